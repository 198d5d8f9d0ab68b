"""
Miscellaneous helper functions for solbolt.
"""

from typing import Any, Optional

from eth_hash.auto import keccak

from .exceptions import MissingFieldError, MalformedInputError


def require(obj: Any, *path: Any, prefix: str = "") -> Any:
    """
    Walk nested dicts along path, raising MissingFieldError naming the full
    dotted path of the first missing (or null) step.
    """
    current = obj
    walked = [prefix] if prefix else []
    for step in path:
        walked.append(str(step))
        if not isinstance(current, dict) or current.get(step) is None:
            raise MissingFieldError(".".join(walked))
        current = current[step]
    return current


def require_number(obj: dict, field: str, prefix: str = "") -> float:
    """Fetch a numeric field, rejecting missing values and non-numbers."""
    value = require(obj, field, prefix=prefix)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        path = f"{prefix}.{field}" if prefix else field
        raise MalformedInputError(f"Expected a number at {path}, got {value!r}", path=path)
    return value


def hash_source(source_text: str) -> str:
    """Keccak-256 of the UTF-8 source, used to detect edits between compile and symexec."""
    return "0x" + keccak(source_text.encode("utf-8")).hex()


def prettify_gas(gas: Optional[float]) -> str:
    """
    Format a gas amount for display: thousands separators, at most two decimals.

    >>> prettify_gas(12345.678)
    '12,345.68'
    >>> prettify_gas(21000)
    '21,000'
    """
    if gas is None:
        return "-"
    if float(gas).is_integer():
        return f"{int(gas):,}"
    return f"{gas:,.2f}"
