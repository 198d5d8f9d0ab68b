"""
Gas Annotation Merger

Attaches symbolic-execution gas measurements to the entries of a
MappingTable and buckets each entry's mean worst-case gas into one of the
heat-map classes.
"""

from collections import OrderedDict
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from eth_utils import function_signature_to_4byte_selector

from solbolt.core.mapping import GasClass, MappingTable
from solbolt.parsers.solidity_ast import find_function_definitions
from solbolt.utils.exceptions import MalformedInputError, StaleGenerationError
from solbolt.utils.logging import get_logger

if TYPE_CHECKING:
    from solbolt.parsers.symexec import SymexecResult

logger = get_logger("gas")

GAS_CLASS_LABELS = OrderedDict([
    (GasClass.NONE, "NO COVERAGE"),
    (GasClass.CLASS_0, "0 - 10 GAS"),
    (GasClass.CLASS_1, "10 - 50 GAS"),
    (GasClass.CLASS_2, "50 - 100 GAS"),
    (GasClass.CLASS_3, "100 - 200 GAS"),
    (GasClass.CLASS_4, "200 - 500 GAS"),
    (GasClass.CLASS_5, "500 - 1000 GAS"),
    (GasClass.CLASS_6, "1000 - 2000 GAS"),
    (GasClass.CLASS_7, "2000 - 5000 GAS"),
    (GasClass.CLASS_8, "5000 - 10000 GAS"),
    (GasClass.CLASS_9, "> 10000 GAS"),
])


def gas_class_label(gas_class: GasClass) -> str:
    return GAS_CLASS_LABELS[gas_class]


def _function_index(ast: dict, method_identifiers: Optional[Dict[str, str]]):
    if method_identifiers is not None and not isinstance(method_identifiers, dict):
        raise MalformedInputError("Expected methodIdentifiers to be an object", path="methodIdentifiers")
    selectors = {}
    for signature, selector in (method_identifiers or {}).items():
        if not isinstance(selector, str):
            raise MalformedInputError(
                f"Expected a hex selector for {signature}", path=f"methodIdentifiers.{signature}"
            )
        selectors[signature] = "0x" + selector.lower().replace("0x", "")

    index = {}
    for function in find_function_definitions(ast):
        selector = None
        if function.is_externally_callable:
            selector = selectors.get(function.signature)
            if selector is None:
                selector = "0x" + function_signature_to_4byte_selector(function.signature).hex()
        index[function.source_range.key] = (function.name, selector)
    return index


def merge_gas(
    table: MappingTable,
    result: "SymexecResult",
    ast: Optional[dict] = None,
    method_identifiers: Optional[Dict[str, str]] = None,
) -> MappingTable:
    """
    Merge one symbolic-execution result into ``table`` in place.

    Creation measurements are applied first, then runtime. A key present in
    the table has its GasRecord replaced wholesale, so a later phase or a
    later merge wins. Keys unknown to the table are ignored.

    Raises:
        StaleGenerationError: if the table has been replaced by a newer
            compilation.
    """
    if table.retired:
        raise StaleGenerationError(
            f"Mapping table for {table.contract} (generation {table.generation}) "
            "was replaced by a newer compilation",
            expected_generation=table.generation,
        )

    functions = _function_index(ast, method_identifiers) if ast else {}

    applied = 0
    ignored = 0
    for phase, records in result.phases():
        for key, record in records.items():
            entry = table.get(key)
            if entry is None:
                ignored += 1
                continue
            entry.gas = record
            entry.function_name = entry.function_selector = None
            applied += 1
            if record.function_gas is not None and key in functions:
                entry.function_name, entry.function_selector = functions[key]
        logger.debug("Merged %s phase: %d measurements", phase, len(records))

    table.has_symexec = True
    logger.info("Attached gas to %d region(s) of %s (%d unmatched)",
                applied, table.contract, ignored)
    return table


def gas_summary(table: MappingTable) -> Dict[GasClass, int]:
    """Histogram of entries per heat-map class, including the no-coverage bucket."""
    summary = OrderedDict((gas_class, 0) for gas_class in GAS_CLASS_LABELS)
    for entry in table.values():
        gas_class = entry.gas.gas_class if entry.gas else GasClass.NONE
        summary[gas_class] += 1
    return summary


def function_summary(table: MappingTable) -> List[Tuple[str, Optional[str], float]]:
    """``(key, function_name, function_gas)`` for every entry carrying function-level gas."""
    functions = []
    for entry in sorted(table.values(), key=lambda e: (e.source_range.begin, e.source_range.end)):
        if entry.gas is not None and entry.gas.function_gas is not None:
            functions.append((entry.key, entry.function_name, entry.gas.function_gas))
    return functions
