"""
Symbolic-execution result parser.

The symbolic-execution service reports gas per source range, split into the
creation (constructor) and runtime phases::

    {
      "creation": {"86:246": {...}},
      "runtime": {
        "120:40": {
          "numSamples": 4,
          "minOpcodeGas": 80, "maxOpcodeGas": 120,
          "minStorageGas": 0, "maxStorageGas": 22100,
          "memGas": 12,
          "meanWcGas": 5558.0,
          "functionGas": 24012,
          "loopGas": {"312": {"gas": 400, "isHidden": false}},
          "detectedIssues": ["storage mutation inside a loop"]
        }
      }
    }

Keys use the same ``begin:end`` scheme as the mapping table.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from solbolt.core.mapping import GasRecord, LoopGasEstimate, SourceRange, classify_gas
from solbolt.utils.exceptions import MalformedInputError, MissingFieldError
from solbolt.utils.helpers import require_number
from solbolt.utils.logging import get_logger

logger = get_logger("symexec")

PHASES = ("creation", "runtime")
SAMPLE_COUNT_FIELDS = ("numSamples", "numTx")
WORST_CASE_FIELDS = ("meanWcGas", "meanMaxTotalGas")
ISSUE_FIELDS = ("detectedIssues", "issues")


@dataclass
class SymexecResult:
    """Parsed gas measurements of one symbolic-execution run."""
    creation: Dict[str, GasRecord] = field(default_factory=dict)
    runtime: Dict[str, GasRecord] = field(default_factory=dict)

    def phases(self):
        """Phases in merge order: creation first, then runtime."""
        return (("creation", self.creation), ("runtime", self.runtime))

    def __len__(self) -> int:
        return len(self.creation) + len(self.runtime)


def _optional_number(item: dict, field_name: str, path: str) -> Optional[float]:
    if item.get(field_name) is None:
        return None
    return require_number(item, field_name, prefix=path)


def _sample_count(item: dict, path: str) -> int:
    for field_name in SAMPLE_COUNT_FIELDS:
        if item.get(field_name) is not None:
            return int(require_number(item, field_name, prefix=path))
    raise MissingFieldError(f"{path}.{SAMPLE_COUNT_FIELDS[0]}")


def _parse_loop_gas(raw: Any, path: str) -> Dict[int, LoopGasEstimate]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise MalformedInputError(f"Expected an object at {path}", path=path)
    loop_gas = {}
    for pc, estimate in raw.items():
        estimate_path = f"{path}.{pc}"
        try:
            program_counter = int(pc)
        except ValueError:
            raise MalformedInputError(f"Invalid program counter {pc!r}", path=estimate_path)
        if not isinstance(estimate, dict):
            raise MalformedInputError(f"Expected an object at {estimate_path}", path=estimate_path)
        loop_gas[program_counter] = LoopGasEstimate(
            gas=require_number(estimate, "gas", prefix=estimate_path),
            is_hidden=bool(estimate.get("isHidden", False)),
        )
    return loop_gas


def _parse_issues(item: dict, path: str) -> List[str]:
    for field_name in ISSUE_FIELDS:
        issues = item.get(field_name)
        if not issues:
            continue
        if not isinstance(issues, list):
            raise MalformedInputError(f"Expected a list at {path}.{field_name}", path=f"{path}.{field_name}")
        return [str(issue) for issue in issues]
    return []


def parse_gas_record(item: Any, path: str) -> GasRecord:
    """Parse one per-range measurement object into a GasRecord."""
    if not isinstance(item, dict):
        raise MalformedInputError(f"Expected a gas measurement object at {path}", path=path)

    num_samples = _sample_count(item, path)
    min_opcode = require_number(item, "minOpcodeGas", prefix=path)
    max_opcode = require_number(item, "maxOpcodeGas", prefix=path)
    min_storage = require_number(item, "minStorageGas", prefix=path)
    max_storage = require_number(item, "maxStorageGas", prefix=path)
    mem = require_number(item, "memGas", prefix=path)

    worst_case = None
    for field_name in WORST_CASE_FIELDS:
        worst_case = _optional_number(item, field_name, path)
        if worst_case is not None:
            break
    if worst_case is None and num_samples > 0:
        worst_case = (max_opcode + max_storage + mem) / num_samples
    if num_samples <= 0:
        worst_case = None

    return GasRecord(
        gas_class=classify_gas(worst_case),
        num_samples=num_samples,
        min_opcode_gas=min_opcode,
        max_opcode_gas=max_opcode,
        min_storage_gas=min_storage,
        max_storage_gas=max_storage,
        mem_gas=mem,
        mean_worst_case_gas=worst_case,
        mean_opcode_gas=_optional_number(item, "meanOpcodeGas", path),
        function_gas=_optional_number(item, "functionGas", path),
        loop_gas=_parse_loop_gas(item.get("loopGas"), f"{path}.loopGas"),
        issues=_parse_issues(item, path),
    )


def parse_symexec_result(document: Any) -> SymexecResult:
    """
    Parse a symbolic-execution result document.

    Both phases are required; either may be empty. Keys are validated as
    ``begin:end`` range keys.
    """
    if not isinstance(document, dict):
        raise MalformedInputError("Expected a symbolic-execution result object")

    result = SymexecResult()
    for phase in PHASES:
        section = document.get(phase)
        if section is None:
            raise MissingFieldError(phase)
        if not isinstance(section, dict):
            raise MalformedInputError(f"Expected an object at {phase}", path=phase)
        records = getattr(result, phase)
        for key, item in section.items():
            SourceRange.from_key(key)
            records[key] = parse_gas_record(item, f"{phase}.{key}")

    logger.debug("Parsed symexec result: %d creation, %d runtime measurements",
                 len(result.creation), len(result.runtime))
    return result
