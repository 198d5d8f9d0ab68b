"""
Legacy Assembly Parser (Instruction Stream Builder)

Walks the compiler's ``evm.legacyAssembly`` output for each contract and
produces two things at once:

- a pretty-printed instruction listing, one line per emitted instruction,
  with ``CONSTRUCTOR:`` and ``SUBROUTINES:`` section headers, and
- a MappingTable from every source range in the primary file to the
  contiguous listing spans its instructions landed on.

Each legacy assembly instruction looks like::

    {"begin": 86, "end": 246, "name": "PUSH", "source": 0, "value": "80"}

``source`` is the index of the source file (0 = primary file). Instructions
attributed to the contract declaration itself are compiler bookkeeping and
are dropped from both the listing and the mapping.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from solbolt.core.mapping import CompilationMappings, MappingTable, SourceRange
from solbolt.parsers.offsets import LineIndex
from solbolt.parsers.solidity_ast import find_contract_definition
from solbolt.utils.exceptions import MalformedInputError, MissingFieldError
from solbolt.utils.helpers import require
from solbolt.utils.logging import get_logger, log_trace

logger = get_logger("assembly")

PRIMARY_SOURCE_INDEX = 0
TAG = "tag"
TAG_INDENT = "\t\t"
INSTRUCTION_INDENT = "\t\t\t\t"

CODE_KEYS = (".code", "code")
DATA_KEYS = (".data", "data")
RUNTIME_SUBASSEMBLY = "0"


class Section(str, Enum):
    """Top-level sections of a contract's legacy assembly."""
    CONSTRUCTOR = "constructor"
    RUNTIME = "runtime"

    @property
    def header(self) -> str:
        return "CONSTRUCTOR:" if self is Section.CONSTRUCTOR else "SUBROUTINES:"


def _optional_int(data: Dict[str, Any], key: str, prefix: str) -> Optional[int]:
    value = data.get(key)
    if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
        raise MalformedInputError(
            f"Expected an integer at {prefix}{key}, got {type(value).__name__}", path=f"{prefix}{key}"
        )
    return value


@dataclass(frozen=True)
class AssemblyInstruction:
    """Single decoded legacy assembly instruction."""
    name: str
    value: Optional[str] = None
    source: Optional[int] = None
    begin: Optional[int] = None
    end: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "") -> "AssemblyInstruction":
        prefix = f"{path}." if path else ""
        if not isinstance(data, dict) or not data.get("name"):
            raise MissingFieldError(f"{prefix}name")
        if not isinstance(data["name"], str):
            raise MalformedInputError(f"Instruction name must be a string at {prefix}name", path=f"{prefix}name")
        value = data.get("value")
        return cls(
            name=data["name"],
            value=str(value) if value is not None else None,
            source=_optional_int(data, "source", prefix),
            begin=_optional_int(data, "begin", prefix),
            end=_optional_int(data, "end", prefix),
        )

    @property
    def is_tag(self) -> bool:
        return self.name == TAG

    @property
    def source_range(self) -> Optional[SourceRange]:
        """The primary-file range this instruction came from, if any."""
        if self.source != PRIMARY_SOURCE_INDEX:
            return None
        if self.begin is None or self.end is None or self.begin < 0 or self.end < self.begin:
            return None
        return SourceRange(self.begin, self.end)

    def render(self) -> str:
        if self.is_tag:
            return f"{TAG_INDENT}TAG {self.value}:"
        if self.value:
            return f"{INSTRUCTION_INDENT}{self.name} {self.value}"
        return f"{INSTRUCTION_INDENT}{self.name}"


class InstructionStreamBuilder:
    """
    Builds the listing and the MappingTable of one contract.

    Instructions must be fed in final emission order: a span is only
    extended when the new line directly follows the entry's last line, so
    code that the compiler emitted twice (inlining, loop duplication) keeps
    one span per copy.
    """

    def __init__(
        self,
        source_text: str,
        contract: str,
        excluded_range: Optional[SourceRange] = None,
        generation: int = 0,
        line_index: Optional[LineIndex] = None,
    ):
        self.line_index = line_index or LineIndex(source_text)
        self.excluded_range = excluded_range
        self.table = MappingTable(contract, generation)
        self.emitted = 0
        self.dropped = 0
        self.unmapped = 0

    @property
    def current_line(self) -> int:
        """1-indexed line number of the most recently emitted listing line."""
        return len(self.table.listing_lines)

    def add_section(self, section: Section, instructions: Iterable[AssemblyInstruction]) -> None:
        self.table.listing_lines.append(section.header)
        count = 0
        for instruction in instructions:
            self.add_instruction(instruction)
            count += 1
        logger.debug("%s: %d instructions in %s section", self.table.contract, count, section.value)

    def add_instruction(self, instruction: AssemblyInstruction) -> None:
        source_range = instruction.source_range

        if source_range is not None and source_range == self.excluded_range:
            self.dropped += 1
            return

        self.table.listing_lines.append(instruction.render())
        self.emitted += 1
        line = self.current_line

        if source_range is None:
            self.unmapped += 1
            return

        entry = self.table.get(source_range.key)
        if entry is None:
            entry = self.table.add_entry(source_range, self.line_index.position(source_range))
        entry.add_line(line)
        log_trace(logger, "line %d -> %s (%s)", line, source_range.key, instruction.name)

    def build(self) -> MappingTable:
        logger.debug(
            "%s: emitted %d lines, %d unmapped, %d dropped, %d regions",
            self.table.contract, self.emitted, self.unmapped, self.dropped, len(self.table),
        )
        return self.table


def _first_present(container: dict, keys: Iterable[str], path: str) -> Any:
    for key in keys:
        if isinstance(container, dict) and container.get(key) is not None:
            return container[key]
    raise MissingFieldError(f"{path}.{'|'.join(keys)}")


def _parse_code(raw: Any, path: str) -> List[AssemblyInstruction]:
    if not isinstance(raw, list):
        raise MalformedInputError(f"Expected a list of instructions at {path}", path=path)
    return [AssemblyInstruction.from_dict(item, f"{path}[{i}]") for i, item in enumerate(raw)]


def parse_sections(legacy_assembly: dict, path: str = "legacyAssembly") -> Dict[Section, List[AssemblyInstruction]]:
    """Split a legacyAssembly object into its constructor and runtime instruction lists."""
    constructor = _parse_code(_first_present(legacy_assembly, CODE_KEYS, path), f"{path}.code")
    data = _first_present(legacy_assembly, DATA_KEYS, path)
    runtime_path = f"{path}.data.{RUNTIME_SUBASSEMBLY}"
    runtime_assembly = data.get(RUNTIME_SUBASSEMBLY) if isinstance(data, dict) else None
    if runtime_assembly is None:
        raise MissingFieldError(runtime_path)
    runtime = _parse_code(_first_present(runtime_assembly, CODE_KEYS, runtime_path), f"{runtime_path}.code")
    return {Section.CONSTRUCTOR: constructor, Section.RUNTIME: runtime}


def build_contract_mapping(
    source_text: str,
    contract: str,
    legacy_assembly: dict,
    contract_range: Optional[SourceRange] = None,
    generation: int = 0,
    line_index: Optional[LineIndex] = None,
    path: str = "legacyAssembly",
) -> MappingTable:
    """Build the MappingTable and listing for a single contract's legacy assembly."""
    sections = parse_sections(legacy_assembly, path)
    builder = InstructionStreamBuilder(
        source_text,
        contract,
        excluded_range=contract_range,
        generation=generation,
        line_index=line_index,
    )
    builder.add_section(Section.CONSTRUCTOR, sections[Section.CONSTRUCTOR])
    builder.add_section(Section.RUNTIME, sections[Section.RUNTIME])
    return builder.build()


def _primary_ast(sources: dict) -> Optional[dict]:
    for info in sources.values():
        if isinstance(info, dict) and info.get("id") == PRIMARY_SOURCE_INDEX:
            return info.get("ast")
    for info in sources.values():
        if isinstance(info, dict):
            return info.get("ast")
    return None


def build_mapping_tables(
    source_text: str,
    compiler_result: dict,
    generation: int = 0,
) -> CompilationMappings:
    """
    Build one MappingTable per compiled contract of a compiler result.

    Contracts without legacy assembly (interfaces, abstract contracts) are
    skipped.
    """
    contracts = require(compiler_result, "contracts")
    sources = require(compiler_result, "sources")
    line_index = LineIndex(source_text)

    tables: Dict[str, MappingTable] = {}
    method_identifiers: Dict[str, Dict[str, str]] = {}

    for filename, file_contracts in contracts.items():
        if not isinstance(file_contracts, dict):
            raise MalformedInputError(f"Expected contracts of {filename} to be an object",
                                      path=f"contracts.{filename}")
        for name, contract_output in file_contracts.items():
            contract_path = f"contracts.{filename}.{name}"
            evm = require(contract_output, "evm", prefix=contract_path)
            legacy_assembly = evm.get("legacyAssembly")
            if not legacy_assembly:
                logger.debug("Skipping %s: no legacy assembly (interface or abstract)", name)
                continue

            ast = require(sources, filename, "ast", prefix="sources")
            contract_range = find_contract_definition(ast, name) or find_contract_definition(ast)
            if contract_range is None:
                logger.warning("No ContractDefinition found for %s; nothing will be excluded", name)

            tables[name] = build_contract_mapping(
                source_text,
                name,
                legacy_assembly,
                contract_range=contract_range,
                generation=generation,
                line_index=line_index,
                path=f"{contract_path}.evm.legacyAssembly",
            )
            method_identifiers[name] = evm.get("methodIdentifiers") or {}

    logger.info("Built mappings for %d contract(s): %s", len(tables), ", ".join(tables) or "-")
    return CompilationMappings(
        tables=tables,
        generation=generation,
        ast=_primary_ast(sources),
        method_identifiers=method_identifiers,
    )
