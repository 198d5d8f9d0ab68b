"""
Mapping Table data model.

A MappingTable holds, for every distinct source range the compiler attributed
instructions to, the resolved source position and the list of disassembly
line spans generated from it. Tables are rebuilt wholesale on every
compilation; gas data is merged into the live generation in place.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from solbolt.utils.exceptions import MalformedInputError


class View(str, Enum):
    """Which editor a position or highlight refers to."""
    SOURCE = "source"
    COMPILED = "compiled"


class GasClass(str, Enum):
    """Heat-map bucket of a region's mean worst-case gas; values are the CSS class names."""
    NONE = "frag-heatmap-null"
    CLASS_0 = "frag-heatmap-0"
    CLASS_1 = "frag-heatmap-1"
    CLASS_2 = "frag-heatmap-2"
    CLASS_3 = "frag-heatmap-3"
    CLASS_4 = "frag-heatmap-4"
    CLASS_5 = "frag-heatmap-5"
    CLASS_6 = "frag-heatmap-6"
    CLASS_7 = "frag-heatmap-7"
    CLASS_8 = "frag-heatmap-8"
    CLASS_9 = "frag-heatmap-9"

    @property
    def index(self) -> Optional[int]:
        """Bucket number 0-9, None for the no-coverage class."""
        if self is GasClass.NONE:
            return None
        return int(self.value.rsplit("-", 1)[1])

    @classmethod
    def from_index(cls, index: Optional[int]) -> "GasClass":
        if index is None:
            return cls.NONE
        return cls(f"frag-heatmap-{index}")


# Inclusive upper bound of each class; anything above the last is class 9.
GAS_CLASS_THRESHOLDS = (10, 50, 100, 200, 500, 1000, 2000, 5000, 10000)


def classify_gas(mean_worst_case_gas: Optional[float]) -> GasClass:
    """
    Bucket a mean worst-case gas value.

    Each bucket includes its upper bound: exactly 100 is class 2 while
    100.0001 is class 3. ``None`` (no measurement) is the no-coverage class.
    """
    if mean_worst_case_gas is None:
        return GasClass.NONE
    for index, upper in enumerate(GAS_CLASS_THRESHOLDS):
        if mean_worst_case_gas <= upper:
            return GasClass.from_index(index)
    return GasClass.from_index(len(GAS_CLASS_THRESHOLDS))


@dataclass(frozen=True)
class SourceRange:
    """Half-open byte interval [begin, end) into the primary source file."""
    begin: int
    end: int

    @property
    def key(self) -> str:
        return f"{self.begin}:{self.end}"

    @property
    def length(self) -> int:
        return self.end - self.begin

    @classmethod
    def from_key(cls, key: str) -> "SourceRange":
        parts = key.split(":")
        if len(parts) != 2:
            raise MalformedInputError(f"Invalid range key {key!r}", path=key)
        try:
            begin, end = int(parts[0]), int(parts[1])
        except ValueError:
            raise MalformedInputError(f"Invalid range key {key!r}", path=key)
        return cls(begin, end)

    @classmethod
    def from_src(cls, src: str, path: str = "src") -> "SourceRange":
        """Build from an AST ``src`` attribute (``start:length:fileIndex``)."""
        if not isinstance(src, str):
            raise MalformedInputError(f"Invalid AST src attribute {src!r}", path=path)
        parts = src.split(":")
        if len(parts) < 2:
            raise MalformedInputError(f"Invalid AST src attribute {src!r}", path=path)
        try:
            start, length = int(parts[0]), int(parts[1])
        except ValueError:
            raise MalformedInputError(f"Invalid AST src attribute {src!r}", path=path)
        return cls(start, start + length)

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class SourcePosition:
    """1-indexed line/column extent of a SourceRange; length is the specificity metric."""
    start_line: int
    start_char: int
    end_line: int
    end_char: int
    length: int

    def contains(self, line: int, column: int) -> bool:
        """End-inclusive containment of a (line, column) cursor position."""
        if self.start_line == self.end_line:
            return (
                line == self.start_line
                and self.start_char <= column <= self.end_char
            )
        if self.start_line < line < self.end_line:
            return True
        if line == self.start_line:
            return column >= self.start_char
        if line == self.end_line:
            return column <= self.end_char
        return False

    @property
    def is_multiline(self) -> bool:
        return self.start_line != self.end_line


@dataclass
class CompiledSpan:
    """Inclusive range of disassembly lines generated from one source range."""
    start_line: int
    end_line: int

    def contains(self, line: int, column: int = 1) -> bool:
        return self.start_line <= line <= self.end_line

    def __len__(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class LoopGasEstimate:
    """Per-program-counter loop gas; hidden means the iteration was not fully explored."""
    gas: float
    is_hidden: bool = False


@dataclass
class GasStatistics:
    """Per-sample gas means shown for a highlighted region."""
    mean_min_total_gas: float
    mean_max_total_gas: float
    mean_min_opcode_gas: float
    mean_max_opcode_gas: float
    mean_min_storage_gas: float
    mean_max_storage_gas: float
    mean_mem_gas: float


@dataclass
class GasRecord:
    """Symbolic-execution gas measurement attached to one mapping entry."""
    gas_class: "GasClass"
    num_samples: int
    min_opcode_gas: float
    max_opcode_gas: float
    min_storage_gas: float
    max_storage_gas: float
    mem_gas: float
    mean_worst_case_gas: Optional[float]
    mean_opcode_gas: Optional[float] = None
    function_gas: Optional[float] = None
    loop_gas: Dict[int, LoopGasEstimate] = field(default_factory=dict)
    issues: List[str] = field(default_factory=list)

    def statistics(self) -> GasStatistics:
        n = self.num_samples or 1
        mean_min_total = (self.min_opcode_gas + self.min_storage_gas + self.mem_gas) / n
        if self.mean_worst_case_gas is not None:
            mean_max_total = self.mean_worst_case_gas
        else:
            mean_max_total = (self.max_opcode_gas + self.max_storage_gas + self.mem_gas) / n
        return GasStatistics(
            mean_min_total_gas=mean_min_total,
            mean_max_total_gas=mean_max_total,
            mean_min_opcode_gas=self.min_opcode_gas / n,
            mean_max_opcode_gas=self.max_opcode_gas / n,
            mean_min_storage_gas=self.min_storage_gas / n,
            mean_max_storage_gas=self.max_storage_gas / n,
            mean_mem_gas=self.mem_gas / n,
        )


@dataclass
class MappingEntry:
    """One source range with its resolved position, compiled spans and optional gas."""
    key: str
    source_range: SourceRange
    source_position: SourcePosition
    compiled_spans: List[CompiledSpan] = field(default_factory=list)
    gas: Optional[GasRecord] = None
    function_name: Optional[str] = None
    function_selector: Optional[str] = None

    @property
    def length(self) -> int:
        return self.source_position.length

    def add_line(self, line: int) -> None:
        """
        Attribute one emitted disassembly line to this entry, extending the
        last span only if it ends on the immediately preceding line.
        """
        if self.compiled_spans and self.compiled_spans[-1].end_line == line - 1:
            self.compiled_spans[-1].end_line = line
        else:
            self.compiled_spans.append(CompiledSpan(line, line))


class MappingTable:
    """
    Key -> MappingEntry table for one compiled contract and one generation.

    A retired table belongs to a compilation that has since been replaced;
    gas merges against it are rejected.
    """

    def __init__(self, contract: str, generation: int = 0):
        self.contract = contract
        self.generation = generation
        self.entries: Dict[str, MappingEntry] = {}
        self.listing_lines: List[str] = []
        self.has_symexec = False
        self.retired = False

    # -- dict-like access -------------------------------------------------

    def __getitem__(self, key: str) -> MappingEntry:
        return self.entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: str) -> Optional[MappingEntry]:
        return self.entries.get(key)

    def keys(self):
        return self.entries.keys()

    def values(self):
        return self.entries.values()

    def items(self):
        return self.entries.items()

    # ---------------------------------------------------------------------

    def add_entry(self, source_range: SourceRange, position: SourcePosition) -> MappingEntry:
        """Return the entry for source_range, creating it on first sight."""
        entry = self.entries.get(source_range.key)
        if entry is None:
            entry = MappingEntry(
                key=source_range.key,
                source_range=source_range,
                source_position=position,
            )
            self.entries[entry.key] = entry
        return entry

    @property
    def listing(self) -> str:
        """The pretty-printed instruction stream, one line per emitted instruction."""
        return "\n".join(self.listing_lines)

    @property
    def coverage_percentage(self) -> Optional[float]:
        """Share of entries that received gas data, None before any merge."""
        if not self.has_symexec:
            return None
        if not self.entries:
            return 0.0
        covered = sum(1 for entry in self.entries.values() if entry.gas is not None)
        return covered * 100.0 / len(self.entries)

    def by_specificity(self) -> List[MappingEntry]:
        """Entries ordered most specific (shortest) first, ties by position."""
        return sorted(
            self.entries.values(),
            key=lambda e: (e.length, e.source_range.begin, e.source_range.end),
        )

    def retire(self) -> None:
        self.retired = True

    def __repr__(self) -> str:
        return (
            f"MappingTable(contract={self.contract!r}, generation={self.generation}, "
            f"entries={len(self.entries)}, lines={len(self.listing_lines)})"
        )


@dataclass
class CompilationMappings:
    """All per-contract tables produced from one compiler result."""
    tables: Dict[str, MappingTable]
    generation: int = 0
    ast: Optional[dict] = None
    method_identifiers: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def __getitem__(self, contract: str) -> MappingTable:
        return self.tables[contract]

    def __contains__(self, contract: object) -> bool:
        return contract in self.tables

    def __iter__(self):
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)

    def contract_names(self) -> List[str]:
        return list(self.tables)

    def by_index(self, index: int) -> Optional[MappingTable]:
        names = self.contract_names()
        if 0 <= index < len(names):
            return self.tables[names[index]]
        return None

