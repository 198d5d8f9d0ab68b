"""
Mapping Store

Owns the mapping tables of the current compilation generation. Replacing
the tables and merging gas into them are mutually exclusive: once a new
compilation has been installed, a gas merge addressed to an older
generation is rejected with StaleGenerationError instead of being applied.
"""

import threading
from typing import Dict, List, Optional

from solbolt.core.gas import merge_gas
from solbolt.core.mapping import CompilationMappings, MappingTable
from solbolt.parsers.legacy_assembly import build_mapping_tables
from solbolt.parsers.symexec import SymexecResult
from solbolt.utils.exceptions import SourceChangedError, StaleGenerationError
from solbolt.utils.helpers import hash_source
from solbolt.utils.logging import get_logger

logger = get_logger("store")


class MappingStore:
    """
    Thread-safe holder of one generation of per-contract mapping tables.

    Attributes:
        generation: Number of the installed compilation, 0 before the first.
        source_hash: Keccak hash of the source the tables were built from.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._mappings: Optional[CompilationMappings] = None
        self.generation = 0
        self.source_hash: Optional[str] = None

    def next_generation(self) -> int:
        with self._lock:
            return self.generation + 1

    def build(self, source_text: str, compiler_result: dict) -> CompilationMappings:
        """Build tables for a compiler result and install them as the next generation."""
        with self._lock:
            mappings = build_mapping_tables(source_text, compiler_result, generation=self.next_generation())
            self.replace_all(mappings, source_hash=hash_source(source_text))
            return mappings

    def replace_all(self, mappings: CompilationMappings, source_hash: Optional[str] = None) -> int:
        """
        Install ``mappings`` and retire every previously installed table.

        The generation is bumped before returning, so any merge captured
        against the old generation will be rejected.
        """
        with self._lock:
            if self._mappings is not None:
                for table in self._mappings.tables.values():
                    table.retire()
            self.generation += 1
            mappings.generation = self.generation
            for table in mappings.tables.values():
                table.generation = self.generation
            self._mappings = mappings
            self.source_hash = source_hash
            logger.debug("Installed generation %d (%d contracts)", self.generation, len(mappings))
            return self.generation

    def clear(self) -> None:
        with self._lock:
            if self._mappings is not None:
                for table in self._mappings.tables.values():
                    table.retire()
            self._mappings = None
            self.source_hash = None
            self.generation += 1

    @property
    def mappings(self) -> Optional[CompilationMappings]:
        with self._lock:
            return self._mappings

    def get(self, contract: str) -> Optional[MappingTable]:
        with self._lock:
            if self._mappings is None:
                return None
            return self._mappings.tables.get(contract)

    def contracts(self) -> List[str]:
        with self._lock:
            return self._mappings.contract_names() if self._mappings else []

    def tables(self) -> Dict[str, MappingTable]:
        with self._lock:
            return dict(self._mappings.tables) if self._mappings else {}

    def check_source(self, source_text: str) -> None:
        """Raise SourceChangedError unless ``source_text`` is what the tables were built from."""
        with self._lock:
            current = hash_source(source_text)
            if self.source_hash is None or current != self.source_hash:
                raise SourceChangedError(
                    current_generation=self.generation,
                    expected_hash=self.source_hash,
                    actual_hash=current,
                )

    def merge_gas(self, contract: str, result: SymexecResult, generation: int) -> MappingTable:
        """
        Merge a symbolic-execution result captured against ``generation``.

        Raises:
            StaleGenerationError: if a newer compilation has been installed
                since ``generation`` was captured, or the contract is gone.
        """
        with self._lock:
            if generation != self.generation or self._mappings is None:
                raise StaleGenerationError(
                    f"Gas data for {contract} targets generation {generation}, "
                    f"current generation is {self.generation}",
                    expected_generation=generation,
                    current_generation=self.generation,
                )
            table = self._mappings.tables.get(contract)
            if table is None:
                raise StaleGenerationError(
                    f"Contract {contract} is not part of generation {self.generation}",
                    expected_generation=generation,
                    current_generation=self.generation,
                )
            return merge_gas(
                table,
                result,
                ast=self._mappings.ast,
                method_identifiers=self._mappings.method_identifiers.get(contract),
            )
