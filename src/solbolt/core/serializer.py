"""
JSON Serialization for solbolt mapping output

Serializes mapping tables into the camelCase JSON shape consumed by the
explorer web app: per contract, the region mappings, the instruction
listing and the symbolic-execution flags.
"""

import json
from typing import Any, Dict, Optional

from solbolt.core.mapping import (
    CompilationMappings,
    CompiledSpan,
    GasRecord,
    MappingEntry,
    MappingTable,
    SourcePosition,
)


class MappingSerializer:
    """Serializes mapping tables to JSON compatible with the web app."""

    def __init__(self, include_listing: bool = True):
        self.include_listing = include_listing

    def source_map(self, position: SourcePosition) -> Dict[str, int]:
        return {
            "startLine": position.start_line,
            "startChar": position.start_char,
            "endLine": position.end_line,
            "endChar": position.end_char,
            "length": position.length,
        }

    def compiled_map(self, span: CompiledSpan, length: int) -> Dict[str, int]:
        return {
            "startLine": span.start_line,
            "startChar": 1,
            "endLine": span.end_line,
            "endChar": 1,
            "length": length,
        }

    def gas_map(self, gas: GasRecord) -> Dict[str, Any]:
        data = {
            "class": gas.gas_class.value,
            "numSamples": gas.num_samples,
            "minOpcodeGas": gas.min_opcode_gas,
            "maxOpcodeGas": gas.max_opcode_gas,
            "minStorageGas": gas.min_storage_gas,
            "maxStorageGas": gas.max_storage_gas,
            "memGas": gas.mem_gas,
            "meanWcGas": gas.mean_worst_case_gas,
        }
        if gas.mean_opcode_gas is not None:
            data["meanOpcodeGas"] = gas.mean_opcode_gas
        return data

    def gas_statistics(self, gas: GasRecord) -> Dict[str, float]:
        stats = gas.statistics()
        return {
            "meanMinTotalGas": stats.mean_min_total_gas,
            "meanMaxTotalGas": stats.mean_max_total_gas,
            "meanMinOpcodeGas": stats.mean_min_opcode_gas,
            "meanMaxOpcodeGas": stats.mean_max_opcode_gas,
            "meanMinStorageGas": stats.mean_min_storage_gas,
            "meanMaxStorageGas": stats.mean_max_storage_gas,
            "meanMemGas": stats.mean_mem_gas,
        }

    def serialize_entry(self, entry: MappingEntry) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "sourceMap": self.source_map(entry.source_position),
            "compiledMaps": [self.compiled_map(span, entry.length) for span in entry.compiled_spans],
        }
        gas = entry.gas
        if gas is None:
            return data

        data["gasMap"] = self.gas_map(gas)
        if gas.loop_gas:
            data["loopGas"] = {
                str(pc): {"gas": estimate.gas, "isHidden": estimate.is_hidden}
                for pc, estimate in sorted(gas.loop_gas.items())
            }
        if gas.function_gas is not None:
            data["functionGas"] = gas.function_gas
        if entry.function_name:
            data["functionName"] = entry.function_name
        if entry.function_selector:
            data["functionSelector"] = entry.function_selector
        if gas.issues:
            data["detectedIssues"] = list(gas.issues)
        return data

    def serialize_table(self, table: MappingTable) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "mappings": {key: self.serialize_entry(entry) for key, entry in table.items()},
            "hasSymExec": table.has_symexec,
        }
        if self.include_listing:
            data["filteredLines"] = table.listing
        coverage = table.coverage_percentage
        if coverage is not None:
            data["covPercentage"] = round(coverage, 2)
        return data

    def serialize(self, mappings: CompilationMappings, contract: Optional[str] = None) -> Dict[str, Any]:
        """Serialize every contract, or only ``contract`` when given."""
        names = [contract] if contract else mappings.contract_names()
        return {name: self.serialize_table(mappings[name]) for name in names}

    def to_json(self, mappings: CompilationMappings, contract: Optional[str] = None, indent: int = 2) -> str:
        return json.dumps(self.serialize(mappings, contract), indent=indent)
