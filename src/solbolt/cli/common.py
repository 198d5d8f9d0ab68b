"""
Common utilities for CLI commands.

This module provides shared functionality used across multiple CLI commands
to reduce code duplication and ensure consistent behavior.
"""

import json
import sys
from typing import Any, List, Optional, Tuple

from solbolt.core.gas import GAS_CLASS_LABELS, function_summary, gas_class_label, gas_summary, merge_gas
from solbolt.core.mapping import CompilationMappings, GasRecord, MappingEntry, MappingTable
from solbolt.parsers.legacy_assembly import build_mapping_tables
from solbolt.parsers.symexec import parse_symexec_result
from solbolt.utils.colors import bold, dim, gas_value, region_key
from solbolt.utils.exceptions import ConfigError, MalformedInputError, format_error
from solbolt.utils.helpers import prettify_gas
from solbolt.utils.logging import logger


def read_source(path: str) -> str:
    """Read a source file without newline translation so byte offsets stay exact."""
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except OSError as e:
        raise ConfigError(f"Cannot read source file: {e}", config_file=path)


def read_json(path: str) -> Any:
    """Read a JSON document, reporting parse errors as malformed input."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}", config_file=path)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"{path} is not valid JSON: {e}", path=path)


def load_compilation(source_path: str, compiled_path: str) -> Tuple[str, dict, CompilationMappings]:
    """
    Load a source file and its compiler output and build the mapping tables.

    The compiler output may be the raw standard-JSON output or a service
    response wrapping it in ``result``.
    """
    source = read_source(source_path)
    compiled = read_json(compiled_path)
    if isinstance(compiled, dict) and "contracts" not in compiled and isinstance(compiled.get("result"), dict):
        compiled = compiled["result"]
    logger.debug(f"Loaded {source_path} ({len(source.encode('utf-8'))} bytes) and {compiled_path}")
    return source, compiled, build_mapping_tables(source, compiled)


def select_table(mappings: CompilationMappings, contract: Optional[str]) -> MappingTable:
    """Pick the named contract's table, or the first one when no name is given."""
    if contract:
        if contract not in mappings:
            available = ", ".join(mappings.contract_names()) or "none"
            raise MalformedInputError(
                f"Contract {contract} not found in compiler output (available: {available})",
                path=f"contracts.*.{contract}",
            )
        return mappings[contract]
    table = mappings.by_index(0)
    if table is None:
        raise MalformedInputError("Compiler output contains no contract with legacy assembly",
                                  path="contracts")
    return table


def attach_symexec(mappings: CompilationMappings, table: MappingTable, symexec_path: str) -> MappingTable:
    """Parse a symbolic-execution result file and merge its gas into ``table``."""
    result = parse_symexec_result(read_json(symexec_path))
    return merge_gas(
        table,
        result,
        ast=mappings.ast,
        method_identifiers=mappings.method_identifiers.get(table.contract),
    )


def format_spans(entry: MappingEntry) -> str:
    parts = []
    for span in entry.compiled_spans:
        if span.start_line == span.end_line:
            parts.append(str(span.start_line))
        else:
            parts.append(f"{span.start_line}-{span.end_line}")
    return ",".join(parts) or "-"


def format_position(entry: MappingEntry) -> str:
    pos = entry.source_position
    return f"{pos.start_line}:{pos.start_char}-{pos.end_line}:{pos.end_char}"


def format_entry(entry: MappingEntry) -> str:
    """One display row: key, source extent, compiled spans, and gas when present."""
    row = f"  {region_key(entry.key):<12} source {format_position(entry):<14} compiled {format_spans(entry)}"
    if entry.gas is not None:
        row += f"  gas {gas_value(prettify_gas(entry.gas.mean_worst_case_gas))} {dim(entry.gas.gas_class.value)}"
    if entry.function_name:
        row += f"  fn {entry.function_name}"
        if entry.function_selector:
            row += f" {entry.function_selector}"
    return row


def format_statistics(gas: GasRecord) -> List[str]:
    """Per-sample gas means of one region, as shown by the inspector."""
    stats = gas.statistics()
    return [
        f"  {gas_class_label(gas.gas_class)} over {gas.num_samples} sample(s)",
        f"  mean total   {prettify_gas(stats.mean_min_total_gas)} - {prettify_gas(stats.mean_max_total_gas)}",
        f"  mean opcode  {prettify_gas(stats.mean_min_opcode_gas)} - {prettify_gas(stats.mean_max_opcode_gas)}",
        f"  mean storage {prettify_gas(stats.mean_min_storage_gas)} - {prettify_gas(stats.mean_max_storage_gas)}",
        f"  mean memory  {prettify_gas(stats.mean_mem_gas)}",
    ]


def print_table(table: MappingTable) -> None:
    print(bold(f"Contract {table.contract}") +
          f" ({len(table)} regions, {len(table.listing_lines)} listing lines)")
    for entry in sorted(table.values(), key=lambda e: (e.source_range.begin, e.source_range.end)):
        print(format_entry(entry))


def print_gas_summary(table: MappingTable) -> None:
    coverage = table.coverage_percentage
    print(bold("Gas summary") + (f" (coverage {coverage:.2f}%)" if coverage is not None else ""))
    for gas_class, count in gas_summary(table).items():
        print(f"  {GAS_CLASS_LABELS[gas_class]:<18} {count}")
    functions = function_summary(table)
    if functions:
        print(bold("Functions"))
        for key, name, gas in functions:
            print(f"  {name or key:<18} {gas_value(prettify_gas(gas))}")


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def handle_command_error(
    e: Exception,
    json_mode: bool = False,
    exit_code: int = 1
) -> int:
    """
    Handle command errors uniformly.

    Args:
        e: The exception that occurred
        json_mode: If True, output as JSON
        exit_code: Exit code to return

    Returns:
        Exit code
    """
    error_output = format_error(e, json_mode)
    if json_mode:
        print(error_output)
    else:
        print(error_output, file=sys.stderr)
    return exit_code
