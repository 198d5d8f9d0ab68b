"""
Parsers module for solbolt.

This module contains the parsers for the documents the engine consumes:
- Source offsets (byte offset <-> line/column)
- Compiler legacy assembly (instruction stream and mapping tables)
- Compiler JSON AST
- Symbolic-execution gas results
"""

from .offsets import LineIndex, offset_to_line_col, line_col_to_offset
from .legacy_assembly import (
    AssemblyInstruction,
    InstructionStreamBuilder,
    Section,
    build_contract_mapping,
    build_mapping_tables,
)
from .solidity_ast import (
    FunctionDefinition,
    find_contract_definition,
    find_function_definitions,
)
from .symexec import SymexecResult, parse_symexec_result

__all__ = [
    # Offsets
    'LineIndex',
    'offset_to_line_col',
    'line_col_to_offset',
    # Legacy assembly
    'AssemblyInstruction',
    'InstructionStreamBuilder',
    'Section',
    'build_contract_mapping',
    'build_mapping_tables',
    # AST
    'FunctionDefinition',
    'find_contract_definition',
    'find_function_definitions',
    # Symbolic execution
    'SymexecResult',
    'parse_symexec_result',
]
