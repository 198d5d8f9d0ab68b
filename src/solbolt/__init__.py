"""
SolBolt - Solidity source to EVM assembly explorer
"""

__version__ = "0.1.0"

# Core components
from .core import (
    View,
    GasClass,
    MappingTable,
    CompilationMappings,
    MappingStore,
    MappingSerializer,
    merge_gas,
    resolve_region,
    classify_gas,
)

# Parsers
from .parsers import (
    build_mapping_tables,
    parse_symexec_result,
    offset_to_line_col,
)

# Remote service
from .remote import ExplorerSession, RemoteServiceClient, TaskPoller

# Configuration
from .config import SolboltConfig, CompilerSettings, SymexecSettings

# Utilities
from .utils import (
    SolboltError,
    MalformedInputError,
    StaleGenerationError,
    OutOfRangeOffsetError,
)

# Main entry point
from .cli.main import main

__all__ = [
    # Version
    '__version__',
    # Main
    'main',
    # Core
    'View',
    'GasClass',
    'MappingTable',
    'CompilationMappings',
    'MappingStore',
    'MappingSerializer',
    'merge_gas',
    'resolve_region',
    'classify_gas',
    # Parsers
    'build_mapping_tables',
    'parse_symexec_result',
    'offset_to_line_col',
    # Remote
    'ExplorerSession',
    'RemoteServiceClient',
    'TaskPoller',
    # Config
    'SolboltConfig',
    'CompilerSettings',
    'SymexecSettings',
    # Utils
    'SolboltError',
    'MalformedInputError',
    'StaleGenerationError',
    'OutOfRangeOffsetError',
]
