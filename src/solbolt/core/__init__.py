"""
Core module for solbolt.

This module contains the correlation engine:
- Mapping tables between source regions and assembly listing lines
- Gas annotation merging and heat-map classification
- Region resolution and editor decorations
- MappingStore: generation ownership of the tables
- MappingSerializer: JSON output for the web app
"""

from .mapping import (
    View,
    GasClass,
    SourceRange,
    SourcePosition,
    CompiledSpan,
    GasRecord,
    LoopGasEstimate,
    MappingEntry,
    MappingTable,
    CompilationMappings,
    classify_gas,
)
from .gas import merge_gas, gas_summary, function_summary, GAS_CLASS_LABELS
from .regions import (
    resolve_region,
    HighlightSelection,
    HighlightTracker,
    Decoration,
    build_decorations,
    reveal_line,
)
from .mapping_store import MappingStore
from .serializer import MappingSerializer

__all__ = [
    'View',
    'GasClass',
    'SourceRange',
    'SourcePosition',
    'CompiledSpan',
    'GasRecord',
    'LoopGasEstimate',
    'MappingEntry',
    'MappingTable',
    'CompilationMappings',
    'classify_gas',
    'merge_gas',
    'gas_summary',
    'function_summary',
    'GAS_CLASS_LABELS',
    'resolve_region',
    'HighlightSelection',
    'HighlightTracker',
    'Decoration',
    'build_decorations',
    'reveal_line',
    'MappingStore',
    'MappingSerializer',
]
