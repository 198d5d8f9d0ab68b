"""
Utilities module for solbolt.

Provides common utilities, exception handling, logging, colors, and helper functions.
"""

from .exceptions import (
    SolboltError,
    MalformedInputError,
    MissingFieldError,
    OutOfRangeOffsetError,
    StaleGenerationError,
    SourceChangedError,
    ServiceError,
    TaskFailedError,
    ConfigError,
    format_error,
    format_error_json,
)
from .logging import setup_logging, get_logger, logger, TRACE
from .colors import (
    Colors,
    SUPPORTS_COLOR,
    bold, dim,
    error, success, warning, info,
    gas_value, region_key,
)
from .helpers import (
    require,
    hash_source,
    prettify_gas,
)

__all__ = [
    # Exceptions
    'SolboltError',
    'MalformedInputError',
    'MissingFieldError',
    'OutOfRangeOffsetError',
    'StaleGenerationError',
    'SourceChangedError',
    'ServiceError',
    'TaskFailedError',
    'ConfigError',
    # Formatting
    'format_error',
    'format_error_json',
    # Logging
    'setup_logging',
    'get_logger',
    'logger',
    'TRACE',
    # Colors
    'Colors',
    'SUPPORTS_COLOR',
    'bold', 'dim',
    'error', 'success', 'warning', 'info',
    'gas_value', 'region_key',
    # Helpers
    'require',
    'hash_source',
    'prettify_gas',
]
