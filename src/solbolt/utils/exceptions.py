"""
Custom exceptions for solbolt.

This module provides a hierarchy of exceptions for the error cases of the
correlation engine and its remote collaborators, along with utilities for
formatting errors consistently.
"""

import json
from typing import Any, Dict, Optional


class SolboltError(Exception):
    """
    Base exception for all solbolt errors.

    Attributes:
        message: Human-readable error message
        details: Additional context as key-value pairs
        error_code: Optional error code for programmatic handling
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": True,
            "type": self.error_code,
            "message": self.message,
            **self.details
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


# ============================================================================
# Input Errors
# ============================================================================

class MalformedInputError(SolboltError):
    """Raised when a compiler or symbolic-execution document lacks an expected field."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        details = {"path": path} if path else {}
        details.update(kwargs)
        super().__init__(message, details, "MalformedInputError")
        self.path = path


class MissingFieldError(MalformedInputError):
    """Raised when a required field is absent at a document path."""

    def __init__(self, path: str, **kwargs):
        super().__init__(f"Missing required field: {path}", path=path, **kwargs)
        self.error_code = "MissingFieldError"


class OutOfRangeOffsetError(SolboltError):
    """Raised when a source offset falls outside [0, len(source)]."""

    def __init__(self, offset: int, length: int, **kwargs):
        super().__init__(
            f"Source offset {offset} is outside the source text (length {length})",
            {"offset": offset, "length": length, **kwargs},
            "OutOfRangeOffsetError"
        )
        self.offset = offset
        self.length = length


# ============================================================================
# Generation Errors
# ============================================================================

class StaleGenerationError(SolboltError):
    """
    Raised when gas data targets a mapping generation that has been replaced.

    Recoverable: the caller should discard the result and request gas data
    again against the current generation.
    """

    def __init__(
        self,
        message: str,
        expected_generation: Optional[int] = None,
        current_generation: Optional[int] = None,
        **kwargs
    ):
        details = {}
        if expected_generation is not None:
            details["expected_generation"] = expected_generation
        if current_generation is not None:
            details["current_generation"] = current_generation
        details.update(kwargs)
        super().__init__(message, details, "StaleGenerationError")


class SourceChangedError(StaleGenerationError):
    """Raised when symbolic execution is requested for source that was edited after compiling."""

    def __init__(self, **kwargs):
        super().__init__("Source content has changed, please compile first!", **kwargs)
        self.error_code = "SourceChangedError"


# ============================================================================
# Remote Service Errors
# ============================================================================

class ServiceError(SolboltError):
    """Raised when the remote compiler/symexec service cannot be reached or answers with an error."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs
    ):
        details = {}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        details.update(kwargs)
        super().__init__(message, details, "ServiceError")
        self.status_code = status_code


class TaskFailedError(SolboltError):
    """Raised when a remote job finishes with FAILURE or an unsuccessful result."""

    def __init__(
        self,
        message: str,
        task_id: Optional[str] = None,
        kind: Optional[str] = None,
        **kwargs
    ):
        details = {}
        if task_id:
            details["task_id"] = task_id
        if kind:
            details["kind"] = kind
        details.update(kwargs)
        super().__init__(message, details, "TaskFailedError")


class ConfigError(SolboltError):
    """Raised when the configuration file cannot be read or is invalid."""

    def __init__(self, message: str, config_file: Optional[str] = None, **kwargs):
        details = {"config_file": config_file} if config_file else {}
        details.update(kwargs)
        super().__init__(message, details, "ConfigError")


# ============================================================================
# Error Formatting Utilities
# ============================================================================

def format_error(e: Exception, json_mode: bool = False) -> str:
    """
    Format an exception for display.

    Args:
        e: The exception to format
        json_mode: If True, output as JSON; otherwise use colored text

    Returns:
        Formatted error string
    """
    if isinstance(e, SolboltError):
        if json_mode:
            return e.to_json()
        from solbolt.utils.colors import error
        return error(e.message)

    if json_mode:
        return json.dumps(format_error_json(str(e), type(e).__name__), indent=2)
    from solbolt.utils.colors import error
    return error(str(e))


def format_error_json(
    message: str,
    error_type: str = "Error",
    **kwargs
) -> Dict[str, Any]:
    """
    Create a standardized error JSON structure.

    Args:
        message: Error message
        error_type: Error type/code
        **kwargs: Additional fields to include

    Returns:
        Dictionary suitable for JSON output
    """
    return {
        "error": True,
        "type": error_type,
        "message": message,
        **kwargs
    }
