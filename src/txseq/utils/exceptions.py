"""
Custom exceptions for txseq.

This module provides a hierarchy of exceptions for the different ways a
trace can fail to load or reconstruct, along with utilities for formatting
errors consistently.
"""

import json
from typing import Any, Dict, Optional


class TxseqError(Exception):
    """
    Base exception for all txseq errors.

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
# Trace Structure Errors
# ============================================================================

class MalformedTraceError(TxseqError):
    """Raised when the event sequence cannot be replayed consistently."""

    def __init__(self, message: str, event_id: Optional[int] = None, **kwargs):
        details = {}
        if event_id is not None:
            details["event_id"] = event_id
        details.update(kwargs)
        super().__init__(message, details, "MalformedTraceError")


class UnknownEventKindError(MalformedTraceError):
    """Raised when an event kind is not recognized."""

    def __init__(self, kind: Any, event_id: Optional[int] = None, **kwargs):
        super().__init__(
            f"Unknown event kind: {kind!r}",
            event_id=event_id,
            kind=str(kind),
            **kwargs
        )
        self.error_code = "UnknownEventKindError"


class DelegateContextError(MalformedTraceError):
    """Raised when delegated-context metadata has no matching opening."""

    def __init__(self, context_id: int, event_id: Optional[int] = None, reason: str = "", **kwargs):
        message = f"Delegated context {context_id} is not open"
        if reason:
            message += f": {reason}"
        super().__init__(message, event_id=event_id, context_id=context_id, **kwargs)
        self.error_code = "DelegateContextError"


class FrameStackError(MalformedTraceError):
    """Raised when an event requires an open call frame and there is none."""

    def __init__(self, message: str, event_id: Optional[int] = None, **kwargs):
        super().__init__(message, event_id=event_id, **kwargs)
        self.error_code = "FrameStackError"


# ============================================================================
# Input Errors
# ============================================================================

class TraceLoadError(TxseqError):
    """Raised when a trace file cannot be read or decoded."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        details = {"source": source} if source else {}
        details.update(kwargs)
        super().__init__(message, details, "TraceLoadError")


class ConfigError(TxseqError):
    """Raised when a configuration file is invalid."""

    def __init__(self, message: str, config_file: Optional[str] = None, **kwargs):
        details = {"config_file": config_file} if config_file else {}
        details.update(kwargs)
        super().__init__(message, details, "ConfigError")


class OutputError(TxseqError):
    """Raised when command output cannot be written."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        details = {"path": path} if path else {}
        details.update(kwargs)
        super().__init__(message, details, "OutputError")


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
    from txseq.utils.colors import error

    if isinstance(e, TxseqError):
        if json_mode:
            return e.to_json()
        return error(e.message)
    if json_mode:
        return json.dumps(format_error_json(str(e), type(e).__name__), indent=2)
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
