"""
Utilities module for txseq.

Provides exception handling, logging and terminal colors.
"""

from .exceptions import (
    TxseqError,
    MalformedTraceError,
    UnknownEventKindError,
    DelegateContextError,
    FrameStackError,
    TraceLoadError,
    ConfigError,
    OutputError,
    format_error,
    format_error_json,
)
from .logging import setup_logging, get_logger, logger, TRACE
from .colors import (
    Colors,
    SUPPORTS_COLOR,
    bold, dim,
    error, success, warning, info,
    address, gas_value, function_name,
)

__all__ = [
    # Exceptions
    'TxseqError',
    'MalformedTraceError',
    'UnknownEventKindError',
    'DelegateContextError',
    'FrameStackError',
    'TraceLoadError',
    'ConfigError',
    'OutputError',
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
    'address', 'gas_value', 'function_name',
]
