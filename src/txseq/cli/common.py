"""
Common utilities for CLI commands.

This module provides shared functionality used across CLI commands
to ensure consistent error reporting and output handling.
"""

import sys
from pathlib import Path
from typing import Any, Optional

from txseq.core.events import TransactionTrace, load_trace
from txseq.utils.exceptions import OutputError, format_error
from txseq.utils.logging import logger, setup_logging


def configure_logging(args: Any) -> None:
    """Set up logging from the global command line flags."""
    setup_logging(
        quiet=getattr(args, 'quiet', False),
        debug=getattr(args, 'debug', False),
        verbose=getattr(args, 'verbose', False),
        log_file=getattr(args, 'log_file', None),
    )


def read_trace(trace_file: str) -> TransactionTrace:
    """
    Load a trace file given on the command line.

    Raises:
        TraceLoadError: If the file cannot be loaded
    """
    logger.debug(f"Loading trace from {trace_file}")
    trace = load_trace(trace_file)
    logger.debug(
        f"Loaded {len(trace.events)} events and {len(trace.contracts)} contracts"
    )
    return trace


def write_output(text: str, output: Optional[str] = None) -> None:
    """
    Write command output to a file, or to stdout when no file is given.

    Args:
        text: Text to write
        output: Optional output file path

    Raises:
        OutputError: If the output file cannot be written
    """
    if output:
        try:
            Path(output).write_text(text)
        except OSError as e:
            raise OutputError(f"Cannot write {output}: {e.strerror or e}", path=str(output))
        logger.info(f"Wrote {output}")
    else:
        sys.stdout.write(text)
        sys.stdout.flush()


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
