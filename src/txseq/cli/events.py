"""
List events command implementation.

This module prints the flat event sequence of a trace, one line per event,
before any frame reconstruction.
"""

import json

from txseq.core.events import EventKind, InteractionEvent, TransactionTrace
from txseq.formatting.labels import display_address, format_ether, function_label
from txseq.utils.colors import (
    address, bold, dim, error, function_name, gas_value, info, success, warning
)
from txseq.utils.exceptions import TxseqError
from txseq.cli.common import handle_command_error, read_trace


def list_events_command(args) -> int:
    """
    Execute the list-events command.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    json_mode = getattr(args, 'json_events', False)

    try:
        trace = read_trace(args.trace_file)
    except TxseqError as e:
        return handle_command_error(e, json_mode)

    if json_mode:
        print(json.dumps([e.to_dict() for e in trace.events], indent=2))
    else:
        _print_events(trace)
    return 0


def format_event_line(event: InteractionEvent) -> str:
    """Format a single event for terminal display."""
    parts = [
        f"{event.id:>4}",
        f"{event.kind.value:<13}",
        f"{address(display_address(event.from_address))} -> {address(display_address(event.to_address))}",
    ]

    if event.kind == EventKind.VALUE_TRANSFER:
        parts.append(f"{format_ether(event.amount)} ETH")
    else:
        label = function_label(event, show_params=True)
        if label:
            parts.append(function_name(label))

    if event.gas_used is not None:
        parts.append(f"gas {gas_value(event.gas_used)}")

    parts.append(success("ok") if event.succeeded else error("failed"))

    if event.delegate_context:
        marker = f"delegated {event.delegate_context.id}"
        if event.delegate_context.is_last:
            marker += " (last)"
        parts.append(dim(marker))

    line = "  ".join(parts)
    if event.error_message:
        line += f"\n      {error(event.error_message)}"
    return line


def _print_events(trace: TransactionTrace) -> None:
    details = trace.details
    if details.hash:
        title = f"Transaction {info(details.hash)}"
        if details.network:
            title += f" on {info(details.network)}"
        print(title)

    print(f"\n{bold('Events:')}")
    print(dim("-" * 80))
    if not trace.events:
        print(warning("No events in this trace."))
        return
    for event in trace.events:
        print(format_event_line(event))
    print(dim("-" * 80))
