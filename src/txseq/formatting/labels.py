"""
Stateless text helpers for participants, call labels and amounts.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Optional

from eth_utils import is_hex_address, to_checksum_address
from web3 import Web3

from txseq.core.events import CallArgument, EventKind, InteractionEvent
from txseq.core.instructions import ArrowStyle

CONSTRUCTOR_LABEL = "create"

_ARROWS = {
    EventKind.CALL: ArrowStyle.SIMPLE,
    EventKind.DELEGATE_CALL: ArrowStyle.SIMPLE,
    EventKind.VALUE_TRANSFER: ArrowStyle.DOUBLE,
    EventKind.CREATE: ArrowStyle.CIRCLE,
    EventKind.SELF_DESTRUCT: ArrowStyle.SLASHED,
}


def short_address(address: str) -> str:
    """Shorten an address to its first 6 and last 4 characters, e.g. 0x1234..abcd."""
    return address[:6] + ".." + address[-4:]


def participant_id(address: str) -> str:
    """Derive a markup-safe participant alias from an address."""
    return address[2:6] + address[-4:]


def display_address(address: str) -> str:
    """Checksum hex addresses for display; leave other identifiers alone."""
    if is_hex_address(address):
        return to_checksum_address(address)
    return address


def format_ether(amount_wei: int, decimals: int = 2) -> str:
    """
    Convert a wei amount to ether with thousands separators.

    Args:
        amount_wei: Amount in wei
        decimals: Number of decimal places to keep

    Returns:
        Formatted amount, e.g. "1,234.50"
    """
    ether = Decimal(Web3.from_wei(amount_wei, 'ether'))
    quantum = Decimal(1).scaleb(-decimals)
    return f"{ether.quantize(quantum, rounding=ROUND_HALF_UP):,.{decimals}f}"


def format_param_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (bytes, bytearray)):
        return '0x' + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_param_value(v) for v in value) + "]"
    if value is None:
        return ""
    return str(value)


def format_params(args: Optional[List[CallArgument]]) -> str:
    """Render arguments as ``name: value`` pairs, shortening addresses."""
    if not args:
        return ""

    parts = []
    for arg in args:
        if arg.type == "address" and isinstance(arg.value, str):
            parts.append(f"{arg.name}: {short_address(arg.value)}")
        else:
            parts.append(f"{arg.name}: {format_param_value(arg.value)}")
    return ", ".join(parts)


def function_label(event: InteractionEvent, show_params: bool = False) -> str:
    """
    Build the text shown on a call arrow.

    Creates are always labelled as a constructor call. Otherwise the
    function name is preferred over the raw selector; parameters are only
    listed when the function name is known.
    """
    if EventKind.parse(event.kind, event_id=event.id) == EventKind.CREATE:
        return CONSTRUCTOR_LABEL
    label = event.label
    if label is None:
        return ""
    if label.function_name:
        if show_params:
            return f"{label.function_name}({format_params(label.args)})"
        return label.function_name
    return label.selector or ""


def arrow_style(kind: EventKind) -> ArrowStyle:
    return _ARROWS[kind]
