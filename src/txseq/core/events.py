"""
Interaction event data model

Defines the flat, time-ordered trace records consumed by the call-frame
reconstructor, plus the participant and transaction metadata that travel
with a trace. Records are loaded from JSON produced by an external trace
source.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from eth_utils import is_hex_address, to_normalized_address

from txseq.utils.exceptions import TraceLoadError, UnknownEventKindError


class EventKind(str, Enum):
    """Kind of a trace interaction."""
    VALUE_TRANSFER = "ValueTransfer"
    CALL = "Call"
    CREATE = "Create"
    SELF_DESTRUCT = "SelfDestruct"
    DELEGATE_CALL = "DelegateCall"

    @classmethod
    def parse(cls, raw: Any, event_id: Optional[int] = None) -> "EventKind":
        """
        Resolve a kind from its name or from the numeric code used by
        upstream trace sources.

        Raises:
            UnknownEventKindError: If the value names no known kind
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            if 0 <= raw < len(_KIND_CODES):
                return _KIND_CODES[raw]
        elif isinstance(raw, str):
            kind = _KIND_ALIASES.get(raw.replace("_", "").lower())
            if kind is not None:
                return kind
        raise UnknownEventKindError(raw, event_id=event_id)


_KIND_CODES = (
    EventKind.VALUE_TRANSFER,
    EventKind.CALL,
    EventKind.CREATE,
    EventKind.SELF_DESTRUCT,
    EventKind.DELEGATE_CALL,
)

_KIND_ALIASES = {
    "valuetransfer": EventKind.VALUE_TRANSFER,
    "value": EventKind.VALUE_TRANSFER,
    "call": EventKind.CALL,
    "create": EventKind.CREATE,
    "selfdestruct": EventKind.SELF_DESTRUCT,
    "delegatecall": EventKind.DELEGATE_CALL,
}


def normalize_address(value: str) -> str:
    """Lower-case hex addresses so adjacency checks ignore checksum casing."""
    if is_hex_address(value):
        return to_normalized_address(value)
    return value


def parse_quantity(value: Union[int, str, None], default: Optional[int] = None) -> Optional[int]:
    """
    Parse an integer quantity from an int, a decimal string or a 0x hex string.

    Args:
        value: Raw value from the trace source
        default: Returned when the value is missing

    Returns:
        Parsed integer or the default

    Raises:
        ValueError: If the value is not an integer or is negative
    """
    if value is None or value == "":
        return default
    if isinstance(value, (bool, dict, list)):
        raise ValueError(f"Expected an integer quantity, got {value!r}")
    if isinstance(value, int):
        pass
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Expected an integer quantity, got {value!r}")
        value = int(value)
    else:
        text = str(value).strip()
        value = int(text, 16) if text.lower().startswith("0x") else int(text)
    if value < 0:
        raise ValueError(f"Expected a non-negative quantity, got {value}")
    return value


def parse_flag(value: Any, default: bool) -> bool:
    """
    Parse a JSON boolean, also accepting the strings "true" and "false".

    Raises:
        ValueError: For any other value
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"Expected a boolean, got {value!r}")


def _require(value: Any, expected: type, what: str) -> Any:
    if not isinstance(value, expected):
        noun = "a JSON object" if expected is dict else "a JSON list"
        raise TraceLoadError(f"{what} must be {noun}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class DelegateContext:
    """Marks an event executing inside a delegated context."""
    id: int
    is_last: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "isLast": self.is_last}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DelegateContext":
        _require(data, dict, "delegateContext")
        if data.get("id") is None:
            raise TraceLoadError("delegateContext is missing required field 'id'")
        return cls(
            id=parse_quantity(data["id"]),
            is_last=parse_flag(data.get("isLast", data.get("last")), False),
        )


@dataclass(frozen=True)
class CallArgument:
    """Decoded function call argument."""
    name: str
    type: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CallArgument":
        _require(data, dict, "Label argument")
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            value=data.get("value"),
        )


@dataclass(frozen=True)
class CallLabel:
    """Function identification attached to a call."""
    selector: str
    function_name: Optional[str] = None
    args: List[CallArgument] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "selector": self.selector,
            "args": [a.to_dict() for a in self.args],
        }
        if self.function_name:
            result["functionName"] = self.function_name
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CallLabel":
        _require(data, dict, "label")
        args = _require(data.get("args") or [], list, "label args")
        return cls(
            selector=data.get("selector", "") or "",
            function_name=data.get("functionName"),
            args=[CallArgument.from_dict(a) for a in args],
        )


@dataclass(frozen=True)
class InteractionEvent:
    """
    A single interaction in a flattened execution trace.

    Events arrive in pre-order, depth-first execution order. There are no
    explicit frame-closed markers; the reconstructor infers them.
    """
    id: int
    kind: EventKind
    from_address: str
    to_address: str
    parent_id: Optional[int] = None
    delegate_context: Optional[DelegateContext] = None
    amount: int = 0
    gas_used: Optional[int] = None
    gas_limit: Optional[int] = None
    label: Optional[CallLabel] = None
    succeeded: bool = True
    error_message: Optional[str] = None

    @property
    def is_delegated(self) -> bool:
        """True when the event runs inside a delegated context."""
        return self.delegate_context is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "id": self.id,
            "kind": self.kind.value,
            "from": self.from_address,
            "to": self.to_address,
            "amount": str(self.amount),
            "succeeded": self.succeeded,
        }
        if self.parent_id is not None:
            result["parentId"] = self.parent_id
        if self.delegate_context:
            result["delegateContext"] = self.delegate_context.to_dict()
        if self.gas_used is not None:
            result["gasUsed"] = self.gas_used
        if self.gas_limit is not None:
            result["gasLimit"] = self.gas_limit
        if self.label:
            result["label"] = self.label.to_dict()
        if self.error_message:
            result["errorMessage"] = self.error_message
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InteractionEvent":
        """
        Create from dictionary.

        Raises:
            TraceLoadError: If a field is missing, of the wrong JSON type, or
                            out of range
            UnknownEventKindError: If the kind is not recognized
        """
        _require(data, dict, "Trace event")
        for key in ("id", "kind", "from", "to"):
            if key not in data:
                raise TraceLoadError(f"Event is missing required field '{key}'", event=data)

        try:
            event_id = parse_quantity(data["id"])
            delegate = data.get("delegateContext")
            label = data.get("label")
            return cls(
                id=event_id,
                kind=EventKind.parse(data["kind"], event_id=event_id),
                from_address=normalize_address(str(data["from"])),
                to_address=normalize_address(str(data["to"])),
                parent_id=parse_quantity(data.get("parentId")),
                delegate_context=DelegateContext.from_dict(delegate) if delegate is not None else None,
                amount=parse_quantity(data.get("amount"), 0),
                gas_used=parse_quantity(data.get("gasUsed")),
                gas_limit=parse_quantity(data.get("gasLimit")),
                label=CallLabel.from_dict(label) if label is not None else None,
                succeeded=parse_flag(data.get("succeeded"), True),
                error_message=data.get("errorMessage") or None,
            )
        except ValueError as e:
            raise TraceLoadError(f"Invalid field in event {data.get('id')}: {e}", event_id=data.get("id"))
        except TraceLoadError as e:
            e.details.setdefault("event_id", data.get("id"))
            raise


@dataclass(frozen=True)
class Contract:
    """Display metadata for a participant address."""
    address: str
    contract_name: Optional[str] = None
    token_name: Optional[str] = None
    symbol: Optional[str] = None

    @classmethod
    def from_dict(cls, address: str, data: Dict[str, Any]) -> "Contract":
        _require(data, dict, f"Contract entry for {address}")
        return cls(
            address=normalize_address(address),
            contract_name=data.get("contractName"),
            token_name=data.get("tokenName"),
            symbol=data.get("symbol"),
        )


@dataclass(frozen=True)
class TransactionDetails:
    """Transaction-level metadata, used only for the diagram title."""
    hash: str = ""
    network: Optional[str] = None
    succeeded: bool = True
    error_message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionDetails":
        _require(data, dict, "Trace details")
        try:
            succeeded = parse_flag(data.get("succeeded"), True)
        except ValueError as e:
            raise TraceLoadError(f"Invalid transaction details: {e}")
        return cls(
            hash=data.get("hash", ""),
            network=data.get("network"),
            succeeded=succeeded,
            error_message=data.get("errorMessage"),
        )


@dataclass
class TransactionTrace:
    """A complete trace: ordered events plus participant and transaction metadata."""
    events: List[InteractionEvent] = field(default_factory=list)
    contracts: Dict[str, Contract] = field(default_factory=dict)
    details: TransactionDetails = field(default_factory=TransactionDetails)

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> "TransactionTrace":
        """
        Build a trace from decoded JSON.

        Accepts either a bare list of events or an object with ``events``
        (or ``messages``), ``contracts`` and ``details``.
        """
        if isinstance(data, list):
            raw_events, raw_contracts, raw_details = data, {}, {}
        elif isinstance(data, dict):
            raw_events = data.get("events", data.get("messages", []))
            raw_contracts = _require(data.get("contracts") or {}, dict, "Trace contracts")
            raw_details = data.get("details") or {}
        else:
            raise TraceLoadError(f"Expected a JSON object or list, got {type(data).__name__}")

        if not isinstance(raw_events, list):
            raise TraceLoadError("Trace events must be a JSON list")

        events = [InteractionEvent.from_dict(e) for e in raw_events]
        contracts = {}
        for addr, info in raw_contracts.items():
            contract = Contract.from_dict(addr, info or {})
            contracts[contract.address] = contract

        return cls(
            events=events,
            contracts=contracts,
            details=TransactionDetails.from_dict(raw_details),
        )


def load_trace(path: Union[str, Path]) -> TransactionTrace:
    """
    Load a trace from a JSON file.

    Args:
        path: Path to the trace file

    Returns:
        Parsed TransactionTrace

    Raises:
        TraceLoadError: If the file is missing or is not valid trace JSON
    """
    trace_path = Path(path)
    try:
        with open(trace_path) as f:
            data = json.load(f)
    except FileNotFoundError:
        raise TraceLoadError(f"Trace file not found: {trace_path}", source=str(trace_path))
    except json.JSONDecodeError as e:
        raise TraceLoadError(f"Trace file is not valid JSON: {e}", source=str(trace_path))

    try:
        return TransactionTrace.from_dict(data)
    except TraceLoadError as e:
        e.details.setdefault("source", str(trace_path))
        raise
