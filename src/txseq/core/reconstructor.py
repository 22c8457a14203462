"""
Call-Frame Reconstructor

Replays a flat, ordered trace of interaction events and infers when call
frames close. The trace has no explicit return markers: a return is
detected when an event's origin no longer matches the destination of the
event before it, and the open frames are unwound until the caller's
context matches again.

Delegated contexts are activated on the diagram but never occupy a slot on
the frame stack, so the stack depth always equals the number of unreturned
calls on the real call path.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from txseq.core.events import EventKind, InteractionEvent
from txseq.core.instructions import (
    Activation,
    CallArrow,
    Destroy,
    Instruction,
    Note,
    Return,
    ValueArrow,
)
from txseq.formatting.labels import arrow_style, format_ether, function_label, short_address
from txseq.utils.exceptions import DelegateContextError, FrameStackError, MalformedTraceError
from txseq.utils.logging import get_logger

logger = get_logger('reconstructor')

SELFDESTRUCT_LABEL = "selfdestruct"


@dataclass
class ReconstructionOptions:
    """Rendering options that affect instruction content."""
    show_gas: bool = False
    show_params: bool = False


@dataclass
class DelegateFrame:
    """An open delegated context, keyed by the id of the DelegateCall that opened it."""
    context_id: int
    opened_by: InteractionEvent


class CallFrameReconstructor:
    """
    Turns an ordered event sequence into diagram instructions.

    A single instance may be reused; all state is reset at the start of
    each reconstruct() call.
    """

    def __init__(self, options: Optional[ReconstructionOptions] = None):
        self.options = options or ReconstructionOptions()
        self._reset()

    def _reset(self):
        self.frame_stack: List[InteractionEvent] = []
        self.open_delegates: Dict[int, DelegateFrame] = {}
        self._previous: Optional[InteractionEvent] = None
        self._previous_kind: Optional[EventKind] = None
        # Origin of a value transfer seen since the previous event. Used in
        # place of the previous event's destination by the next return check.
        self._adjacency_target: Optional[str] = None
        self._pending_delegate_close: Optional[int] = None
        self._last_event_id: Optional[int] = None
        self._instructions: List[Instruction] = []

    @property
    def depth(self) -> int:
        """Number of unreturned calls on the real call path."""
        return len(self.frame_stack)

    def reconstruct(self, events: Iterable[InteractionEvent]) -> List[Instruction]:
        """
        Replay the events and return the diagram instructions.

        Args:
            events: Events in execution order

        Returns:
            Ordered list of instructions

        Raises:
            MalformedTraceError: If the sequence cannot be replayed consistently
        """
        self._reset()
        for event in events:
            self.process(event)
        self.drain()
        instructions, self._instructions = self._instructions, []
        return instructions

    def process(self, event: InteractionEvent):
        """Process one event in arrival order."""
        kind = EventKind.parse(event.kind, event_id=event.id)
        self._check_order(event)
        self._log_event(event, kind)

        if (
            self._previous is not None
            and self._previous_kind != EventKind.DELEGATE_CALL
            and event.from_address != self._effective_destination()
        ):
            self._unwind_to(event.from_address)

        self._close_pending_delegate()
        self._check_delegate_context(event, kind)

        if kind in (EventKind.CALL, EventKind.CREATE, EventKind.DELEGATE_CALL):
            self._open_call(event, kind)
        elif kind == EventKind.VALUE_TRANSFER:
            self._transfer_value(event)
        elif kind == EventKind.SELF_DESTRUCT:
            self._self_destruct(event)

        if event.delegate_context and event.delegate_context.is_last:
            self._pending_delegate_close = event.delegate_context.id

        # A value transfer leaves no lasting effect on adjacency
        if kind != EventKind.VALUE_TRANSFER:
            self._previous = event
            self._previous_kind = kind
            self._adjacency_target = None

    def drain(self):
        """
        Close everything still open after the last event, innermost first.

        Frames and delegated activations are interleaved by the id of the
        event that opened them.
        """
        pending = self._pending_delegate_close
        self._pending_delegate_close = None

        open_items = list(self.frame_stack) + [d.opened_by for d in self.open_delegates.values()]
        for opener in sorted(open_items, key=lambda e: e.id, reverse=True):
            if opener.id in self.open_delegates:
                del self.open_delegates[opener.id]
                if opener.id != pending:
                    logger.warning(
                        f"Delegated context {opener.id} has no last event; closing it at end of trace"
                    )
                self._emit(Return(opener.to_address, delegated=True))
            else:
                self.frame_stack.remove(opener)
                self._close_frame(opener)

    def _effective_destination(self) -> str:
        if self._adjacency_target is not None:
            return self._adjacency_target
        return self._previous.to_address

    def _unwind_to(self, origin: str):
        """Close frames until the one whose caller is ``origin``, inclusive."""
        while self.frame_stack:
            frame = self.frame_stack.pop()
            logger.trace(f"pop frame {frame.id} at depth {len(self.frame_stack)}")
            self._close_frame(frame)
            # Assumes a caller does not re-enter itself mid-stack
            if frame.from_address == origin:
                break

    def _close_frame(self, frame: InteractionEvent):
        if frame.succeeded:
            self._emit(Return(frame.to_address))
        else:
            # A failed call's context cannot resume
            self._emit(Destroy(frame.to_address))
        if frame.error_message:
            self._emit(Note(frame.to_address, frame.error_message))

    def _close_pending_delegate(self):
        context_id = self._pending_delegate_close
        if context_id is None:
            return
        self._pending_delegate_close = None
        delegate = self.open_delegates.pop(context_id)
        logger.trace(f"close delegated context {context_id}")
        self._emit(Return(delegate.opened_by.to_address, delegated=True))

    def _open_call(self, event: InteractionEvent, kind: EventKind):
        self._emit(CallArrow(
            source=event.from_address,
            target=event.to_address,
            label=function_label(event, self.options.show_params),
            arrow=arrow_style(kind),
            gas_used=self._gas(event),
            delegated=event.is_delegated,
        ))

        if kind == EventKind.DELEGATE_CALL:
            self._emit(Activation(event.to_address, delegated=True))
            self.open_delegates[event.id] = DelegateFrame(event.id, event)
            logger.trace(f"open delegated context {event.id}")
        else:
            self._emit(Activation(event.to_address))
            self.frame_stack.append(event)
            logger.trace(f"push frame {event.id} at depth {len(self.frame_stack)}")

    def _transfer_value(self, event: InteractionEvent):
        if event.amount < 0:
            raise MalformedTraceError(
                f"Value transfer {event.id} has a negative amount: {event.amount}",
                event_id=event.id,
            )
        self._emit(ValueArrow(
            source=event.from_address,
            target=event.to_address,
            amount=f"{format_ether(event.amount)} ETH",
            arrow=arrow_style(EventKind.VALUE_TRANSFER),
            gas_used=self._gas(event),
            delegated=event.is_delegated,
        ))
        if self._previous is not None:
            self._adjacency_target = event.from_address

    def _self_destruct(self, event: InteractionEvent):
        if not self.frame_stack:
            raise FrameStackError(
                f"Selfdestruct event {event.id} has no open call frame",
                event_id=event.id,
            )
        frame = self.frame_stack.pop()
        logger.trace(f"selfdestruct pops frame {frame.id}")
        self._emit(Return(frame.to_address, label=SELFDESTRUCT_LABEL))

    def _check_order(self, event: InteractionEvent):
        if self._last_event_id is not None and event.id <= self._last_event_id:
            raise MalformedTraceError(
                f"Event {event.id} arrived after event {self._last_event_id}; "
                f"events must be in strictly increasing id order",
                event_id=event.id,
            )
        self._last_event_id = event.id

    def _check_delegate_context(self, event: InteractionEvent, kind: EventKind):
        context = event.delegate_context
        if context is None or context.id in self.open_delegates:
            return
        # A delegate call with no inner events may mark its own context
        if kind == EventKind.DELEGATE_CALL and context.id == event.id:
            return
        reason = "no delegate call opened it" if context.is_last else "it was never opened or already ended"
        raise DelegateContextError(context.id, event_id=event.id, reason=reason)

    def _gas(self, event: InteractionEvent) -> Optional[int]:
        return event.gas_used if self.options.show_gas else None

    def _emit(self, instruction: Instruction):
        self._instructions.append(instruction)

    def _log_event(self, event: InteractionEvent, kind: EventKind):
        label = event.label
        context = event.delegate_context
        logger.debug(
            f"id {event.id}, parent {event.parent_id}, "
            f"from {short_address(event.from_address)}, to {short_address(event.to_address)}, "
            f"{label.function_name if label else None} [{event.gas_used}] "
            f"{label.selector if label else None}, type {kind.value}, "
            f"delegated call {context.id if context else None} "
            f"last {context.is_last if context else None}"
        )


def reconstruct(
    events: Iterable[InteractionEvent],
    show_gas: bool = False,
    show_params: bool = False,
) -> List[Instruction]:
    """Convenience wrapper around CallFrameReconstructor."""
    options = ReconstructionOptions(show_gas=show_gas, show_params=show_params)
    return CallFrameReconstructor(options).reconstruct(events)
