"""Tests for the call-frame reconstructor: return detection, delegated contexts,
value transfers, self-destructs, failures and drain."""

import logging

import pytest

from txseq.core.events import CallLabel, DelegateContext, EventKind, InteractionEvent
from txseq.core.instructions import (
    Activation,
    CallArrow,
    Destroy,
    InstructionKind,
    Note,
    Return,
    ValueArrow,
)
from txseq.core.reconstructor import (
    CallFrameReconstructor,
    ReconstructionOptions,
    reconstruct,
)
from txseq.utils.exceptions import (
    DelegateContextError,
    FrameStackError,
    MalformedTraceError,
    UnknownEventKindError,
)
from txseq.utils.logging import TRACE

EOA = "0x1111111111111111111111111111111111111111"
B = "0x2222222222222222222222222222222222222222"
C = "0x3333333333333333333333333333333333333333"
L = "0x4444444444444444444444444444444444444444"
D = "0x5555555555555555555555555555555555555555"
E = "0x6666666666666666666666666666666666666666"

ONE_ETHER = 10 ** 18


def call(event_id, frm, to, kind=EventKind.CALL, context=None, **kwargs):
    return InteractionEvent(
        id=event_id,
        kind=kind,
        from_address=frm,
        to_address=to,
        delegate_context=DelegateContext(*context) if context else None,
        **kwargs
    )


def value(event_id, frm, to, amount=ONE_ETHER, **kwargs):
    return call(event_id, frm, to, kind=EventKind.VALUE_TRANSFER, amount=amount, **kwargs)


def kinds(instructions):
    return [i.kind for i in instructions]


def closes(instructions):
    return [i for i in instructions if isinstance(i, (Return, Destroy))]


def assert_balanced(instructions):
    activations = [i for i in instructions if isinstance(i, Activation)]
    assert len(activations) == len(closes(instructions))


# ------------------------------------------------------------------ #
# Return detection
# ------------------------------------------------------------------ #


class TestReturnDetection:

    def test_empty_input_yields_nothing(self):
        assert reconstruct([]) == []

    def test_single_call_is_drained(self):
        result = reconstruct([call(1, EOA, B)])

        assert result == [
            CallArrow(EOA, B),
            Activation(B),
            Return(B),
        ]

    def test_nested_calls_close_innermost_first_at_drain(self):
        result = reconstruct([call(1, EOA, B), call(2, B, C), call(3, C, D)])

        assert closes(result) == [Return(D), Return(C), Return(B)]

    def test_unwind_stops_at_frame_called_from_current_origin(self):
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, C),
            call(3, C, D),
            call(4, B, E),
        ])

        assert result == [
            CallArrow(EOA, B), Activation(B),
            CallArrow(B, C), Activation(C),
            CallArrow(C, D), Activation(D),
            Return(D),
            Return(C),
            CallArrow(B, E), Activation(E),
            Return(E),
            Return(B),
        ]

    def test_unwind_pops_single_frame_for_sibling_call(self):
        result = reconstruct([call(1, EOA, B), call(2, B, C), call(3, B, D)])

        assert result[4:7] == [Return(C), CallArrow(B, D), Activation(D)]
        assert closes(result) == [Return(C), Return(D), Return(B)]

    def test_unwind_empties_stack_when_no_caller_matches(self):
        reconstructor = CallFrameReconstructor()
        reconstructor.process(call(1, EOA, B))
        reconstructor.process(call(2, B, C))
        reconstructor.process(call(3, E, D))

        assert [f.id for f in reconstructor.frame_stack] == [3]

    def test_adjacent_calls_do_not_return(self):
        reconstructor = CallFrameReconstructor()
        for event in [call(1, EOA, B), call(2, B, C), call(3, C, D)]:
            reconstructor.process(event)

        assert reconstructor.depth == 3

    def test_reconstructor_is_reusable(self):
        reconstructor = CallFrameReconstructor()
        first = reconstructor.reconstruct([call(1, EOA, B), call(2, B, C)])
        second = reconstructor.reconstruct([call(1, EOA, B), call(2, B, C)])

        assert first == second
        assert reconstructor.depth == 0


# ------------------------------------------------------------------ #
# Failures
# ------------------------------------------------------------------ #


class TestFailures:

    def test_failed_call_closes_with_destroy_and_note(self):
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, C, succeeded=False, error_message="revert"),
            value(3, C, EOA),
        ])

        assert result == [
            CallArrow(EOA, B),
            Activation(B),
            CallArrow(B, C),
            Activation(C),
            ValueArrow(C, EOA, "1.00 ETH"),
            Destroy(C),
            Note(C, "revert"),
            Return(B),
        ]

    def test_failed_call_without_error_has_no_note(self):
        result = reconstruct([call(1, EOA, B, succeeded=False)])

        assert result[-1] == Destroy(B)
        assert InstructionKind.NOTE not in kinds(result)

    def test_error_note_is_attached_to_successful_frame(self):
        result = reconstruct([call(1, EOA, B, error_message="out of gas in callee")])

        assert result[-2:] == [Return(B), Note(B, "out of gas in callee")]

    def test_failed_frame_closed_during_unwind(self):
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, C, succeeded=False, error_message="Ownable: caller is not the owner"),
            call(3, B, D),
        ])

        assert result[4:6] == [Destroy(C), Note(C, "Ownable: caller is not the owner")]
        assert result[6] == CallArrow(B, D)

    def test_processing_continues_after_failure(self):
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, C, succeeded=False),
            call(3, B, D),
            call(4, D, E),
        ])

        assert closes(result) == [Destroy(C), Return(E), Return(D), Return(B)]


# ------------------------------------------------------------------ #
# Value transfers
# ------------------------------------------------------------------ #


class TestValueTransfers:

    def test_transfer_between_adjacent_calls_closes_nothing(self):
        with_transfer = reconstruct([call(1, EOA, B), value(2, B, D), call(3, B, C)])
        without = reconstruct([call(1, EOA, B), call(3, B, C)])

        assert closes(with_transfer) == closes(without)
        assert with_transfer[2] == ValueArrow(B, D, "1.00 ETH")

    def test_transfer_does_not_become_previous_event(self):
        reconstructor = CallFrameReconstructor()
        reconstructor.process(call(1, EOA, B))
        reconstructor.process(value(2, B, D))
        reconstructor.process(call(3, B, C))

        assert reconstructor.depth == 2

    def test_transfer_after_return_prevents_second_unwind(self):
        # C returned to B, then B sends value and calls E
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, C),
            value(3, B, D),
            call(4, B, E),
        ])

        assert result[4:9] == [
            Return(C),
            ValueArrow(B, D, "1.00 ETH"),
            CallArrow(B, E),
            Activation(E),
            Return(E),
        ]
        assert result[-1] == Return(B)

    def test_transfer_from_outer_context_unwinds(self):
        result = reconstruct([call(1, EOA, B), call(2, B, C), value(3, EOA, D)])

        assert result[4:6] == [Return(C), Return(B)]

    def test_first_event_transfer(self):
        result = reconstruct([value(1, EOA, B, amount=25 * 10 ** 17), call(2, EOA, C)])

        assert result == [
            ValueArrow(EOA, B, "2.50 ETH"),
            CallArrow(EOA, C),
            Activation(C),
            Return(C),
        ]

    def test_amount_has_thousands_separator(self):
        result = reconstruct([value(1, EOA, B, amount=1234567 * 10 ** 15)])

        assert result[0].amount == "1,234.57 ETH"


# ------------------------------------------------------------------ #
# Delegated contexts
# ------------------------------------------------------------------ #


class TestDelegateCalls:

    def test_delegate_calls_never_touch_the_frame_stack(self):
        reconstructor = CallFrameReconstructor()
        depths = []
        for event in [
            call(1, EOA, B),
            call(2, B, L, kind=EventKind.DELEGATE_CALL, context=(2, True)),
            call(3, B, L, kind=EventKind.DELEGATE_CALL, context=(3, True)),
            call(4, B, L, kind=EventKind.DELEGATE_CALL, context=(4, True)),
        ]:
            reconstructor.process(event)
            depths.append(reconstructor.depth)

        assert depths == [1, 1, 1, 1]

    def test_one_delegate_return_per_last_marker(self):
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, L, kind=EventKind.DELEGATE_CALL, context=(2, True)),
            call(3, B, L, kind=EventKind.DELEGATE_CALL, context=(3, True)),
        ])

        assert result == [
            CallArrow(EOA, B), Activation(B),
            CallArrow(B, L, delegated=True), Activation(L, delegated=True),
            Return(L, delegated=True),
            CallArrow(B, L, delegated=True), Activation(L, delegated=True),
            Return(L, delegated=True),
            Return(B),
        ]
        assert len([i for i in result if isinstance(i, Return) and not i.delegated]) == 1

    def test_delegated_context_with_inner_calls(self):
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, L, kind=EventKind.DELEGATE_CALL),
            call(3, B, C, context=(2, False)),
            call(4, B, D, context=(2, True)),
            call(5, B, E),
        ])

        assert result == [
            CallArrow(EOA, B), Activation(B),
            CallArrow(B, L), Activation(L, delegated=True),
            CallArrow(B, C, delegated=True), Activation(C),
            Return(C),
            CallArrow(B, D, delegated=True), Activation(D),
            Return(D),
            Return(L, delegated=True),
            CallArrow(B, E), Activation(E),
            Return(E),
            Return(B),
        ]
        assert_balanced(result)

    def test_return_check_skipped_after_delegate_call(self):
        reconstructor = CallFrameReconstructor()
        reconstructor.process(call(1, EOA, B))
        reconstructor.process(call(2, B, L, kind=EventKind.DELEGATE_CALL))
        reconstructor.process(call(3, B, C, context=(2, True)))

        assert [f.id for f in reconstructor.frame_stack] == [1, 3]

    def test_drain_interleaves_frames_and_delegates_innermost_first(self):
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, L, kind=EventKind.DELEGATE_CALL),
            call(3, B, C, context=(2, True)),
        ])

        assert result[-3:] == [Return(C), Return(L, delegated=True), Return(B)]

    def test_unterminated_delegate_is_closed_with_warning(self, caplog):
        logger = logging.getLogger('txseq')
        propagate = logger.propagate
        logger.propagate = True
        try:
            with caplog.at_level(logging.WARNING, logger='txseq'):
                result = reconstruct([
                    call(1, EOA, B),
                    call(2, B, L, kind=EventKind.DELEGATE_CALL),
                ])
        finally:
            logger.propagate = propagate

        assert result[-2:] == [Return(L, delegated=True), Return(B)]
        assert "Delegated context 2 has no last event" in caplog.text
        assert_balanced(result)

    def test_last_marker_on_value_transfer_closes_context(self):
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, L, kind=EventKind.DELEGATE_CALL),
            value(3, B, D, context=(2, True)),
            call(4, B, C),
        ])

        assert result[4:7] == [
            ValueArrow(B, D, "1.00 ETH", delegated=True),
            Return(L, delegated=True),
            CallArrow(B, C),
        ]
        assert_balanced(result)

    def test_last_marker_without_opening_is_rejected(self):
        with pytest.raises(DelegateContextError) as exc_info:
            reconstruct([call(1, EOA, B), call(2, B, C, context=(7, True))])

        assert exc_info.value.details == {"event_id": 2, "context_id": 7}

    def test_context_used_after_it_ended_is_rejected(self):
        with pytest.raises(DelegateContextError):
            reconstruct([
                call(1, EOA, B),
                call(2, B, L, kind=EventKind.DELEGATE_CALL),
                call(3, B, C, context=(2, True)),
                call(4, B, D, context=(2, False)),
            ])


# ------------------------------------------------------------------ #
# Self-destruct
# ------------------------------------------------------------------ #


class TestSelfDestruct:

    def test_selfdestruct_pops_innermost_frame(self):
        result = reconstruct([
            call(1, EOA, B),
            call(2, B, C),
            call(3, C, B, kind=EventKind.SELF_DESTRUCT),
        ])

        assert result[4:] == [Return(C, label="selfdestruct"), Return(B)]
        assert_balanced(result)

    def test_selfdestruct_without_frame_is_rejected(self):
        with pytest.raises(FrameStackError):
            reconstruct([call(1, B, EOA, kind=EventKind.SELF_DESTRUCT)])


# ------------------------------------------------------------------ #
# Labels, gas and malformed input
# ------------------------------------------------------------------ #


class TestOptionsAndValidation:

    def test_gas_shown_only_when_enabled(self):
        events = [call(1, EOA, B, gas_used=21000)]

        assert reconstruct(events)[0].gas_used is None
        assert reconstruct(events, show_gas=True)[0].gas_used == 21000

    def test_labels_use_function_name_and_params(self):
        label = CallLabel(selector="0xa9059cbb", function_name="transfer")
        reconstructor = CallFrameReconstructor(ReconstructionOptions(show_params=True))

        result = reconstructor.reconstruct([call(1, EOA, B, label=label)])

        assert result[0].label == "transfer()"

    def test_create_uses_circle_arrow_and_constructor_label(self):
        result = reconstruct([call(1, EOA, B, kind=EventKind.CREATE)])

        assert result[0].label == "create"
        assert result[0].arrow.value == "circle"

    def test_unknown_kind_is_rejected(self):
        with pytest.raises(UnknownEventKindError):
            reconstruct([call(1, EOA, B, kind="StaticCall")])

    def test_out_of_order_ids_are_rejected(self):
        with pytest.raises(MalformedTraceError, match="strictly increasing"):
            reconstruct([call(2, EOA, B), call(1, B, C)])

    def test_kind_given_as_string_is_accepted(self):
        result = reconstruct([call(1, EOA, B, kind="Call")])

        assert result[1] == Activation(B)

    def test_negative_transfer_amount_is_rejected(self):
        with pytest.raises(MalformedTraceError, match="negative amount") as exc_info:
            reconstruct([call(1, EOA, B), value(2, B, EOA, amount=-1)])

        assert exc_info.value.details["event_id"] == 2

    def test_frame_pushes_and_pops_logged_at_trace_level(self, caplog):
        logger = logging.getLogger('txseq')
        propagate = logger.propagate
        logger.propagate = True
        try:
            with caplog.at_level(TRACE, logger='txseq'):
                reconstruct([call(1, EOA, B), call(2, EOA, C)])
        finally:
            logger.propagate = propagate

        trace_lines = [r.getMessage() for r in caplog.records if r.levelno == TRACE]
        assert "push frame 1 at depth 1" in trace_lines
        assert "pop frame 1 at depth 0" in trace_lines


@pytest.mark.parametrize("events", [
    [call(1, EOA, B), call(2, B, C), call(3, C, D), call(4, EOA, E)],
    [call(1, EOA, B), call(2, B, L, kind=EventKind.DELEGATE_CALL), call(3, B, C, context=(2, True)), value(4, C, EOA)],
    [call(1, EOA, B, succeeded=False), call(2, B, C, succeeded=False, error_message="x")],
    [call(1, EOA, B), call(2, B, C), call(3, C, B, kind=EventKind.SELF_DESTRUCT), call(4, B, D)],
])
def test_every_activation_is_closed(events):
    assert_balanced(reconstruct(events))
