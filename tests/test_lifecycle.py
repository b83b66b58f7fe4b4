import pytest

from staybook.errors import StateError
from staybook.models import TERMINAL_BOOKING_STATUSES, BookingStatus, NotificationType
from staybook.services.lifecycle import (
    ALLOWED_TRANSITIONS,
    BookingAction,
    EnsurePayment,
    Notify,
    Recipient,
    SetCancelledAt,
    allowed_actions,
    can_transition,
    transition,
)


def _notified(move):
    return {(e.recipient, e.type) for e in move.effects if isinstance(e, Notify)}


def test_guest_creation_is_pending_and_notifies_host():
    move = transition(None, BookingAction.CREATE_BY_GUEST)
    assert move.next_status == BookingStatus.PENDING
    assert _notified(move) == {(Recipient.HOST, NotificationType.BOOKING_CREATED)}
    assert not any(isinstance(e, EnsurePayment) for e in move.effects)


def test_host_creation_is_confirmed_with_payment():
    move = transition(None, BookingAction.CREATE_BY_HOST)
    assert move.next_status == BookingStatus.CONFIRMED
    payments = [e for e in move.effects if isinstance(e, EnsurePayment)]
    assert len(payments) == 1
    assert (Recipient.GUEST, NotificationType.BOOKING_CREATED) in _notified(move)


def test_pay_confirms_pending_booking():
    move = transition(BookingStatus.PENDING, BookingAction.PAY)
    assert move.next_status == BookingStatus.CONFIRMED
    assert (Recipient.GUEST, NotificationType.BOOKING_CONFIRMED) in _notified(move)


def test_host_confirm_accepts_pending_without_payment():
    move = transition(BookingStatus.PENDING, BookingAction.CONFIRM)
    assert move.next_status == BookingStatus.CONFIRMED
    assert _notified(move) == {(Recipient.GUEST, NotificationType.BOOKING_CONFIRMED)}
    assert not any(isinstance(e, EnsurePayment) for e in move.effects)


@pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CONFIRMED])
def test_cancel_sets_timestamp_and_notifies_both(status):
    move = transition(status, BookingAction.CANCEL)
    assert move.next_status == BookingStatus.CANCELLED
    assert any(isinstance(e, SetCancelledAt) for e in move.effects)
    assert _notified(move) == {
        (Recipient.GUEST, NotificationType.BOOKING_CANCELLED),
        (Recipient.HOST, NotificationType.BOOKING_CANCELLED),
    }


def test_complete_keeps_existing_payment():
    move = transition(BookingStatus.CONFIRMED, BookingAction.COMPLETE)
    assert move.next_status == BookingStatus.COMPLETED
    (payment,) = [e for e in move.effects if isinstance(e, EnsurePayment)]
    assert payment.overwrite is False


@pytest.mark.parametrize("status,action", [
    (BookingStatus.PENDING, BookingAction.COMPLETE),
    (BookingStatus.PENDING, BookingAction.MARK_NO_SHOW),
    (BookingStatus.CONFIRMED, BookingAction.PAY),
    (BookingStatus.CONFIRMED, BookingAction.CONFIRM),
    (BookingStatus.CANCELLED, BookingAction.CONFIRM),
    (BookingStatus.COMPLETED, BookingAction.COMPLETE),
    (BookingStatus.COMPLETED, BookingAction.CANCEL),
    (BookingStatus.CANCELLED, BookingAction.PAY),
    (BookingStatus.CANCELLED, BookingAction.CANCEL),
    (BookingStatus.NO_SHOW, BookingAction.COMPLETE),
])
def test_illegal_moves_raise_state_error(status, action):
    assert not can_transition(status, action)
    with pytest.raises(StateError):
        transition(status, action)


def test_pay_requires_existing_booking():
    with pytest.raises(StateError):
        transition(None, BookingAction.PAY)


def test_terminal_states_have_no_moves():
    for status in TERMINAL_BOOKING_STATUSES:
        assert allowed_actions(status) == []
        assert status not in ALLOWED_TRANSITIONS


def test_allowed_transitions_graph():
    assert ALLOWED_TRANSITIONS[BookingStatus.PENDING] == {BookingStatus.CONFIRMED, BookingStatus.CANCELLED}
    assert ALLOWED_TRANSITIONS[BookingStatus.CONFIRMED] == {
        BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW,
    }


def test_accepts_raw_status_values():
    assert transition("pending", BookingAction.PAY).next_status == BookingStatus.CONFIRMED
