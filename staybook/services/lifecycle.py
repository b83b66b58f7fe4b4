"""Booking lifecycle state machine.

Pure functions only: ``transition`` looks up the move for an action and
returns the next status together with the side effects the storage layer
must apply in the same transaction. Nothing here touches the database.

    pending   -> confirmed | cancelled
    confirmed -> completed | cancelled | no_show
    completed, cancelled, no_show are terminal
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from ..errors import StateError
from ..models import BookingStatus, NotificationType, PaymentStatus


class BookingAction(str, Enum):
    CREATE_BY_GUEST = "create_by_guest"
    CREATE_BY_HOST = "create_by_host"
    PAY = "pay"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    COMPLETE = "complete"
    MARK_NO_SHOW = "mark_no_show"


class Recipient(str, Enum):
    GUEST = "guest"
    HOST = "host"


@dataclass(frozen=True)
class SetCancelledAt:
    pass


@dataclass(frozen=True)
class EnsurePayment:
    """Make sure the booking has a payment in ``status``; create it with ``method`` if absent."""
    method: str
    status: PaymentStatus = PaymentStatus.COMPLETED
    # When False an existing payment row is left untouched
    overwrite: bool = True


@dataclass(frozen=True)
class Notify:
    recipient: Recipient
    type: NotificationType


Effect = Union[SetCancelledAt, EnsurePayment, Notify]


@dataclass(frozen=True)
class Transition:
    action: BookingAction
    previous: Optional[BookingStatus]
    next_status: BookingStatus
    effects: tuple = field(default_factory=tuple)


# Payment methods recorded for payments the engine creates on its own
HOST_CREATED_METHOD = "host_created"
HOST_COMPLETED_METHOD = "host_completed"
SIMULATED_METHOD = "simulated"


# (action, from-state) -> (to-state, effects); None marks creation
_TABLE: dict[tuple[BookingAction, Optional[BookingStatus]], tuple[BookingStatus, tuple]] = {
    (BookingAction.CREATE_BY_GUEST, None): (
        BookingStatus.PENDING,
        (Notify(Recipient.HOST, NotificationType.BOOKING_CREATED),),
    ),
    (BookingAction.CREATE_BY_HOST, None): (
        BookingStatus.CONFIRMED,
        (
            EnsurePayment(HOST_CREATED_METHOD),
            Notify(Recipient.GUEST, NotificationType.BOOKING_CREATED),
        ),
    ),
    (BookingAction.PAY, BookingStatus.PENDING): (
        BookingStatus.CONFIRMED,
        (
            EnsurePayment(SIMULATED_METHOD),
            Notify(Recipient.GUEST, NotificationType.BOOKING_CONFIRMED),
            Notify(Recipient.HOST, NotificationType.PAYMENT_COMPLETED),
        ),
    ),
    # Host accepts a pending request; payment is still owed by the guest
    (BookingAction.CONFIRM, BookingStatus.PENDING): (
        BookingStatus.CONFIRMED,
        (Notify(Recipient.GUEST, NotificationType.BOOKING_CONFIRMED),),
    ),
    (BookingAction.CANCEL, BookingStatus.PENDING): (
        BookingStatus.CANCELLED,
        (
            SetCancelledAt(),
            Notify(Recipient.GUEST, NotificationType.BOOKING_CANCELLED),
            Notify(Recipient.HOST, NotificationType.BOOKING_CANCELLED),
        ),
    ),
    (BookingAction.CANCEL, BookingStatus.CONFIRMED): (
        BookingStatus.CANCELLED,
        (
            SetCancelledAt(),
            Notify(Recipient.GUEST, NotificationType.BOOKING_CANCELLED),
            Notify(Recipient.HOST, NotificationType.BOOKING_CANCELLED),
        ),
    ),
    (BookingAction.COMPLETE, BookingStatus.CONFIRMED): (
        BookingStatus.COMPLETED,
        (
            EnsurePayment(HOST_COMPLETED_METHOD, overwrite=False),
            Notify(Recipient.GUEST, NotificationType.BOOKING_COMPLETED),
        ),
    ),
    (BookingAction.MARK_NO_SHOW, BookingStatus.CONFIRMED): (
        BookingStatus.NO_SHOW,
        (Notify(Recipient.GUEST, NotificationType.BOOKING_NO_SHOW),),
    ),
}

ALLOWED_TRANSITIONS: dict[Optional[BookingStatus], frozenset] = {}
for (_action, _src), (_dst, _) in _TABLE.items():
    ALLOWED_TRANSITIONS.setdefault(_src, set()).add(_dst)
ALLOWED_TRANSITIONS = {k: frozenset(v) for k, v in ALLOWED_TRANSITIONS.items()}


def can_transition(current: Optional[BookingStatus], action: BookingAction) -> bool:
    return (action, current) in _TABLE


def allowed_actions(current: BookingStatus) -> list[BookingAction]:
    return [action for (action, src) in _TABLE if src == current]


def transition(current: Optional[BookingStatus], action: BookingAction) -> Transition:
    """Return the move for ``action`` from ``current`` or raise StateError."""
    if current is not None:
        current = BookingStatus(current)
    try:
        next_status, effects = _TABLE[(action, current)]
    except KeyError:
        if current is None:
            raise StateError(f"Action '{action.value}' requires an existing booking")
        raise StateError(f"Cannot {action.value.replace('_', ' ')} a booking that is {current.value}")
    return Transition(action=action, previous=current, next_status=next_status, effects=effects)
