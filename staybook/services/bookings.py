"""Booking lifecycle operations.

Each public function is one atomic unit of work: load and authorize, ask the
state machine for the move, take the hotel lock, apply the move and its
effects, commit. Any error rolls the whole operation back.
"""
import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, StateError, ValidationError
from ..models import Booking, BookingStatus, Hotel, Payment, PaymentStatus, User
from . import notifications
from .authorization import authorize
from .availability import assert_no_overlap, calculate_booking_price, count_nights, lock_hotel
from .lifecycle import (
    BookingAction,
    EnsurePayment,
    SetCancelledAt,
    Transition,
    transition,
)

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, conflict_message: str = "Hotel already booked for these dates"):
    """Commit on success; roll back and translate constraint violations otherwise."""
    try:
        yield
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity violation rolled back: %s", e.orig)
        raise ConflictError(conflict_message) from e
    except Exception:
        db.rollback()
        raise


def _get_hotel(db: Session, hotel_id: int) -> Hotel:
    hotel = db.get(Hotel, hotel_id)
    if not hotel:
        raise NotFoundError("Hotel not found")
    return hotel


def _get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def _validate_party(hotel: Hotel, num_guests: int) -> None:
    if num_guests is None or num_guests < 1:
        raise ValidationError("num_guests must be at least 1")
    if num_guests > hotel.max_guests:
        raise ValidationError(f"This hotel accepts at most {hotel.max_guests} guests")


def _ensure_payment(db: Session, booking: Booking, effect: EnsurePayment, method_override: str | None = None) -> Payment:
    payment = db.query(Payment).filter(Payment.booking_id == booking.id).one_or_none()
    method = method_override or effect.method
    now = datetime.utcnow()
    if payment is None:
        payment = Payment(
            booking_id=booking.id,
            amount=booking.total_price,
            payment_method=method,
            status=effect.status,
            transaction_id=f"sim_{uuid.uuid4().hex[:16]}",
            payment_date=now,
        )
        db.add(payment)
    elif effect.overwrite:
        payment.amount = booking.total_price
        payment.payment_method = method
        payment.status = effect.status
        payment.payment_date = now
    db.flush()
    return payment


def _apply(db: Session, booking: Booking, hotel: Hotel, move: Transition, payment_method: str | None = None) -> None:
    booking.status = move.next_status
    for effect in move.effects:
        if isinstance(effect, SetCancelledAt):
            booking.cancelled_at = datetime.utcnow()
        elif isinstance(effect, EnsurePayment):
            _ensure_payment(db, booking, effect, payment_method)
    db.flush()
    notifications.dispatch(db, booking, hotel, move.effects)
    logger.info(
        "Booking %s on hotel %s: %s -> %s (%s)",
        booking.id, hotel.id,
        move.previous.value if move.previous else "new", move.next_status.value, move.action.value,
    )


def _create(db: Session, hotel: Hotel, guest_id: int, check_in: date, check_out: date, num_guests: int, notes: str | None, action: BookingAction) -> Booking:
    move = transition(None, action)
    with unit_of_work(db):
        lock_hotel(db, hotel.id)
        db.refresh(hotel)
        if action == BookingAction.CREATE_BY_GUEST and not hotel.is_active:
            raise NotFoundError("Hotel not found")
        assert_no_overlap(db, hotel.id, check_in, check_out)
        booking = Booking(
            hotel_id=hotel.id,
            guest_id=guest_id,
            check_in_date=check_in,
            check_out_date=check_out,
            num_guests=num_guests,
            total_price=calculate_booking_price(hotel, check_in, check_out),
            status=move.next_status,
            notes=(notes or "").strip() or None,
        )
        db.add(booking)
        db.flush()
        _apply(db, booking, hotel, move)
    db.refresh(booking)
    return booking


def create_guest_booking(db: Session, principal: User, hotel_id: int, check_in: date, check_out: date, num_guests: int = 1, notes: str | None = None) -> Booking:
    """Self-service booking: starts pending and notifies the host."""
    hotel = _get_hotel(db, hotel_id)
    if not hotel.is_active:
        raise NotFoundError("Hotel not found")
    count_nights(check_in, check_out)
    _validate_party(hotel, num_guests)
    return _create(db, hotel, principal.id, check_in, check_out, num_guests, notes, BookingAction.CREATE_BY_GUEST)


def create_host_booking(db: Session, principal: User, hotel_id: int, guest_id: int, check_in: date, check_out: date, num_guests: int = 1, notes: str | None = None) -> Booking:
    """Manual booking by the hotel's host: confirmed at once with a completed payment."""
    hotel = _get_hotel(db, hotel_id)
    authorize(principal, hotel, "create_booking")
    if not db.get(User, guest_id):
        raise NotFoundError("Guest not found")
    count_nights(check_in, check_out)
    _validate_party(hotel, num_guests)
    return _create(db, hotel, guest_id, check_in, check_out, num_guests, notes, BookingAction.CREATE_BY_HOST)


def _transition_existing(db: Session, principal: User, booking_id: int, action: BookingAction, permission: str, payment_method: str | None = None) -> Booking:
    booking = _get_booking(db, booking_id)
    authorize(principal, booking, permission)
    with unit_of_work(db):
        hotel = lock_hotel(db, booking.hotel_id)
        # Re-read under the lock so the move starts from the latest status
        db.refresh(booking)
        move = transition(booking.status, action)
        _apply(db, booking, hotel, move, payment_method)
    db.refresh(booking)
    return booking


def simulate_payment(db: Session, principal: User, booking_id: int, payment_method: str | None = None) -> PaymentStatus:
    """Stub payment: records a completed payment and confirms the pending booking."""
    booking = _transition_existing(db, principal, booking_id, BookingAction.PAY, "pay", payment_method)
    return booking.payment.status


def confirm_booking(db: Session, principal: User, booking_id: int) -> Booking:
    """Host accepts a pending request without taking payment."""
    return _transition_existing(db, principal, booking_id, BookingAction.CONFIRM, "confirm")


def cancel_booking(db: Session, principal: User, booking_id: int) -> Booking:
    return _transition_existing(db, principal, booking_id, BookingAction.CANCEL, "cancel")


def complete_booking(db: Session, principal: User, booking_id: int) -> Booking:
    return _transition_existing(db, principal, booking_id, BookingAction.COMPLETE, "complete")


def mark_no_show(db: Session, principal: User, booking_id: int) -> Booking:
    return _transition_existing(db, principal, booking_id, BookingAction.MARK_NO_SHOW, "no_show")


def reschedule_booking(db: Session, principal: User, booking_id: int, check_in: date, check_out: date, num_guests: int | None = None) -> Booking:
    """
    Move a pending booking to new dates. The booking is excluded from its own
    overlap scan and its price is derived again for the new stay.
    """
    booking = _get_booking(db, booking_id)
    authorize(principal, booking, "reschedule")
    count_nights(check_in, check_out)
    with unit_of_work(db):
        hotel = lock_hotel(db, booking.hotel_id)
        db.refresh(booking)
        if booking.status != BookingStatus.PENDING:
            raise StateError(f"Only pending bookings can be rescheduled (booking is {booking.status.value})")
        guests = booking.num_guests if num_guests is None else num_guests
        _validate_party(hotel, guests)
        assert_no_overlap(db, hotel.id, check_in, check_out, exclude_booking_id=booking.id)
        booking.check_in_date = check_in
        booking.check_out_date = check_out
        booking.num_guests = guests
        booking.total_price = calculate_booking_price(hotel, check_in, check_out)
        logger.info("Booking %s rescheduled to %s..%s", booking.id, check_in, check_out)
    db.refresh(booking)
    return booking


def get_booking(db: Session, principal: User, booking_id: int) -> Booking:
    booking = _get_booking(db, booking_id)
    authorize(principal, booking, "view")
    return booking
