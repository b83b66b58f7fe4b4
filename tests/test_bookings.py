from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import update

from conftest import D
from staybook.errors import AuthorizationError, NotFoundError, StateError, ValidationError
from staybook.models import Booking, BookingStatus, Hotel, Notification, NotificationType, Payment, PaymentStatus
from staybook.services import bookings


def days(n):
    return D + timedelta(days=n)


def _notifications(db, user):
    return [n.type for n in db.query(Notification).filter(Notification.user_id == user.id).order_by(Notification.id)]


def test_guest_booking_end_to_end(db, host, guest, make_hotel):
    hotel = make_hotel(host, price="89.00")
    booking = bookings.create_guest_booking(db, guest, hotel.id, D, days(3), num_guests=2, notes="  late arrival ")
    assert booking.status == BookingStatus.PENDING
    assert booking.total_price == Decimal("267.00")
    assert booking.notes == "late arrival"
    assert _notifications(db, host) == [NotificationType.BOOKING_CREATED]

    assert bookings.simulate_payment(db, guest, booking.id) == PaymentStatus.COMPLETED
    db.refresh(booking)
    assert booking.status == BookingStatus.CONFIRMED
    assert NotificationType.BOOKING_CONFIRMED in _notifications(db, guest)

    bookings.complete_booking(db, host, booking.id)
    payments = db.query(Payment).filter(Payment.booking_id == booking.id).all()
    assert len(payments) == 1
    assert payments[0].amount == Decimal("267.00")
    assert payments[0].status == PaymentStatus.COMPLETED

    with pytest.raises(StateError):
        bookings.complete_booking(db, host, booking.id)


def test_host_booking_is_confirmed_with_payment(db, host, guest, hotel):
    booking = bookings.create_host_booking(db, host, hotel.id, guest.id, D, days(2), num_guests=1)
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.payment.status == PaymentStatus.COMPLETED
    assert booking.payment.amount == Decimal("298.00")
    assert _notifications(db, guest) == [NotificationType.BOOKING_CREATED]


def test_complete_without_payment_records_one(db, host, guest, hotel):
    booking = bookings.create_host_booking(db, host, hotel.id, guest.id, D, days(1))
    db.delete(booking.payment)
    db.commit()
    bookings.complete_booking(db, host, booking.id)
    db.refresh(booking)
    assert booking.payment is not None
    assert booking.payment.amount == Decimal("149.00")


def test_cancel_sets_cancelled_at_and_notifies_both(db, host, guest, hotel):
    booking = bookings.create_guest_booking(db, guest, hotel.id, D, days(2))
    cancelled = bookings.cancel_booking(db, guest, booking.id)
    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.cancelled_at is not None
    assert NotificationType.BOOKING_CANCELLED in _notifications(db, guest)
    assert NotificationType.BOOKING_CANCELLED in _notifications(db, host)
    with pytest.raises(StateError):
        bookings.simulate_payment(db, guest, booking.id)


def test_completed_booking_cannot_be_cancelled(db, host, guest, hotel):
    booking = bookings.create_host_booking(db, host, hotel.id, guest.id, D, days(2))
    bookings.complete_booking(db, host, booking.id)
    with pytest.raises(StateError):
        bookings.cancel_booking(db, guest, booking.id)


def test_no_show_only_from_confirmed(db, host, guest, hotel):
    booking = bookings.create_guest_booking(db, guest, hotel.id, D, days(2))
    with pytest.raises(StateError):
        bookings.mark_no_show(db, host, booking.id)
    bookings.simulate_payment(db, guest, booking.id)
    assert bookings.mark_no_show(db, host, booking.id).status == BookingStatus.NO_SHOW
    assert NotificationType.BOOKING_NO_SHOW in _notifications(db, guest)


def test_only_owner_can_complete_or_create_host_booking(db, host, guest, hotel, make_user):
    booking = bookings.create_host_booking(db, host, hotel.id, guest.id, D, days(2))
    with pytest.raises(AuthorizationError):
        bookings.complete_booking(db, guest, booking.id)
    other_host = make_user()
    with pytest.raises(AuthorizationError):
        bookings.create_host_booking(db, other_host, hotel.id, guest.id, days(3), days(4))


def test_only_guest_can_pay(db, host, guest, hotel):
    booking = bookings.create_guest_booking(db, guest, hotel.id, D, days(2))
    with pytest.raises(AuthorizationError):
        bookings.simulate_payment(db, host, booking.id)


def test_strangers_cannot_see_or_cancel(db, guest, hotel, make_user):
    booking = bookings.create_guest_booking(db, guest, hotel.id, D, days(2))
    stranger = make_user()
    with pytest.raises(AuthorizationError):
        bookings.get_booking(db, stranger, booking.id)
    with pytest.raises(AuthorizationError):
        bookings.cancel_booking(db, stranger, booking.id)


def test_create_validates_party_and_dates(db, guest, hotel):
    with pytest.raises(ValidationError):
        bookings.create_guest_booking(db, guest, hotel.id, days(2), days(2))
    with pytest.raises(ValidationError):
        bookings.create_guest_booking(db, guest, hotel.id, D, days(1), num_guests=0)
    with pytest.raises(ValidationError):
        bookings.create_guest_booking(db, guest, hotel.id, D, days(1), num_guests=hotel.max_guests + 1)


def test_inactive_or_missing_hotel_is_not_found(db, host, guest, make_hotel):
    hidden = make_hotel(host, is_active=False)
    with pytest.raises(NotFoundError):
        bookings.create_guest_booking(db, guest, hidden.id, D, days(1))
    with pytest.raises(NotFoundError):
        bookings.create_guest_booking(db, guest, 9999, D, days(1))
    with pytest.raises(NotFoundError):
        bookings.cancel_booking(db, guest, 9999)


def test_reschedule_only_pending(db, host, guest, hotel):
    booking = bookings.create_host_booking(db, host, hotel.id, guest.id, D, days(2))
    with pytest.raises(StateError):
        bookings.reschedule_booking(db, guest, booking.id, days(3), days(4))


def test_custom_payment_method_is_recorded(db, guest, hotel):
    booking = bookings.create_guest_booking(db, guest, hotel.id, D, days(1))
    bookings.simulate_payment(db, guest, booking.id, payment_method="card")
    db.refresh(booking)
    assert booking.payment.payment_method == "card"
    assert booking.payment.transaction_id.startswith("sim_")


def test_host_confirms_pending_booking(db, host, guest, hotel):
    booking = bookings.create_guest_booking(db, guest, hotel.id, D, days(2))
    with pytest.raises(AuthorizationError):
        bookings.confirm_booking(db, guest, booking.id)
    confirmed = bookings.confirm_booking(db, host, booking.id)
    assert confirmed.status == BookingStatus.CONFIRMED
    assert confirmed.payment is None
    assert _notifications(db, guest) == [NotificationType.BOOKING_CONFIRMED]
    with pytest.raises(StateError):
        bookings.confirm_booking(db, host, booking.id)
    with pytest.raises(StateError):
        bookings.simulate_payment(db, guest, booking.id)


def test_second_cancel_keeps_first_timestamp(db, guest, hotel):
    booking = bookings.create_guest_booking(db, guest, hotel.id, D, days(2))
    cancelled_at = bookings.cancel_booking(db, guest, booking.id).cancelled_at
    with pytest.raises(StateError):
        bookings.cancel_booking(db, guest, booking.id)
    db.refresh(booking)
    assert booking.status == BookingStatus.CANCELLED
    assert booking.cancelled_at == cancelled_at


def test_hotel_unpublished_before_lock_rejects_guest_booking(db, guest, hotel):
    assert hotel.is_active
    # Another writer hides the hotel after this session loaded it
    db.execute(
        update(Hotel).where(Hotel.id == hotel.id).values(is_active=False)
        .execution_options(synchronize_session=False)
    )
    assert hotel.is_active
    with pytest.raises(NotFoundError):
        bookings.create_guest_booking(db, guest, hotel.id, D, days(1))
    assert db.query(Booking).count() == 0
