from datetime import timedelta

import pytest

from conftest import D
from staybook.config import settings
from staybook.errors import AuthorizationError
from staybook.models import Booking, Notification, NotificationType
from staybook.services import bookings, notifications


def test_failed_notification_does_not_undo_booking(db, guest, hotel, monkeypatch):
    def broken(**kwargs):
        kwargs["user_id"] = None
        return Notification(**kwargs)

    monkeypatch.setattr(notifications, "Notification", broken)
    booking = bookings.create_guest_booking(db, guest, hotel.id, D, D + timedelta(days=1))
    assert db.get(Booking, booking.id) is not None
    assert db.query(Notification).count() == 0


def test_notification_message_names_hotel_and_dates(db, host, guest, hotel):
    bookings.create_guest_booking(db, guest, hotel.id, D, D + timedelta(days=2))
    (note,) = notifications.list_notifications(db, host.id)
    assert note.type == NotificationType.BOOKING_CREATED
    assert hotel.name in note.message
    assert D.isoformat() in note.message
    assert note.is_read is False


def test_mark_read_and_mark_all(db, host, guest, hotel):
    b = bookings.create_guest_booking(db, guest, hotel.id, D, D + timedelta(days=2))
    bookings.cancel_booking(db, guest, b.id)
    first, second = notifications.list_notifications(db, host.id)
    assert notifications.mark_read(db, host, first.id).is_read is True
    assert [n.id for n in notifications.list_notifications(db, host.id, unread_only=True)] == [second.id]
    with pytest.raises(AuthorizationError):
        notifications.mark_read(db, guest, second.id)
    assert notifications.mark_all_read(db, host) == 1
    assert notifications.list_notifications(db, host.id, unread_only=True) == []


def test_deliver_pending_marks_sent_rows(db, guest, hotel, monkeypatch):
    bookings.create_guest_booking(db, guest, hotel.id, D, D + timedelta(days=1))
    sent = []
    monkeypatch.setattr(settings, "NOTIFICATION_EMAIL_ENABLE", True)
    monkeypatch.setattr(
        "staybook.services.mail.send_notification_email",
        lambda email, title, message: sent.append((email, title)) or True,
    )
    assert notifications.deliver_pending(db) == 1
    assert sent == [(hotel.host.email, "New Booking Created")]
    assert db.query(Notification).filter(Notification.emailed_at.is_(None)).count() == 0
    assert notifications.deliver_pending(db) == 0


def test_failed_delivery_stays_pending(db, guest, hotel, monkeypatch):
    bookings.create_guest_booking(db, guest, hotel.id, D, D + timedelta(days=1))
    monkeypatch.setattr(settings, "NOTIFICATION_EMAIL_ENABLE", True)
    monkeypatch.setattr("staybook.services.mail.send_notification_email", lambda *a: False)
    assert notifications.deliver_pending(db) == 0
    assert db.query(Notification).filter(Notification.emailed_at.is_(None)).count() == 1


def test_delivery_disabled_is_noop(db, guest, hotel):
    bookings.create_guest_booking(db, guest, hotel.id, D, D + timedelta(days=1))
    assert notifications.deliver_pending(db) == 0


def test_host_booking_own_hotel_gets_one_row_per_event(db, host, hotel):
    b = bookings.create_guest_booking(db, host, hotel.id, D, D + timedelta(days=2))
    bookings.cancel_booking(db, host, b.id)
    cancelled = (
        db.query(Notification)
        .filter(
            Notification.user_id == host.id,
            Notification.related_booking_id == b.id,
            Notification.type == NotificationType.BOOKING_CANCELLED,
        )
        .count()
    )
    assert cancelled == 1
