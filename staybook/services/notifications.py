"""Notification outbox.

Rows are written inside the caller's transaction, each under its own
SAVEPOINT: a failing insert is logged and dropped without undoing the
booking change that caused it. E-mail delivery of the rows is a separate
step (``deliver_pending``) that can be retried independently.
"""
import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import NotFoundError
from ..models import Booking, Hotel, Notification, NotificationType, User
from .authorization import authorize
from .lifecycle import Notify, Recipient

logger = logging.getLogger(__name__)

_TEMPLATES: dict[NotificationType, tuple[str, str]] = {
    NotificationType.BOOKING_CREATED: ("New Booking Created", "A new booking has been created at {hotel} for {check_in} to {check_out}."),
    NotificationType.BOOKING_CONFIRMED: ("Booking Confirmed", "Your booking at {hotel} has been confirmed."),
    NotificationType.BOOKING_CANCELLED: ("Booking Cancelled", "The booking at {hotel} for {check_in} to {check_out} has been cancelled."),
    NotificationType.BOOKING_COMPLETED: ("Stay Completed", "Your stay at {hotel} is complete. We hope you enjoyed it."),
    NotificationType.BOOKING_NO_SHOW: ("Marked as No-Show", "Your booking at {hotel} for {check_in} was marked as a no-show."),
    NotificationType.NEW_REVIEW: ("New Review", "{hotel} received a new {rating}-star review."),
    NotificationType.PAYMENT_COMPLETED: ("Payment Received", "Payment of {amount} was received for a booking at {hotel}."),
    NotificationType.PAYMENT_FAILED: ("Payment Failed", "Payment for your booking at {hotel} failed."),
}


def render(ntype: NotificationType, **context) -> tuple[str, str]:
    title, message = _TEMPLATES[ntype]
    try:
        return title, message.format(**context)
    except (KeyError, IndexError):
        return title, message


def notify(db: Session, user_id: int, ntype: NotificationType, title: str, message: str | None = None, booking_id: int | None = None) -> Notification | None:
    """Append one notification row; never raises."""
    try:
        with db.begin_nested():
            n = Notification(
                user_id=user_id,
                type=ntype,
                title=title,
                message=message,
                related_booking_id=booking_id,
            )
            db.add(n)
        return n
    except SQLAlchemyError:
        logger.exception("Failed to record %s notification for user %s (booking %s)", ntype.value, user_id, booking_id)
        return None


def booking_context(booking: Booking, hotel: Hotel) -> dict:
    return {
        "hotel": hotel.name,
        "check_in": booking.check_in_date.isoformat(),
        "check_out": booking.check_out_date.isoformat(),
        "amount": f"{booking.total_price:.2f} {settings.CURRENCY}",
    }


def dispatch(db: Session, booking: Booking, hotel: Hotel, effects: Iterable) -> list[Notification]:
    """
    Write one row per Notify effect, addressed to the booking's guest or the
    hotel's host. A host booking their own hotel is both, and gets one row
    per event.
    """
    sent = []
    seen = set()
    context = booking_context(booking, hotel)
    for effect in effects:
        if not isinstance(effect, Notify):
            continue
        user_id = booking.guest_id if effect.recipient == Recipient.GUEST else hotel.host_id
        if (user_id, effect.type) in seen:
            continue
        seen.add((user_id, effect.type))
        title, message = render(effect.type, **context)
        n = notify(db, user_id, effect.type, title, message, booking_id=booking.id)
        if n is not None:
            sent.append(n)
    return sent


def list_notifications(db: Session, user_id: int, unread_only: bool = False, limit: int | None = None) -> list[Notification]:
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.is_read.is_(False))
    q = q.order_by(Notification.created_at.desc(), Notification.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def mark_read(db: Session, principal: User, notification_id: int) -> Notification:
    n = db.get(Notification, notification_id)
    if not n:
        raise NotFoundError("Notification not found")
    authorize(principal, n, "mark_read")
    n.is_read = True
    db.commit()
    db.refresh(n)
    return n


def mark_all_read(db: Session, principal: User) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == principal.id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return int(updated or 0)


def deliver_pending(db: Session, limit: int | None = None) -> int:
    """
    E-mail notifications that have not been delivered yet.
    Returns the number delivered; failures stay pending for the next run.
    """
    from .mail import send_notification_email

    if not settings.NOTIFICATION_EMAIL_ENABLE:
        return 0
    pending = (
        db.query(Notification, User.email)
        .join(User, User.id == Notification.user_id)
        .filter(Notification.emailed_at.is_(None))
        .order_by(Notification.id.asc())
        .limit(limit or settings.NOTIFICATION_EMAIL_BATCH)
        .all()
    )
    delivered = 0
    for n, email in pending:
        if send_notification_email(email, n.title, n.message):
            n.emailed_at = datetime.utcnow()
            delivered += 1
    db.commit()
    if delivered:
        logger.info("Delivered %d notification e-mails", delivered)
    return delivered


def deliver_pending_in_background() -> None:
    """Entry point for FastAPI background tasks; opens its own session."""
    from ..db import SessionLocal

    if not settings.NOTIFICATION_EMAIL_ENABLE:
        return
    db = SessionLocal()
    try:
        deliver_pending(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Notification delivery run failed")
    finally:
        db.close()
