import logging

from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, StateError, ValidationError
from ..models import Booking, BookingStatus, Hotel, NotificationType, Review, User
from . import notifications
from .bookings import unit_of_work

logger = logging.getLogger(__name__)


def create_review(db: Session, principal: User, booking_id: int, rating: int, comment: str | None = None) -> Review:
    """
    A guest may review a booking once, and only after the stay is completed.
    The hotel's host is notified.
    """
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("rating must be an integer from 1 to 5")
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.guest_id != principal.id:
        raise StateError("Only the guest of this booking can review it")
    if booking.status != BookingStatus.COMPLETED:
        raise StateError(f"Only completed bookings can be reviewed (booking is {booking.status.value})")
    if db.query(Review.id).filter(Review.booking_id == booking.id).first():
        raise ConflictError("This booking has already been reviewed")

    hotel = db.get(Hotel, booking.hotel_id)
    with unit_of_work(db, conflict_message="This booking has already been reviewed"):
        review = Review(
            booking_id=booking.id,
            hotel_id=booking.hotel_id,
            guest_id=principal.id,
            rating=rating,
            comment=(comment or "").strip() or None,
        )
        db.add(review)
        db.flush()
        title, message = notifications.render(NotificationType.NEW_REVIEW, hotel=hotel.name, rating=rating)
        notifications.notify(db, hotel.host_id, NotificationType.NEW_REVIEW, title, message, booking_id=booking.id)
    db.refresh(review)
    logger.info("Review %s (%s stars) on hotel %s", review.id, rating, hotel.id)
    return review


def list_hotel_reviews(db: Session, hotel_id: int) -> list[Review]:
    return (
        db.query(Review)
        .filter(Review.hotel_id == hotel_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
