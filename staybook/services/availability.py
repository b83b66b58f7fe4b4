"""Availability index and double-booking guard.

Date ranges are half-open ``[check_in, check_out)``: a stay that checks out
on the day another checks in does not overlap it.
"""
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import exists, func, update
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Booking, Hotel, Review, ACTIVE_BOOKING_STATUSES

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return a_start < b_end and b_start < a_end


def count_nights(check_in: date, check_out: date) -> int:
    if check_in is None or check_out is None:
        raise ValidationError("check_in and check_out are required")
    if check_out <= check_in:
        raise ValidationError("check_out must be after check_in")
    return (check_out - check_in).days


def calculate_booking_price(hotel: Hotel, check_in: date, check_out: date) -> Decimal:
    """price_per_night x nights, in cents."""
    nights = count_nights(check_in, check_out)
    price = Decimal(str(hotel.price_per_night))
    return (price * nights).quantize(CENTS, rounding=ROUND_HALF_UP)


def _overlapping_query(db: Session, hotel_id: int, check_in: date, check_out: date, exclude_booking_id: int | None = None):
    q = db.query(Booking).filter(
        Booking.hotel_id == hotel_id,
        Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        Booking.check_in_date < check_out,
        Booking.check_out_date > check_in,
    )
    if exclude_booking_id is not None:
        q = q.filter(Booking.id != exclude_booking_id)
    return q


def is_hotel_available(db: Session, hotel_id: int, check_in: date, check_out: date, exclude_booking_id: int | None = None) -> bool:
    count_nights(check_in, check_out)
    return _overlapping_query(db, hotel_id, check_in, check_out, exclude_booking_id).first() is None


def lock_hotel(db: Session, hotel_id: int) -> Hotel:
    """
    Take the per-hotel write lock for the rest of the current transaction.

    Every booking write for a hotel goes through its row: ``FOR UPDATE`` blocks
    concurrent writers on PostgreSQL/MySQL, and the no-op UPDATE makes SQLite
    acquire its write lock before the overlap scan runs.
    """
    hotel = db.query(Hotel).filter(Hotel.id == hotel_id).with_for_update().one_or_none()
    if not hotel:
        raise NotFoundError("Hotel not found")
    db.execute(
        update(Hotel)
        .where(Hotel.id == hotel_id)
        .values(updated_at=Hotel.updated_at)
        .execution_options(synchronize_session=False)
    )
    return hotel


def assert_no_overlap(db: Session, hotel_id: int, check_in: date, check_out: date, exclude_booking_id: int | None = None) -> None:
    """Raise ConflictError if an active booking on the hotel overlaps [check_in, check_out)."""
    count_nights(check_in, check_out)
    clash = _overlapping_query(db, hotel_id, check_in, check_out, exclude_booking_id).first()
    if clash is not None:
        logger.warning(
            "Rejected overlap on hotel %s for %s..%s (clashes with booking %s)",
            hotel_id, check_in, check_out, clash.id,
        )
        raise ConflictError("Hotel already booked for these dates")


def rating_subquery(db: Session):
    """Per-hotel average rating and review count, recomputed from review rows."""
    return (
        db.query(
            Review.hotel_id.label("hotel_id"),
            func.avg(Review.rating).label("average_rating"),
            func.count(Review.id).label("review_count"),
        )
        .group_by(Review.hotel_id)
        .subquery()
    )


def search_available_hotels(db: Session, city: str, check_in: date, check_out: date, num_guests: int = 1) -> list[dict]:
    """
    Hotels in ``city`` that are active, fit ``num_guests`` and have no active
    booking overlapping the requested stay. Pure read; ordered by hotel id.
    """
    nights = count_nights(check_in, check_out)
    if num_guests is None or num_guests < 1:
        raise ValidationError("num_guests must be at least 1")
    city_norm = (city or "").strip().lower()
    if not city_norm:
        raise ValidationError("city is required")

    busy = exists().where(
        Booking.hotel_id == Hotel.id,
        Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        Booking.check_in_date < check_out,
        Booking.check_out_date > check_in,
    )
    ratings = rating_subquery(db)
    rows = (
        db.query(Hotel, ratings.c.average_rating, ratings.c.review_count)
        .outerjoin(ratings, ratings.c.hotel_id == Hotel.id)
        .filter(
            Hotel.is_active.is_(True),
            func.lower(Hotel.city) == city_norm,
            Hotel.max_guests >= num_guests,
            ~busy,
        )
        .order_by(Hotel.id.asc())
        .all()
    )
    results = []
    for hotel, avg_rating, review_count in rows:
        results.append({
            "hotel_id": hotel.id,
            "name": hotel.name,
            "city": hotel.city,
            "country": hotel.country,
            "max_guests": hotel.max_guests,
            "price_per_night": Decimal(str(hotel.price_per_night)),
            "primary_image_url": hotel.primary_image_url,
            "nights": nights,
            "total_price": calculate_booking_price(hotel, check_in, check_out),
            "average_rating": float(avg_rating) if avg_rating is not None else None,
            "review_count": int(review_count or 0),
        })
    logger.debug("Search %s %s..%s x%s -> %d hotels", city_norm, check_in, check_out, num_guests, len(results))
    return results
