"""Read-only projections over the entity store.

Every function recomputes from the current rows on each call; nothing here
is stored, so these can never drift from the bookings, reviews and payments
they summarise.
"""
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from ..models import (
    Booking,
    BookingStatus,
    FamousPlace,
    Hotel,
    HotelFamousPlace,
    Payment,
    PaymentStatus,
    Review,
    User,
)
from .availability import rating_subquery
from .notifications import list_notifications


def _rating(value) -> float | None:
    return float(value) if value is not None else None


def _listing_row(hotel: Hotel, host: User, avg_rating, review_count) -> dict:
    return {
        "hotel_id": hotel.id,
        "host_id": hotel.host_id,
        "host_first_name": host.first_name,
        "host_last_name": host.last_name,
        "host_photo": host.profile_photo_url,
        "name": hotel.name,
        "description": hotel.description,
        "address": hotel.address,
        "city": hotel.city,
        "country": hotel.country,
        "max_guests": hotel.max_guests,
        "bedrooms": hotel.bedrooms,
        "bathrooms": hotel.bathrooms,
        "price_per_night": Decimal(str(hotel.price_per_night)),
        "amenities": list(hotel.amenities or []),
        "images": list(hotel.images or []),
        "primary_image_url": hotel.primary_image_url,
        "is_active": hotel.is_active,
        "average_rating": _rating(avg_rating),
        "review_count": int(review_count or 0),
    }


def hotel_listings(db: Session, hotel_ids: list[int] | None = None, include_inactive: bool = False, host_id: int | None = None) -> list[dict]:
    """Hotels with host details, average rating (None without reviews) and review count."""
    ratings = rating_subquery(db)
    q = (
        db.query(Hotel, User, ratings.c.average_rating, ratings.c.review_count)
        .join(User, User.id == Hotel.host_id)
        .outerjoin(ratings, ratings.c.hotel_id == Hotel.id)
    )
    if hotel_ids is not None:
        q = q.filter(Hotel.id.in_(hotel_ids))
    if host_id is not None:
        q = q.filter(Hotel.host_id == host_id)
    if not include_inactive:
        q = q.filter(Hotel.is_active.is_(True))
    return [_listing_row(*row) for row in q.order_by(Hotel.id.asc()).all()]


def get_hotel_rating(db: Session, hotel_id: int) -> float | None:
    avg = db.query(func.avg(Review.rating)).filter(Review.hotel_id == hotel_id).scalar()
    return _rating(avg)


def hotel_nearby_places(db: Session, hotel_id: int) -> list[dict]:
    """Linked places, nearest first; unknown distances sort last, then by name and id."""
    rows = (
        db.query(HotelFamousPlace, FamousPlace)
        .join(FamousPlace, FamousPlace.id == HotelFamousPlace.place_id)
        .filter(HotelFamousPlace.hotel_id == hotel_id)
        .order_by(
            HotelFamousPlace.distance_m.is_(None),
            HotelFamousPlace.distance_m.asc(),
            FamousPlace.name.asc(),
            FamousPlace.id.asc(),
        )
        .all()
    )
    return [
        {
            "hotel_id": link.hotel_id,
            "place_id": place.id,
            "name": place.name,
            "category": place.category,
            "city": place.city,
            "description": place.description,
            "primary_image_url": place.primary_image_url,
            "distance_m": link.distance_m,
        }
        for link, place in rows
    ]


def booking_details(
    db: Session,
    booking_ids: list[int] | None = None,
    guest_id: int | None = None,
    host_id: int | None = None,
    status: BookingStatus | None = None,
    hotel_id: int | None = None,
) -> list[dict]:
    """Bookings joined with guest, hotel and payment columns for dashboards."""
    guest = aliased(User)
    q = (
        db.query(Booking, guest, Hotel, Payment)
        .join(guest, guest.id == Booking.guest_id)
        .join(Hotel, Hotel.id == Booking.hotel_id)
        .outerjoin(Payment, Payment.booking_id == Booking.id)
    )
    if booking_ids is not None:
        q = q.filter(Booking.id.in_(booking_ids))
    if guest_id is not None:
        q = q.filter(Booking.guest_id == guest_id)
    if host_id is not None:
        q = q.filter(Hotel.host_id == host_id)
    if status is not None:
        q = q.filter(Booking.status == status)
    if hotel_id is not None:
        q = q.filter(Booking.hotel_id == hotel_id)
    rows = q.order_by(Booking.check_in_date.desc(), Booking.id.desc()).all()
    return [
        {
            "booking_id": b.id,
            "status": b.status,
            "check_in_date": b.check_in_date,
            "check_out_date": b.check_out_date,
            "num_guests": b.num_guests,
            "total_price": Decimal(str(b.total_price)),
            "notes": b.notes,
            "created_at": b.created_at,
            "cancelled_at": b.cancelled_at,
            "guest_id": g.id,
            "guest_first_name": g.first_name,
            "guest_last_name": g.last_name,
            "guest_email": g.email,
            "guest_phone": g.phone,
            "hotel_id": h.id,
            "hotel_name": h.name,
            "hotel_image": h.primary_image_url,
            "city": h.city,
            "country": h.country,
            "payment_id": p.id if p else None,
            "payment_status": p.status if p else None,
            "payment_method": p.payment_method if p else None,
            "transaction_id": p.transaction_id if p else None,
        }
        for b, g, h, p in rows
    ]


def host_payments(db: Session, host_id: int, status: PaymentStatus | None = None) -> list[dict]:
    """Payments on the host's hotels, newest first."""
    q = (
        db.query(Payment, Booking, Hotel)
        .join(Booking, Booking.id == Payment.booking_id)
        .join(Hotel, Hotel.id == Booking.hotel_id)
        .filter(Hotel.host_id == host_id)
    )
    if status is not None:
        q = q.filter(Payment.status == status)
    rows = q.order_by(Payment.payment_date.desc(), Payment.id.desc()).all()
    return [
        {
            "payment_id": p.id,
            "booking_id": b.id,
            "hotel_id": h.id,
            "hotel_name": h.name,
            "payment_date": p.payment_date,
            "amount": Decimal(str(p.amount)),
            "payment_method": p.payment_method,
            "status": p.status,
            "transaction_id": p.transaction_id,
        }
        for p, b, h in rows
    ]


def host_reviews(db: Session, host_id: int) -> list[dict]:
    rows = (
        db.query(Review, Hotel, User)
        .join(Hotel, Hotel.id == Review.hotel_id)
        .join(User, User.id == Review.guest_id)
        .filter(Hotel.host_id == host_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
    return [
        {
            "review_id": r.id,
            "booking_id": r.booking_id,
            "hotel_id": h.id,
            "hotel_name": h.name,
            "guest_first_name": g.first_name,
            "guest_last_name": g.last_name,
            "rating": r.rating,
            "comment": r.comment,
            "created_at": r.created_at,
        }
        for r, h, g in rows
    ]


def host_overview(db: Session, host_id: int) -> dict:
    """Dashboard KPIs: revenue over all payments, active listings, pending bookings, rating."""
    total_revenue = (
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .join(Booking, Booking.id == Payment.booking_id)
        .join(Hotel, Hotel.id == Booking.hotel_id)
        .filter(Hotel.host_id == host_id)
        .scalar()
    )
    active_listings = db.query(func.count(Hotel.id)).filter(Hotel.host_id == host_id, Hotel.is_active.is_(True)).scalar()
    pending_bookings = (
        db.query(func.count(Booking.id))
        .join(Hotel, Hotel.id == Booking.hotel_id)
        .filter(Hotel.host_id == host_id, Booking.status == BookingStatus.PENDING)
        .scalar()
    )
    avg_rating = (
        db.query(func.avg(Review.rating))
        .join(Hotel, Hotel.id == Review.hotel_id)
        .filter(Hotel.host_id == host_id)
        .scalar()
    )
    recent = list_notifications(db, host_id, limit=5)
    return {
        "total_revenue": Decimal(str(total_revenue or 0)).quantize(Decimal("0.01")),
        "active_listings": int(active_listings or 0),
        "pending_bookings": int(pending_bookings or 0),
        "average_rating": _rating(avg_rating),
        "recent_notifications": recent,
    }
