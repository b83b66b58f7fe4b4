"""Hotel listings owned by hosts, and their links to the famous-place catalogue."""
import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import FamousPlace, Hotel, HotelFamousPlace, User
from .authorization import authorize, is_allowed
from .bookings import unit_of_work

logger = logging.getLogger(__name__)

_REQUIRED_TEXT = ("name", "address", "city", "country")
_EDITABLE = (
    "name", "description", "address", "city", "country", "max_guests", "bedrooms",
    "bathrooms", "price_per_night", "amenities", "images", "primary_image_url",
)


def _clean_amenities(values) -> list[str]:
    seen = {}
    for v in values or []:
        tag = str(v).strip()
        if tag and tag.lower() not in seen:
            seen[tag.lower()] = tag
    return sorted(seen.values(), key=str.lower)


def _validate(fields: dict) -> dict:
    """Normalise a complete set of hotel fields and enforce listing invariants."""
    for key in _REQUIRED_TEXT:
        value = (fields.get(key) or "").strip()
        if not value:
            raise ValidationError(f"{key} is required")
        fields[key] = value
    try:
        price = Decimal(str(fields.get("price_per_night")))
    except (InvalidOperation, ValueError):
        raise ValidationError("price_per_night must be a number")
    if not price.is_finite() or price <= 0:
        raise ValidationError("price_per_night must be greater than 0")
    fields["price_per_night"] = price.quantize(Decimal("0.01"))
    if fields.get("max_guests") is None or int(fields["max_guests"]) <= 0:
        raise ValidationError("max_guests must be greater than 0")
    for key in ("bedrooms", "bathrooms"):
        if fields.get(key) is None:
            fields[key] = 1
        if int(fields[key]) < 0:
            raise ValidationError(f"{key} cannot be negative")
    fields["amenities"] = _clean_amenities(fields.get("amenities"))
    images = [str(u).strip() for u in (fields.get("images") or []) if str(u).strip()]
    fields["images"] = list(dict.fromkeys(images))
    primary = (fields.get("primary_image_url") or "").strip() or None
    if primary and primary not in fields["images"]:
        raise ValidationError("primary_image_url must be one of the hotel images")
    if not primary and fields["images"]:
        primary = fields["images"][0]
    fields["primary_image_url"] = primary
    return fields


def create_hotel(db: Session, principal: User, data: dict) -> Hotel:
    authorize(principal, None, "create", resource_type=Hotel)
    fields = _validate({k: data.get(k) for k in _EDITABLE})
    with unit_of_work(db):
        hotel = Hotel(host_id=principal.id, is_active=bool(data.get("is_active", True)), **fields)
        db.add(hotel)
    db.refresh(hotel)
    logger.info("Host %s created hotel %s", principal.id, hotel.id)
    return hotel


def get_hotel(db: Session, principal: User | None, hotel_id: int) -> Hotel:
    """Inactive hotels are visible to their owner only; everyone else gets a 404."""
    hotel = db.get(Hotel, hotel_id)
    if not hotel or not is_allowed(principal, hotel, "view"):
        raise NotFoundError("Hotel not found")
    return hotel


def _owned_hotel(db: Session, principal: User, hotel_id: int) -> Hotel:
    hotel = db.get(Hotel, hotel_id)
    if not hotel:
        raise NotFoundError("Hotel not found")
    authorize(principal, hotel, "update")
    return hotel


def update_hotel(db: Session, principal: User, hotel_id: int, changes: dict) -> Hotel:
    hotel = _owned_hotel(db, principal, hotel_id)
    merged = {k: getattr(hotel, k) for k in _EDITABLE}
    merged.update({k: v for k, v in changes.items() if k in _EDITABLE})
    # Dropping the current primary image from the list falls back to the first remaining one
    if "images" in changes and "primary_image_url" not in changes and merged["primary_image_url"] not in (merged["images"] or []):
        merged["primary_image_url"] = None
    fields = _validate(merged)
    with unit_of_work(db):
        for key, value in fields.items():
            setattr(hotel, key, value)
        if "is_active" in changes and changes["is_active"] is not None:
            hotel.is_active = bool(changes["is_active"])
    db.refresh(hotel)
    return hotel


def set_hotel_active(db: Session, principal: User, hotel_id: int, is_active: bool) -> Hotel:
    hotel = _owned_hotel(db, principal, hotel_id)
    with unit_of_work(db):
        hotel.is_active = bool(is_active)
    db.refresh(hotel)
    logger.info("Hotel %s %s by host %s", hotel.id, "published" if hotel.is_active else "unpublished", principal.id)
    return hotel


# ==== Famous places ====

def create_famous_place(db: Session, principal: User, data: dict) -> FamousPlace:
    authorize(principal, None, "create", resource_type=Hotel)
    fields = {}
    for key in ("name", "city", "country"):
        value = (data.get(key) or "").strip()
        if not value:
            raise ValidationError(f"{key} is required")
        fields[key] = value
    for key in ("address", "category", "description", "primary_image_url"):
        fields[key] = (data.get(key) or "").strip() or None
    fields["images"] = [u for u in (data.get("images") or []) if u]
    with unit_of_work(db):
        place = FamousPlace(**fields)
        db.add(place)
    db.refresh(place)
    return place


def list_famous_places(db: Session, city: str | None = None) -> list[FamousPlace]:
    q = db.query(FamousPlace)
    if city:
        q = q.filter(func.lower(FamousPlace.city) == city.strip().lower())
    return q.order_by(FamousPlace.name.asc(), FamousPlace.id.asc()).all()


def _check_distance(distance_m: int | None) -> None:
    if distance_m is not None and distance_m < 0:
        raise ValidationError("distance_m cannot be negative")


def link_nearby_place(db: Session, principal: User, hotel_id: int, place_id: int, distance_m: int | None = None) -> HotelFamousPlace:
    hotel = _owned_hotel(db, principal, hotel_id)
    if not db.get(FamousPlace, place_id):
        raise NotFoundError("Place not found")
    _check_distance(distance_m)
    if db.get(HotelFamousPlace, (hotel.id, place_id)):
        raise ConflictError("Place is already linked to this hotel")
    with unit_of_work(db, conflict_message="Place is already linked to this hotel"):
        link = HotelFamousPlace(hotel_id=hotel.id, place_id=place_id, distance_m=distance_m)
        db.add(link)
    db.refresh(link)
    return link


def update_nearby_distance(db: Session, principal: User, hotel_id: int, place_id: int, distance_m: int | None) -> HotelFamousPlace:
    hotel = _owned_hotel(db, principal, hotel_id)
    link = db.get(HotelFamousPlace, (hotel.id, place_id))
    if not link:
        raise NotFoundError("Place is not linked to this hotel")
    _check_distance(distance_m)
    with unit_of_work(db):
        link.distance_m = distance_m
    db.refresh(link)
    return link


def unlink_nearby_place(db: Session, principal: User, hotel_id: int, place_id: int) -> None:
    hotel = _owned_hotel(db, principal, hotel_id)
    link = db.get(HotelFamousPlace, (hotel.id, place_id))
    if not link:
        raise NotFoundError("Place is not linked to this hotel")
    with unit_of_work(db):
        db.delete(link)
