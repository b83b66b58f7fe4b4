from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError
from ..models import Hotel, User, Wishlist
from .authorization import is_allowed
from .bookings import unit_of_work


def add_to_wishlist(db: Session, principal: User, hotel_id: int) -> Wishlist:
    hotel = db.get(Hotel, hotel_id)
    if not hotel or not is_allowed(principal, hotel, "view"):
        raise NotFoundError("Hotel not found")
    exists = db.query(Wishlist.id).filter(Wishlist.guest_id == principal.id, Wishlist.hotel_id == hotel_id).first()
    if exists:
        raise ConflictError("Hotel is already in your wishlist")
    # The unique constraint still guards concurrent inserts
    with unit_of_work(db, conflict_message="Hotel is already in your wishlist"):
        entry = Wishlist(guest_id=principal.id, hotel_id=hotel_id)
        db.add(entry)
    db.refresh(entry)
    return entry


def remove_from_wishlist(db: Session, principal: User, hotel_id: int) -> None:
    entry = db.query(Wishlist).filter(Wishlist.guest_id == principal.id, Wishlist.hotel_id == hotel_id).one_or_none()
    if not entry:
        raise NotFoundError("Hotel is not in your wishlist")
    with unit_of_work(db):
        db.delete(entry)


def list_wishlist(db: Session, principal: User) -> list[Wishlist]:
    return (
        db.query(Wishlist)
        .filter(Wishlist.guest_id == principal.id)
        .order_by(Wishlist.created_at.desc(), Wishlist.id.desc())
        .all()
    )
