from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User
from ..schemas import (
    AvailabilityOut,
    HotelActiveIn,
    HotelCreateIn,
    HotelListingOut,
    HotelUpdateIn,
    NearbyDistanceIn,
    NearbyLinkIn,
    NearbyPlaceOut,
    PlaceCreateIn,
    PlaceOut,
    PriceQuoteOut,
    ReviewOut,
    SearchResultOut,
)
from ..security import optional_principal, require_host, require_principal
from ..services import hotels, reviews, views
from ..services.availability import calculate_booking_price, count_nights, is_hotel_available, search_available_hotels

router = APIRouter(prefix="/api/v1", tags=["hotels"])


def _listing(db: Session, hotel_id: int) -> dict:
    return views.hotel_listings(db, hotel_ids=[hotel_id], include_inactive=True)[0]

# ==== Public ====

@router.get("/hotels/search", response_model=List[SearchResultOut])
def api_search(city: str, check_in: date, check_out: date, num_guests: int = 1, db: Session = Depends(get_db)):
    return search_available_hotels(db, city, check_in, check_out, num_guests)


@router.get("/hotels", response_model=List[HotelListingOut])
def api_listings(city: Optional[str] = None, db: Session = Depends(get_db)):
    rows = views.hotel_listings(db)
    if city:
        wanted = city.strip().lower()
        rows = [r for r in rows if r["city"].lower() == wanted]
    return rows


@router.get("/hotels/{hotel_id}", response_model=HotelListingOut)
def api_hotel(hotel_id: int, user: Optional[User] = Depends(optional_principal), db: Session = Depends(get_db)):
    hotels.get_hotel(db, user, hotel_id)
    return _listing(db, hotel_id)


@router.get("/hotels/{hotel_id}/nearby-places", response_model=List[NearbyPlaceOut])
def api_nearby_places(hotel_id: int, user: Optional[User] = Depends(optional_principal), db: Session = Depends(get_db)):
    hotels.get_hotel(db, user, hotel_id)
    return views.hotel_nearby_places(db, hotel_id)


@router.get("/hotels/{hotel_id}/reviews", response_model=List[ReviewOut])
def api_hotel_reviews(hotel_id: int, user: Optional[User] = Depends(optional_principal), db: Session = Depends(get_db)):
    hotels.get_hotel(db, user, hotel_id)
    return reviews.list_hotel_reviews(db, hotel_id)


@router.get("/hotels/{hotel_id}/availability", response_model=AvailabilityOut)
def api_availability(hotel_id: int, check_in: date, check_out: date, user: Optional[User] = Depends(optional_principal), db: Session = Depends(get_db)):
    hotels.get_hotel(db, user, hotel_id)
    count_nights(check_in, check_out)
    return {
        "hotel_id": hotel_id,
        "check_in": check_in,
        "check_out": check_out,
        "available": is_hotel_available(db, hotel_id, check_in, check_out),
    }


@router.get("/hotels/{hotel_id}/price", response_model=PriceQuoteOut)
def api_price(hotel_id: int, check_in: date, check_out: date, user: Optional[User] = Depends(optional_principal), db: Session = Depends(get_db)):
    hotel = hotels.get_hotel(db, user, hotel_id)
    return {
        "hotel_id": hotel.id,
        "check_in": check_in,
        "check_out": check_out,
        "nights": count_nights(check_in, check_out),
        "price_per_night": hotel.price_per_night,
        "total_price": calculate_booking_price(hotel, check_in, check_out),
    }

# ==== Host management ====

@router.post("/hotels", response_model=HotelListingOut, status_code=201)
def api_create_hotel(payload: HotelCreateIn, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    hotel = hotels.create_hotel(db, user, payload.model_dump())
    return _listing(db, hotel.id)


@router.patch("/hotels/{hotel_id}", response_model=HotelListingOut)
def api_update_hotel(hotel_id: int, payload: HotelUpdateIn, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    hotels.update_hotel(db, user, hotel_id, payload.model_dump(exclude_unset=True))
    return _listing(db, hotel_id)


@router.post("/hotels/{hotel_id}/active", response_model=HotelListingOut)
def api_set_active(hotel_id: int, payload: HotelActiveIn, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    hotels.set_hotel_active(db, user, hotel_id, payload.is_active)
    return _listing(db, hotel_id)


@router.post("/hotels/{hotel_id}/nearby-places", response_model=List[NearbyPlaceOut], status_code=201)
def api_link_place(hotel_id: int, payload: NearbyLinkIn, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    hotels.link_nearby_place(db, user, hotel_id, payload.place_id, payload.distance_m)
    return views.hotel_nearby_places(db, hotel_id)


@router.patch("/hotels/{hotel_id}/nearby-places/{place_id}", response_model=List[NearbyPlaceOut])
def api_update_place_distance(hotel_id: int, place_id: int, payload: NearbyDistanceIn, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    hotels.update_nearby_distance(db, user, hotel_id, place_id, payload.distance_m)
    return views.hotel_nearby_places(db, hotel_id)


@router.delete("/hotels/{hotel_id}/nearby-places/{place_id}", status_code=204)
def api_unlink_place(hotel_id: int, place_id: int, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    hotels.unlink_nearby_place(db, user, hotel_id, place_id)
    return Response(status_code=204)

# ==== Famous places ====

@router.get("/places", response_model=List[PlaceOut])
def api_places(city: Optional[str] = None, db: Session = Depends(get_db)):
    return hotels.list_famous_places(db, city)


@router.post("/places", response_model=PlaceOut, status_code=201)
def api_create_place(payload: PlaceCreateIn, user: User = Depends(require_host), db: Session = Depends(get_db)):
    return hotels.create_famous_place(db, user, payload.model_dump())
