from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User
from ..schemas import WishlistIn, WishlistOut
from ..security import require_principal
from ..services import wishlists

router = APIRouter(prefix="/api/v1", tags=["wishlist"])


@router.get("/wishlist", response_model=List[WishlistOut])
def api_wishlist(user: User = Depends(require_principal), db: Session = Depends(get_db)):
    return wishlists.list_wishlist(db, user)


@router.post("/wishlist", response_model=WishlistOut, status_code=201)
def api_add_to_wishlist(payload: WishlistIn, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    return wishlists.add_to_wishlist(db, user, payload.hotel_id)


@router.delete("/wishlist/{hotel_id}", status_code=204)
def api_remove_from_wishlist(hotel_id: int, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    wishlists.remove_from_wishlist(db, user, hotel_id)
    return Response(status_code=204)
