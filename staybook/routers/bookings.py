from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..limiter import limiter
from ..models import BookingStatus, User
from ..schemas import (
    BookingCreateIn,
    BookingDetailsOut,
    BookingOut,
    PaymentIn,
    PaymentResultOut,
    RescheduleIn,
)
from ..security import require_principal
from ..services import bookings, views
from ..services.notifications import deliver_pending_in_background

router = APIRouter(prefix="/api/v1", tags=["bookings"])


@router.post("/bookings", response_model=BookingOut, status_code=201)
@limiter.limit(settings.RATE_LIMIT_BOOKINGS)
def api_create_booking(request: Request, payload: BookingCreateIn, background_tasks: BackgroundTasks, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    booking = bookings.create_guest_booking(
        db, user, payload.hotel_id, payload.check_in_date, payload.check_out_date,
        num_guests=payload.num_guests, notes=payload.notes,
    )
    background_tasks.add_task(deliver_pending_in_background)
    return booking


@router.get("/bookings", response_model=List[BookingDetailsOut])
def api_my_bookings(status: Optional[BookingStatus] = None, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    return views.booking_details(db, guest_id=user.id, status=status)


@router.get("/bookings/{booking_id}", response_model=BookingDetailsOut)
def api_booking(booking_id: int, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    bookings.get_booking(db, user, booking_id)
    return views.booking_details(db, booking_ids=[booking_id])[0]


@router.post("/bookings/{booking_id}/pay", response_model=PaymentResultOut)
def api_pay(booking_id: int, background_tasks: BackgroundTasks, payload: Optional[PaymentIn] = None, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    method = payload.payment_method if payload else None
    status = bookings.simulate_payment(db, user, booking_id, method)
    background_tasks.add_task(deliver_pending_in_background)
    return {"booking_id": booking_id, "payment_status": status, "booking": bookings.get_booking(db, user, booking_id)}


@router.post("/bookings/{booking_id}/confirm", response_model=BookingOut)
def api_confirm(booking_id: int, background_tasks: BackgroundTasks, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    booking = bookings.confirm_booking(db, user, booking_id)
    background_tasks.add_task(deliver_pending_in_background)
    return booking


@router.post("/bookings/{booking_id}/cancel", response_model=BookingOut)
def api_cancel(booking_id: int, background_tasks: BackgroundTasks, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    booking = bookings.cancel_booking(db, user, booking_id)
    background_tasks.add_task(deliver_pending_in_background)
    return booking


@router.post("/bookings/{booking_id}/complete", response_model=BookingOut)
def api_complete(booking_id: int, background_tasks: BackgroundTasks, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    booking = bookings.complete_booking(db, user, booking_id)
    background_tasks.add_task(deliver_pending_in_background)
    return booking


@router.post("/bookings/{booking_id}/no-show", response_model=BookingOut)
def api_no_show(booking_id: int, background_tasks: BackgroundTasks, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    booking = bookings.mark_no_show(db, user, booking_id)
    background_tasks.add_task(deliver_pending_in_background)
    return booking


@router.post("/bookings/{booking_id}/reschedule", response_model=BookingOut)
def api_reschedule(booking_id: int, payload: RescheduleIn, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    return bookings.reschedule_booking(
        db, user, booking_id, payload.check_in_date, payload.check_out_date, num_guests=payload.num_guests,
    )
