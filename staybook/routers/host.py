from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import ValidationError
from ..limiter import limiter
from ..models import BookingStatus, PaymentStatus, User
from ..schemas import (
    BookingDetailsOut,
    BookingOut,
    HostBookingCreateIn,
    HostOverviewOut,
    HostPaymentOut,
    HostReviewOut,
    HotelListingOut,
)
from ..security import require_host
from ..services import bookings, views
from ..services.notifications import deliver_pending_in_background
from ..services.reporting import generate_payments_csv, generate_payments_pdf

router = APIRouter(prefix="/api/v1/host", tags=["host"])


@router.get("/hotels", response_model=List[HotelListingOut])
def api_host_hotels(user: User = Depends(require_host), db: Session = Depends(get_db)):
    return views.hotel_listings(db, host_id=user.id, include_inactive=True)


@router.get("/bookings", response_model=List[BookingDetailsOut])
def api_host_bookings(status: Optional[BookingStatus] = None, hotel_id: Optional[int] = None, user: User = Depends(require_host), db: Session = Depends(get_db)):
    return views.booking_details(db, host_id=user.id, status=status, hotel_id=hotel_id)


@router.post("/bookings", response_model=BookingOut, status_code=201)
@limiter.limit(settings.RATE_LIMIT_BOOKINGS)
def api_host_create_booking(request: Request, payload: HostBookingCreateIn, background_tasks: BackgroundTasks, user: User = Depends(require_host), db: Session = Depends(get_db)):
    booking = bookings.create_host_booking(
        db, user, payload.hotel_id, payload.guest_id, payload.check_in_date, payload.check_out_date,
        num_guests=payload.num_guests, notes=payload.notes,
    )
    background_tasks.add_task(deliver_pending_in_background)
    return booking


@router.get("/overview", response_model=HostOverviewOut)
def api_host_overview(user: User = Depends(require_host), db: Session = Depends(get_db)):
    return views.host_overview(db, user.id)


@router.get("/financials", response_model=List[HostPaymentOut])
def api_host_financials(status: Optional[PaymentStatus] = None, user: User = Depends(require_host), db: Session = Depends(get_db)):
    return views.host_payments(db, user.id, status)


@router.get("/financials/export")
def api_host_financials_export(format: str = "csv", status: Optional[PaymentStatus] = None, user: User = Depends(require_host), db: Session = Depends(get_db)):
    rows = views.host_payments(db, user.id, status)
    stamp = datetime.utcnow().strftime("%Y%m%d")
    if format == "csv":
        return Response(
            content=generate_payments_csv(rows),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=payments_{stamp}.csv"},
        )
    if format == "pdf":
        return Response(
            content=generate_payments_pdf(rows, user, settings.CURRENCY),
            media_type="application/pdf",
            headers={"Content-Disposition": f"attachment; filename=payments_{stamp}.pdf"},
        )
    raise ValidationError("format must be csv or pdf")


@router.get("/reviews", response_model=List[HostReviewOut])
def api_host_reviews(user: User = Depends(require_host), db: Session = Depends(get_db)):
    return views.host_reviews(db, user.id)
