from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from enum import Enum as PyEnum
from sqlalchemy import Integer, ForeignKey, Date, Numeric, Text, DateTime, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base, enum_column_type

if TYPE_CHECKING:
    from .hotel import Hotel
    from .user import User
    from .payment import Payment
    from .review import Review

class BookingStatus(str, PyEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

# Bookings in these states occupy their dates
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.COMPLETED)
TERMINAL_BOOKING_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW)

class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out_date > check_in_date", name="ck_bookings_date_order"),
        CheckConstraint("num_guests > 0", name="ck_bookings_num_guests_positive"),
        # composite index helps overlap searches
        Index("ix_bookings_hotel_dates", "hotel_id", "check_in_date", "check_out_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id"), nullable=False, index=True)
    guest_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_out_date: Mapped[date] = mapped_column(Date, nullable=False)
    num_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(enum_column_type(BookingStatus, "booking_status"), default=BookingStatus.PENDING, nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Relationships
    hotel: Mapped[Hotel] = relationship(back_populates="bookings")
    guest: Mapped[User] = relationship(back_populates="bookings")
    payment: Mapped[Optional[Payment]] = relationship(back_populates="booking", uselist=False)
    review: Mapped[Optional[Review]] = relationship(back_populates="booking", uselist=False)

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days
