from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, ForeignKey, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base, enum_column_type

if TYPE_CHECKING:
    from .booking import Booking

class PaymentStatus(str, PyEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"
    FAILED = "failed"

class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # One payment per booking
    booking_id: Mapped[int] = mapped_column(ForeignKey("bookings.id"), unique=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(100), nullable=False, default="demo")
    status: Mapped[PaymentStatus] = mapped_column(enum_column_type(PaymentStatus, "payment_status"), default=PaymentStatus.PENDING, nullable=False)
    transaction_id: Mapped[str | None] = mapped_column(String(100))
    payment_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    booking: Mapped[Booking] = relationship(back_populates="payment")
