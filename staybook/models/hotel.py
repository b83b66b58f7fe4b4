from datetime import datetime
from decimal import Decimal
from sqlalchemy import Integer, String, ForeignKey, DateTime, Numeric, Boolean, Text, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

class Hotel(Base):
    __tablename__ = "hotels"
    __table_args__ = (
        CheckConstraint("price_per_night > 0", name="ck_hotels_price_positive"),
        CheckConstraint("max_guests > 0", name="ck_hotels_max_guests_positive"),
        CheckConstraint("bedrooms >= 0 AND bathrooms >= 0", name="ck_hotels_rooms_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    host_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str] = mapped_column(String(300), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(120), nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    amenities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    primary_image_url: Mapped[str | None] = mapped_column(String(500))
    # Hotels are unpublished rather than deleted
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    host: Mapped["User"] = relationship(back_populates="hotels_owned", foreign_keys=[host_id])
    bookings: Mapped[list["Booking"]] = relationship(back_populates="hotel")
    reviews: Mapped[list["Review"]] = relationship(back_populates="hotel")
    nearby_places: Mapped[list["HotelFamousPlace"]] = relationship(back_populates="hotel", cascade="all, delete-orphan")
