from datetime import datetime
from sqlalchemy import Integer, String, ForeignKey, DateTime, Text, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

class FamousPlace(Base):
    """Global catalogue of points of interest hotels can be linked to."""
    __tablename__ = "famous_places"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(120), nullable=False)
    address: Mapped[str | None] = mapped_column(String(300))
    category: Mapped[str | None] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    primary_image_url: Mapped[str | None] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    hotel_links: Mapped[list["HotelFamousPlace"]] = relationship(back_populates="place")


class HotelFamousPlace(Base):
    __tablename__ = "hotel_famous_places"
    __table_args__ = (
        CheckConstraint("distance_m IS NULL OR distance_m >= 0", name="ck_hotel_famous_places_distance"),
    )

    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id"), primary_key=True)
    place_id: Mapped[int] = mapped_column(ForeignKey("famous_places.id"), primary_key=True)
    distance_m: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    hotel: Mapped["Hotel"] = relationship(back_populates="nearby_places")
    place: Mapped["FamousPlace"] = relationship(back_populates="hotel_links")
