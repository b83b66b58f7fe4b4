from datetime import datetime
from sqlalchemy import Integer, String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base, enum_column_type
from enum import Enum

class UserType(str, Enum):
    GUEST = "guest"
    HOST = "host"

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # Opaque principal id issued by the external identity provider
    auth_id: Mapped[str | None] = mapped_column(String(255), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50))
    bio: Mapped[str | None] = mapped_column(Text)
    profile_photo_url: Mapped[str | None] = mapped_column(String(500))
    user_type: Mapped[UserType] = mapped_column(enum_column_type(UserType, "user_type"), default=UserType.GUEST, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # A user may own hotels (as host) and make bookings (as guest) at the same time
    hotels_owned: Mapped[list["Hotel"]] = relationship(back_populates="host", foreign_keys="Hotel.host_id")
    bookings: Mapped[list["Booking"]] = relationship(back_populates="guest")
    notifications: Mapped[list["Notification"]] = relationship(back_populates="user")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
