"""Request and response models for the JSON API.

Money fields are Decimals and serialise as strings ("447.00") so totals
travel without float drift.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field

from .models import BookingStatus, NotificationType, PaymentStatus, UserType

# ==== Users ====

class UserCreateIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    bio: Optional[str] = None
    profile_photo_url: Optional[str] = None
    user_type: UserType = UserType.GUEST

class UserUpdateIn(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    bio: Optional[str] = None
    profile_photo_url: Optional[str] = None
    user_type: Optional[UserType] = None

class UserOut(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    bio: Optional[str] = None
    profile_photo_url: Optional[str] = None
    user_type: UserType
    created_at: datetime

    class Config:
        use_enum_values = True
        from_attributes = True

# ==== Hotels ====

class HotelCreateIn(BaseModel):
    name: str
    description: Optional[str] = None
    address: str
    city: str
    country: str
    max_guests: int
    bedrooms: int = 1
    bathrooms: int = 1
    price_per_night: Decimal
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    primary_image_url: Optional[str] = None
    is_active: bool = True

class HotelUpdateIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    max_guests: Optional[int] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    price_per_night: Optional[Decimal] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    primary_image_url: Optional[str] = None
    is_active: Optional[bool] = None

class HotelActiveIn(BaseModel):
    is_active: bool

class HotelListingOut(BaseModel):
    hotel_id: int
    host_id: int
    host_first_name: Optional[str] = None
    host_last_name: Optional[str] = None
    host_photo: Optional[str] = None
    name: str
    description: Optional[str] = None
    address: str
    city: str
    country: str
    max_guests: int
    bedrooms: int
    bathrooms: int
    price_per_night: Decimal
    amenities: List[str]
    images: List[str]
    primary_image_url: Optional[str] = None
    is_active: bool
    average_rating: Optional[float] = None
    review_count: int

class SearchResultOut(BaseModel):
    hotel_id: int
    name: str
    city: str
    country: str
    max_guests: int
    price_per_night: Decimal
    primary_image_url: Optional[str] = None
    nights: int
    total_price: Decimal
    average_rating: Optional[float] = None
    review_count: int

class AvailabilityOut(BaseModel):
    hotel_id: int
    check_in: date
    check_out: date
    available: bool

class PriceQuoteOut(BaseModel):
    hotel_id: int
    check_in: date
    check_out: date
    nights: int
    price_per_night: Decimal
    total_price: Decimal

# ==== Famous places ====

class PlaceCreateIn(BaseModel):
    name: str
    city: str
    country: str
    address: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    primary_image_url: Optional[str] = None

class PlaceOut(BaseModel):
    id: int
    name: str
    city: str
    country: str
    address: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    primary_image_url: Optional[str] = None

    class Config:
        from_attributes = True

class NearbyLinkIn(BaseModel):
    place_id: int
    distance_m: Optional[int] = None

class NearbyDistanceIn(BaseModel):
    distance_m: Optional[int] = None

class NearbyPlaceOut(BaseModel):
    hotel_id: int
    place_id: int
    name: str
    category: Optional[str] = None
    city: str
    description: Optional[str] = None
    primary_image_url: Optional[str] = None
    distance_m: Optional[int] = None

# ==== Bookings ====

class BookingCreateIn(BaseModel):
    hotel_id: int
    check_in_date: date
    check_out_date: date
    num_guests: int = 1
    notes: Optional[str] = None

class HostBookingCreateIn(BookingCreateIn):
    guest_id: int

class RescheduleIn(BaseModel):
    check_in_date: date
    check_out_date: date
    num_guests: Optional[int] = None

class PaymentIn(BaseModel):
    payment_method: Optional[str] = Field(None, max_length=100)

class BookingOut(BaseModel):
    id: int
    hotel_id: int
    guest_id: int
    check_in_date: date
    check_out_date: date
    num_guests: int
    nights: int
    total_price: Decimal
    status: BookingStatus
    notes: Optional[str] = None
    created_at: datetime
    cancelled_at: Optional[datetime] = None

    class Config:
        use_enum_values = True
        from_attributes = True

class BookingDetailsOut(BaseModel):
    booking_id: int
    status: BookingStatus
    check_in_date: date
    check_out_date: date
    num_guests: int
    total_price: Decimal
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    guest_id: int
    guest_first_name: str
    guest_last_name: str
    guest_email: str
    guest_phone: Optional[str] = None
    hotel_id: int
    hotel_name: str
    hotel_image: Optional[str] = None
    city: str
    country: str
    payment_id: Optional[int] = None
    payment_status: Optional[PaymentStatus] = None
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None

    class Config:
        use_enum_values = True

class PaymentResultOut(BaseModel):
    booking_id: int
    payment_status: PaymentStatus
    booking: BookingOut

    class Config:
        use_enum_values = True

# ==== Reviews ====

class ReviewCreateIn(BaseModel):
    booking_id: int
    rating: int
    comment: Optional[str] = None

class ReviewOut(BaseModel):
    id: int
    booking_id: int
    hotel_id: int
    guest_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class HostReviewOut(BaseModel):
    review_id: int
    booking_id: int
    hotel_id: int
    hotel_name: str
    guest_first_name: str
    guest_last_name: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime

# ==== Wishlist ====

class WishlistIn(BaseModel):
    hotel_id: int

class WishlistOut(BaseModel):
    id: int
    hotel_id: int
    created_at: datetime

    class Config:
        from_attributes = True

# ==== Notifications ====

class NotificationOut(BaseModel):
    id: int
    type: NotificationType
    title: str
    message: Optional[str] = None
    related_booking_id: Optional[int] = None
    is_read: bool
    created_at: datetime

    class Config:
        use_enum_values = True
        from_attributes = True

# ==== Host dashboard ====

class HostPaymentOut(BaseModel):
    payment_id: int
    booking_id: int
    hotel_id: int
    hotel_name: str
    payment_date: datetime
    amount: Decimal
    payment_method: str
    status: PaymentStatus
    transaction_id: Optional[str] = None

    class Config:
        use_enum_values = True

class HostOverviewOut(BaseModel):
    total_revenue: Decimal
    active_listings: int
    pending_bookings: int
    average_rating: Optional[float] = None
    recent_notifications: List[NotificationOut]
