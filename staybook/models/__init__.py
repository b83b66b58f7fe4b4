from .user import User, UserType
from .hotel import Hotel
from .booking import Booking, BookingStatus, ACTIVE_BOOKING_STATUSES, TERMINAL_BOOKING_STATUSES
from .payment import Payment, PaymentStatus
from .review import Review
from .place import FamousPlace, HotelFamousPlace
from .notification import Notification, NotificationType
from .wishlist import Wishlist
