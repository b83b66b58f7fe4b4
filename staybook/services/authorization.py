"""Row-ownership rules, checked explicitly at the start of each core operation.

``authorize(principal, resource, action)`` raises AuthorizationError when
the principal may not perform ``action`` on ``resource``; it never mutates
anything.
"""
import logging
from typing import Optional

from ..errors import AuthorizationError
from ..models import Booking, Hotel, Notification, User
from ..security import is_host

logger = logging.getLogger(__name__)


def _owns_hotel(user: Optional[User], hotel: Hotel) -> bool:
    return user is not None and hotel.host_id == user.id


def _hotel_rule(principal: Optional[User], hotel: Optional[Hotel], action: str) -> bool:
    if action == "create":
        return is_host(principal)
    if hotel is None:
        return False
    if action == "view":
        return hotel.is_active or _owns_hotel(principal, hotel)
    if action in ("update", "create_booking"):
        return _owns_hotel(principal, hotel)
    return False


def _booking_rule(principal: Optional[User], booking: Booking, action: str) -> bool:
    if principal is None:
        return False
    is_guest = booking.guest_id == principal.id
    is_owner = booking.hotel is not None and booking.hotel.host_id == principal.id
    if action in ("view", "cancel", "reschedule"):
        return is_guest or is_owner
    if action == "pay":
        return is_guest
    if action in ("confirm", "complete", "no_show"):
        return is_owner
    return False


def _notification_rule(principal: Optional[User], notification: Notification, action: str) -> bool:
    return principal is not None and notification.user_id == principal.id


_RULES = {
    Hotel: _hotel_rule,
    Booking: _booking_rule,
    Notification: _notification_rule,
}


def is_allowed(principal: Optional[User], resource, action: str, resource_type=None) -> bool:
    kind = resource_type or type(resource)
    rule = _RULES.get(kind)
    if rule is None:
        return False
    return rule(principal, resource, action)


def authorize(principal: Optional[User], resource, action: str, resource_type=None) -> None:
    """
    Raise AuthorizationError unless ``principal`` may ``action`` on ``resource``.
    Pass ``resource_type`` when there is no instance yet (e.g. creating a hotel).
    """
    if not is_allowed(principal, resource, action, resource_type):
        kind = (resource_type or type(resource)).__name__.lower()
        logger.warning(
            "Denied %s on %s %s for user %s",
            action, kind, getattr(resource, "id", None), getattr(principal, "id", None),
        )
        raise AuthorizationError(f"Not allowed to {action.replace('_', ' ')} this {kind}")
