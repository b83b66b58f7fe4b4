import logging

from sqlalchemy.orm import Session

from ..errors import ConflictError, ValidationError
from ..models import User, UserType
from .bookings import unit_of_work

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("first_name", "last_name", "phone", "bio", "profile_photo_url", "user_type")


def _clean(changes: dict) -> dict:
    fields = {}
    for key in _PROFILE_FIELDS:
        if key not in changes or changes[key] is None:
            continue
        value = changes[key]
        if key == "user_type":
            fields[key] = UserType(value)
            continue
        value = str(value).strip()
        if key in ("first_name", "last_name") and not value:
            raise ValidationError(f"{key} cannot be empty")
        fields[key] = value or None
    return fields


def register_user(db: Session, auth_id: str, data: dict) -> User:
    """Create the profile for a principal signing up through the identity provider."""
    if db.query(User.id).filter(User.auth_id == auth_id).first():
        raise ConflictError("Profile already exists for this account")
    email = (data.get("email") or "").strip().lower()
    if "@" not in email:
        raise ValidationError("A valid email is required")
    if db.query(User.id).filter(User.email == email).first():
        raise ConflictError("Email is already registered")
    fields = _clean({k: data.get(k) for k in _PROFILE_FIELDS})
    for key in ("first_name", "last_name"):
        if not fields.get(key):
            raise ValidationError(f"{key} is required")
    with unit_of_work(db, conflict_message="Email is already registered"):
        user = User(auth_id=auth_id, email=email, **fields)
        db.add(user)
    db.refresh(user)
    logger.info("Registered user %s as %s", user.id, user.user_type.value)
    return user


def update_profile(db: Session, principal: User, changes: dict) -> User:
    fields = _clean(changes)
    with unit_of_work(db):
        for key, value in fields.items():
            setattr(principal, key, value)
    db.refresh(principal)
    return principal
