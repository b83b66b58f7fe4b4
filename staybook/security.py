from typing import Optional
from itsdangerous import URLSafeTimedSerializer, BadSignature
from fastapi import Request, Response, Depends, HTTPException
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .models import User, UserType

# Tokens carry the opaque principal id ("sub") issued by the identity provider.
serializer = URLSafeTimedSerializer(settings.SECRET_KEY, salt="staybook-session")

_MAX_AGE_SECONDS = settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60


def issue_token(auth_id: str) -> str:
    return serializer.dumps({"sub": auth_id})


def set_session(response: Response, auth_id: str):
    token = issue_token(auth_id)
    is_production = getattr(settings, "ENVIRONMENT", "development") == "production"
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=is_production,
        path="/",
        max_age=_MAX_AGE_SECONDS,
    )


def clear_session(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")


def get_current_auth_id(request: Request) -> Optional[str]:
    """Read the principal from a bearer token, falling back to the session cookie."""
    token = None
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
    if not token:
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    try:
        data = serializer.loads(token, max_age=_MAX_AGE_SECONDS)
        sub = data.get("sub")
        return str(sub) if sub else None
    except (BadSignature, AttributeError, TypeError):
        return None


def auth_user_id(db: Session, auth_id: str | None) -> Optional[int]:
    """Map an identity-provider principal to the internal user id."""
    if not auth_id:
        return None
    return db.query(User.id).filter(User.auth_id == auth_id).scalar()


def is_host(user: User | None) -> bool:
    return bool(user) and user.user_type == UserType.HOST


def require_auth_id(request: Request) -> str:
    auth_id = get_current_auth_id(request)
    if not auth_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return auth_id


def optional_principal(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    user_id = auth_user_id(db, get_current_auth_id(request))
    if not user_id:
        return None
    return db.get(User, user_id)


def require_principal(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Dependency for endpoints that act on behalf of a registered user.
    Answers 401 when the token is missing or the principal has not signed up yet.
    """
    user = optional_principal(request, db)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_host(user: User = Depends(require_principal)) -> User:
    if not is_host(user):
        raise HTTPException(status_code=403, detail="Host account required")
    return user
