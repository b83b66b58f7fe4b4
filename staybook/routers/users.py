from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User
from ..schemas import UserCreateIn, UserOut, UserUpdateIn
from ..security import clear_session, require_auth_id, require_principal, set_session
from ..services import users

router = APIRouter(prefix="/api/v1", tags=["users"])

# ==== Session ====

@router.post("/auth/session")
def api_open_session(response: Response, auth_id: str = Depends(require_auth_id)):
    """Exchange a bearer token from the identity provider for the session cookie."""
    set_session(response, auth_id)
    return {"ok": True}


@router.post("/auth/logout")
def api_logout(response: Response):
    clear_session(response)
    return {"ok": True}

# ==== Profile ====

@router.post("/users/me", response_model=UserOut, status_code=201)
def api_sign_up(request: Request, payload: UserCreateIn, auth_id: str = Depends(require_auth_id), db: Session = Depends(get_db)):
    return users.register_user(db, auth_id, payload.model_dump())


@router.get("/users/me", response_model=UserOut)
def api_me(user: User = Depends(require_principal)):
    return user


@router.patch("/users/me", response_model=UserOut)
def api_update_me(payload: UserUpdateIn, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    return users.update_profile(db, user, payload.model_dump(exclude_unset=True))
