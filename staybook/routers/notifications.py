from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User
from ..schemas import NotificationOut
from ..security import require_principal
from ..services import notifications

router = APIRouter(prefix="/api/v1", tags=["notifications"])


@router.get("/notifications", response_model=List[NotificationOut])
def api_notifications(unread_only: bool = False, limit: int = 50, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    return notifications.list_notifications(db, user.id, unread_only=unread_only, limit=limit)


@router.post("/notifications/read-all")
def api_mark_all_read(user: User = Depends(require_principal), db: Session = Depends(get_db)):
    return {"updated": notifications.mark_all_read(db, user)}


@router.post("/notifications/{notification_id}/read", response_model=NotificationOut)
def api_mark_read(notification_id: int, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    return notifications.mark_read(db, user, notification_id)
