from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User
from ..schemas import ReviewCreateIn, ReviewOut
from ..security import require_principal
from ..services import reviews
from ..services.notifications import deliver_pending_in_background

router = APIRouter(prefix="/api/v1", tags=["reviews"])


@router.post("/reviews", response_model=ReviewOut, status_code=201)
def api_create_review(payload: ReviewCreateIn, background_tasks: BackgroundTasks, user: User = Depends(require_principal), db: Session = Depends(get_db)):
    review = reviews.create_review(db, user, payload.booking_id, payload.rating, payload.comment)
    background_tasks.add_task(deliver_pending_in_background)
    return review
