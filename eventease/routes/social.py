from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventease.database.db import get_db
from eventease.routes.deps import get_current_actor
from eventease.schemas.social import LikeOut, ReviewOut, ReviewRequest, ReviewSubmitOut, ReviewWithAuthorOut
from eventease.services import catalog, social
from eventease.services.accounts import Actor

router = APIRouter(prefix="/events/{event_id}", tags=["social"])


@router.post("/like", response_model=LikeOut)
def toggle_like(event_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return social.toggle_like(db, actor, event_id=event_id)


@router.get("/like", response_model=LikeOut)
def like_status(event_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    event = catalog.get_event(db, event_id)
    return {"event_id": event_id, "liked": social.is_liked(db, actor, event_id=event_id), "likes": event.likes}


@router.get("/reviews", response_model=list[ReviewWithAuthorOut])
def list_reviews(event_id: str, db: Session = Depends(get_db)):
    return social.event_reviews(db, event_id=event_id)


@router.post("/reviews", response_model=ReviewSubmitOut)
def submit_review(
    event_id: str,
    payload: ReviewRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return social.submit_review(db, actor, event_id=event_id, rating=payload.rating, comment=payload.comment)


@router.get("/reviews/mine", response_model=ReviewOut | None)
def my_review(event_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return social.user_review(db, actor, event_id=event_id)
