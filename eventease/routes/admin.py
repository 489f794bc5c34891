from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventease.database.db import get_db
from eventease.routes.deps import get_current_actor
from eventease.schemas.events import AdminEventBuckets, EventOut, ModerationRequest, ModerationSummaryOut
from eventease.services import moderation
from eventease.services.accounts import Actor

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/events", response_model=AdminEventBuckets)
def all_events(status: str | None = None, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Every event, split into pending/approved/rejected. No pagination."""
    return moderation.admin_events(db, actor, status=status)


@router.get("/summary", response_model=ModerationSummaryOut)
def summary(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return moderation.moderation_summary(db, actor)


@router.patch("/events/{event_id}/status", response_model=EventOut)
def moderate(
    event_id: str,
    payload: ModerationRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return moderation.moderate_event(db, actor, event_id=event_id, status=payload.status, reason=payload.reason)
