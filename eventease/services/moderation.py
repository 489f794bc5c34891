import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventease.core import config
from eventease.core.errors import EventNotFound, InvalidTransition, PermissionDenied, StoreError, ValidationError
from eventease.models.events import Event, EventStatus
from eventease.services.accounts import Actor

logger = logging.getLogger(__name__)

DECISIONS = (EventStatus.APPROVED.value, EventStatus.REJECTED.value)


def check_moderator(actor: Actor) -> None:
    if config.MODERATION_REQUIRES_ADMIN and not actor.is_admin:
        raise PermissionDenied("Only administrators can moderate events.")


def moderate_event(db: Session, actor: Actor, *, event_id: str, status: str, reason: str | None = None) -> Event:
    """
    Move a pending event to approved or rejected. Decisions are final:
    the update only matches rows that are still pending.
    Rejections must carry a reason, which is shown to the organizer.
    """
    check_moderator(actor)
    if status not in DECISIONS:
        raise ValidationError(f"Status must be one of {', '.join(DECISIONS)}.")

    values = {"status": status, "updated_at": func.now()}
    if status == EventStatus.REJECTED.value:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Please provide a reason for rejection.", title="Reason Required")
        values["rejection_reason"] = reason
    else:
        values["approved_at"] = func.now()

    stmt = (
        update(Event)
        .where(Event.id == event_id, Event.status == EventStatus.PENDING.value)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    try:
        res = db.execute(stmt)
        if res.rowcount != 1:  # type: ignore
            db.rollback()
            current = db.scalar(select(Event.status).where(Event.id == event_id))
            if current is None:
                raise EventNotFound(event_id)
            raise InvalidTransition(f"Event is already {current}.")
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to moderate event %s", event_id)
        raise StoreError()

    event = db.get(Event, event_id)
    db.refresh(event)
    logger.info("Event %s %s by %s", event_id, status, actor.user_id)
    return event


def admin_events(db: Session, actor: Actor, *, status: str | None = None) -> dict[str, list[Event]]:
    """Every event regardless of status, split into moderation buckets."""
    check_moderator(actor)
    stmt = select(Event).order_by(Event.created_at.desc())
    if status is not None:
        if status not in {s.value for s in EventStatus}:
            raise ValidationError(f"Unknown status '{status}'.")
        stmt = stmt.where(Event.status == status)

    try:
        events = list(db.scalars(stmt))
    except SQLAlchemyError:
        logger.exception("Admin event query failed")
        raise StoreError()

    buckets: dict[str, list[Event]] = {s.value: [] for s in EventStatus}
    for event in events:
        buckets.setdefault(event.status, []).append(event)
    return buckets


def moderation_summary(db: Session, actor: Actor) -> dict:
    check_moderator(actor)
    rows = db.execute(select(Event.status, func.count(Event.id)).group_by(Event.status)).all()
    counts = {s.value: 0 for s in EventStatus}
    for status, count in rows:
        counts[status] = int(count)
    return {**counts, "total": sum(counts.values())}
