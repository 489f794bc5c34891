import logging
import math

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventease.core.errors import EventNotFound, PermissionDenied, StoreError, ValidationError
from eventease.models.events import Event, EventCategory, EventStatus
from eventease.models.registrations import Registration
from eventease.services.accounts import Actor

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100
HIGHLIGHT_LIMIT = 6

SORT_OPTIONS = ("date", "name", "popularity")
SORT_DIRECTIONS = ("asc", "desc")

CATEGORY_NAMES = {
    EventCategory.SPORTS: "Sports",
    EventCategory.COLLEGE: "College",
    EventCategory.ENTERTAINMENT: "Entertainment",
    EventCategory.CIRCUS: "Circus",
    EventCategory.THEATER: "Theater",
    EventCategory.MUSIC: "Music",
    EventCategory.OTHER: "Other",
}


def categories() -> list[dict]:
    return [{"id": category.value, "name": name} for category, name in CATEGORY_NAMES.items()]


def _approved():
    return select(Event).where(Event.status == EventStatus.APPROVED.value)


def _fetch(db: Session, stmt) -> list[Event]:
    try:
        return list(db.scalars(stmt))
    except SQLAlchemyError:
        logger.exception("Event query failed")
        raise StoreError()


def escape_like(text: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _sort_key(sort_by: str):
    if sort_by == "date":
        return lambda e: e.event_date
    if sort_by == "name":
        return lambda e: e.name.lower()
    return lambda e: e.likes or 0


def sort_events(events: list[Event], *, sort_by: str, direction: str = "asc") -> list[Event]:
    if sort_by not in SORT_OPTIONS:
        raise ValidationError(f"Unknown sort option '{sort_by}'.")
    if direction not in SORT_DIRECTIONS:
        raise ValidationError(f"Unknown sort direction '{direction}'.")
    return sorted(events, key=_sort_key(sort_by), reverse=direction == "desc")


def paginate(items: list, *, page: int, page_size: int) -> dict:
    """Slice `items` into a 1-based page."""
    if page < 1:
        raise ValidationError("Page must be 1 or greater.")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}.")

    start = (page - 1) * page_size
    return {
        "items": items[start:start + page_size],
        "total": len(items),
        "page": page,
        "page_size": page_size,
        "pages": math.ceil(len(items) / page_size) if items else 0,
    }


def list_events(
    db: Session,
    *,
    category: str | None = None,
    search: str | None = None,
    sort_by: str = "date",
    direction: str = "asc",
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> dict:
    """
    Public listing. A search query takes priority over the category filter;
    only approved events are ever returned. Soonest events come first unless
    another order is asked for.
    """
    stmt = _approved()
    query = (search or "").strip()
    if query:
        pattern = f"%{escape_like(query)}%"
        stmt = stmt.where(
            or_(
                Event.name.ilike(pattern, escape="\\"),
                Event.description.ilike(pattern, escape="\\"),
                Event.city.ilike(pattern, escape="\\"),
            )
        )
    elif category:
        if category not in {c.value for c in EventCategory}:
            raise ValidationError(f"Unknown category '{category}'.")
        stmt = stmt.where(Event.category == category)

    events = _fetch(db, stmt.order_by(Event.created_at.desc()))
    events = sort_events(events, sort_by=sort_by or "date", direction=direction)
    return paginate(events, page=page, page_size=page_size)


def featured_events(db: Session) -> list[Event]:
    stmt = _approved().where(Event.featured.is_(True)).order_by(Event.created_at.desc()).limit(HIGHLIGHT_LIMIT)
    return _fetch(db, stmt)


def trending_events(db: Session) -> list[Event]:
    stmt = _approved().where(Event.trending.is_(True)).order_by(Event.likes.desc()).limit(HIGHLIGHT_LIMIT)
    return _fetch(db, stmt)


def get_event(db: Session, event_id: str) -> Event:
    """Return an approved event or raise EventNotFound."""
    event = db.scalar(_approved().where(Event.id == event_id))
    if event is None:
        raise EventNotFound(event_id)
    return event


def submit_event(db: Session, actor: Actor, *, data: dict) -> Event:
    """Store a new event for moderation. Free events carry no prices."""
    data = dict(data)
    if data.get("free_event", True):
        data["price_standard"] = data["price_vip"] = data["price_group"] = 0
    else:
        for field in ("price_standard", "price_vip", "price_group"):
            data[field] = data.get(field) or 0
    data["tags"] = [tag.strip() for tag in data.get("tags") or [] if tag and tag.strip()]
    if isinstance(data.get("category"), EventCategory):
        data["category"] = data["category"].value

    event = Event(
        **data,
        organizer_id=actor.user_id,
        status=EventStatus.PENDING.value,
        registered_count=0,
    )
    db.add(event)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to submit event for %s", actor.user_id)
        raise StoreError()
    db.refresh(event)
    logger.info("Event %s submitted by %s", event.id, actor.user_id)
    return event


def organizer_events(db: Session, actor: Actor) -> list[Event]:
    stmt = select(Event).where(Event.organizer_id == actor.user_id).order_by(Event.created_at.desc())
    return _fetch(db, stmt)


def event_registrations(db: Session, actor: Actor, event_id: str) -> list[Registration]:
    """Registrations for an event, visible to its organizer and to admins."""
    event = db.get(Event, event_id)
    if event is None:
        raise EventNotFound(event_id)
    if event.organizer_id != actor.user_id and not actor.is_admin:
        raise PermissionDenied()

    stmt = (
        select(Registration)
        .where(Registration.event_id == event_id)
        .order_by(Registration.created_at.desc())
    )
    try:
        return list(db.scalars(stmt))
    except SQLAlchemyError:
        logger.exception("Registration query failed for event %s", event_id)
        raise StoreError()
