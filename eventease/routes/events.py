from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventease.database.db import get_db
from eventease.routes.deps import get_current_actor
from eventease.schemas.books import RegistrationOut
from eventease.schemas.events import CategoryOut, EventCreate, EventOut, EventPage
from eventease.services import catalog
from eventease.services.accounts import Actor

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=EventPage)
def list_events(
    category: str | None = None,
    search: str | None = None,
    sort_by: str = Query(default="date", pattern="^(date|name|popularity)$"),
    direction: str = Query(default="asc", pattern="^(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=catalog.DEFAULT_PAGE_SIZE, ge=1, le=catalog.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return catalog.list_events(
        db,
        category=category,
        search=search,
        sort_by=sort_by,
        direction=direction,
        page=page,
        page_size=page_size,
    )


@router.get("/categories", response_model=list[CategoryOut])
def list_categories():
    return catalog.categories()


@router.get("/featured", response_model=list[EventOut])
def featured(db: Session = Depends(get_db)):
    return catalog.featured_events(db)


@router.get("/trending", response_model=list[EventOut])
def trending(db: Session = Depends(get_db)):
    return catalog.trending_events(db)


@router.get("/mine", response_model=list[EventOut])
def my_events(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return catalog.organizer_events(db, actor)


@router.post("", response_model=EventOut, status_code=201)
def submit_event(payload: EventCreate, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return catalog.submit_event(db, actor, data=payload.model_dump())


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return catalog.get_event(db, event_id)


@router.get("/{event_id}/registrations", response_model=list[RegistrationOut])
def event_registrations(event_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return catalog.event_registrations(db, actor, event_id)
