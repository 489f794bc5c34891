from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventease.database.db import get_db
from eventease.routes.deps import get_current_actor
from eventease.schemas.books import BookingWithEventOut, RegistrationWithEventOut
from eventease.schemas.events import EventOut
from eventease.schemas.invoices import InvoiceOut
from eventease.schemas.social import ReviewOut
from eventease.services import bookings, invoices, social
from eventease.services.accounts import Actor

router = APIRouter(prefix="/me", tags=["dashboard"])


@router.get("/registrations", response_model=list[RegistrationWithEventOut])
def my_registrations(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return bookings.user_registrations(db, actor)


@router.get("/bookings", response_model=list[BookingWithEventOut])
def my_bookings(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return bookings.user_bookings(db, actor)


@router.get("/invoices", response_model=list[InvoiceOut])
def my_invoices(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return invoices.user_invoices(db, actor)


@router.get("/likes", response_model=list[EventOut])
def my_likes(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return social.user_likes(db, actor)


@router.get("/reviews", response_model=list[ReviewOut])
def my_reviews(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return social.user_reviews(db, actor)
