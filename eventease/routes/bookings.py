from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventease.database.db import get_db
from eventease.routes.deps import get_current_actor
from eventease.schemas.books import (
    BookingOut,
    BookRequest,
    BookResult,
    PaymentStatusUpdate,
    RegistrationOut,
    RegistrationRequest,
)
from eventease.services import bookings
from eventease.services.accounts import Actor
from eventease.tasks import queue_booking_email, queue_registration_email

router = APIRouter(tags=["bookings"])


@router.post("/events/{event_id}/book", response_model=BookResult, status_code=201)
def book_event(
    event_id: str,
    payload: BookRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    result = bookings.book_event(db, actor, event_id=event_id, form=payload.model_dump())

    # confirmation email is fire-and-forget; failures never undo the booking
    if result["kind"] == "registration":
        registration = result["registration"]
        queue_registration_email(registration, registration.event)
    else:
        booking = result["booking"]
        queue_booking_email(booking, booking.event)

    return result


@router.post("/events/{event_id}/registrations", response_model=RegistrationOut, status_code=201)
def register_for_event(
    event_id: str,
    payload: RegistrationRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    registration = bookings.register_for_event(db, actor, event_id=event_id, form=payload.model_dump())
    queue_registration_email(registration, registration.event)
    return registration


@router.patch("/bookings/{booking_id}/payment-status", response_model=BookingOut)
def update_payment_status(
    booking_id: str,
    payload: PaymentStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return bookings.update_booking_payment_status(db, actor, booking_id=booking_id, status=payload.payment_status)
