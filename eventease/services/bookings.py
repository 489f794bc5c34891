import logging
import uuid

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from eventease.core.errors import BookingFailed, NotFound, RegistrationFailed, SoldOut, ValidationError
from eventease.core.locks import event_lock_key, resource_lock
from eventease.models.bookings import Booking, PaymentStatus, TicketType
from eventease.models.events import Event
from eventease.models.invoices import Invoice
from eventease.models.registrations import Registration, RegistrationStatus, RegistrationType
from eventease.services import catalog, invoices
from eventease.services.accounts import Actor, require_admin

logger = logging.getLogger(__name__)

MAX_TICKETS_PER_BOOKING = 10

PRICE_FIELDS = {
    TicketType.STANDARD.value: "price_standard",
    TicketType.VIP.value: "price_vip",
    TicketType.GROUP.value: "price_group",
}


def unit_price(event: Event, ticket_type: str) -> float:
    """Price of one ticket of `ticket_type` for a paid event."""
    field = PRICE_FIELDS.get(ticket_type)
    if field is None:
        raise ValidationError(f"Unknown ticket type '{ticket_type}'.", title="Invalid Ticket Type")
    price = getattr(event, field)
    if price is None:
        raise ValidationError(f"No {ticket_type} tickets are sold for this event.", title="Invalid Ticket Type")
    return float(price)


def calculate_total(event: Event, ticket_type: str, quantity: int) -> float:
    return round(unit_price(event, ticket_type) * quantity, 2)


def validate_quantity(quantity: int) -> None:
    if quantity < 1:
        raise ValidationError("At least 1 ticket is required.")
    if quantity > MAX_TICKETS_PER_BOOKING:
        raise ValidationError(f"Maximum {MAX_TICKETS_PER_BOOKING} tickets per booking.")


def check_booking_open(event: Event) -> None:
    if not event.is_booking_open:
        raise ValidationError(
            f"Registration opens on {event.booking_opening_date.strftime('%B %d, %Y')}.",
            title="Registration Not Yet Open",
        )


def new_booking_reference() -> str:
    return f"BK-{uuid.uuid4().hex[:10].upper()}"


def _claim_seats(db: Session, event_id: str, seats: int) -> None:
    """Check capacity and increment registered_count in one conditional write."""
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.registered_count + seats <= Event.total_capacity)
        .values(registered_count=Event.registered_count + seats)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        raise SoldOut()


def _persist(db: Session, event_id: str, seats: int, rows: list, error_cls) -> None:
    """
    Claim `seats` and insert `rows` in a single transaction while holding the event lock.
    """
    with resource_lock(event_lock_key(event_id)):
        try:
            _claim_seats(db, event_id, seats)
            db.add_all(rows)
            db.commit()
        except SoldOut:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to persist %s for event %s", error_cls.__name__, event_id)
            raise error_cls()
    for row in rows:
        db.refresh(row)


def register_free(db: Session, actor: Actor, event: Event, form: dict) -> Registration:
    quantity = form.get("quantity", 1)
    registration = Registration(
        event_id=event.id,
        user_id=actor.user_id,
        full_name=form["full_name"],
        email=form["email"],
        phone=form.get("phone"),
        group_size=quantity,
        registration_type=RegistrationType.INDIVIDUAL.value,
        status=RegistrationStatus.APPROVED.value,
    )
    _persist(db, event.id, quantity, [registration], RegistrationFailed)
    logger.info("Free registration %s created for event %s", registration.id, event.id)
    return registration


def book_paid(db: Session, actor: Actor, event: Event, form: dict) -> tuple[Booking, Invoice]:
    ticket_type = form.get("ticket_type") or TicketType.STANDARD.value
    quantity = form.get("quantity", 1)
    total_amount = calculate_total(event, ticket_type, quantity)

    booking = Booking(
        id=str(uuid.uuid4()),
        event_id=event.id,
        user_id=actor.user_id,
        ticket_type=ticket_type,
        quantity=quantity,
        total_amount=total_amount,
        # No payment gateway: payment is simulated as completed
        payment_status=PaymentStatus.COMPLETED.value,
        booking_reference=new_booking_reference(),
        cardholder_name=form.get("cardholder_name") or form["full_name"],
        email=form["email"],
    )
    invoice = invoices.build_invoice(booking)
    _persist(db, event.id, quantity, [booking, invoice], BookingFailed)
    logger.info(
        "Booking %s created for event %s: %s x %s = %.2f",
        booking.booking_reference, event.id, quantity, ticket_type, total_amount,
    )
    return booking, invoice


def book_event(db: Session, actor: Actor, *, event_id: str, form: dict) -> dict:
    """
    Free events become an approved Registration; paid events become a completed
    Booking with its invoice. All validation happens before any write.
    """
    event = catalog.get_event(db, event_id)
    check_booking_open(event)
    validate_quantity(form.get("quantity", 1))

    if event.free_event:
        registration = register_free(db, actor, event, form)
        return {"kind": "registration", "registration": registration, "booking": None, "invoice": None}

    booking, invoice = book_paid(db, actor, event, form)
    return {"kind": "booking", "registration": None, "booking": booking, "invoice": invoice}


def register_for_event(db: Session, actor: Actor, *, event_id: str, form: dict) -> Registration:
    """
    The standalone registration form. Status defaults to pending; only free
    events may be registered as approved straight away.
    """
    event = catalog.get_event(db, event_id)
    check_booking_open(event)
    group_size = form.get("group_size") or 1
    if group_size < 1:
        raise ValidationError("At least 1 attendee is required.")
    status = form.get("status") or RegistrationStatus.PENDING.value
    if status != RegistrationStatus.PENDING.value and not event.free_event:
        raise ValidationError("Registrations for paid events stay pending until payment.")

    registration = Registration(
        event_id=event.id,
        user_id=actor.user_id,
        full_name=form["full_name"],
        email=form["email"],
        phone=form.get("phone"),
        group_size=group_size,
        registration_type=RegistrationType.GROUP.value if group_size > 1 else RegistrationType.INDIVIDUAL.value,
        special_requests=form.get("special_requests"),
        dietary_restrictions=form.get("dietary_restrictions"),
        accessibility_needs=form.get("accessibility_needs"),
        emergency_contact=form.get("emergency_contact"),
        emergency_phone=form.get("emergency_phone"),
        status=status,
    )
    _persist(db, event.id, group_size, [registration], RegistrationFailed)
    logger.info("Registration %s submitted for event %s", registration.id, event.id)
    return registration


def user_registrations(db: Session, actor: Actor) -> list[Registration]:
    stmt = (
        select(Registration)
        .options(selectinload(Registration.event))
        .where(Registration.user_id == actor.user_id)
        .order_by(Registration.created_at.desc())
    )
    return list(db.scalars(stmt))


def user_bookings(db: Session, actor: Actor) -> list[Booking]:
    stmt = (
        select(Booking)
        .options(selectinload(Booking.event))
        .where(Booking.user_id == actor.user_id)
        .order_by(Booking.created_at.desc())
    )
    return list(db.scalars(stmt))


def update_booking_payment_status(db: Session, actor: Actor, *, booking_id: str, status: str) -> Booking:
    require_admin(actor)
    if status not in {s.value for s in PaymentStatus}:
        raise ValidationError(f"Unknown payment status '{status}'.")

    booking = db.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found.")
    booking.payment_status = status
    booking.updated_at = func.now()
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to update payment status for booking %s", booking_id)
        raise BookingFailed()
    db.refresh(booking)
    logger.info("Booking %s payment status set to %s by %s", booking_id, status, actor.user_id)
    return booking
