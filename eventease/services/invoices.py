import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from eventease.core.errors import NotFound, PermissionDenied, StoreError
from eventease.models.bookings import Booking
from eventease.models.invoices import Invoice, InvoiceStatus
from eventease.services.accounts import Actor

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

TAX_RATE = 0.10
PAYMENT_METHOD = "credit_card"
DUE_IN_DAYS = 30

_templates = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
)

_clock_lock = threading.Lock()
_last_millis = 0


def _next_millis() -> int:
    """Wall-clock milliseconds, bumped so two calls in this process never repeat."""
    global _last_millis
    with _clock_lock:
        now = int(time.time() * 1000)
        _last_millis = max(now, _last_millis + 1)
        return _last_millis


def new_invoice_number(now: datetime | None = None) -> str:
    year = (now or datetime.now(timezone.utc)).year
    return f"INV-{year}-{_next_millis()}"


def compute_totals(subtotal: float) -> dict:
    return {
        "subtotal": round(subtotal, 2),
        "tax_amount": round(subtotal * TAX_RATE, 2),
        "total_amount": round(subtotal * (1 + TAX_RATE), 2),
    }


def build_invoice(booking: Booking) -> Invoice:
    """Derive the invoice for a completed booking. The caller persists it."""
    issued = datetime.now(timezone.utc)
    return Invoice(
        booking=booking,
        booking_id=booking.id,
        user_id=booking.user_id,
        invoice_number=new_invoice_number(issued),
        invoice_date=issued,
        due_date=issued + timedelta(days=DUE_IN_DAYS),
        status=InvoiceStatus.PAID.value,
        payment_method=PAYMENT_METHOD,
        **compute_totals(booking.total_amount),
    )


def generate_invoice(db: Session, booking: Booking) -> Invoice:
    invoice = build_invoice(booking)
    db.add(invoice)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to generate invoice for booking %s", booking.id)
        raise StoreError()
    db.refresh(invoice)
    logger.info("Invoice %s generated for booking %s", invoice.invoice_number, booking.id)
    return invoice


def get_invoice(db: Session, actor: Actor, invoice_id: str) -> Invoice:
    stmt = (
        select(Invoice)
        .options(joinedload(Invoice.booking).joinedload(Booking.event))
        .where(Invoice.id == invoice_id)
    )
    invoice = db.scalar(stmt)
    if invoice is None:
        raise NotFound("Invoice not found.")
    if invoice.user_id != actor.user_id and not actor.is_admin:
        raise PermissionDenied()
    return invoice


def user_invoices(db: Session, actor: Actor) -> list[Invoice]:
    stmt = select(Invoice).where(Invoice.user_id == actor.user_id).order_by(Invoice.created_at.desc())
    return list(db.scalars(stmt))


def _format_date(value) -> str:
    if not value:
        return "N/A"
    return value.strftime("%b %d, %Y")


def invoice_context(invoice: Invoice) -> dict:
    """Flatten an invoice and its booking/event into template values, never failing on missing relations."""
    booking = invoice.booking
    event = booking.event if booking is not None else None
    quantity = (booking.quantity if booking is not None else None) or 1
    subtotal = invoice.subtotal or 0

    return {
        "invoice_number": invoice.invoice_number or "N/A",
        "invoice_date": _format_date(invoice.invoice_date),
        "due_date": _format_date(invoice.due_date),
        "event_name": (event.name if event else None) or "N/A",
        "event_date": _format_date(event.event_date) if event else "N/A",
        "venue": (event.venue if event else None) or "N/A",
        "city": (event.city if event else None) or "N/A",
        "ticket_type": (booking.ticket_type if booking else None) or "Event Ticket",
        "quantity": quantity,
        "unit_price": f"{subtotal / quantity:.2f}",
        "subtotal": f"{subtotal:.2f}",
        "tax_amount": f"{invoice.tax_amount:.2f}" if invoice.tax_amount else None,
        "total_amount": f"{invoice.total_amount or 0:.2f}",
        "status": (invoice.status or "N/A").upper(),
        "payment_method": invoice.payment_method,
    }


def render_invoice(invoice: Invoice, *, autoprint: bool = False) -> str:
    """Render a self-contained printable HTML invoice."""
    template = _templates.get_template("invoice.html")
    return template.render(autoprint=autoprint, **invoice_context(invoice))
