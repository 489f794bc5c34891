from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from eventease.schemas.events import EventOut
from eventease.schemas.invoices import InvoiceOut


# ---------- Booking flow ----------
class BookRequest(BaseModel):
    full_name: str = Field(min_length=2, max_length=200)
    email: EmailStr
    phone: str | None = Field(default=None, pattern=r"^\d{10}$")
    quantity: int = Field(default=1, ge=1)
    # Checked against the known ticket types by the booking service
    ticket_type: str = "standard"
    cardholder_name: str | None = Field(default=None, max_length=200)


class RegistrationRequest(BaseModel):
    full_name: str = Field(min_length=2, max_length=200)
    email: EmailStr
    phone: str | None = Field(default=None, pattern=r"^\d{10}$")
    group_size: int = Field(default=1, ge=1, le=5)
    special_requests: str | None = None
    dietary_restrictions: str | None = None
    accessibility_needs: str | None = None
    emergency_contact: str | None = None
    emergency_phone: str | None = None
    status: Literal["pending", "approved"] = "pending"


class RegistrationOut(BaseModel):
    id: str
    event_id: str | None
    user_id: str | None
    full_name: str
    email: str
    phone: str | None
    group_size: int | None
    registration_type: str
    special_requests: str | None
    dietary_restrictions: str | None
    accessibility_needs: str | None
    emergency_contact: str | None
    emergency_phone: str | None
    status: str
    created_at: datetime | None

    class Config:
        from_attributes = True


class RegistrationWithEventOut(RegistrationOut):
    event: EventOut | None = None


class BookingOut(BaseModel):
    id: str
    event_id: str | None
    user_id: str | None
    ticket_type: str
    quantity: int
    total_amount: float
    payment_status: str
    booking_reference: str | None
    cardholder_name: str | None
    email: str | None
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True


class BookingWithEventOut(BookingOut):
    event: EventOut | None = None


class PaymentStatusUpdate(BaseModel):
    payment_status: Literal["completed", "failed", "refunded"]


class BookResult(BaseModel):
    """Outcome of the booking flow: a free registration or a paid booking with its invoice."""

    kind: Literal["registration", "booking"]
    registration: RegistrationOut | None = None
    booking: BookingOut | None = None
    invoice: InvoiceOut | None = None
