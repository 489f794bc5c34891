from datetime import datetime

from pydantic import BaseModel


class InvoiceOut(BaseModel):
    id: str
    booking_id: str | None
    user_id: str | None
    invoice_number: str
    invoice_date: datetime
    due_date: datetime
    subtotal: float
    tax_amount: float | None
    total_amount: float
    status: str
    payment_method: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True
