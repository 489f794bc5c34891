from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from eventease.database.db import get_db
from eventease.routes.deps import get_current_actor
from eventease.schemas.invoices import InvoiceOut
from eventease.services import invoices
from eventease.services.accounts import Actor

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(invoice_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return invoices.get_invoice(db, actor, invoice_id)


@router.get("/{invoice_id}/print", response_class=HTMLResponse)
def print_invoice(
    invoice_id: str,
    autoprint: bool = False,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Printable invoice document, meant to be opened in a new window."""
    invoice = invoices.get_invoice(db, actor, invoice_id)
    return HTMLResponse(invoices.render_invoice(invoice, autoprint=autoprint))
