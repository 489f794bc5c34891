# Import every model module so relationships resolve and Base.metadata is complete.
from eventease.models import bookings, events, invoices, registrations, social, users  # noqa: F401
