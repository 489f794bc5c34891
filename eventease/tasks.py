import logging

from eventease.core.celery_config import celery_app
from eventease.core.errors import NotificationFailure
from eventease.models import registry  # noqa: F401
from eventease.services.notifications import (
    NotificationDispatcher,
    booking_email_payload,
    registration_email_payload,
)

logger = logging.getLogger(__name__)


def _dispatch(kind: str, send, payload: dict) -> dict:
    try:
        receipt = send(payload)
    except NotificationFailure as e:
        # Email is best effort; the registration or booking already stands.
        logger.warning("%s email to %s not sent: %s", kind, payload.get("email"), e.message)
        return {"sent": False, "error": e.message}
    logger.info("%s email sent to %s", kind, payload.get("email"))
    return {"sent": True, "receipt": receipt}


@celery_app.task(bind=True)
def send_registration_email_task(self, payload: dict):
    """Send the registration confirmation through the email function."""
    return _dispatch("Registration", NotificationDispatcher().send_registration_email, payload)


@celery_app.task(bind=True)
def send_booking_email_task(self, payload: dict):
    """Send the booking confirmation through the email function."""
    return _dispatch("Booking", NotificationDispatcher().send_booking_email, payload)


def _enqueue(task, payload: dict) -> None:
    try:
        task.delay(payload)
    except Exception as e:
        logger.warning("Could not queue %s for %s: %s", task.name, payload.get("email"), e)


def queue_registration_email(registration, event) -> None:
    _enqueue(send_registration_email_task, registration_email_payload(registration, event))


def queue_booking_email(booking, event) -> None:
    _enqueue(send_booking_email_task, booking_email_payload(booking, event))
