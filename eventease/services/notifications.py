"""Client for the managed email functions.

Two endpoints are called with fixed payload shapes:
`send-registration-email` and `send-booking-email`. Both answer with the
provider's send receipt, or `{"error": "..."}` and a non-2xx status.
"""
import logging

import requests

from eventease.core import config
from eventease.core.errors import NotificationFailure
from eventease.models.bookings import Booking
from eventease.models.events import Event
from eventease.models.registrations import Registration

logger = logging.getLogger(__name__)

REGISTRATION_EMAIL = "send-registration-email"
BOOKING_EMAIL = "send-booking-email"


def _event_date(event: Event) -> str:
    return event.event_date.strftime("%B %d, %Y") if event.event_date else ""


def registration_email_payload(registration: Registration, event: Event) -> dict:
    return {
        "email": registration.email,
        "fullName": registration.full_name,
        "eventName": event.name,
        "eventDate": _event_date(event),
        "venue": event.venue,
        "city": event.city,
    }


def booking_email_payload(booking: Booking, event: Event) -> dict:
    return {
        "email": booking.email,
        "cardholderName": booking.cardholder_name,
        "eventName": event.name,
        "eventDate": _event_date(event),
        "venue": event.venue,
        "city": event.city,
        "ticketType": booking.ticket_type,
        "quantity": booking.quantity,
        "totalAmount": booking.total_amount,
        "bookingReference": booking.booking_reference,
    }


class NotificationDispatcher:
    """Client for the email functions."""

    def __init__(self, base_url: str | None = None, api_key: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or config.NOTIFICATIONS_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else config.NOTIFICATIONS_API_KEY
        self.timeout = timeout or config.NOTIFICATIONS_TIMEOUT

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def send(self, function_name: str, payload: dict) -> dict:
        """
        Invoke an email function.

        Raises:
            NotificationFailure: on transport errors or a non-2xx answer.
        """
        url = f"{self.base_url}/{function_name}"
        try:
            response = requests.post(url, json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning("Email function %s unreachable: %s", function_name, e)
            raise NotificationFailure(str(e))

        if not response.ok:
            try:
                message = response.json().get("error") or response.text
            except ValueError:
                message = response.text
            logger.warning("Email function %s failed with %s: %s", function_name, response.status_code, message)
            raise NotificationFailure(message or f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError:
            return {}

    def send_registration_email(self, payload: dict) -> dict:
        return self.send(REGISTRATION_EMAIL, payload)

    def send_booking_email(self, payload: dict) -> dict:
        return self.send(BOOKING_EMAIL, payload)
