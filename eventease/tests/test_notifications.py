"""
Test the email function client.
"""
from unittest.mock import Mock, patch

import pytest
import requests

from eventease.core.errors import NotificationFailure
from eventease.services.notifications import BOOKING_EMAIL, NotificationDispatcher

# Captured before the autouse fixture swaps `send` out
REAL_SEND = NotificationDispatcher.send


@pytest.fixture
def dispatcher(monkeypatch):
    monkeypatch.setattr(NotificationDispatcher, "send", REAL_SEND)
    return NotificationDispatcher(base_url="https://functions.test/", api_key="anon-key", timeout=3)


def _response(status_code: int, body=None) -> Mock:
    response = Mock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = str(body)
    response.json.return_value = body
    return response


class TestNotificationDispatcher:
    """Test calls to the email functions."""

    def test_send_posts_payload(self, dispatcher):
        with patch("eventease.services.notifications.requests.post") as mock_post:
            mock_post.return_value = _response(200, {"id": "email-1"})

            receipt = dispatcher.send_booking_email({"email": "jane@mail.com"})

        assert receipt == {"id": "email-1"}
        mock_post.assert_called_once_with(
            f"https://functions.test/{BOOKING_EMAIL}",
            json={"email": "jane@mail.com"},
            headers={"Content-Type": "application/json", "Authorization": "Bearer anon-key"},
            timeout=3,
        )

    def test_error_response(self, dispatcher):
        with patch("eventease.services.notifications.requests.post") as mock_post:
            mock_post.return_value = _response(500, {"error": "Resend rejected the message"})

            with pytest.raises(NotificationFailure, match="Resend rejected the message"):
                dispatcher.send_registration_email({"email": "jane@mail.com"})

    def test_transport_error(self, dispatcher):
        with patch("eventease.services.notifications.requests.post") as mock_post:
            mock_post.side_effect = requests.exceptions.ConnectTimeout("timed out")

            with pytest.raises(NotificationFailure):
                dispatcher.send_registration_email({"email": "jane@mail.com"})
