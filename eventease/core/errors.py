"""Domain errors for EventEase.

Every error carries a code, a short title and a user-safe description,
mirroring the titled notice the client shows for a failed action.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    SOLD_OUT = "SOLD_OUT"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    RESOURCE_BUSY = "RESOURCE_BUSY"
    STORE_ERROR = "STORE_ERROR"
    BOOKING_FAILED = "BOOKING_FAILED"
    NOTIFICATION_FAILED = "NOTIFICATION_FAILED"


class EventEaseError(Exception):
    """Base domain error with code, title and user-safe message."""

    code = ErrorCode.STORE_ERROR
    status_code = 500
    title = "Error"

    def __init__(self, message: str, *, title: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class AuthenticationRequired(EventEaseError):
    code = ErrorCode.AUTHENTICATION_REQUIRED
    status_code = 401
    title = "Authentication Required"

    def __init__(self, message: str = "Please log in to continue.") -> None:
        super().__init__(message)


class PermissionDenied(EventEaseError):
    code = ErrorCode.PERMISSION_DENIED
    status_code = 403
    title = "Permission Denied"

    def __init__(self, message: str = "You are not allowed to perform this action.") -> None:
        super().__init__(message)


class ValidationError(EventEaseError):
    """Raised before any write when input fails a business rule."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 422
    title = "Invalid Input"


class NotFound(EventEaseError):
    code = ErrorCode.NOT_FOUND
    status_code = 404
    title = "Not Found"


class EventNotFound(NotFound):
    code = ErrorCode.EVENT_NOT_FOUND

    def __init__(self, event_id: str) -> None:
        super().__init__("The event you're looking for doesn't exist or has been removed.")
        self.event_id = event_id


class SoldOut(EventEaseError):
    code = ErrorCode.SOLD_OUT
    status_code = 409
    title = "Sold Out"

    def __init__(self, message: str = "Event is sold out.") -> None:
        super().__init__(message)


class InvalidTransition(EventEaseError):
    code = ErrorCode.INVALID_TRANSITION
    status_code = 409
    title = "Invalid Status Change"


class ResourceBusy(EventEaseError):
    code = ErrorCode.RESOURCE_BUSY
    status_code = 409
    title = "Busy"

    def __init__(self, message: str = "Could not acquire lock, please try again.") -> None:
        super().__init__(message)


class StoreError(EventEaseError):
    """Any read/insert/update failure from the store. Never retried."""

    code = ErrorCode.STORE_ERROR
    status_code = 500
    title = "Error"

    def __init__(self, message: str = "Something went wrong. Please try again.") -> None:
        super().__init__(message)


class BookingFailed(StoreError):
    code = ErrorCode.BOOKING_FAILED
    title = "Booking Failed"

    def __init__(self, message: str = "There was an error processing your booking. Please try again.") -> None:
        super().__init__(message)


class RegistrationFailed(StoreError):
    code = ErrorCode.BOOKING_FAILED
    title = "Registration Failed"

    def __init__(
        self, message: str = "There was an error submitting your registration. Please try again."
    ) -> None:
        super().__init__(message)


class NotificationFailure(EventEaseError):
    """Email dispatch failed. Logged only, never surfaced to the user."""

    code = ErrorCode.NOTIFICATION_FAILED
    status_code = 502
    title = "Notification Failed"
