"""Error taxonomy shared by the services and mapped to HTTP in main."""
from typing import Any, Dict, Optional


class BookingAPIError(Exception):
    status_code = 500
    title = "Internal Server Error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"error": self.title, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class AuthenticationError(BookingAPIError):
    status_code = 401
    title = "Authentication failed"
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, message: str = "Could not validate credentials", details: Any = None):
        super().__init__(message, details)


class AuthorizationError(BookingAPIError):
    status_code = 403
    title = "Access denied"

    def __init__(self, message: str = "Not enough permissions", details: Any = None):
        super().__init__(message, details)


class NotFoundError(BookingAPIError):
    status_code = 404
    title = "Not found"


class ValidationError(BookingAPIError):
    status_code = 400
    title = "Validation error"


class ConflictError(BookingAPIError):
    status_code = 409
    title = "Conflict"


class RateLimitError(BookingAPIError):
    status_code = 429
    title = "Too many requests"

    def __init__(self, message: str = "Too many requests. Please try again later.", details: Any = None):
        super().__init__(message, details)
