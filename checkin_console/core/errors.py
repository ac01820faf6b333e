"""
Error taxonomy for backend calls and console workflows
"""

from typing import Any, Optional


class ApiError(Exception):
    """Base class for every failure talking to the backend"""

    retryable = False

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class TransportError(ApiError):
    """No HTTP response was obtained"""

    retryable = True


class RequestTimeoutError(TransportError):
    """The request exceeded the configured timeout"""


class AuthenticationError(ApiError):
    """HTTP 401/403 from the backend"""


class RequestError(ApiError):
    """HTTP 4xx other than auth; message is the backend's, verbatim"""


class NotFoundError(RequestError):
    pass


class ServerError(ApiError):
    """HTTP 5xx"""

    retryable = True


class DecodeError(ApiError):
    """Response body did not match the expected shape"""


def error_for_status(status_code: int, message: str, payload: Any = None) -> ApiError:
    """Map a non-2xx status to its error class"""
    if status_code in (401, 403):
        return AuthenticationError(message, status_code, payload)
    if status_code == 404:
        return NotFoundError(message, status_code, payload)
    if 400 <= status_code < 500:
        return RequestError(message, status_code, payload)
    return ServerError(message, status_code, payload)


# -------- Console workflow errors --------

class ConsoleError(Exception):
    """Base class for errors raised by console workflows"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidScanError(ConsoleError):
    status_code = 422


class GuestNotFoundError(ConsoleError):
    status_code = 404


class EventNotFoundError(ConsoleError):
    status_code = 404


class NotCheckedInError(ConsoleError):
    status_code = 409


class AlreadyCheckedOutError(ConsoleError):
    status_code = 409


class AssignmentError(ConsoleError):
    status_code = 422
