"""Backend Error Hierarchy.

Typed exceptions raised by the backend client. httpx exceptions are
translated at the client boundary so callers only ever catch
``BackendError`` subclasses.
"""

from typing import Any, Optional

from src.api_client.config import ErrorCode, STATUS_ERROR_MAP


class BackendError(Exception):
    """Base exception for all backend failures."""

    default_message = "Request to the TripManager backend failed"

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.SERVER_ERROR,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    @property
    def user_message(self) -> str:
        """Message suitable for showing to the user.

        Prefers the ``message`` field of the backend's error body.
        """
        server_message = self.details.get("message")
        if isinstance(server_message, str) and server_message:
            return server_message
        return self.message


class ValidationError(BackendError):
    """Backend rejected the request payload (400/422)."""

    default_message = "The request was rejected by the server"


class AuthenticationError(BackendError):
    """Auth token missing, expired or invalid (401)."""

    default_message = "Your session has expired. Please log in again."


class AuthorizationError(BackendError):
    """Authenticated user lacks permission (403)."""

    default_message = "You do not have permission to perform this action"


class NotFoundError(BackendError):
    """Requested resource does not exist (404)."""

    default_message = "The requested item no longer exists"


class RateLimitError(BackendError):
    """Too many requests (429)."""

    default_message = "Too many requests. Please try again shortly."


class ServerError(BackendError):
    """Backend returned a 5xx response."""

    default_message = "The server encountered an error"


class BackendUnavailableError(BackendError):
    """Backend could not be reached (timeout, DNS, connection reset)."""

    default_message = "Unable to reach the server. Please check your connection."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, ErrorCode.SERVICE_UNAVAILABLE)


_STATUS_EXCEPTIONS: dict[int, type[BackendError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    422: ValidationError,
    429: RateLimitError,
}


def error_for_status(status_code: int, body: Any = None) -> BackendError:
    """Build the exception matching an HTTP error status."""
    details = body if isinstance(body, dict) else {}
    if status_code >= 500:
        exc_class: type[BackendError] = ServerError
        error_code = ErrorCode.SERVER_ERROR
    else:
        exc_class = _STATUS_EXCEPTIONS.get(status_code, BackendError)
        error_code = STATUS_ERROR_MAP.get(status_code, ErrorCode.SERVER_ERROR)
    return exc_class(
        error_code=error_code,
        status_code=status_code,
        details=details,
    )
