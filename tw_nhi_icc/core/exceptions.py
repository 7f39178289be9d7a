# tw_nhi_icc/core/exceptions.py

"""Custom exceptions for the tw_nhi_icc library."""

from typing import Optional


class NhiIccError(Exception):
    """Base exception class for all tw_nhi_icc errors."""
    def __init__(self, message="An unspecified TW NHI IC card service error occurred."):
        super().__init__(message)


# --- Transport Layer Exceptions ---

class NetworkError(NhiIccError):
    """
    The card service could not be reached (connection refused, DNS failure,
    failed WebSocket handshake, ...). It often wraps a lower-level exception.
    """
    def __init__(self, message="Network error.", original_exception: Exception | None = None):
        """
        Args:
            message: A description of the network error.
            original_exception: The underlying exception that caused this error (e.g., from aiohttp or websockets).
        """
        super().__init__(message)
        self.original_exception = original_exception

    def __str__(self):
        base_msg = super().__str__()
        if self.original_exception:
            orig_exc_type = type(self.original_exception).__name__
            orig_exc_msg = str(self.original_exception)
            return f"{base_msg} Original exception: [{orig_exc_type}] {orig_exc_msg}"
        return base_msg


class TimeoutError(NetworkError):
    """
    Raised when a request, its response body, or a WebSocket handshake does not
    complete within the allocated time.
    """
    def __init__(self, message="Operation timed out waiting for the card service."):
        super().__init__(message, original_exception=None)


# --- Service Response Exceptions ---

class ResponseError(NhiIccError):
    """
    The card service was reached but answered with a failure status, or with a
    body that cannot be used. Not a NetworkError: the endpoint is reachable.
    """
    def __init__(self, status_code: int, body: Optional[str] = None, message: Optional[str] = None):
        self.status_code = status_code
        self.body = body

        final_message: str
        if message:
            final_message = message
        elif body is not None:
            final_message = f"status code = {status_code}, body = {body!r}"
        else:
            final_message = f"status code = {status_code}, but cannot get the body"

        super().__init__(final_message)
