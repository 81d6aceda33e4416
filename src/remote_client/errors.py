"""Typed exception hierarchy for remote documentation service errors.

This module defines the root exception for the whole tool plus the transport
errors raised by the remote client. All transport errors carry the endpoint
(and the HTTP status where there is one) so callers can report them with
enough context to debug a failed sync.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all docs-hierarchy-sync errors.

    Use this to catch any application-level error from the tool.
    """
    pass


class RemoteError(SyncError):
    """Base exception for all remote service errors."""
    pass


class InvalidCredentialsError(RemoteError):
    """Raised when the API key is missing or rejected by the service."""

    def __init__(self, endpoint: str, reason: Optional[str] = None):
        message = f"API key is missing or invalid (endpoint: {endpoint})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.endpoint = endpoint
        self.reason = reason


class APIUnreachableError(RemoteError):
    """Raised when the remote API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIError(RemoteError):
    """Raised when the remote API answers with an error status."""

    def __init__(self, method: str, endpoint: str, status_code: int, body: str = ""):
        message = f"API Error {status_code} on {method.upper()} {endpoint}"
        if body:
            message += f": {body}"
        super().__init__(message)
        self.method = method.upper()
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body


class NotFoundError(APIError):
    """Raised when the requested category or document does not exist remotely."""
    pass


class RateLimitError(APIError):
    """Raised on HTTP 429. Retried by retry_logic before surfacing."""
    pass


class APIAccessError(RemoteError):
    """Raised when API access fails after retries."""

    def __init__(self, message: str = "Remote API failure (after 3 retries)"):
        super().__init__(message)
