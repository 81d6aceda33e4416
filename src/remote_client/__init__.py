"""Remote documentation service client.

This package provides a small, typed client over the documentation host's
REST API: bearer authentication, error translation and rate-limit retries.
"""

from .api_wrapper import APIWrapper
from .auth import Authenticator, Credentials, RemoteConfig
from .errors import (
    SyncError,
    RemoteError,
    InvalidCredentialsError,
    APIUnreachableError,
    APIError,
    NotFoundError,
    RateLimitError,
    APIAccessError,
)

__all__ = [
    "APIWrapper",
    "Authenticator",
    "Credentials",
    "RemoteConfig",
    "SyncError",
    "RemoteError",
    "InvalidCredentialsError",
    "APIUnreachableError",
    "APIError",
    "NotFoundError",
    "RateLimitError",
    "APIAccessError",
]
