"""Async Python client for the Timber accounting API."""

from timber.client import TimberClient, create_client
from timber.core.errors import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    EncodingError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TimberConnectionError,
    TimberError,
    TransportError,
    ValidationError,
)
from timber.services.payload import Attachment, PayloadEncoder

__version__ = "0.1.0"

__all__ = [
    "APIError",
    "Attachment",
    "AuthenticationError",
    "ConfigurationError",
    "EncodingError",
    "ForbiddenError",
    "NotFoundError",
    "PayloadEncoder",
    "RateLimitError",
    "ServerError",
    "TimberClient",
    "TimberConnectionError",
    "TimberError",
    "TransportError",
    "ValidationError",
    "create_client",
]
