"""Error taxonomy for the Timber SDK.

Every exception raised by the SDK derives from ``TimberError`` and carries an
``ErrorCode`` together with a suggested action, so callers can log, surface
or translate failures consistently.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for the SDK."""

    # Configuration errors
    CONFIG_MISSING_API_KEY = "CONFIG_MISSING_API_KEY"

    # Payload errors
    ENCODING_UNSUPPORTED_NESTING = "ENCODING_UNSUPPORTED_NESTING"
    ENCODING_INVALID_ELEMENT = "ENCODING_INVALID_ELEMENT"
    ENCODING_UNSUPPORTED_TYPE = "ENCODING_UNSUPPORTED_TYPE"

    # API errors
    API_AUTH_ERROR = "API_AUTH_ERROR"
    API_FORBIDDEN = "API_FORBIDDEN"
    API_NOT_FOUND = "API_NOT_FOUND"
    API_VALIDATION_ERROR = "API_VALIDATION_ERROR"
    API_RATE_LIMITED = "API_RATE_LIMITED"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    API_ERROR = "API_ERROR"

    # Network errors
    CONNECTION_ERROR = "CONNECTION_ERROR"
    TIMEOUT = "TIMEOUT"


class ErrorResponse(BaseModel):
    """Structured view of an SDK error.

    Attributes:
        error_code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status returned by the API, if any
        details: Additional error details
        retry_after: Seconds to wait before retrying (for rate limits)
        suggested_action: Actionable suggestion for the caller
        is_retryable: Whether the operation can be retried
    """
    error_code: str
    message: str
    status_code: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    retry_after: Optional[int] = None
    suggested_action: Optional[str] = None
    is_retryable: bool = False


SUGGESTED_ACTIONS = {
    ErrorCode.CONFIG_MISSING_API_KEY: "Pass an API key to create_client() or set TIMBER_API_KEY.",

    ErrorCode.ENCODING_UNSUPPORTED_NESTING: "Nested records may only contain plain values. Flatten the record before submitting.",
    ErrorCode.ENCODING_INVALID_ELEMENT: "Line-item lists may only contain records, strings or files. Remove empty entries.",
    ErrorCode.ENCODING_UNSUPPORTED_TYPE: "Use strings, numbers, booleans, dates, records, lists or Attachment values.",

    ErrorCode.API_AUTH_ERROR: "Authentication failed. Please verify your API key.",
    ErrorCode.API_FORBIDDEN: "The API key lacks permission for this resource.",
    ErrorCode.API_NOT_FOUND: "The requested resource was not found.",
    ErrorCode.API_VALIDATION_ERROR: "The submitted data was rejected. Please review and correct the fields.",
    ErrorCode.API_RATE_LIMITED: "Too many requests. Please wait before trying again.",
    ErrorCode.API_SERVER_ERROR: "The API returned a server error. Please try again later.",
    ErrorCode.API_ERROR: "The API returned an unexpected error.",

    ErrorCode.CONNECTION_ERROR: "Cannot connect to the API. Please check the base URL and your network.",
    ErrorCode.TIMEOUT: "The request timed out. Please try again.",
}

# Retryable error codes
RETRYABLE_ERRORS = {
    ErrorCode.API_RATE_LIMITED,
    ErrorCode.API_SERVER_ERROR,
    ErrorCode.CONNECTION_ERROR,
    ErrorCode.TIMEOUT,
}


def create_error_response(
    error_code: ErrorCode,
    message: Optional[str] = None,
    status_code: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None,
    retry_after: Optional[int] = None,
) -> ErrorResponse:
    """Create a standardized error response.

    Args:
        error_code: The error code
        message: Optional custom message (uses the suggested action if not provided)
        status_code: Optional HTTP status code
        details: Optional additional details
        retry_after: Optional retry delay in seconds

    Returns:
        ErrorResponse with suggested action
    """
    suggested_action = SUGGESTED_ACTIONS.get(error_code)

    return ErrorResponse(
        error_code=error_code.value,
        message=message or suggested_action or "An error occurred",
        status_code=status_code,
        details=details,
        retry_after=retry_after,
        suggested_action=suggested_action,
        is_retryable=error_code in RETRYABLE_ERRORS,
    )


# =============================================================================
# Exceptions
# =============================================================================


class TimberError(Exception):
    """Base exception for all SDK errors."""

    error_code: ErrorCode = ErrorCode.API_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.details = details

    @property
    def suggested_action(self) -> Optional[str]:
        return SUGGESTED_ACTIONS.get(self.error_code)

    @property
    def is_retryable(self) -> bool:
        return self.error_code in RETRYABLE_ERRORS

    def to_response(self) -> ErrorResponse:
        """Build the structured ``ErrorResponse`` for this error."""
        return create_error_response(
            error_code=self.error_code,
            message=self.message,
            status_code=getattr(self, "status_code", None),
            details=self.details,
            retry_after=getattr(self, "retry_after", None),
        )


class ConfigurationError(TimberError):
    """Raised when the client cannot be configured (e.g. no API key)."""

    error_code = ErrorCode.CONFIG_MISSING_API_KEY


class EncodingError(TimberError):
    """Raised when a request payload has a shape the form encoder cannot flatten.

    This is a programming error on the caller side; it is raised before any
    network call and is never retried.
    """

    error_code = ErrorCode.ENCODING_UNSUPPORTED_TYPE


class TransportError(TimberError):
    """Base exception for network and HTTP failures."""
    pass


class TimberConnectionError(TransportError):
    """Raised when the API cannot be reached or the request times out."""

    error_code = ErrorCode.CONNECTION_ERROR


class APIError(TransportError):
    """Raised when the API answers with an error status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Raised when authentication fails (401)."""

    error_code = ErrorCode.API_AUTH_ERROR


class ForbiddenError(APIError):
    """Raised when access is forbidden (403)."""

    error_code = ErrorCode.API_FORBIDDEN


class NotFoundError(APIError):
    """Raised when a resource is not found (404)."""

    error_code = ErrorCode.API_NOT_FOUND


class ValidationError(APIError):
    """Raised when request validation fails (400/422) or an ID is missing."""

    error_code = ErrorCode.API_VALIDATION_ERROR


class RateLimitError(APIError):
    """Raised when rate limited (429)."""

    error_code = ErrorCode.API_RATE_LIMITED

    def __init__(
        self,
        message: str,
        retry_after: Optional[int] = None,
        status_code: Optional[int] = 429,
    ):
        super().__init__(message, status_code=status_code)
        self.retry_after = retry_after


class ServerError(APIError):
    """Raised when the API returns a 5xx error."""

    error_code = ErrorCode.API_SERVER_ERROR
