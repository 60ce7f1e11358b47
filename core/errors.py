"""
Error Taxonomy and Classification

Every failure the Kraken client can report is one of a closed set of kinds.
Each kind has its own exception class deriving from KrakenError, so callers
can either catch a specific class or branch on ``error.kind``.

Retryable kinds (transient, eligible for the retry loop):
    - RateLimitExceeded
    - Network
    - Timeout

Classification sources:
    - classify_remote_errors(): the ``error`` list of a Kraken response envelope
    - classify_transport_error(): exceptions raised by aiohttp while sending

Example:
    >>> err = classify_remote_errors(["EAPI:Rate limit exceeded"])
    >>> type(err).__name__, err.retryable
    ('RateLimitExceededError', True)
    >>> str(classify_remote_errors(["EGeneral:Invalid arguments"]))
    'API error: EGeneral:Invalid arguments'
"""

import asyncio
from enum import Enum
from typing import List, Optional

import aiohttp


class ErrorKind(str, Enum):
    """Closed set of error kinds reported by the client."""

    HTTP_ERROR = "HttpError"
    INVALID_RESPONSE = "InvalidResponse"
    SERIALIZATION_ERROR = "SerializationError"
    API = "Api"
    AUTH = "Auth"
    RATE_LIMIT_EXCEEDED = "RateLimitExceeded"
    VALIDATION = "Validation"
    NETWORK = "Network"
    TIMEOUT = "Timeout"
    UNKNOWN = "Unknown"
    DESERIALIZATION = "Deserialization"


RETRYABLE_KINDS = frozenset({
    ErrorKind.RATE_LIMIT_EXCEEDED,
    ErrorKind.NETWORK,
    ErrorKind.TIMEOUT,
})


# ============================================
# Exception Hierarchy
# ============================================

class KrakenError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        kind: ErrorKind of this error
        label: Human readable prefix used in str()
        message: Descriptive message (the joined remote error list for API errors)
        cause: Underlying exception, if any
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    label: str = "Unknown error"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"

    @property
    def retryable(self) -> bool:
        """True if the failure is transient and the request may be retried."""
        return self.kind in RETRYABLE_KINDS


class HttpError(KrakenError):
    """Client-side HTTP failure that is neither a timeout nor a connection error."""

    kind = ErrorKind.HTTP_ERROR
    label = "HTTP error"


class InvalidResponseError(KrakenError):
    """Non-2xx status from the exchange."""

    kind = ErrorKind.INVALID_RESPONSE
    label = "Invalid response"


class SerializationError(KrakenError):
    """Response body is not valid JSON."""

    kind = ErrorKind.SERIALIZATION_ERROR
    label = "Serialization error"


class ApiError(KrakenError):
    """Error reported by the exchange in the response envelope."""

    kind = ErrorKind.API
    label = "API error"


class AuthError(KrakenError):
    """Missing or malformed credentials, or authentication rejected remotely."""

    kind = ErrorKind.AUTH
    label = "Authentication error"


class RateLimitExceededError(KrakenError):
    """Exchange reported that the rate limit was exceeded."""

    kind = ErrorKind.RATE_LIMIT_EXCEEDED
    label = "Rate limit exceeded"


class ValidationError(KrakenError):
    """Invalid request parameters, detected locally or by the exchange."""

    kind = ErrorKind.VALIDATION
    label = "Validation error"


class NetworkError(KrakenError):
    """Connection could not be established or was dropped."""

    kind = ErrorKind.NETWORK
    label = "Network error"


class RequestTimeoutError(KrakenError):
    """A single attempt exceeded the configured timeout."""

    kind = ErrorKind.TIMEOUT
    label = "Timeout error"


class UnknownError(KrakenError):
    """Unexpected condition, e.g. a successful envelope without a result."""

    kind = ErrorKind.UNKNOWN
    label = "Unknown error"


class DeserializationError(KrakenError):
    """Valid JSON whose shape does not match the expected type."""

    kind = ErrorKind.DESERIALIZATION
    label = "Deserialization error"


# ============================================
# Classification
# ============================================

def classify_remote_errors(errors: List[str]) -> KrakenError:
    """
    Map a Kraken envelope ``error`` list to a KrakenError.

    Only the first entry decides the kind (case-insensitive substring match);
    the message always carries the whole list joined with ", ".

    Args:
        errors: Error strings from the response envelope

    Returns:
        KrakenError: The classified error (not raised)
    """
    if not errors:
        return UnknownError("Empty error response")

    first = errors[0].lower()
    message = ", ".join(errors)

    if "rate limit" in first:
        return RateLimitExceededError(message)
    if "authentication" in first:
        return AuthError(message)
    if "validation" in first:
        return ValidationError(message)
    return ApiError(message)


def classify_transport_error(exc: BaseException, url: str) -> KrakenError:
    """
    Map an exception raised while sending a request to a KrakenError.

    Timeouts are checked first: aiohttp.ServerTimeoutError is both a
    connection error and an asyncio.TimeoutError.

    Args:
        exc: Exception raised by aiohttp
        url: Request URL, used in the message

    Returns:
        KrakenError: The classified error (not raised)
    """
    if isinstance(exc, asyncio.TimeoutError):
        return RequestTimeoutError(f"Request to {url} timed out", cause=exc)
    if isinstance(exc, aiohttp.ClientConnectionError):
        return NetworkError(f"Connection to {url} failed: {exc}", cause=exc)
    return HttpError(f"Request to {url} failed: {exc}", cause=exc)
