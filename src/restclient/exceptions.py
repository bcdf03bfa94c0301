"""Structured exception classes for the REST client.

Every failure surfaced by a client call is exactly one of the classes
below. They share :class:`RestError` as a base so callers can catch the
whole family at once, and all of them carry a stable ``code`` for
programmatic handling.
"""

import json
from typing import Any, Dict, Optional


class RestError(Exception):
    """Base exception for all REST client errors.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class BadURLError(RestError):
    """Raised when base URL, path and query cannot form an absolute URL.

    :param message: Description of the URL failure
    :param url: Optional textual form of the offending URL or component
    """

    def __init__(
        self,
        message: str = "Could not build a valid absolute URL",
        url: Optional[str] = None,
    ):
        """Initialize bad URL error with message and optional URL."""
        details = {}
        if url is not None:
            details["url"] = url
        super().__init__(message=message, code="BAD_URL", details=details)


class BadResponseTypeError(RestError):
    """Raised when the transport returns metadata that is not HTTP-shaped.

    :param received_type: Optional name of the metadata type received
    """

    def __init__(self, received_type: Optional[str] = None):
        """Initialize bad response type error with the received type name."""
        details = {}
        if received_type:
            details["received_type"] = received_type
        super().__init__(
            message="Transport returned a non-HTTP response",
            code="BAD_RESPONSE_TYPE",
            details=details,
        )


class ServerError(RestError):
    """Raised when the response status code is outside ``[200, 300)``.

    The raw response bytes are always kept, even when empty, so the
    caller can inspect an error payload without fetching it again.
    Two server errors are equal when both status code and bytes match.

    :param status_code: HTTP status code from the response
    :param response: Raw response body
    """

    def __init__(self, status_code: int, response: bytes = b""):
        """Initialize server error with status code and raw body."""
        super().__init__(
            message=f"Server responded with status {status_code}",
            code="SERVER_ERROR",
            details={"status_code": status_code, "response_size": len(response)},
        )
        self.status_code = status_code
        self.response = response

    @property
    def text(self) -> str:
        """Response body decoded as UTF-8, undecodable bytes replaced."""
        return self.response.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Parse the response body as JSON.

        :raises json.JSONDecodeError: If the body is not valid JSON
        """
        return json.loads(self.response)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServerError):
            return NotImplemented
        return (self.status_code, self.response) == (
            other.status_code,
            other.response,
        )

    def __hash__(self) -> int:
        return hash((self.status_code, self.response))

    def __repr__(self) -> str:
        return f"ServerError(status_code={self.status_code!r}, response={self.response!r})"


class _WrappedError(RestError):
    """Base for errors that wrap an underlying exception unmodified."""

    default_message = "Operation failed"
    error_code = "REST_ERROR"

    def __init__(self, cause: BaseException, message: Optional[str] = None):
        details = {
            "original_error": str(cause),
            "error_type": type(cause).__name__,
        }
        super().__init__(
            message=message or f"{self.default_message}: {cause}",
            code=self.error_code,
            details=details,
        )
        self.cause = cause
        self.__cause__ = cause


class EncodingError(_WrappedError):
    """Raised when the request body (or a header) cannot be encoded.

    :param cause: The exception raised by the encoder
    :param message: Optional override for the error message
    """

    default_message = "Failed to encode request"
    error_code = "ENCODING_ERROR"


class DecodingError(_WrappedError):
    """Raised when the response body cannot be decoded into the target type.

    :param cause: The exception raised by the decoder
    :param message: Optional override for the error message
    """

    default_message = "Failed to decode response"
    error_code = "DECODING_ERROR"


class TransportError(_WrappedError):
    """Raised when the transport itself fails (DNS, TLS, timeout, reset).

    :param cause: The exception raised by the transport, passed through as-is
    :param message: Optional override for the error message
    """

    default_message = "Transport failed"
    error_code = "TRANSPORT_ERROR"
