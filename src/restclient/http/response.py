"""Response status validation and body decoding.

The two steps are separate on purpose: callers that only care about the
status can validate without decoding anything.
"""

import logging
from typing import Optional, Type, TypeVar

from ..exceptions import DecodingError, ServerError
from .models import RawResponse
from .serialization import Decoder, JSONDecoder

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUCCESS_RANGE = range(200, 300)


def is_success(status_code: int) -> bool:
    """Check if the status code is in the 200-299 range."""
    return status_code in SUCCESS_RANGE


def validate(status_code: int, body: Optional[bytes] = None) -> None:
    """Raise :class:`ServerError` unless ``status_code`` is 2xx.

    :param status_code: HTTP status code of the response
    :type status_code: int
    :param body: Raw response body, attached to the error for diagnostics
    :type body: Optional[bytes]
    :raises ServerError: If the status code is outside ``[200, 300)``
    """
    if not is_success(status_code):
        logger.warning("Request failed with status %d", status_code)
        raise ServerError(status_code, body or b"")


def validate_response(response: RawResponse) -> None:
    """Validate the status code of a raw response, keeping its body."""
    validate(response.status_code, response.body)


def decode(
    data: bytes, response_type: Type[T], decoder: Optional[Decoder] = None
) -> T:
    """Decode ``data`` into ``response_type``.

    :param data: Response body bytes
    :param response_type: Target type, anything pydantic can validate
    :param decoder: Decoder to use, JSON by default
    :return: The decoded value
    :raises DecodingError: If the decoder fails; the original error is kept
    """
    decoder = decoder or JSONDecoder()
    try:
        return decoder.decode(data, response_type)
    except Exception as e:
        logger.debug(
            "Decoding %d bytes as %s failed: %s",
            len(data),
            getattr(response_type, "__name__", response_type),
            e,
        )
        raise DecodingError(e) from e
