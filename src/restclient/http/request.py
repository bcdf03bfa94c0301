"""Outbound request assembly.

Builds the immutable :class:`OutboundRequest` for one call. Without a
body this cannot fail for a valid URL; with a body, any failure of the
encoder is raised as :class:`EncodingError` with the original cause.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

import httpx

from ..exceptions import EncodingError
from .models import CachePolicy, OutboundRequest
from .serialization import Encoder, JSONEncoder

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class _NoBody:
    """Marker for "no request body", distinct from a ``None`` body value."""

    _instance: Optional["_NoBody"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_BODY"

    def __bool__(self) -> bool:
        return False


NO_BODY: Any = _NoBody()

_FORBIDDEN_HEADER_CHARS = ("\r", "\n", "\x00")


def _check_header(name: str, value: str) -> None:
    if not name or any(c in name for c in _FORBIDDEN_HEADER_CHARS + (":", " ")):
        raise EncodingError(
            ValueError(f"invalid header name {name!r}"),
            message=f"Invalid header name: {name!r}",
        )
    if any(c in value for c in _FORBIDDEN_HEADER_CHARS):
        raise EncodingError(
            ValueError(f"invalid value for header {name!r}"),
            message=f"Invalid value for header {name!r}",
        )


def merge_headers(
    default_headers: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Apply default headers, then caller headers in iteration order.

    Names match case-insensitively and the later entry wins, keeping the
    caller's spelling. Each name maps to exactly one value; repeated
    fields are never folded into a comma-separated list.

    :param default_headers: Headers applied first
    :param headers: Caller headers, applied last
    :return: Merged header mapping
    :raises EncodingError: If a name or value cannot be sent over HTTP
    """
    merged: Dict[str, str] = {}
    index: Dict[str, str] = {}
    for source in (default_headers, headers):
        if not source:
            continue
        for name, value in source.items():
            name, value = str(name), str(value)
            _check_header(name, value)
            previous = index.get(name.lower())
            if previous is not None:
                del merged[previous]
            merged[name] = value
            index[name.lower()] = name
    return merged


def build_request(
    url: Union[str, httpx.URL],
    method: str = "GET",
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    cache_policy: CachePolicy = CachePolicy.USE_PROTOCOL_CACHE_POLICY,
    body: Any = NO_BODY,
    encoder: Optional[Encoder] = None,
    default_headers: Optional[Mapping[str, str]] = None,
) -> OutboundRequest:
    """Assemble an outbound request, encoding ``body`` when one is given.

    :param url: Absolute request URL, used unchanged
    :type url: Union[str, httpx.URL]
    :param method: HTTP method token; nonstandard verbs are allowed
    :type method: str
    :param headers: Optional caller headers
    :type headers: Optional[Mapping[str, str]]
    :param timeout: Timeout in seconds for the transport, must be > 0
    :type timeout: float
    :param cache_policy: Cache behaviour hint forwarded to the transport
    :type cache_policy: CachePolicy
    :param body: Value to encode as the body; ``NO_BODY`` sends none
    :type body: Any
    :param encoder: Body encoder, JSON by default
    :type encoder: Optional[Encoder]
    :param default_headers: Headers the caller's headers may override
    :type default_headers: Optional[Mapping[str, str]]
    :return: The immutable outbound request
    :rtype: OutboundRequest
    :raises EncodingError: If the body or a header cannot be encoded
    :raises ValueError: If ``timeout`` is not positive
    """
    if timeout is None or timeout <= 0:
        raise ValueError(f"timeout must be greater than 0, got {timeout!r}")

    merged = merge_headers(default_headers, headers)

    payload: Optional[bytes] = None
    if body is not NO_BODY:
        encoder = encoder or JSONEncoder()
        try:
            payload = encoder.encode(body)
        except Exception as e:
            logger.debug("Encoding %s body failed: %s", type(body).__name__, e)
            raise EncodingError(e) from e
        if not isinstance(payload, (bytes, bytearray)):
            raise EncodingError(
                TypeError(
                    f"encoder returned {type(payload).__name__}, expected bytes"
                )
            )
        payload = bytes(payload)

    return OutboundRequest(
        url=str(url),
        method=method,
        headers=merged,
        body=payload,
        cache_policy=cache_policy,
        timeout=timeout,
    )
