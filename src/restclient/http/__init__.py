"""HTTP pipeline public API (barrel module).

This package provides the four pipeline stages and their value types:
- URL building (``build_url``)
- Request assembly (``build_request``)
- Transport invocation (``send``) and the bundled transports
- Status validation and body decoding (``validate``, ``decode``)

Recommended import pattern for consumers:
    from restclient.http import build_url, build_request, send, validate, decode
"""

from .models import (
    CachePolicy,
    Endpoint,
    OutboundRequest,
    RawResponse,
    ResponseMetadata,
    ensure_absolute_url,
)
from .request import DEFAULT_TIMEOUT, NO_BODY, build_request, merge_headers
from .response import decode, is_success, validate, validate_response
from .serialization import Decoder, Encoder, JSONDecoder, JSONEncoder
from .transport import HTTPXTransport, StubTransport, Transport, cache_headers, send
from .url import build_url, normalize_query

__all__ = [
    "CachePolicy",
    "Endpoint",
    "OutboundRequest",
    "RawResponse",
    "ResponseMetadata",
    "ensure_absolute_url",
    "build_url",
    "normalize_query",
    "DEFAULT_TIMEOUT",
    "NO_BODY",
    "build_request",
    "merge_headers",
    "Transport",
    "HTTPXTransport",
    "StubTransport",
    "cache_headers",
    "send",
    "is_success",
    "validate",
    "validate_response",
    "decode",
    "Encoder",
    "Decoder",
    "JSONEncoder",
    "JSONDecoder",
]
