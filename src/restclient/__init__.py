"""Asynchronous REST client over a pluggable HTTP transport.

The package builds requests from path, query, header and body
parameters, sends them through a transport, validates the status code
and decodes the JSON body into the type the caller asks for.

:var __version__: Current package version
:type __version__: str
"""

from .client import RestClient
from .exceptions import (
    BadResponseTypeError,
    BadURLError,
    DecodingError,
    EncodingError,
    RestError,
    ServerError,
    TransportError,
)
from .http import (
    NO_BODY,
    CachePolicy,
    Endpoint,
    HTTPXTransport,
    JSONDecoder,
    JSONEncoder,
    OutboundRequest,
    RawResponse,
    ResponseMetadata,
    StubTransport,
    Transport,
)

__version__ = "0.1.0"

__all__ = [
    "RestClient",
    "RestError",
    "BadURLError",
    "BadResponseTypeError",
    "ServerError",
    "EncodingError",
    "DecodingError",
    "TransportError",
    "NO_BODY",
    "CachePolicy",
    "Endpoint",
    "OutboundRequest",
    "RawResponse",
    "ResponseMetadata",
    "Transport",
    "HTTPXTransport",
    "StubTransport",
    "JSONEncoder",
    "JSONDecoder",
]
