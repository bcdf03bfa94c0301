"""REST client composing the request pipeline.

:class:`RestClient` holds only read-only configuration (base URL,
transport, encoder, decoder and defaults). Every call builds its own
URL, request and response values and runs them through the same
pipeline: build URL, assemble request, send, validate, decode. Concurrent
calls on one client therefore never see each other's state.

Examples:
    >>> async with RestClient("https://api.example.com") as client:
    ...     user = await client.get("/users/1", response_type=User)
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type, TypeVar, Union

import httpx

from .config.settings import ClientSettings, get_settings
from .exceptions import BadURLError
from .http.models import CachePolicy, OutboundRequest, RawResponse, ensure_absolute_url
from .http.request import DEFAULT_TIMEOUT, NO_BODY
from .http.request import build_request as _build_request
from .http.response import decode as _decode
from .http.response import validate as _validate
from .http.serialization import Decoder, Encoder, JSONDecoder, JSONEncoder
from .http.transport import HTTPXTransport, Transport
from .http.transport import send as _send
from .http.url import QueryInput, build_url
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RestClient:
    """Asynchronous client for one REST API.

    :param base_url: Absolute base URL; validated once here
    :type base_url: Union[str, httpx.URL]
    :param transport: Transport performing the I/O, httpx by default
    :type transport: Optional[Transport]
    :param encoder: Default body encoder, JSON by default
    :type encoder: Optional[Encoder]
    :param decoder: Default response decoder, JSON by default
    :type decoder: Optional[Decoder]
    :param default_headers: Headers sent with every request; caller
        headers override them
    :type default_headers: Optional[Mapping[str, str]]
    :param timeout: Default timeout in seconds
    :type timeout: float
    :param cache_policy: Default cache policy hint
    :type cache_policy: Optional[CachePolicy]
    :raises BadURLError: If ``base_url`` is not an absolute URL
    """

    def __init__(
        self,
        base_url: Union[str, httpx.URL],
        transport: Optional[Transport] = None,
        encoder: Optional[Encoder] = None,
        decoder: Optional[Decoder] = None,
        default_headers: Optional[Mapping[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        cache_policy: Optional[CachePolicy] = None,
    ):
        if timeout is None or timeout <= 0:
            raise ValueError(f"timeout must be greater than 0, got {timeout!r}")
        self._base_url = ensure_absolute_url(base_url)
        self._transport: Transport = transport or HTTPXTransport()
        self._encoder: Encoder = encoder or JSONEncoder()
        self._decoder: Decoder = decoder or JSONDecoder()
        self._default_headers = MappingProxyType(dict(default_headers or {}))
        self._timeout = float(timeout)
        self._cache_policy = cache_policy or CachePolicy.USE_PROTOCOL_CACHE_POLICY
        logger.debug("Created REST client for %s", self._base_url)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        transport: Optional[Transport] = None,
        **kwargs: Any,
    ) -> "RestClient":
        """Build a client from :class:`ClientSettings`.

        :param settings: Settings to use; loaded from the environment if omitted
        :param transport: Optional transport override
        :raises BadURLError: If the settings hold no base URL
        """
        settings = settings or get_settings()
        setup_logging(settings.log_level)
        if not settings.base_url:
            raise BadURLError("No base URL configured (RESTCLIENT_BASE_URL)")
        return cls(
            settings.base_url,
            transport=transport,
            default_headers=settings.default_headers,
            timeout=settings.timeout,
            cache_policy=settings.cache_policy,
            **kwargs,
        )

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def encoder(self) -> Encoder:
        return self._encoder

    @property
    def decoder(self) -> Decoder:
        return self._decoder

    @property
    def default_headers(self) -> Mapping[str, str]:
        return self._default_headers

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def cache_policy(self) -> CachePolicy:
        return self._cache_policy

    async def aclose(self) -> None:
        """Close the underlying transport."""
        await self._transport.aclose()

    async def __aenter__(self) -> "RestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # Pipeline stages

    def url(
        self, path: Optional[str] = None, query: Optional[QueryInput] = None
    ) -> httpx.URL:
        """Resolve ``path`` and ``query`` against the base URL."""
        return build_url(self._base_url, path=path, query=query)

    def build_request(
        self,
        url: Union[str, httpx.URL],
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        body: Any = NO_BODY,
        cache_policy: Optional[CachePolicy] = None,
        timeout: Optional[float] = None,
        encoder: Optional[Encoder] = None,
    ) -> OutboundRequest:
        """Assemble a request using this client's defaults."""
        return _build_request(
            url,
            method=method,
            headers=headers,
            timeout=self._timeout if timeout is None else timeout,
            cache_policy=cache_policy or self._cache_policy,
            body=body,
            encoder=encoder or self._encoder,
            default_headers=self._default_headers,
        )

    async def response(self, request: OutboundRequest) -> RawResponse:
        """Send ``request`` through the transport."""
        return await _send(self._transport, request)

    def validate(self, status_code: int, body: Optional[bytes] = None) -> None:
        _validate(status_code, body)

    def decode(
        self, data: bytes, response_type: Type[T], decoder: Optional[Decoder] = None
    ) -> T:
        return _decode(data, response_type, decoder or self._decoder)

    async def request(
        self,
        method: str,
        path: Optional[str] = None,
        query: Optional[QueryInput] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = NO_BODY,
        response_type: Optional[Type[T]] = None,
        cache_policy: Optional[CachePolicy] = None,
        timeout: Optional[float] = None,
        encoder: Optional[Encoder] = None,
        decoder: Optional[Decoder] = None,
    ) -> Optional[T]:
        """Run one call through the whole pipeline.

        Whether a body is encoded depends on ``body`` being given, and
        whether the response is decoded depends on ``response_type``.
        Without a response type the status is still validated and
        ``None`` is returned.

        :param method: HTTP method token; any verb is accepted
        :param path: Optional path resolved against the base URL
        :param query: Optional ordered query pairs
        :param headers: Optional headers overriding the client defaults
        :param body: Value to encode as the request body
        :param response_type: Type to decode the response body into
        :param cache_policy: Cache policy hint, client default if omitted
        :param timeout: Timeout in seconds, client default if omitted
        :param encoder: Body encoder for this call only
        :param decoder: Response decoder for this call only
        :return: The decoded response, or None without a response type
        :raises BadURLError: If the URL cannot be built
        :raises EncodingError: If the body or a header cannot be encoded
        :raises TransportError: If the transport fails
        :raises BadResponseTypeError: If the transport response is not HTTP
        :raises ServerError: If the status code is not 2xx
        :raises DecodingError: If the response body cannot be decoded
        """
        outbound = self.build_request(
            self.url(path, query),
            method=method,
            headers=headers,
            body=body,
            cache_policy=cache_policy,
            timeout=timeout,
            encoder=encoder,
        )
        raw = await self.response(outbound)
        _validate(raw.status_code, raw.body)
        if response_type is None:
            return None
        return self.decode(raw.body, response_type, decoder)

    # Per-verb wrappers

    async def get(self, path: Optional[str] = None, **kwargs: Any) -> Any:
        """Send a GET request. See :meth:`request` for the options."""
        return await self.request("GET", path, **kwargs)

    async def post(self, path: Optional[str] = None, **kwargs: Any) -> Any:
        """Send a POST request. See :meth:`request` for the options."""
        return await self.request("POST", path, **kwargs)

    async def put(self, path: Optional[str] = None, **kwargs: Any) -> Any:
        """Send a PUT request. See :meth:`request` for the options."""
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: Optional[str] = None, **kwargs: Any) -> Any:
        """Send a PATCH request. See :meth:`request` for the options."""
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: Optional[str] = None, **kwargs: Any) -> Any:
        """Send a DELETE request. See :meth:`request` for the options."""
        return await self.request("DELETE", path, **kwargs)

    async def options(self, path: Optional[str] = None, **kwargs: Any) -> Any:
        """Send an OPTIONS request. See :meth:`request` for the options."""
        return await self.request("OPTIONS", path, **kwargs)

    async def trace(self, path: Optional[str] = None, **kwargs: Any) -> Any:
        """Send a TRACE request. See :meth:`request` for the options."""
        return await self.request("TRACE", path, **kwargs)

    async def connect(self, path: Optional[str] = None, **kwargs: Any) -> Any:
        """Send a CONNECT request. See :meth:`request` for the options."""
        return await self.request("CONNECT", path, **kwargs)

    async def head(
        self,
        path: Optional[str] = None,
        query: Optional[QueryInput] = None,
        headers: Optional[Mapping[str, str]] = None,
        cache_policy: Optional[CachePolicy] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Send a HEAD request; only the status is checked."""
        await self.request(
            "HEAD",
            path,
            query=query,
            headers=headers,
            cache_policy=cache_policy,
            timeout=timeout,
        )
