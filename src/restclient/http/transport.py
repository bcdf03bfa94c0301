"""Transports and the transport invoker.

A transport performs the network I/O for one :class:`OutboundRequest`
and returns ``(body_bytes, metadata)``. The invoker, :func:`send`,
delegates to it exactly once: it never retries, never alters the
request and never times the call itself, since the timeout travels on
the request. Every exception the transport raises is wrapped in
:class:`TransportError`. A body that is not bytes or metadata that is not
a :class:`ResponseMetadata` is rejected with :class:`BadResponseTypeError`.
"""

import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Protocol, Tuple, Union

import httpx

from ..exceptions import BadResponseTypeError, TransportError
from ..logging_config import sanitize_headers
from .models import CachePolicy, OutboundRequest, RawResponse, ResponseMetadata

logger = logging.getLogger(__name__)

TransportResult = Tuple[bytes, Any]


class Transport(Protocol):
    """Capability that executes one outbound request."""

    async def send(self, request: OutboundRequest) -> TransportResult: ...

    async def aclose(self) -> None: ...


_CACHE_CONTROL: Dict[CachePolicy, Dict[str, str]] = {
    CachePolicy.USE_PROTOCOL_CACHE_POLICY: {},
    CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA: {"Cache-Control": "no-cache"},
    CachePolicy.RELOAD_IGNORING_LOCAL_AND_REMOTE_CACHE_DATA: {
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
    },
    CachePolicy.RETURN_CACHE_DATA_ELSE_LOAD: {"Cache-Control": "max-stale"},
    CachePolicy.RETURN_CACHE_DATA_DONT_LOAD: {"Cache-Control": "only-if-cached"},
    CachePolicy.RELOAD_REVALIDATING_CACHE_DATA: {"Cache-Control": "max-age=0"},
}


def cache_headers(request: OutboundRequest) -> Dict[str, str]:
    """Headers expressing the request's cache policy.

    Headers the caller already set are left out so caller values win.
    """
    present = {name.lower() for name in request.headers}
    return {
        name: value
        for name, value in _CACHE_CONTROL[request.cache_policy].items()
        if name.lower() not in present
    }


class HTTPXTransport:
    """Transport backed by ``httpx.AsyncClient``.

    When no client is given one is created and owned by the transport,
    and :meth:`aclose` closes it. A client passed in by the caller is
    left open. Redirects are not followed.

    :param client: Optional preconfigured async client
    :type client: Optional[httpx.AsyncClient]
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=False)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def send(self, request: OutboundRequest) -> TransportResult:
        """Send ``request`` and return body bytes plus response metadata."""
        headers = {**cache_headers(request), **request.headers}
        response = await self._client.request(
            request.method,
            request.url,
            headers=headers,
            content=request.body,
            timeout=httpx.Timeout(request.timeout),
            follow_redirects=False,
        )
        metadata = ResponseMetadata(
            status_code=response.status_code,
            headers=dict(response.headers),
            url=str(response.url),
        )
        return response.content, metadata

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
            logger.debug("Closed owned HTTP client")

    async def __aenter__(self) -> "HTTPXTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class StubTransport:
    """In-memory transport returning canned results.

    Each queued item is either ``(body, metadata)`` or an exception to
    raise. When the queue holds one item it is reused for every call.
    Every request received is recorded in :attr:`requests`.

    :param body: Body bytes for the default result
    :param status_code: Status code for the default result
    :param headers: Headers for the default result
    :param metadata: Explicit metadata, overriding status_code/headers;
        may be any object to simulate a non-HTTP response
    :param error: Exception to raise instead of returning a result
    """

    def __init__(
        self,
        body: bytes = b"",
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
        metadata: Any = None,
        error: Optional[BaseException] = None,
    ):
        self.requests: List[OutboundRequest] = []
        self._results: Deque[Union[TransportResult, BaseException]] = deque()
        if error is not None:
            self._results.append(error)
        else:
            if metadata is None:
                metadata = ResponseMetadata(
                    status_code=status_code, headers=headers or {}
                )
            self._results.append((body, metadata))

    def queue(self, *results: Union[TransportResult, BaseException]) -> None:
        """Replace the canned results with ``results``, served in order."""
        self._results = deque(results)

    async def send(self, request: OutboundRequest) -> TransportResult:
        self.requests.append(request)
        if not self._results:
            raise RuntimeError("StubTransport has no queued results")
        result = self._results[0] if len(self._results) == 1 else self._results.popleft()
        if isinstance(result, BaseException):
            raise result
        body, metadata = result
        if isinstance(metadata, ResponseMetadata) and metadata.url is None:
            metadata = metadata.model_copy(update={"url": request.url})
        return body, metadata

    async def aclose(self) -> None:
        return None


async def send(transport: Transport, request: OutboundRequest) -> RawResponse:
    """Invoke ``transport`` once and normalize its result.

    :param transport: The transport to delegate to
    :param request: The assembled request, passed through unchanged
    :return: Body bytes with HTTP status, headers and effective URL
    :rtype: RawResponse
    :raises TransportError: If the transport call fails
    :raises BadResponseTypeError: If the metadata is not HTTP-shaped
    """
    logger.debug(
        "Sending %s %s headers=%s",
        request.method,
        request.url,
        sanitize_headers(request.headers),
    )
    try:
        result = await transport.send(request)
    except Exception as e:
        logger.warning("%s %s failed: %s", request.method, request.url, e)
        raise TransportError(e) from e

    if not isinstance(result, tuple) or len(result) != 2:
        raise BadResponseTypeError(type(result).__name__)
    body, metadata = result
    if not isinstance(body, (bytes, bytearray, memoryview)):
        raise BadResponseTypeError(type(body).__name__)
    if not isinstance(metadata, ResponseMetadata):
        raise BadResponseTypeError(type(metadata).__name__)

    logger.debug(
        "Received %d from %s %s", metadata.status_code, request.method, request.url
    )
    return RawResponse.from_parts(bytes(body), metadata)
