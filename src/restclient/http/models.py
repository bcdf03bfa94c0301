"""Value types flowing through the request pipeline.

All models are frozen pydantic models: once built, an endpoint, an
outbound request or a raw response never changes. Each call builds its
own values, so nothing is shared between concurrent calls.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import BadURLError

QueryPairs = Tuple[Tuple[str, str], ...]


class CachePolicy(str, Enum):
    """Cache behaviour hint forwarded to the transport.

    The pipeline never interprets this value; it only travels on the
    outbound request for the transport to honour.
    """

    USE_PROTOCOL_CACHE_POLICY = "use_protocol_cache_policy"
    RELOAD_IGNORING_LOCAL_CACHE_DATA = "reload_ignoring_local_cache_data"
    RELOAD_IGNORING_LOCAL_AND_REMOTE_CACHE_DATA = (
        "reload_ignoring_local_and_remote_cache_data"
    )
    RETURN_CACHE_DATA_ELSE_LOAD = "return_cache_data_else_load"
    RETURN_CACHE_DATA_DONT_LOAD = "return_cache_data_dont_load"
    RELOAD_REVALIDATING_CACHE_DATA = "reload_revalidating_cache_data"


def ensure_absolute_url(url) -> httpx.URL:
    """Parse ``url`` and check it is an absolute URL with a host.

    :param url: URL as ``str`` or ``httpx.URL``
    :return: Parsed URL
    :rtype: httpx.URL
    :raises BadURLError: If the URL cannot be parsed or is not absolute
    """
    try:
        parsed = url if isinstance(url, httpx.URL) else httpx.URL(str(url))
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise BadURLError(f"Invalid URL: {e}", url=str(url)) from e
    if not parsed.is_absolute_url or not parsed.host:
        raise BadURLError("URL is not absolute", url=str(url))
    return parsed


class Endpoint(BaseModel):
    """Base address plus optional path and ordered query pairs.

    :param base_url: Absolute base address
    :type base_url: str
    :param path: Optional path resolved against the base
    :type path: Optional[str]
    :param query: Optional ordered query pairs, duplicates kept
    :type query: Optional[Tuple[Tuple[str, str], ...]]
    """

    model_config = ConfigDict(frozen=True)

    base_url: str
    path: Optional[str] = None
    query: Optional[QueryPairs] = None

    def url(self) -> httpx.URL:
        """Resolve this endpoint into one absolute URL."""
        from .url import build_url

        return build_url(self.base_url, path=self.path, query=self.query)


class OutboundRequest(BaseModel):
    """Fully assembled description of one HTTP call about to be sent.

    ``method`` is a free-form token so nonstandard verbs pass through.
    ``headers`` holds one value per name; repeated names are never folded.

    :param url: Absolute request URL
    :type url: str
    :param method: HTTP method token
    :type method: str
    :param headers: Request headers
    :type headers: Dict[str, str]
    :param body: Optional encoded body
    :type body: Optional[bytes]
    :param cache_policy: Cache behaviour hint for the transport
    :type cache_policy: CachePolicy
    :param timeout: Timeout in seconds, strictly positive
    :type timeout: float
    """

    model_config = ConfigDict(frozen=True)

    url: str
    method: str = Field("GET", min_length=1)
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[bytes] = None
    cache_policy: CachePolicy = CachePolicy.USE_PROTOCOL_CACHE_POLICY
    timeout: float = Field(60.0, gt=0)

    @field_validator("url", mode="before")
    @classmethod
    def check_absolute_url(cls, v) -> str:
        return str(ensure_absolute_url(v))

    @field_validator("method")
    @classmethod
    def check_method_token(cls, v: str) -> str:
        if any(c.isspace() for c in v):
            raise ValueError("method token must not contain whitespace")
        return v


class ResponseMetadata(BaseModel):
    """HTTP-shaped response metadata returned by a transport.

    :param status_code: Numeric HTTP status code
    :type status_code: int
    :param headers: Response headers
    :type headers: Dict[str, str]
    :param url: Effective response URL
    :type url: Optional[str]
    """

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    url: Optional[str] = None


class RawResponse(BaseModel):
    """Body bytes plus HTTP metadata, as produced by the transport invoker."""

    model_config = ConfigDict(frozen=True)

    body: bytes = b""
    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    url: Optional[str] = None

    @classmethod
    def from_parts(cls, body: bytes, metadata: ResponseMetadata) -> "RawResponse":
        return cls(
            body=body,
            status_code=metadata.status_code,
            headers=dict(metadata.headers),
            url=metadata.url,
        )
