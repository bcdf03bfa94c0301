"""URL building for the request pipeline.

The path is resolved against the base following RFC 3986 relative
resolution, so ``/users`` replaces the base path while ``users`` resolves
against the base directory. The query, when given, replaces whatever
query the resolved URL had and keeps every pair in order.
"""

import logging
from typing import Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlencode

import httpx

from ..exceptions import BadURLError
from .models import ensure_absolute_url

logger = logging.getLogger(__name__)

QueryInput = Union[Mapping[str, str], Iterable[Tuple[str, str]]]

# RFC 3986 pchar plus "/"; "%" is encoded so the path is taken literally.
_PATH_SAFE = "/:@!$&'()*+,;="


def normalize_query(query: Optional[QueryInput]) -> Optional[Tuple[Tuple[str, str], ...]]:
    """Turn a mapping or pair sequence into an ordered tuple of pairs.

    :param query: Mapping or iterable of ``(name, value)`` pairs
    :return: Tuple of pairs, or None when no query was given
    :raises BadURLError: If a pair is malformed or holds a None value
    """
    if query is None:
        return None
    items = query.items() if isinstance(query, Mapping) else query
    pairs = []
    for item in items:
        try:
            name, value = item
        except (TypeError, ValueError) as e:
            raise BadURLError(f"Malformed query item: {item!r}") from e
        if name is None or value is None:
            raise BadURLError(f"Query item has no value: {item!r}")
        pairs.append((str(name), str(value)))
    return tuple(pairs)


def build_url(
    base_url: Union[str, httpx.URL],
    path: Optional[str] = None,
    query: Optional[QueryInput] = None,
) -> httpx.URL:
    """Combine base URL, path and query into one absolute URL.

    :param base_url: Absolute base URL
    :type base_url: Union[str, httpx.URL]
    :param path: Optional path, percent-encoded for the path context
    :type path: Optional[str]
    :param query: Optional ordered query pairs; duplicate names are kept
    :type query: Optional[QueryInput]
    :return: The resolved absolute URL
    :rtype: httpx.URL
    :raises BadURLError: If the result is not a valid absolute URL
    """
    base = ensure_absolute_url(base_url)
    pairs = normalize_query(query)
    # Lone surrogates in path or query surface as UnicodeEncodeError.
    try:
        url = base
        if path is not None:
            url = base.join(quote(path, safe=_PATH_SAFE))
        if pairs is not None:
            # QueryParams groups values by name, so encode the pairs directly.
            encoded = urlencode(pairs, quote_via=quote)
            url = url.copy_with(query=encoded.encode("ascii") if encoded else None)
    except (httpx.InvalidURL, UnicodeError, TypeError, ValueError) as e:
        raise BadURLError(f"Could not build URL: {e}", url=str(base)) from e

    if not url.is_absolute_url or not url.host:
        raise BadURLError("Resolved URL is not absolute", url=str(url))
    logger.debug("Built URL %s", url)
    return url
