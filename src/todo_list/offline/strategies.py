"""Policies for answering a request from cache and network."""

import logging
from enum import Enum
from typing import TYPE_CHECKING

from todo_list.errors import NetworkFailureError
from todo_list.offline.messages import Request, Response

if TYPE_CHECKING:
    from todo_list.offline.cache_storage import Cache
    from todo_list.offline.controller import FetchEvent
    from todo_list.offline.fetcher import Fetcher

logger = logging.getLogger(__name__)


class CacheStrategy(str, Enum):
    CACHE_FIRST = "cache-first"
    NETWORK_FIRST = "network-first"


def _store_copy(event: "FetchEvent", cache: "Cache", response: Response) -> Response:
    """Clone a successful response into the cache and return the original.

    The cache write is registered on the event so the host keeps it alive
    after the response has been handed back.
    """
    copy = response.clone()

    async def write() -> None:
        cache.put(event.request, copy)

    event.wait_until(write())
    return response


async def cache_first(
    event: "FetchEvent", cache: "Cache", fetcher: "Fetcher", fallback: Request
) -> Response:
    """Serve from cache; on miss fetch and cache; offline placeholder as last resort."""
    cached = cache.match(event.request)
    if cached is not None:
        return cached

    try:
        response = await fetcher.fetch(event.request)
    except NetworkFailureError as e:
        logger.info(f"[cache-first] Offline, no cache for {event.request.url}: {e}")
        return Response.offline_placeholder()

    if not response.ok:
        # Pass errors through uncached
        return response
    return _store_copy(event, cache, response)


async def network_first(
    event: "FetchEvent", cache: "Cache", fetcher: "Fetcher", fallback: Request
) -> Response:
    """Fetch from network and refresh the cache; fall back to cache, then root document."""
    try:
        response = await fetcher.fetch(event.request)
    except NetworkFailureError as e:
        logger.info(f"[network-first] Network failed for {event.request.url}: {e}")
        cached = cache.match(event.request)
        if cached is not None:
            return cached
        document = cache.match(fallback)
        if document is not None:
            return document
        return Response.offline_placeholder()

    if not response.ok:
        return response
    return _store_copy(event, cache, response)


STRATEGIES = {
    CacheStrategy.CACHE_FIRST: cache_first,
    CacheStrategy.NETWORK_FIRST: network_first,
}
