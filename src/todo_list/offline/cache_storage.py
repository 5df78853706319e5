"""Named, versioned cache buckets of request -> response pairs."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from todo_list.errors import NetworkFailureError
from todo_list.offline.messages import Request, Response

if TYPE_CHECKING:
    from todo_list.offline.fetcher import Fetcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StoredResponse:
    status: int
    status_text: str
    headers: dict[str, str]
    body: bytes

    def to_response(self) -> Response:
        # Fresh object per match: every caller gets its own unread body
        return Response(
            body=self.body,
            status=self.status,
            headers=self.headers,
            status_text=self.status_text,
        )


class Cache:
    """A single cache bucket."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: dict[str, _StoredResponse] = {}

    def match(self, request: Request) -> Response | None:
        """Return the stored response for request, or None."""
        stored = self._entries.get(request.cache_key)
        return stored.to_response() if stored else None

    def put(self, request: Request, response: Response) -> None:
        """Store response under request, consuming its body.

        Later puts for the same request overwrite earlier ones.
        """
        body = response.read()
        self._entries[request.cache_key] = _StoredResponse(
            status=response.status,
            status_text=response.status_text,
            headers=dict(response.headers),
            body=body,
        )

    def keys(self) -> list[str]:
        return list(self._entries)

    async def add_all(self, requests: Iterable[Request], fetcher: "Fetcher") -> None:
        """Fetch every request and store all responses, or none of them.

        Raises:
            NetworkFailureError: If any fetch fails or returns a non-200 status
        """
        requests = list(requests)
        responses = await asyncio.gather(
            *(fetcher.fetch(request) for request in requests), return_exceptions=True
        )

        for request, response in zip(requests, responses, strict=True):
            if isinstance(response, BaseException):
                message = f"Failed to fetch {request.url}: {response}"
                raise NetworkFailureError(message) from response
            if not response.ok:
                raise NetworkFailureError(f"Bad response for {request.url}: {response.status}")

        for request, response in zip(requests, responses, strict=True):
            self.put(request, response)
        logger.debug(f"[Cache] {self.name}: stored {len(requests)} entries")


class CacheStorage:
    """Registry of named cache buckets."""

    def __init__(self) -> None:
        self._caches: dict[str, Cache] = {}

    def open(self, name: str) -> Cache:
        """Return the bucket called name, creating it if needed."""
        cache = self._caches.get(name)
        if cache is None:
            cache = Cache(name)
            self._caches[name] = cache
        return cache

    def delete(self, name: str) -> bool:
        return self._caches.pop(name, None) is not None

    def keys(self) -> list[str]:
        return list(self._caches)
