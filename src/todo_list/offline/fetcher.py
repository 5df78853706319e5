"""Network access for the cache controller."""

import logging
from typing import Protocol

import httpx

from todo_list.errors import NetworkFailureError
from todo_list.offline.messages import Request, Response

logger = logging.getLogger(__name__)

# httpx already decoded the body, these no longer describe it
_DROPPED_HEADERS = {"content-encoding", "content-length", "transfer-encoding", "connection"}


class Fetcher(Protocol):
    """Protocol for fetching a request from the network."""

    async def fetch(self, request: Request) -> Response:
        """Fetch request.

        Raises:
            NetworkFailureError: If the network is unreachable
        """
        ...


class HttpxFetcher:
    """Fetcher that forwards requests to an upstream origin."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize with a client whose base_url points at the upstream origin."""
        self._client = client

    async def fetch(self, request: Request) -> Response:
        try:
            upstream = await self._client.request(
                request.method,
                request.url,
                headers=request.headers or None,
                content=request.body or None,
            )
        except httpx.TransportError as e:
            logger.debug(f"[HttpxFetcher] {request.method} {request.url} failed: {e}")
            raise NetworkFailureError(f"{request.method} {request.url}: {e}") from e

        headers = {
            name: value
            for name, value in upstream.headers.items()
            if name.lower() not in _DROPPED_HEADERS
        }
        return Response(
            body=upstream.content,
            status=upstream.status_code,
            headers=headers,
            status_text=upstream.reason_phrase,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
