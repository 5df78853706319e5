"""Offline cache controller: install/activate/fetch lifecycle over one cache bucket."""

import asyncio
import logging
from collections.abc import Awaitable
from enum import Enum
from typing import Any

from todo_list.errors import NetworkFailureError
from todo_list.offline.cache_storage import Cache, CacheStorage
from todo_list.offline.fetcher import Fetcher
from todo_list.offline.manifest import AssetManifest
from todo_list.offline.messages import Request, Response
from todo_list.offline.strategies import STRATEGIES, CacheStrategy

logger = logging.getLogger(__name__)

SKIP_WAITING = "SKIP_WAITING"


class ControllerState(str, Enum):
    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"  # Waiting to activate
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class FetchEvent:
    """An intercepted request plus the work that must finish before it is done."""

    def __init__(self, request: Request) -> None:
        self.request = request
        self._pending: list[asyncio.Future[Any]] = []

    def wait_until(self, work: Awaitable[Any]) -> None:
        """Extend the event until work completes."""
        self._pending.append(asyncio.ensure_future(work))

    async def settled(self) -> None:
        """Wait for all extending work; failures are logged, never raised."""
        if not self._pending:
            return
        results = await asyncio.gather(*self._pending, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                logger.error(f"[FetchEvent] Deferred work failed for {self.request.url}: {result}")


class CacheController:
    """Request-interception proxy for one cache version.

    Lifecycle: install() populates the bucket named after the version,
    activate() evicts buckets of other versions, then handle_fetch() answers
    in-scope GET requests using the configured strategy.
    """

    def __init__(
        self,
        version: str,
        manifest: AssetManifest,
        caches: CacheStorage,
        fetcher: Fetcher,
        strategy: CacheStrategy = CacheStrategy.CACHE_FIRST,
        skip_waiting_on_install: bool = True,
    ) -> None:
        """Initialize controller for a cache version."""
        self.version = version
        self.manifest = manifest
        self.strategy = CacheStrategy(strategy)
        self.state = ControllerState.PARSED
        self.skip_waiting_requested = False
        self.claimed_clients = False
        self._skip_waiting_on_install = skip_waiting_on_install
        self._caches = caches
        self._fetcher = fetcher
        self._resolve = STRATEGIES[self.strategy]

    @property
    def scope(self) -> str:
        return self.manifest.scope

    def _cache(self) -> Cache:
        return self._caches.open(self.version)

    def skip_waiting(self) -> None:
        """Ask to activate without waiting for older controllers' clients."""
        self.skip_waiting_requested = True

    async def install(self) -> None:
        """Populate the cache with core assets and locale files.

        If the full set cannot be cached, retries with core assets only.

        Raises:
            NetworkFailureError: If even the core assets cannot be cached
        """
        self.state = ControllerState.INSTALLING
        if self._skip_waiting_on_install:
            # Readiness is signalled straight away, not after the cache fills
            self.skip_waiting()

        cache = self._cache()
        core = self.manifest.core_requests()
        try:
            await cache.add_all(core + self.manifest.locale_requests(), self._fetcher)
        except NetworkFailureError as e:
            logger.error(f"[CacheController] {self.version}: caching all assets failed: {e}")
            try:
                await cache.add_all(core, self._fetcher)
            except NetworkFailureError:
                self._caches.delete(self.version)
                self.state = ControllerState.REDUNDANT
                raise

        self.state = ControllerState.INSTALLED
        logger.info(f"[CacheController] {self.version}: installed ({len(cache.keys())} entries)")

    async def activate(self) -> None:
        """Delete every cache bucket that is not this version and claim clients."""
        self.state = ControllerState.ACTIVATING
        for name in self._caches.keys():
            if name != self.version:
                self._caches.delete(name)
                logger.info(f"[CacheController] Deleted old cache: {name}")
        self.claimed_clients = True
        self.state = ControllerState.ACTIVATED
        logger.info(f"[CacheController] {self.version}: activated ({self.strategy.value})")

    def in_scope(self, request: Request) -> bool:
        return request.path.startswith(self.scope)

    async def handle_fetch(self, event: FetchEvent) -> Response | None:
        """Answer an intercepted request.

        Returns:
            The response, or None if the request is not handled (non-GET or out of scope)
        """
        request = event.request
        if request.method.upper() != "GET":
            return None
        if not self.in_scope(request):
            return None
        fallback = Request(self.manifest.fallback_url)
        return await self._resolve(event, self._cache(), self._fetcher, fallback)

    def on_message(self, data: Any) -> None:
        """Handle a control message from a client."""
        if isinstance(data, dict) and data.get("type") == SKIP_WAITING:
            logger.info(f"[CacheController] {self.version}: skip waiting requested")
            self.skip_waiting()
