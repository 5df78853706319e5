"""Dependency injection factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Coroutine
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
from fastapi import FastAPI

from todo_list.config import Config
from todo_list.localization.locale_watcher import LocaleWatcher
from todo_list.localization.localizer import Localizer
from todo_list.offline.cache_storage import CacheStorage
from todo_list.offline.controller import CacheController
from todo_list.offline.fetcher import Fetcher, HttpxFetcher
from todo_list.offline.manifest import AssetManifest
from todo_list.offline.registry import ControllerRegistry
from todo_list.store.models import Task
from todo_list.store.preferences import Preferences
from todo_list.store.storage import JsonFileStorage, KeyValueStorage
from todo_list.store.task_store import TaskStore
from todo_list.websocket.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

# Global instances for dependency injection
_config: Config | None = None
_storage: KeyValueStorage | None = None
_task_store: TaskStore | None = None
_preferences: Preferences | None = None
_localizer: Localizer | None = None
_connection_manager: ConnectionManager | None = None
_cache_storage: CacheStorage | None = None
_registry: ControllerRegistry | None = None
_fetcher: Fetcher | None = None
_locale_watcher: LocaleWatcher | None = None

# Strong references to fire-and-forget broadcasts
_background_tasks: set[asyncio.Task[None]] = set()


def get_config() -> Config:
    """Get or create Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_storage() -> KeyValueStorage:
    """Get or create the key-value storage."""
    global _storage
    if _storage is None:
        path = Path(get_config().storage_path).expanduser()
        _storage = JsonFileStorage(path)
        logger.info(f"[Factory] Storage at {path}")
    return _storage


def _schedule(coro: Coroutine[Any, Any, None]) -> None:
    """Run coro on the current event loop without awaiting it."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        coro.close()
        logger.debug("[Factory] No running event loop, event not broadcast")
        return
    task = loop.create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


def get_task_store() -> TaskStore:
    """Get or create the TaskStore singleton (loaded on first use)."""
    global _task_store
    if _task_store is None:
        store = TaskStore(get_storage())
        store.load()

        manager = get_connection_manager()

        def on_store_event(event: str, task: Task | None) -> None:
            if task is None:
                _schedule(manager.publish(event))
            else:
                _schedule(manager.publish(event, task_id=task.id))

        store.add_listener(on_store_event)
        _task_store = store
    return _task_store


def get_preferences() -> Preferences:
    """Get or create Preferences singleton."""
    global _preferences
    if _preferences is None:
        _preferences = Preferences(get_storage())
    return _preferences


def get_localizer() -> Localizer:
    """Get or create Localizer singleton."""
    global _localizer
    if _localizer is None:
        config = get_config()
        localizer = Localizer(config.locales_dir, get_storage(), config.default_language)
        manager = get_connection_manager()
        localizer.add_listener(
            lambda language: _schedule(manager.publish("languageChanged", language=language))
        )
        _localizer = localizer
    return _localizer


def get_connection_manager() -> ConnectionManager:
    """Get or create ConnectionManager singleton."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager


def get_cache_storage() -> CacheStorage:
    """Get or create CacheStorage singleton."""
    global _cache_storage
    if _cache_storage is None:
        _cache_storage = CacheStorage()
    return _cache_storage


def get_registry() -> ControllerRegistry:
    """Get or create ControllerRegistry singleton."""
    global _registry
    if _registry is None:
        _registry = ControllerRegistry()
    return _registry


def get_fetcher() -> Fetcher:
    """Get or create the upstream fetcher."""
    global _fetcher
    if _fetcher is None:
        config = get_config()
        client = httpx.AsyncClient(base_url=config.upstream_url, timeout=config.fetch_timeout)
        _fetcher = HttpxFetcher(client)
    return _fetcher


def get_manifest() -> AssetManifest:
    """Load the asset manifest (YAML file if configured, else built-in defaults)."""
    config = get_config()
    if config.manifest_path:
        return AssetManifest.from_yaml(config.manifest_path, config.scope)
    return AssetManifest.default(config.scope)


def create_cache_controller(version: str | None = None) -> CacheController:
    """Create a controller for version (manifest or configured cache name by default)."""
    config = get_config()
    manifest = get_manifest()
    return CacheController(
        version=version or manifest.version or config.cache_name,
        manifest=manifest,
        caches=get_cache_storage(),
        fetcher=get_fetcher(),
        strategy=config.cache_strategy,
        skip_waiting_on_install=config.skip_waiting_on_install,
    )


def start_locale_watcher() -> None:
    """Reload locale files when they change on disk."""
    global _locale_watcher
    config = get_config()
    locales_dir = Path(config.locales_dir)
    if not locales_dir.exists():
        logger.warning(f"[Factory] Locale folder not found: {locales_dir}")
        return

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.error("[Factory] No running event loop found")
        return

    localizer = get_localizer()

    def callback(language: str) -> None:
        # Called from the watchdog thread
        loop.call_soon_threadsafe(localizer.reload, language)

    watcher = LocaleWatcher(locales_dir)
    watcher.set_callback(callback)
    watcher.start()
    _locale_watcher = watcher


def stop_locale_watcher() -> None:
    global _locale_watcher
    if _locale_watcher is not None:
        try:
            _locale_watcher.stop()
        except Exception as e:
            logger.error(f"[Factory] Failed to stop locale watcher: {e}")
        _locale_watcher = None


async def close_fetcher() -> None:
    """Close the upstream HTTP client."""
    global _fetcher
    if isinstance(_fetcher, HttpxFetcher):
        await _fetcher.aclose()
        _fetcher = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    config = get_config()

    logger.info("[Lifespan] Loading translations...")
    localizer = get_localizer()
    init_task = asyncio.create_task(localizer.init())
    _background_tasks.add(init_task)
    init_task.add_done_callback(_background_tasks.discard)
    await localizer.wait_ready(config.i18n_ready_timeout)

    logger.info("[Lifespan] Loading tasks...")
    get_task_store()

    logger.info("[Lifespan] Installing offline cache...")
    await get_registry().register(create_cache_controller())

    if config.watch_locales:
        start_locale_watcher()
    try:
        yield
    finally:
        stop_locale_watcher()
        await close_fetcher()


def create_app() -> FastAPI:
    """Create FastAPI application (composition root)."""
    from todo_list.api.offline import router as offline_router
    from todo_list.api.offline import serve_asset
    from todo_list.api.preferences import router as preferences_router
    from todo_list.api.todos import router as todos_router
    from todo_list.api.websocket import router as ws_router

    config = get_config()

    app = FastAPI(
        title="todo-list",
        description="Task list with offline asset cache",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(todos_router, prefix="/api")
    app.include_router(preferences_router, prefix="/api")
    app.include_router(offline_router, prefix="/api")
    app.include_router(ws_router)  # WebSocket at /ws

    # Intercepted application assets; non-GET requests pass through to the upstream
    app.add_api_route(
        config.scope + "{path:path}",
        serve_asset,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    )

    return app
