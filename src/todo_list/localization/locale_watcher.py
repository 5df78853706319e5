"""File system watcher for locale files."""

import logging
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


class LocaleWatcher:
    """Watches the locale directory and reports changed languages."""

    def __init__(self, locales_dir: Path):
        """Initialize watcher.

        Args:
            locales_dir: Directory holding <language>.json files
        """
        self.locales_dir = locales_dir
        self._observer: BaseObserver | None = None
        self._callback: Callable[[str], None] | None = None

    def set_callback(self, callback: Callable[[str], None]) -> None:
        """Set callback(language) called when a locale file changes."""
        self._callback = callback

    def start(self) -> None:
        """Start the observer thread."""
        handler = _LocaleEventHandler(self._callback)
        self._observer = Observer()
        self._observer.schedule(handler, str(self.locales_dir), recursive=False)
        self._observer.daemon = True
        self._observer.start()
        logger.info(f"[LocaleWatcher] Watching {self.locales_dir}")

    def stop(self) -> None:
        if self._observer:
            logger.info("[LocaleWatcher] Stopping")
            self._observer.stop()
            self._observer.join(timeout=2)
            self._observer = None


class _LocaleEventHandler(FileSystemEventHandler):
    """Internal handler translating file events into language codes."""

    def __init__(self, callback: Callable[[str], None] | None):
        self.callback = callback

    def _handle_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return

        src_path = event.src_path
        if isinstance(src_path, bytes):
            src_path = src_path.decode("utf-8")

        path = Path(src_path)
        if path.suffix != ".json":
            return

        logger.debug(f"[LocaleEventHandler] changed: {path.name}")
        if self.callback:
            try:
                self.callback(path.stem)
            except Exception as e:
                logger.error(f"[LocaleEventHandler] Callback error: {e}", exc_info=True)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event(event)
