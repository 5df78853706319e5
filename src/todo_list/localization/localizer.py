"""Translation lookup and date formatting for the presentation layer."""

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

from todo_list.offline.manifest import SUPPORTED_LANGUAGES
from todo_list.store.storage import KeyValueStorage

logger = logging.getLogger(__name__)

LANGUAGE_KEY = "selectedLanguage"
DEFAULT_LANGUAGE = "en"

_ENGLISH_MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


class Localizer:
    """Loads locale JSON files and translates dotted keys.

    Startup code awaits wait_ready() instead of polling for the language pack.
    """

    def __init__(
        self,
        locales_dir: str | Path,
        storage: KeyValueStorage,
        default_language: str = DEFAULT_LANGUAGE,
    ) -> None:
        """Initialize localizer; translations load in init()."""
        self._locales_dir = Path(locales_dir)
        self._storage = storage
        self._default_language = default_language
        self._translations: dict[str, dict[str, Any]] = {}
        self._listeners: list[Callable[[str], None]] = []
        self._ready = asyncio.Event()
        self.current_language = self.detect_language()

    def detect_language(self, preferred: str | None = None) -> str:
        """Pick the language: saved choice, then preferred (e.g. "de-AT"), then default."""
        saved = self._storage.get_item(LANGUAGE_KEY)
        if saved in SUPPORTED_LANGUAGES:
            return saved
        if preferred:
            primary = preferred.split("-")[0].lower()
            if primary in SUPPORTED_LANGUAGES:
                return primary
        return self._default_language

    def add_listener(self, listener: Callable[[str], None]) -> None:
        """Register callback(language) fired when the active language changes."""
        self._listeners.append(listener)

    def _emit(self, language: str) -> None:
        for listener in self._listeners:
            try:
                listener(language)
            except Exception as e:
                logger.error(f"[Localizer] Listener error: {e}", exc_info=True)

    def load_translations(self, language: str) -> dict[str, Any]:
        """Load a locale file, falling back to English and then to an empty table."""
        if language in self._translations:
            return self._translations[language]

        path = self._locales_dir / f"{language}.json"
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("locale file must contain an object")
        except (OSError, ValueError) as e:
            logger.error(f"[Localizer] Error loading language {language}: {e}")
            if language != DEFAULT_LANGUAGE:
                return self.load_translations(DEFAULT_LANGUAGE)
            return {}

        self._translations[language] = data
        return data

    async def init(self) -> None:
        """Load the current language and mark the localizer ready."""
        await asyncio.to_thread(self.load_translations, self.current_language)
        self._ready.set()
        logger.info(f"[Localizer] Ready ({self.current_language})")

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    async def wait_ready(self, timeout: float) -> bool:
        """Wait until init() finished, at most timeout seconds.

        Returns:
            True if ready, False if the timeout expired (callers proceed untranslated)
        """
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"[Localizer] Not ready after {timeout}s, continuing")
            return False

    def _table(self) -> dict[str, Any] | None:
        # Languages without a file use the English table
        table = self._translations.get(self.current_language)
        if table is None:
            table = self._translations.get(DEFAULT_LANGUAGE)
        return table

    def translate(self, key: str) -> str:
        """Look up a dotted key ("priority.high"); returns the key when missing."""
        value: Any = self._table()
        if value is None:
            return key
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return key
        return value if isinstance(value, str) else key

    def set_language(self, language: str) -> bool:
        """Switch language, persist the choice and notify listeners."""
        if language not in SUPPORTED_LANGUAGES:
            logger.warning(f"[Localizer] Language {language} not supported")
            return False

        self.load_translations(language)
        self.current_language = language
        self._storage.set_item(LANGUAGE_KEY, language)
        self._emit(language)
        return True

    def reload(self, language: str) -> None:
        """Drop the cached table for language and reload it if it is in use.

        English is in use when it is active or when the active language has
        no table of its own.
        """
        self._translations.pop(language, None)
        is_fallback = (
            language == DEFAULT_LANGUAGE and self.current_language not in self._translations
        )
        if language == self.current_language or is_fallback:
            self.load_translations(language)
            self._emit(self.current_language)

    def format_date(self, value: date) -> str:
        """Medium date ("Mar 5, 2024"), month names from the locale when provided."""
        months = (self._table() or {}).get("date", {}).get("months")
        if not isinstance(months, list) or len(months) != 12:
            months = _ENGLISH_MONTHS
        return f"{months[value.month - 1]} {value.day}, {value.year}"
