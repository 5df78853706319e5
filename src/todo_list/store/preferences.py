"""Display preferences kept alongside the tasks."""

import logging

from todo_list.store.storage import KeyValueStorage

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
THEMES = ("dark", "light")


class Preferences:
    """Theme preference (dark by default)."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    @property
    def theme(self) -> str:
        saved = self._storage.get_item(THEME_KEY)
        return saved if saved in THEMES else "dark"

    def set_theme(self, theme: str) -> None:
        """Persist theme.

        Raises:
            ValueError: If theme is not "dark" or "light"
        """
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self._storage.set_item(THEME_KEY, theme)

    def toggle_theme(self) -> str:
        new_theme = "light" if self.theme == "dark" else "dark"
        self.set_theme(new_theme)
        logger.debug(f"[Preferences] Theme -> {new_theme}")
        return new_theme
