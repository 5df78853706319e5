"""Key-value storage backends (browser localStorage equivalent)."""

import json
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Protocol for string key-value storage.

    corrupt is True when previously saved data could not be read and the
    backend started empty.
    """

    corrupt: bool

    def get_item(self, key: str) -> str | None:
        """Return stored value or None if the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        ...


class MemoryStorage:
    """Volatile storage, used in tests and as a fallback."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})
        self.corrupt = False

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """Storage backed by a single JSON object on disk.

    Every write rewrites the whole file (write to temp file, then rename),
    so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize storage, reading existing items from path.

        An unreadable file is moved aside to <path>.corrupt and the storage
        starts empty with corrupt set.
        """
        self._path = Path(path)
        self.corrupt = False
        self._items: dict[str, str] = self._read()

    @property
    def corrupt_path(self) -> Path:
        return self._path.with_suffix(self._path.suffix + ".corrupt")

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"[JsonFileStorage] Unreadable storage file {self._path}: {e}")
            self._quarantine()
            return {}
        if not isinstance(data, dict):
            logger.error(f"[JsonFileStorage] Storage file {self._path} is not an object")
            self._quarantine()
            return {}
        # Values are opaque strings, same as localStorage
        return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in data.items()}

    def _quarantine(self) -> None:
        self.corrupt = True
        try:
            os.replace(self._path, self.corrupt_path)
            logger.warning(f"[JsonFileStorage] Moved unreadable file to {self.corrupt_path}")
        except OSError as e:
            logger.error(f"[JsonFileStorage] Could not move {self._path} aside: {e}")

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._items, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()
