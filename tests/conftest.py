"""Test fixtures for todo-list."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from fakes import FakeClock, FakeUpstream
from todo_list.offline.cache_storage import CacheStorage
from todo_list.offline.fetcher import HttpxFetcher
from todo_list.offline.manifest import CORE_ASSETS, SUPPORTED_LANGUAGES, AssetManifest
from todo_list.store.storage import MemoryStorage
from todo_list.store.task_store import TaskStore

SCOPE = "/todo-list/"


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at Wednesday 2024-01-03 12:00 UTC."""
    return FakeClock(datetime(2024, 1, 3, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage() -> MemoryStorage:
    """Storage holding an empty task collection."""
    return MemoryStorage({"todos": "[]"})


@pytest.fixture
def store(storage: MemoryStorage, clock: FakeClock) -> TaskStore:
    """Loaded, empty task store."""
    task_store = TaskStore(storage, clock)
    task_store.load()
    return task_store


@pytest.fixture
def manifest() -> AssetManifest:
    return AssetManifest.default(SCOPE)


@pytest.fixture
def upstream() -> FakeUpstream:
    """Upstream origin serving every manifest asset and locale file."""
    assets = {SCOPE + path: f"asset {path}".encode() for path in CORE_ASSETS}
    for lang in SUPPORTED_LANGUAGES:
        assets[f"{SCOPE}js/locales/{lang}.json"] = json.dumps({"lang": lang}).encode()
    return FakeUpstream(assets=assets)


@pytest.fixture
def fetcher(upstream: FakeUpstream) -> HttpxFetcher:
    return HttpxFetcher(upstream.client())


@pytest.fixture
def caches() -> CacheStorage:
    return CacheStorage()


@pytest.fixture
def locales_dir(tmp_path: Path) -> Path:
    """Locale folder with English and German tables."""
    locales = tmp_path / "locales"
    locales.mkdir()
    (locales / "en.json").write_text(
        json.dumps(
            {
                "priority": {"high": "High", "medium": "Medium", "low": "Low"},
                "confirm": {"delete": "Delete this task?"},
            }
        )
    )
    (locales / "de.json").write_text(
        json.dumps(
            {
                "priority": {"high": "Hoch"},
                "date": {
                    "months": [
                        "Jan.", "Feb.", "März", "Apr.", "Mai", "Juni",
                        "Juli", "Aug.", "Sept.", "Okt.", "Nov.", "Dez.",
                    ]
                },
            }
        )
    )
    return locales
