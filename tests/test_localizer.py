"""Tests for Localizer and Preferences."""

from datetime import date
from pathlib import Path

import pytest

from todo_list.localization.localizer import LANGUAGE_KEY, Localizer
from todo_list.store.preferences import THEME_KEY, Preferences
from todo_list.store.storage import MemoryStorage


@pytest.mark.asyncio
async def test_wait_ready_times_out_then_succeeds(locales_dir: Path) -> None:
    """Test startup waits on the ready handle with a timeout instead of polling."""
    localizer = Localizer(locales_dir, MemoryStorage())

    assert await localizer.wait_ready(0.01) is False

    await localizer.init()

    assert localizer.ready
    assert await localizer.wait_ready(0.01) is True


@pytest.mark.asyncio
async def test_translate_dotted_keys(locales_dir: Path) -> None:
    localizer = Localizer(locales_dir, MemoryStorage())
    await localizer.init()

    assert localizer.translate("priority.high") == "High"
    assert localizer.translate("confirm.delete") == "Delete this task?"
    # Missing keys and non-string nodes fall back to the key
    assert localizer.translate("priority.urgent") == "priority.urgent"
    assert localizer.translate("priority") == "priority"


def test_translate_before_load_returns_key(locales_dir: Path) -> None:
    localizer = Localizer(locales_dir, MemoryStorage())
    assert localizer.translate("priority.high") == "priority.high"


def test_detect_language_order(locales_dir: Path) -> None:
    """Test saved choice beats the preferred language, which beats the default."""
    assert Localizer(locales_dir, MemoryStorage()).detect_language("de-AT") == "de"
    assert Localizer(locales_dir, MemoryStorage()).detect_language("xx-YY") == "en"
    saved = MemoryStorage({LANGUAGE_KEY: "ja"})
    assert Localizer(locales_dir, saved).detect_language("de-AT") == "ja"


def test_set_language_persists_and_notifies(locales_dir: Path) -> None:
    storage = MemoryStorage()
    localizer = Localizer(locales_dir, storage)
    changes: list[str] = []
    localizer.add_listener(changes.append)

    assert localizer.set_language("de") is True

    assert localizer.translate("priority.high") == "Hoch"
    assert storage.get_item(LANGUAGE_KEY) == "de"
    assert changes == ["de"]


def test_set_language_rejects_unsupported(locales_dir: Path) -> None:
    localizer = Localizer(locales_dir, MemoryStorage())
    assert localizer.set_language("xx") is False
    assert localizer.current_language == "en"


def test_missing_locale_falls_back_to_english(locales_dir: Path) -> None:
    """Test a language without a file uses the English table."""
    localizer = Localizer(locales_dir, MemoryStorage())
    localizer.set_language("fr")

    table = localizer.load_translations("fr")

    assert table["priority"]["high"] == "High"


def test_reload_picks_up_changed_file(locales_dir: Path) -> None:
    localizer = Localizer(locales_dir, MemoryStorage())
    localizer.set_language("de")
    (locales_dir / "de.json").write_text('{"priority": {"high": "Wichtig"}}')

    localizer.reload("de")

    assert localizer.translate("priority.high") == "Wichtig"


def test_reload_english_while_falling_back_to_it(locales_dir: Path) -> None:
    """Test a changed en.json is reloaded when the active language has no file."""
    localizer = Localizer(locales_dir, MemoryStorage())
    localizer.set_language("fr")
    changes: list[str] = []
    localizer.add_listener(changes.append)
    assert localizer.translate("priority.high") == "High"

    (locales_dir / "en.json").write_text('{"priority": {"high": "Urgent"}}')
    localizer.reload("en")

    assert localizer.translate("priority.high") == "Urgent"
    assert changes == ["fr"]


def test_reload_inactive_language_is_silent(locales_dir: Path) -> None:
    localizer = Localizer(locales_dir, MemoryStorage())
    localizer.set_language("en")
    changes: list[str] = []
    localizer.add_listener(changes.append)

    localizer.reload("de")

    assert changes == []
    assert localizer.translate("priority.high") == "High"


def test_format_date(locales_dir: Path) -> None:
    localizer = Localizer(locales_dir, MemoryStorage())
    localizer.set_language("en")
    assert localizer.format_date(date(2024, 3, 5)) == "Mar 5, 2024"

    localizer.set_language("de")
    assert localizer.format_date(date(2024, 3, 5)) == "März 5, 2024"


def test_theme_preferences() -> None:
    """Test theme defaults to dark, toggles and persists."""
    storage = MemoryStorage()
    preferences = Preferences(storage)

    assert preferences.theme == "dark"
    assert preferences.toggle_theme() == "light"
    assert storage.get_item(THEME_KEY) == "light"
    assert preferences.toggle_theme() == "dark"

    with pytest.raises(ValueError):
        preferences.set_theme("blue")
