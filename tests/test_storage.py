"""Tests for storage backends and task serialization."""

import json
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from todo_list.errors import PersistenceCorruptError
from todo_list.store.codec import decode_tasks, encode_tasks
from todo_list.store.models import Priority, Task
from todo_list.store.storage import JsonFileStorage


def test_json_file_storage_persists_across_instances(tmp_path: Path) -> None:
    """Test values written by one instance are read by the next."""
    path = tmp_path / "data" / "storage.json"
    storage = JsonFileStorage(path)
    storage.set_item("theme", "light")
    storage.set_item("todos", "[]")

    reopened = JsonFileStorage(path)

    assert reopened.get_item("theme") == "light"
    assert reopened.get_item("todos") == "[]"
    assert reopened.get_item("missing") is None


def test_json_file_storage_remove(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    storage = JsonFileStorage(path)
    storage.set_item("theme", "dark")
    storage.remove_item("theme")

    assert JsonFileStorage(path).get_item("theme") is None


def test_json_file_storage_unreadable_file_starts_empty(tmp_path: Path) -> None:
    """Test a garbage storage file does not prevent startup and is kept aside."""
    path = tmp_path / "storage.json"
    path.write_text("garbage")

    storage = JsonFileStorage(path)

    assert storage.get_item("todos") is None
    assert storage.corrupt is True
    assert not path.exists()
    assert (tmp_path / "storage.json.corrupt").read_text() == "garbage"


def test_json_file_storage_non_object_is_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("[1, 2]")

    assert JsonFileStorage(path).corrupt is True


def test_json_file_storage_missing_file_is_not_corrupt(tmp_path: Path) -> None:
    assert JsonFileStorage(tmp_path / "storage.json").corrupt is False


def test_encode_uses_stored_field_names() -> None:
    """Test the stored record shape uses camelCase keys."""
    created = datetime(2024, 1, 3, 12, 0, tzinfo=timezone.utc)
    task = Task(id=1, title="A", created_at=created, due_date=date(2024, 1, 4))

    record = json.loads(encode_tasks([task]))[0]

    assert set(record) == {
        "id", "title", "completed", "priority", "category",
        "dueDate", "notes", "createdAt", "completedAt",
    }
    assert record["dueDate"] == "2024-01-04"
    assert record["priority"] == "medium"
    assert record["completedAt"] is None


def test_decode_normalizes_completion_invariant() -> None:
    """Test completedAt is filled for completed records and cleared otherwise."""
    raw = json.dumps(
        [
            {"id": 1, "title": "a", "completed": True, "createdAt": "2024-01-01T00:00:00Z"},
            {"id": 2, "title": "b", "completed": False, "createdAt": "2024-01-01T00:00:00Z",
             "completedAt": "2024-01-02T00:00:00Z"},
        ]
    )

    first, second = decode_tasks(raw)

    assert first.completed_at == first.created_at
    assert second.completed_at is None


def test_decode_defaults_missing_fields() -> None:
    raw = json.dumps([{"id": 1, "title": "a", "createdAt": "2024-01-01T00:00:00", "notes": None}])

    (task,) = decode_tasks(raw)

    assert task.priority == Priority.MEDIUM
    assert task.notes == ""
    assert task.created_at.tzinfo is not None


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        '{"id": 1}',
        '[{"id": 1, "title": "a"}]',
        '[{"id": 1, "title": "a", "createdAt": "2024-01-01T00:00:00Z", "priority": "urgent"}]',
        '[{"id": 1, "title": "a", "createdAt": "2024-01-01T00:00:00Z"},'
        ' {"id": 1, "title": "b", "createdAt": "2024-01-01T00:00:00Z"}]',
    ],
)
def test_decode_rejects_corrupt_data(raw: str) -> None:
    with pytest.raises(PersistenceCorruptError):
        decode_tasks(raw)
