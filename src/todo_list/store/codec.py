"""Serialization of the task collection to and from storage."""

from datetime import date, datetime, timezone
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from todo_list.errors import PersistenceCorruptError
from todo_list.store.models import Category, Priority, Task


class TaskRecord(BaseModel):
    """Stored shape of a task (camelCase field names)."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    category: Category = Category.PERSONAL
    due_date: date | None = Field(default=None, alias="dueDate")
    notes: str = ""
    created_at: datetime = Field(alias="createdAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")

    @field_validator("due_date", "completed_at", mode="before")
    @classmethod
    def _empty_as_none(cls, value: Any) -> Any:
        # Older records store a missing due date as ""
        if value == "":
            return None
        return value

    @field_validator("notes", mode="before")
    @classmethod
    def _notes_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("created_at", "completed_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_task(cls, task: Task) -> "TaskRecord":
        return cls(
            id=task.id,
            title=task.title,
            completed=task.completed,
            priority=task.priority,
            category=task.category,
            due_date=task.due_date,
            notes=task.notes,
            created_at=task.created_at,
            completed_at=task.completed_at,
        )

    def to_task(self) -> Task:
        """Convert to a Task, restoring the completed/completed_at invariant."""
        completed_at = self.completed_at
        if self.completed and completed_at is None:
            completed_at = self.created_at
        elif not self.completed:
            completed_at = None
        return Task(
            id=self.id,
            title=self.title,
            completed=self.completed,
            priority=self.priority,
            category=self.category,
            due_date=self.due_date,
            notes=self.notes,
            created_at=self.created_at,
            completed_at=completed_at,
        )


_collection_adapter = TypeAdapter(list[TaskRecord])


def encode_tasks(tasks: list[Task]) -> str:
    """Serialize tasks to the JSON blob stored under the "todos" key."""
    records = [TaskRecord.from_task(task) for task in tasks]
    return _collection_adapter.dump_json(records, by_alias=True).decode("utf-8")


def decode_tasks(raw: str) -> list[Task]:
    """Parse a stored JSON blob into tasks.

    Raises:
        PersistenceCorruptError: If the blob is not valid JSON or a record is malformed
    """
    try:
        records = _collection_adapter.validate_json(raw)
    except pydantic.ValidationError as e:
        message = f"Stored tasks are unreadable: {e.error_count()} error(s)"
        raise PersistenceCorruptError(message) from e

    tasks = [record.to_task() for record in records]
    ids = [task.id for task in tasks]
    if len(ids) != len(set(ids)):
        raise PersistenceCorruptError("Stored tasks contain duplicate ids")
    return tasks
