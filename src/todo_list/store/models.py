"""Domain models for the task store."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from todo_list.errors import TodoListError


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Category(str, Enum):
    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    LEARNING = "learning"


class StatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    TODAY = "today"
    WEEK = "week"


@dataclass
class Task:
    """Single to-do record."""

    id: int  # Creation time in milliseconds, bumped on collision
    title: str
    created_at: datetime
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    category: Category = Category.PERSONAL
    due_date: date | None = None
    notes: str = ""
    completed_at: datetime | None = None  # Set iff completed

    def effective_date(self) -> date:
        """Due date if set, else creation date."""
        return self.due_date or self.created_at.date()


@dataclass
class TaskPatch:
    """Fields that an edit may change. None means "leave as is".

    due_date uses clear_due_date to distinguish "unset" from "keep".
    """

    title: str | None = None
    priority: Priority | None = None
    category: Category | None = None
    due_date: date | None = None
    clear_due_date: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class FilterState:
    """Active list filters."""

    status: StatusFilter = StatusFilter.ALL
    priority: Priority | None = None
    category: Category | None = None
    search_query: str = ""


@dataclass(frozen=True)
class Result:
    """Outcome of a store mutation.

    Either task is set (success) or error is set (the operation was a no-op).
    """

    task: Task | None = None
    error: TodoListError | None = None
    celebrate: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, task: Task, celebrate: bool = False) -> "Result":
        return cls(task=task, celebrate=celebrate)

    @classmethod
    def failure(cls, error: TodoListError) -> "Result":
        return cls(error=error)


@dataclass(frozen=True)
class Progress:
    """Completion of tasks whose effective date is today."""

    completed: int
    total: int
    percent: int


@dataclass(frozen=True)
class Statistics:
    """Aggregate numbers for the statistics panel."""

    total: int
    completed: int
    completion_rate: int
    created_this_week: int
    weekly_counts: list[int] = field(default_factory=list)  # Monday..Sunday
    weekly_heights: list[float] = field(default_factory=list)  # Percent of max bucket


@dataclass(frozen=True)
class Analysis:
    """Productivity summary across the whole collection."""

    total: int
    completed: int
    completion_rate: int
    productivity_level: str  # excellent, good, needs_improvement
    high_priority: int
    by_category: dict[str, int] = field(default_factory=dict)
