"""API models for todo-list."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from todo_list.store.models import Category, Priority, Task


class TaskResponse(BaseModel):
    """API response model for tasks."""

    id: int
    title: str
    completed: bool
    priority: Priority
    category: Category
    due_date: date | None
    notes: str
    created_at: datetime
    completed_at: datetime | None
    overdue: bool

    @classmethod
    def from_task(cls, task: Task, overdue: bool) -> "TaskResponse":
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
            overdue=overdue,
        )


class ToggleResponse(BaseModel):
    """Toggle result; celebrate is true when the task was just completed."""

    task: TaskResponse
    celebrate: bool


class CreateTaskRequest(BaseModel):
    """Request model for creating a task."""

    title: str


class UpdateTaskRequest(BaseModel):
    """Request model for editing a task.

    Omitted fields are left unchanged; an explicit null due_date clears it.
    """

    title: str | None = None
    priority: Priority | None = None
    category: Category | None = None
    due_date: date | None = None
    notes: str | None = None


class ReorderRequest(BaseModel):
    """Request model for drag-and-drop reordering."""

    dragged_id: int
    target_id: int


class ProgressResponse(BaseModel):
    completed: int
    total: int
    percent: int


class StatisticsResponse(BaseModel):
    total: int
    completed: int
    completion_rate: int
    created_this_week: int
    weekly_counts: list[int]
    weekly_heights: list[float]


class AnalysisResponse(BaseModel):
    total: int
    completed: int
    completion_rate: int
    productivity_level: str
    high_priority: int
    by_category: dict[str, int]


class NoticeResponse(BaseModel):
    notice: str | None


class ThemeRequest(BaseModel):
    theme: str = Field(pattern="^(dark|light)$")


class LanguageRequest(BaseModel):
    language: str


class ControlMessage(BaseModel):
    """Message forwarded to the cache controller (e.g. {"type": "SKIP_WAITING"})."""

    type: str


class UpdateCacheRequest(BaseModel):
    """Register a controller for a new cache version."""

    version: str
