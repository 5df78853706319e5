"""Task store: owns the task collection, applies mutations and persists them."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from todo_list.errors import (
    ConfirmationDeclinedError,
    NotFoundError,
    PersistenceCorruptError,
    ValidationError,
)
from todo_list.store import views
from todo_list.store.codec import decode_tasks, encode_tasks
from todo_list.store.models import (
    Analysis,
    Category,
    FilterState,
    Priority,
    Progress,
    Result,
    Statistics,
    Task,
    TaskPatch,
)
from todo_list.store.storage import KeyValueStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "todos"
CORRUPT_NOTICE = "Saved tasks could not be read and were reset."

Clock = Callable[[], datetime]
Listener = Callable[[str, Task | None], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def sample_tasks(now: datetime) -> list[Task]:
    """Tasks shown on first visit."""
    base_id = int(now.timestamp() * 1000)
    today = now.date()
    return [
        Task(
            id=base_id,
            title="✅ Tap to complete a task",
            priority=Priority.HIGH,
            category=Category.PERSONAL,
            due_date=today,
            created_at=now,
        ),
        Task(
            id=base_id + 1,
            title="📝 Try adding your own task above",
            priority=Priority.MEDIUM,
            category=Category.LEARNING,
            due_date=today + timedelta(days=1),
            created_at=now,
        ),
        Task(
            id=base_id + 2,
            title="🎯 Set priorities and categories",
            priority=Priority.LOW,
            category=Category.WORK,
            created_at=now,
        ),
    ]


class TaskStore:
    """In-memory task collection flushed to key-value storage after every mutation.

    Mutations never raise for bad input: they return a Result whose error is a
    ValidationError, NotFoundError or ConfirmationDeclinedError and leave the
    collection untouched.
    """

    def __init__(self, storage: KeyValueStorage, clock: Clock = utc_now) -> None:
        """Initialize store with storage backend and clock."""
        self._storage = storage
        self._clock = clock
        self._tasks: list[Task] = []
        self._listeners: list[Listener] = []
        self.notice: str | None = None  # Non-fatal message for the UI (e.g. storage reset)

    @property
    def tasks(self) -> list[Task]:
        """Snapshot of the collection in display order."""
        return list(self._tasks)

    def add_listener(self, listener: Listener) -> None:
        """Register callback(event, task) fired after mutations.

        Events: "changed" after every successful mutation, "celebrate" when a
        task transitions to completed.
        """
        self._listeners.append(listener)

    def _emit(self, event: str, task: Task | None = None) -> None:
        for listener in self._listeners:
            try:
                listener(event, task)
            except Exception as e:
                logger.error(f"[TaskStore] Listener error on {event}: {e}", exc_info=True)

    def load(self) -> list[Task]:
        """Load collection from storage, seeding samples when nothing is stored.

        A corrupt blob, or a storage backend that could not read its saved
        data, is replaced by the samples and recorded in notice.
        """
        raw = self._storage.get_item(STORAGE_KEY)
        self.notice = None

        if raw is None:
            if self._storage.corrupt:
                logger.warning("[TaskStore] Storage was unreadable; reseeding sample tasks")
                self.notice = CORRUPT_NOTICE
            else:
                logger.info("[TaskStore] No stored tasks, seeding samples")
            return self._seed()

        try:
            self._tasks = decode_tasks(raw)
        except PersistenceCorruptError as e:
            logger.warning(f"[TaskStore] {e}; reseeding sample tasks")
            self.notice = CORRUPT_NOTICE
            return self._seed()

        logger.info(f"[TaskStore] Loaded {len(self._tasks)} tasks")
        return self.tasks

    def _seed(self) -> list[Task]:
        self._tasks = sample_tasks(self._clock())
        self._save()
        return self.tasks

    def _save(self) -> None:
        self._storage.set_item(STORAGE_KEY, encode_tasks(self._tasks))

    def _commit(self) -> None:
        self._save()
        self._emit("changed")

    def _find(self, task_id: int) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _next_id(self, now: datetime) -> int:
        candidate = int(now.timestamp() * 1000)
        if self._tasks:
            # Keep ids unique even if two tasks land in the same millisecond
            # or the clock moved backwards
            existing = {task.id for task in self._tasks}
            while candidate in existing:
                candidate += 1
        return candidate

    def get(self, task_id: int) -> Result:
        task = self._find(task_id)
        if task is None:
            return Result.failure(NotFoundError(task_id))
        return Result.success(task)

    def create(self, title: str) -> Result:
        """Append a new task with default fields.

        Args:
            title: Task title; surrounding whitespace is stripped

        Returns:
            Result with the new task, or a ValidationError for an empty title
        """
        title = title.strip()
        if not title:
            return Result.failure(ValidationError("Title must not be empty"))

        now = self._clock()
        task = Task(id=self._next_id(now), title=title, created_at=now)
        self._tasks.append(task)
        self._commit()
        logger.debug(f"[TaskStore] Created task {task.id}")
        return Result.success(task)

    def update(self, task_id: int, patch: TaskPatch) -> Result:
        """Merge edited fields into a task.

        The title is stripped but not re-validated, so an edit may leave it empty.
        """
        task = self._find(task_id)
        if task is None:
            return Result.failure(NotFoundError(task_id))

        if patch.title is not None:
            task.title = patch.title.strip()
        if patch.priority is not None:
            task.priority = patch.priority
        if patch.category is not None:
            task.category = patch.category
        if patch.clear_due_date:
            task.due_date = None
        elif patch.due_date is not None:
            task.due_date = patch.due_date
        if patch.notes is not None:
            task.notes = patch.notes

        self._commit()
        return Result.success(task)

    def toggle_complete(self, task_id: int) -> Result:
        """Flip completion state; celebrate on the open -> completed transition."""
        task = self._find(task_id)
        if task is None:
            return Result.failure(NotFoundError(task_id))

        task.completed = not task.completed
        task.completed_at = self._clock() if task.completed else None
        self._commit()

        if task.completed:
            self._emit("celebrate", task)
        return Result.success(task, celebrate=task.completed)

    def delete(self, task_id: int, confirm: Callable[[Task], bool]) -> Result:
        """Remove a task after the user confirms.

        Args:
            task_id: Task to remove
            confirm: Yes/no prompt, called with the task about to be deleted

        Returns:
            Result with the removed task
        """
        task = self._find(task_id)
        if task is None:
            return Result.failure(NotFoundError(task_id))
        if not confirm(task):
            return Result.failure(ConfirmationDeclinedError(f"Deletion of {task_id} declined"))

        del self._tasks[self._tasks.index(task)]
        self._commit()
        return Result.success(task)

    def reorder(self, dragged_id: int, target_id: int) -> Result:
        """Swap the positions of two tasks (drag and drop)."""
        if dragged_id == target_id:
            return Result.failure(ValidationError("Cannot reorder a task onto itself"))

        ids = [task.id for task in self._tasks]
        if dragged_id not in ids:
            return Result.failure(NotFoundError(dragged_id))
        if target_id not in ids:
            return Result.failure(NotFoundError(target_id))

        i, j = ids.index(dragged_id), ids.index(target_id)
        self._tasks[i], self._tasks[j] = self._tasks[j], self._tasks[i]
        self._commit()
        return Result.success(self._tasks[j])

    def query(self, filters: FilterState | None = None) -> views.TaskView:
        """Filtered view of the collection, re-evaluated on each iteration."""
        return views.TaskView(self._tasks, filters or FilterState(), self._clock)

    def progress_today(self) -> Progress:
        return views.progress_today(self._tasks, self._clock())

    def statistics(self) -> Statistics:
        return views.statistics(self._tasks, self._clock())

    def analysis(self) -> Analysis:
        return views.analysis(self._tasks)

    def is_overdue(self, task: Task) -> bool:
        return views.is_overdue(task, self._clock())
