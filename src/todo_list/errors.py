"""Error types for todo-list."""


class TodoListError(Exception):
    """Base class for all todo-list errors."""


class ValidationError(TodoListError):
    """Input rejected (e.g. empty title on create)."""


class NotFoundError(TodoListError):
    """Operation referenced an unknown task id."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class ConfirmationDeclinedError(TodoListError):
    """User declined a confirmation prompt."""


class PersistenceCorruptError(TodoListError):
    """Stored task collection could not be parsed."""


class NetworkFailureError(TodoListError):
    """Upstream fetch failed (connection error, timeout)."""


class BodyConsumedError(TodoListError):
    """Response body was read more than once."""
