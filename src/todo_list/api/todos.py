"""Task API endpoints."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from todo_list.api.models import (
    AnalysisResponse,
    CreateTaskRequest,
    NoticeResponse,
    ProgressResponse,
    ReorderRequest,
    StatisticsResponse,
    TaskResponse,
    ToggleResponse,
    UpdateTaskRequest,
)
from todo_list.errors import ConfirmationDeclinedError, NotFoundError, ValidationError
from todo_list.factory import get_task_store
from todo_list.store.models import (
    Category,
    FilterState,
    Priority,
    Result,
    StatusFilter,
    Task,
    TaskPatch,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(task: Task) -> TaskResponse:
    return TaskResponse.from_task(task, overdue=get_task_store().is_overdue(task))


def _unwrap(result: Result) -> Task:
    """Return the task of a successful result or raise the matching HTTP error."""
    if result.ok and result.task is not None:
        return result.task
    error = result.error
    if isinstance(error, NotFoundError):
        raise HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ConfirmationDeclinedError):
        raise HTTPException(status_code=409, detail=str(error))
    raise HTTPException(status_code=500, detail=str(error))


@router.get("/todos", response_model=list[TaskResponse])
async def list_todos(
    status: StatusFilter = StatusFilter.ALL,
    priority: Priority | None = None,
    category: Category | None = None,
    q: str = "",
) -> list[TaskResponse]:
    """List tasks in display order.

    Args:
        status: all, active, completed, today or week
        priority: Only tasks with this priority
        category: Only tasks in this category
        q: Case-insensitive text searched in title and notes

    Returns:
        Tasks matching every filter
    """
    filters = FilterState(status=status, priority=priority, category=category, search_query=q)
    return [_to_response(task) for task in get_task_store().query(filters)]


@router.post("/todos", response_model=TaskResponse, status_code=201)
async def create_todo(request: CreateTaskRequest) -> TaskResponse:
    """Create a task with default priority and category.

    Raises:
        HTTPException: 400 if the title is empty
    """
    task = _unwrap(get_task_store().create(request.title))
    logger.info(f"Created task {task.id}")
    return _to_response(task)


@router.get("/todos/{task_id}", response_model=TaskResponse)
async def get_todo(task_id: int) -> TaskResponse:
    return _to_response(_unwrap(get_task_store().get(task_id)))


@router.patch("/todos/{task_id}", response_model=TaskResponse)
async def update_todo(task_id: int, request: UpdateTaskRequest) -> TaskResponse:
    """Edit title, priority, category, due date or notes."""
    patch = TaskPatch(
        title=request.title,
        priority=request.priority,
        category=request.category,
        due_date=request.due_date,
        clear_due_date="due_date" in request.model_fields_set and request.due_date is None,
        notes=request.notes,
    )
    return _to_response(_unwrap(get_task_store().update(task_id, patch)))


@router.post("/todos/{task_id}/toggle", response_model=ToggleResponse)
async def toggle_todo(task_id: int) -> ToggleResponse:
    """Toggle completion of a task."""
    result = get_task_store().toggle_complete(task_id)
    task = _unwrap(result)
    return ToggleResponse(task=_to_response(task), celebrate=result.celebrate)


@router.delete("/todos/{task_id}", response_model=TaskResponse)
async def delete_todo(task_id: int, confirm: bool = False) -> TaskResponse:
    """Delete a task.

    Args:
        task_id: Task to delete
        confirm: The user's answer to the delete confirmation prompt

    Raises:
        HTTPException: 404 if not found, 409 if not confirmed
    """
    result = get_task_store().delete(task_id, lambda _task: confirm)
    return _to_response(_unwrap(result))


@router.post("/todos/reorder", response_model=list[TaskResponse])
async def reorder_todos(request: ReorderRequest) -> list[TaskResponse]:
    """Swap two tasks and return the full list in its new order."""
    store = get_task_store()
    _unwrap(store.reorder(request.dragged_id, request.target_id))
    return [_to_response(task) for task in store.tasks]


@router.get("/progress", response_model=ProgressResponse)
async def get_progress() -> ProgressResponse:
    """Completion of today's tasks."""
    return ProgressResponse(**asdict(get_task_store().progress_today()))


@router.get("/stats", response_model=StatisticsResponse)
async def get_statistics() -> StatisticsResponse:
    return StatisticsResponse(**asdict(get_task_store().statistics()))


@router.get("/analysis", response_model=AnalysisResponse)
async def get_analysis() -> AnalysisResponse:
    return AnalysisResponse(**asdict(get_task_store().analysis()))


@router.get("/notice", response_model=NoticeResponse)
async def get_notice() -> NoticeResponse:
    """Non-fatal message from startup, e.g. unreadable saved tasks were reset."""
    return NoticeResponse(notice=get_task_store().notice)
