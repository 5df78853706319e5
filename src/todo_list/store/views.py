"""Derived views over the task collection: filtering, progress and statistics.

All functions here are pure: they take the collection and the current time
(TaskView takes a clock and reads it per iteration) and never mutate tasks.
"""

import math
from collections.abc import Callable, Iterator, Sequence
from datetime import date, datetime, time, timedelta

from todo_list.store.models import (
    Analysis,
    Category,
    FilterState,
    Priority,
    Progress,
    Statistics,
    StatusFilter,
    Task,
)

WEEK = timedelta(days=7)


def percent(part: int, total: int) -> int:
    """Rounded percentage (half rounds up), 0 when total is 0."""
    if total <= 0:
        return 0
    return math.floor(part / total * 100 + 0.5)


def local_date(value: datetime, now: datetime) -> date:
    """Calendar date of value in the timezone of now."""
    if now.tzinfo is not None and value.tzinfo is not None:
        value = value.astimezone(now.tzinfo)
    return value.date()


def effective_date(task: Task, now: datetime) -> date:
    """Due date if present, else creation date."""
    return task.due_date or local_date(task.created_at, now)


def is_overdue(task: Task, now: datetime) -> bool:
    """Task has a due date before today and is still open."""
    return task.due_date is not None and not task.completed and task.due_date < now.date()


def _matches_status(task: Task, status: StatusFilter, now: datetime) -> bool:
    if status == StatusFilter.ACTIVE:
        return not task.completed
    if status == StatusFilter.COMPLETED:
        return task.completed
    if status == StatusFilter.TODAY:
        today = now.date()
        if task.due_date is not None:
            return task.due_date == today
        return local_date(task.created_at, now) == today
    if status == StatusFilter.WEEK:
        return task.created_at >= now - WEEK
    return True


class TaskView:
    """Lazy, restartable filtered view over a task sequence.

    Each iteration re-applies the filters to the current contents of the
    underlying sequence at the current clock time, in order: status,
    priority, category, search.
    """

    def __init__(
        self, tasks: Sequence[Task], filters: FilterState, clock: Callable[[], datetime]
    ) -> None:
        self._tasks = tasks
        self._filters = filters
        self._clock = clock

    def __iter__(self) -> Iterator[Task]:
        filters = self._filters
        now = self._clock()
        query = filters.search_query.strip().lower()
        for task in self._tasks:
            if not _matches_status(task, filters.status, now):
                continue
            if filters.priority is not None and task.priority != filters.priority:
                continue
            if filters.category is not None and task.category != filters.category:
                continue
            if query and query not in task.title.lower() and query not in task.notes.lower():
                continue
            yield task

    def ids(self) -> list[int]:
        return [task.id for task in self]


def progress_today(tasks: Sequence[Task], now: datetime) -> Progress:
    """Completion of tasks whose effective date is today."""
    today = now.date()
    todays = [task for task in tasks if effective_date(task, now) == today]
    completed = sum(1 for task in todays if task.completed)
    return Progress(completed=completed, total=len(todays), percent=percent(completed, len(todays)))


def start_of_week(now: datetime) -> datetime:
    """Monday 00:00 of the week containing now."""
    today = now.date()
    monday = today - timedelta(days=today.weekday())
    return datetime.combine(monday, time(), tzinfo=now.tzinfo)


def weekly_counts(tasks: Sequence[Task], now: datetime) -> list[int]:
    """Tasks created on each day (Monday..Sunday) of the current week."""
    counts = [0] * 7
    week_start = start_of_week(now)
    for task in tasks:
        day = math.floor((task.created_at - week_start) / timedelta(days=1))
        if 0 <= day < 7:
            counts[day] += 1
    return counts


def statistics(tasks: Sequence[Task], now: datetime) -> Statistics:
    """Aggregate statistics over the whole collection."""
    total = len(tasks)
    completed = sum(1 for task in tasks if task.completed)
    week_ago = now - WEEK
    counts = weekly_counts(tasks, now)
    max_count = max(*counts, 1)

    return Statistics(
        total=total,
        completed=completed,
        completion_rate=percent(completed, total),
        created_this_week=sum(1 for task in tasks if task.created_at >= week_ago),
        weekly_counts=counts,
        weekly_heights=[count / max_count * 100 for count in counts],
    )


def analysis(tasks: Sequence[Task]) -> Analysis:
    """Productivity summary (completion level, priority and category spread)."""
    total = len(tasks)
    completed = sum(1 for task in tasks if task.completed)
    rate = percent(completed, total)

    level = "good"
    if rate >= 80:
        level = "excellent"
    if rate <= 40:
        level = "needs_improvement"

    return Analysis(
        total=total,
        completed=completed,
        completion_rate=rate,
        productivity_level=level,
        high_priority=sum(1 for task in tasks if task.priority == Priority.HIGH),
        by_category={
            category.value: sum(1 for task in tasks if task.category == category)
            for category in Category
        },
    )
