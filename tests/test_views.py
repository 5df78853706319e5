"""Tests for derived views: filters, progress, statistics."""

from datetime import date, datetime, timedelta, timezone

import pytest

from todo_list.store import views
from todo_list.store.models import Category, FilterState, Priority, StatusFilter, Task

NOW = datetime(2024, 1, 3, 12, 0, tzinfo=timezone.utc)  # Wednesday


def _task(
    task_id: int, created: datetime = NOW, title: str | None = None, **fields: object
) -> Task:
    task = Task(id=task_id, title=title or f"task {task_id}", created_at=created)
    for name, value in fields.items():
        setattr(task, name, value)
    if task.completed and task.completed_at is None:
        task.completed_at = created
    return task


def _ids(tasks: list[Task], filters: FilterState, now: datetime = NOW) -> list[int]:
    return views.TaskView(tasks, filters, lambda: now).ids()


def test_today_falls_back_to_created_date() -> None:
    """Test a task without due date created today is in the today view."""
    tasks = [_task(1, created=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc), title="A")]
    today = datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)

    assert _ids(tasks, FilterState(status=StatusFilter.TODAY), now=today) == [1]


def test_today_uses_due_date_when_present() -> None:
    """Test a due date elsewhere excludes a task created today, and vice versa."""
    tasks = [
        _task(1, due_date=date(2024, 1, 5)),  # Created today, due later
        _task(2, created=NOW - timedelta(days=10), due_date=date(2024, 1, 3)),  # Due today
        _task(3, created=NOW - timedelta(days=10)),  # Old, no due date
    ]

    assert _ids(tasks, FilterState(status=StatusFilter.TODAY)) == [2]


def test_week_filter_boundary() -> None:
    """Test the week view includes tasks created exactly seven days ago."""
    tasks = [
        _task(1, created=NOW - timedelta(days=7)),
        _task(2, created=NOW - timedelta(days=7, seconds=1)),
        _task(3, created=NOW - timedelta(days=1)),
    ]

    assert _ids(tasks, FilterState(status=StatusFilter.WEEK)) == [1, 3]


def test_filters_compose_in_order() -> None:
    """Test status, priority, category and search all apply together."""
    tasks = [
        _task(1, title="Plan sprint", priority=Priority.HIGH, category=Category.WORK),
        _task(2, title="Gym", priority=Priority.HIGH, category=Category.HEALTH),
        _task(3, title="Email", priority=Priority.HIGH, category=Category.WORK, completed=True),
        _task(4, title="Review", priority=Priority.LOW, category=Category.WORK, notes="SPRINT"),
        _task(5, title="Sprint retro", priority=Priority.HIGH, category=Category.WORK),
    ]
    filters = FilterState(
        status=StatusFilter.ACTIVE,
        priority=Priority.HIGH,
        category=Category.WORK,
        search_query="sprint",
    )

    assert _ids(tasks, filters) == [1, 5]


def test_search_matches_notes_case_insensitive() -> None:
    tasks = [_task(1, title="Call", notes="Ask about INVOICE"), _task(2, title="Other")]
    assert _ids(tasks, FilterState(search_query="invoice")) == [1]


def test_all_filter_keeps_order() -> None:
    tasks = [_task(3), _task(1), _task(2)]
    assert _ids(tasks, FilterState()) == [3, 1, 2]


def test_progress_today() -> None:
    """Test progress counts tasks whose effective date is today."""
    tasks = [
        _task(1, completed=True),
        _task(2),
        _task(3, due_date=date(2024, 1, 3), created=NOW - timedelta(days=3), completed=True),
        _task(4, due_date=date(2024, 1, 4)),
        _task(5, created=NOW - timedelta(days=2)),
    ]

    progress = views.progress_today(tasks, NOW)

    assert (progress.completed, progress.total, progress.percent) == (2, 3, 67)


def test_progress_today_empty() -> None:
    progress = views.progress_today([], NOW)
    assert (progress.completed, progress.total, progress.percent) == (0, 0, 0)


@pytest.mark.parametrize(
    ("part", "total", "expected"),
    [(0, 0, 0), (0, 5, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 8, 38), (5, 5, 100)],
)
def test_percent_rounds_half_up(part: int, total: int, expected: int) -> None:
    assert views.percent(part, total) == expected


def test_statistics_counts_and_rate() -> None:
    """Test totals, completion rate and the seven-day count."""
    tasks = [
        _task(1, completed=True),
        _task(2, created=NOW - timedelta(days=3)),
        _task(3, created=NOW - timedelta(days=8), completed=True),
        _task(4, created=NOW - timedelta(days=30)),
    ]

    stats = views.statistics(tasks, NOW)

    assert stats.total == 4
    assert stats.completed == 2
    assert stats.completion_rate == 50
    assert stats.created_this_week == 2


def test_statistics_empty_collection() -> None:
    stats = views.statistics([], NOW)
    assert stats.completion_rate == 0
    assert stats.weekly_counts == [0] * 7
    assert stats.weekly_heights == [0.0] * 7


def test_weekly_histogram_monday_start() -> None:
    """Test creation counts bucket by weekday of the current calendar week."""
    monday = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
    tasks = [
        _task(1, created=monday),
        _task(2, created=monday + timedelta(hours=23, minutes=59)),
        _task(3, created=monday + timedelta(days=2, hours=12)),  # Wednesday
        _task(4, created=monday - timedelta(seconds=1)),  # Previous Sunday
        _task(5, created=monday + timedelta(days=7)),  # Next Monday
    ]

    stats = views.statistics(tasks, NOW)

    assert stats.weekly_counts == [2, 0, 1, 0, 0, 0, 0]
    assert stats.weekly_heights == [100.0, 0.0, 50.0, 0.0, 0.0, 0.0, 0.0]


def test_start_of_week_on_sunday() -> None:
    sunday = datetime(2024, 1, 7, 22, 0, tzinfo=timezone.utc)
    assert views.start_of_week(sunday) == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_is_overdue() -> None:
    assert views.is_overdue(_task(1, due_date=date(2024, 1, 2)), NOW)
    assert not views.is_overdue(_task(2, due_date=date(2024, 1, 3)), NOW)
    assert not views.is_overdue(_task(3, due_date=date(2024, 1, 2), completed=True), NOW)
    assert not views.is_overdue(_task(4), NOW)


def test_analysis_levels() -> None:
    """Test productivity level thresholds and category spread."""
    tasks = [
        _task(1, completed=True, priority=Priority.HIGH, category=Category.WORK),
        _task(2, completed=True, category=Category.LEARNING),
        _task(3, category=Category.WORK),
    ]

    summary = views.analysis(tasks)

    assert summary.completion_rate == 67
    assert summary.productivity_level == "good"
    assert summary.high_priority == 1
    assert summary.by_category == {"work": 2, "personal": 0, "health": 0, "learning": 1}
    assert views.analysis([_task(1, completed=True)]).productivity_level == "excellent"
    assert views.analysis([_task(1)]).productivity_level == "needs_improvement"
