"""Task aggregator: groups Logbook tasks by completion day and by area."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, datetime, time
from typing import TypeVar

from thingslog.things.logbook import Task

T = TypeVar("T")


def group_by(items: Iterable[T], key: Callable[[T], str]) -> dict[str, list[T]]:
    """Group items by key, keeping first-seen key order and input order within a group."""
    groups: dict[str, list[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def day_key(stop_date: float) -> str:
    """Start of the local calendar day containing `stop_date`, as ISO-8601 with offset.

    e.g. 2026-02-05T00:00:00-08:00
    """
    day = datetime.fromtimestamp(stop_date).date()
    # Resolve the offset at midnight itself so DST switch days key correctly
    return datetime.combine(day, time()).astimezone().isoformat()


def day_from_key(key: str) -> date:
    return datetime.fromisoformat(key).date()


def group_tasks_by_day(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    """Map each completion day to the tasks stopped that day.

    Tasks without a stop date have no day and are dropped.
    """
    completed = [task for task in tasks if task.stop_date is not None]
    return group_by(completed, lambda task: day_key(task.stop_date))  # type: ignore[arg-type]


def group_tasks_by_area(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    """Map each area to its tasks. Tasks without an area fall under ""."""
    return group_by(tasks, lambda task: task.area or "")
