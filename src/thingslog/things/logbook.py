"""Read-only access to the Things 3 Logbook (completed and cancelled to-dos)."""

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# TMTask.status values
STATUS_CANCELLED = 2
STATUS_COMPLETED = 3

TASKS_QUERY = """
    SELECT
        TMTask.uuid AS uuid,
        TMTask.title AS title,
        TMTask.notes AS notes,
        TMTask.stopDate AS stopDate,
        TMTask.status AS status,
        TMArea.title AS area,
        TMTag.title AS tag
    FROM TMTask
    LEFT JOIN TMTaskTag ON TMTaskTag.tasks = TMTask.uuid
    LEFT JOIN TMTag ON TMTag.uuid = TMTaskTag.tags
    LEFT JOIN TMArea ON TMTask.area = TMArea.uuid
    WHERE TMTask.trashed = 0
        AND TMTask.stopDate IS NOT NULL
        AND TMTask.stopDate > ?
    ORDER BY TMTask.stopDate
"""

CHECKLIST_QUERY = """
    SELECT
        TMChecklistItem.task AS taskId,
        TMChecklistItem.title AS title,
        TMChecklistItem.stopDate AS stopDate
    FROM TMChecklistItem
    JOIN TMTask ON TMTask.uuid = TMChecklistItem.task
    WHERE TMTask.trashed = 0
        AND TMTask.stopDate IS NOT NULL
        AND TMTask.stopDate > ?
        AND TMChecklistItem.title IS NOT ''
    ORDER BY TMChecklistItem.task, TMChecklistItem."index"
"""


class ThingsDatabaseError(Exception):
    """The Things database is missing, locked, or has an unexpected schema."""


@dataclass(frozen=True)
class Subtask:
    """A checklist item on a Things to-do."""

    title: str
    completed: bool


@dataclass(frozen=True)
class Task:
    """A to-do from the Things Logbook."""

    title: str
    uuid: str
    area: str | None = None
    tags: tuple[str, ...] = ()
    notes: str | None = None
    stop_date: float | None = None  # seconds since epoch
    cancelled: bool = False
    subtasks: tuple[Subtask, ...] = ()


@contextlib.contextmanager
def _connect(db_path: Path) -> Iterator[sqlite3.Connection]:
    if not db_path.exists():
        raise ThingsDatabaseError(f"Things database not found: {db_path}")
    try:
        conn = sqlite3.connect(f"{db_path.resolve().as_uri()}?mode=ro", uri=True)
    except sqlite3.Error as e:
        raise ThingsDatabaseError(f"Cannot open Things database: {e}") from e
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA busy_timeout=5000")
    try:
        yield conn
    finally:
        conn.close()


def _query(db_path: Path, sql: str, since: float) -> list[dict[str, Any]]:
    with _connect(db_path) as conn:
        try:
            rows = conn.execute(sql, (since,)).fetchall()
        except sqlite3.Error as e:
            raise ThingsDatabaseError(f"Things query failed: {e}") from e
    return [dict(row) for row in rows]


def fetch_completed_tasks(db_path: Path, since: float) -> list[dict[str, Any]]:
    """Fetch one row per (task, tag) pair for to-dos stopped after `since`."""
    records = _query(db_path, TASKS_QUERY, since)
    logger.debug("Fetched %d task rows since %s", len(records), since)
    return records


def fetch_checklist_items(db_path: Path, since: float) -> list[dict[str, Any]]:
    """Fetch checklist items belonging to to-dos stopped after `since`."""
    records = _query(db_path, CHECKLIST_QUERY, since)
    logger.debug("Fetched %d checklist rows since %s", len(records), since)
    return records


def build_tasks_from_records(
    task_records: Iterable[dict[str, Any]],
    checklist_records: Iterable[dict[str, Any]],
) -> list[Task]:
    """Join task rows and checklist rows into Task values.

    The tag join produces one row per tag, so rows are merged by uuid in
    first-seen order. Checklist rows are attached by their task id.
    """
    merged: dict[str, dict[str, Any]] = {}
    for record in task_records:
        uuid = record["uuid"]
        tag = record.get("tag")
        if uuid in merged:
            if tag is not None:
                merged[uuid]["tags"].append(tag)
            continue
        merged[uuid] = {
            "title": record.get("title") or "",
            "uuid": uuid,
            "area": record.get("area"),
            "tags": [tag] if tag is not None else [],
            "notes": record.get("notes"),
            "stop_date": record.get("stopDate"),
            "cancelled": record.get("status") == STATUS_CANCELLED,
            "subtasks": [],
        }

    for item in checklist_records:
        parent = merged.get(item["taskId"])
        if parent is None:
            continue
        parent["subtasks"].append(
            Subtask(title=item.get("title") or "", completed=item.get("stopDate") is not None)
        )

    return [
        Task(**{**values, "tags": tuple(values["tags"]), "subtasks": tuple(values["subtasks"])})
        for values in merged.values()
    ]


class ThingsLogbook:
    """Fetches Logbook tasks from a Things database file."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def fetch_tasks(self, since: float) -> list[Task]:
        """Return tasks (with subtasks) stopped strictly after `since`."""
        task_records = fetch_completed_tasks(self.db_path, since)
        checklist_records = fetch_checklist_items(self.db_path, since)
        return build_tasks_from_records(task_records, checklist_records)
