"""Shared test fixtures."""

import sqlite3

import pytest

THINGS_SCHEMA = """
    CREATE TABLE TMArea (uuid TEXT PRIMARY KEY, title TEXT);
    CREATE TABLE TMTag (uuid TEXT PRIMARY KEY, title TEXT);
    CREATE TABLE TMTaskTag (tasks TEXT, tags TEXT);
    CREATE TABLE TMTask (
        uuid TEXT PRIMARY KEY, title TEXT, notes TEXT, status INTEGER,
        stopDate REAL, trashed INTEGER DEFAULT 0, area TEXT
    );
    CREATE TABLE TMChecklistItem (
        uuid TEXT PRIMARY KEY, title TEXT, task TEXT, stopDate REAL, "index" INTEGER
    );
"""


@pytest.fixture
def make_things_db(tmp_path):
    """Build a Things database with the Logbook tables.

    Takes rows for TMArea, TMTag, TMTaskTag, TMTask (uuid, title, notes,
    status, stopDate, trashed, area) and TMChecklistItem (uuid, title, task,
    stopDate, index).
    """

    def _make(areas=(), tags=(), task_tags=(), tasks=(), checklist=(), name="main.sqlite"):
        db_path = tmp_path / name
        conn = sqlite3.connect(db_path)
        conn.executescript(THINGS_SCHEMA)
        conn.executemany("INSERT INTO TMArea VALUES (?, ?)", areas)
        conn.executemany("INSERT INTO TMTag VALUES (?, ?)", tags)
        conn.executemany("INSERT INTO TMTaskTag VALUES (?, ?)", task_tags)
        conn.executemany("INSERT INTO TMTask VALUES (?, ?, ?, ?, ?, ?, ?)", tasks)
        conn.executemany("INSERT INTO TMChecklistItem VALUES (?, ?, ?, ?, ?)", checklist)
        conn.commit()
        conn.close()
        return db_path

    return _make
