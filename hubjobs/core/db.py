"""SQLite-backed dataset: pushed records, debug artifacts, and run tracking."""

import json
import sqlite3
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_DATASET_TABLE = """
CREATE TABLE IF NOT EXISTS dataset_items (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    job_id      TEXT,
    url         TEXT    NOT NULL DEFAULT '',
    is_error    INTEGER NOT NULL DEFAULT 0,
    payload     TEXT    NOT NULL,
    pushed_at   TEXT    NOT NULL
);
"""

_KEY_VALUE_TABLE = """
CREATE TABLE IF NOT EXISTS key_value (
    key           TEXT PRIMARY KEY,
    value         TEXT NOT NULL,
    content_type  TEXT NOT NULL DEFAULT 'text/plain',
    stored_at     TEXT NOT NULL
);
"""

_RUNS_TABLE = """
CREATE TABLE IF NOT EXISTS runs (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    mode         TEXT    NOT NULL,
    regions      TEXT    NOT NULL,
    max_items    INTEGER NOT NULL,
    listed_count INTEGER NOT NULL,
    succeeded    INTEGER NOT NULL,
    failed       INTEGER NOT NULL,
    started_at   TEXT    NOT NULL,
    finished_at  TEXT    NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_DATASET_TABLE)
    conn.execute(_KEY_VALUE_TABLE)
    conn.execute(_RUNS_TABLE)
    conn.commit()
    return conn


class Dataset:
    """Output sink: one record per ``push_data`` call.

    Error placeholders are recognized by their ``error`` key and flagged so a
    run's success rate can be audited afterwards.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def conn(self) -> sqlite3.Connection:
        return self._conn

    def push_data(self, item: dict[str, Any]) -> int:
        """Store one record. Returns the row ID."""
        is_error = "error" in item
        job_id = item.get("jobId") if is_error else item.get("id")
        cursor = self._conn.execute(
            """
            INSERT INTO dataset_items (job_id, url, is_error, payload, pushed_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                job_id,
                item.get("url") or "",
                int(is_error),
                json.dumps(item, ensure_ascii=False),
                _now_iso(),
            ),
        )
        self._conn.commit()
        return cursor.lastrowid or 0

    def set_value(self, key: str, value: str, content_type: str = "text/plain") -> None:
        """Store a debug artifact under ``key``, replacing any previous value."""
        self._conn.execute(
            """
            INSERT INTO key_value (key, value, content_type, stored_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(key)
            DO UPDATE SET
                value = excluded.value,
                content_type = excluded.content_type,
                stored_at = excluded.stored_at
            """,
            (key, value, content_type, _now_iso()),
        )
        self._conn.commit()

    def get_value(self, key: str) -> str | None:
        row = self._conn.execute(
            "SELECT value FROM key_value WHERE key = ?", (key,),
        ).fetchone()
        return None if row is None else row["value"]

    def items(self, *, include_errors: bool = True) -> Iterator[dict[str, Any]]:
        """Yield stored records in push order."""
        query = "SELECT payload FROM dataset_items"
        if not include_errors:
            query += " WHERE is_error = 0"
        query += " ORDER BY id"
        for row in self._conn.execute(query):
            yield json.loads(row["payload"])


def count_items(conn: sqlite3.Connection) -> tuple[int, int]:
    """Return (records, error placeholders) stored so far."""
    row = conn.execute(
        """
        SELECT
            COALESCE(SUM(CASE WHEN is_error = 0 THEN 1 ELSE 0 END), 0) AS ok,
            COALESCE(SUM(is_error), 0) AS errors
        FROM dataset_items
        """,
    ).fetchone()
    return (row["ok"], row["errors"])


def insert_run(
    conn: sqlite3.Connection,
    mode: str,
    regions: list[str],
    max_items: int,
    listed_count: int,
    succeeded: int,
    failed: int,
    started_at: datetime,
    finished_at: datetime,
) -> int:
    """Record a completed run. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO runs
            (mode, regions, max_items, listed_count, succeeded, failed, started_at, finished_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            mode,
            ",".join(regions),
            max_items,
            listed_count,
            succeeded,
            failed,
            started_at.isoformat(),
            finished_at.isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def export_items_json(dataset: Dataset, *, include_errors: bool = True) -> str:
    """Export stored records as a JSON array string."""
    return json.dumps(list(dataset.items(include_errors=include_errors)), indent=2, ensure_ascii=False)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
