"""Tests for the dataset store: init, push, key-value artifacts, runs, export."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from hubjobs.core.db import Dataset, count_items, export_items_json, init_db, insert_run


@pytest.fixture()
def db(tmp_path):  # type: ignore[no-untyped-def]
    """Provide a fresh SQLite connection per test."""
    conn = init_db(tmp_path / "test.db")
    yield conn
    conn.close()


@pytest.fixture()
def dataset(db):  # type: ignore[no-untyped-def]
    return Dataset(db)


class TestInitDb:
    def test_creates_tables(self, db) -> None:  # type: ignore[no-untyped-def]
        tables = {
            row[0]
            for row in db.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }
        assert "dataset_items" in tables
        assert "key_value" in tables
        assert "runs" in tables

    def test_idempotent(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        """Calling init_db twice on the same path doesn't error."""
        p = tmp_path / "double.db"
        conn1 = init_db(p)
        conn1.close()
        conn2 = init_db(p)
        conn2.close()

    def test_creates_parent_directory(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        conn = init_db(tmp_path / "nested" / "dir" / "data.db")
        conn.close()
        assert (tmp_path / "nested" / "dir" / "data.db").exists()


class TestPushData:
    def test_record_stored(self, dataset, db) -> None:  # type: ignore[no-untyped-def]
        dataset.push_data({"id": "j1", "url": "https://thehub.io/jobs/j1", "title": "Dev"})
        row = db.execute("SELECT job_id, url, is_error, payload FROM dataset_items").fetchone()
        assert row["job_id"] == "j1"
        assert row["url"] == "https://thehub.io/jobs/j1"
        assert row["is_error"] == 0
        assert json.loads(row["payload"])["title"] == "Dev"

    def test_placeholder_flagged(self, dataset, db) -> None:  # type: ignore[no-untyped-def]
        dataset.push_data({"url": "https://thehub.io/jobs/j2", "jobId": "j2", "error": "boom"})
        row = db.execute("SELECT job_id, is_error FROM dataset_items").fetchone()
        assert row["job_id"] == "j2"
        assert row["is_error"] == 1

    def test_every_push_is_a_row(self, dataset) -> None:  # type: ignore[no-untyped-def]
        dataset.push_data({"id": "j1"})
        dataset.push_data({"id": "j1"})
        assert len(list(dataset.items())) == 2

    def test_items_in_push_order(self, dataset) -> None:  # type: ignore[no-untyped-def]
        for i in range(3):
            dataset.push_data({"id": f"j{i}"})
        assert [item["id"] for item in dataset.items()] == ["j0", "j1", "j2"]

    def test_items_without_errors(self, dataset) -> None:  # type: ignore[no-untyped-def]
        dataset.push_data({"id": "j1"})
        dataset.push_data({"url": "u", "error": "x"})
        assert list(dataset.items(include_errors=False)) == [{"id": "j1"}]

    def test_unicode_preserved(self, dataset) -> None:  # type: ignore[no-untyped-def]
        dataset.push_data({"id": "j1", "title": "Udvikler i København"})
        assert next(dataset.items())["title"] == "Udvikler i København"


class TestKeyValue:
    def test_set_and_get(self, dataset) -> None:  # type: ignore[no-untyped-def]
        dataset.set_value("error-1.txt", "URL: x")
        assert dataset.get_value("error-1.txt") == "URL: x"

    def test_missing_key(self, dataset) -> None:  # type: ignore[no-untyped-def]
        assert dataset.get_value("nope") is None

    def test_overwrite(self, dataset, db) -> None:  # type: ignore[no-untyped-def]
        dataset.set_value("k", "one")
        dataset.set_value("k", "two", content_type="application/json")
        row = db.execute("SELECT value, content_type FROM key_value WHERE key='k'").fetchone()
        assert row["value"] == "two"
        assert row["content_type"] == "application/json"


class TestCountItems:
    def test_empty(self, db) -> None:  # type: ignore[no-untyped-def]
        assert count_items(db) == (0, 0)

    def test_mixed(self, dataset, db) -> None:  # type: ignore[no-untyped-def]
        dataset.push_data({"id": "a"})
        dataset.push_data({"id": "b"})
        dataset.push_data({"url": "u", "error": "x"})
        assert count_items(db) == (2, 1)


class TestInsertRun:
    def test_round_trip(self, db) -> None:  # type: ignore[no-untyped-def]
        now = datetime.now(timezone.utc)
        run_id = insert_run(
            db,
            mode="listing",
            regions=["DK", "REMOTE"],
            max_items=10,
            listed_count=10,
            succeeded=9,
            failed=1,
            started_at=now,
            finished_at=now + timedelta(seconds=5),
        )
        assert run_id > 0
        row = db.execute("SELECT * FROM runs WHERE id = ?", (run_id,)).fetchone()
        assert row["mode"] == "listing"
        assert row["regions"] == "DK,REMOTE"
        assert row["succeeded"] == 9
        assert row["failed"] == 1


class TestExportItemsJson:
    def test_export(self, dataset) -> None:  # type: ignore[no-untyped-def]
        dataset.push_data({"id": "a"})
        dataset.push_data({"url": "u", "error": "x"})
        assert json.loads(export_items_json(dataset)) == [{"id": "a"}, {"url": "u", "error": "x"}]

    def test_export_without_errors(self, dataset) -> None:  # type: ignore[no-untyped-def]
        dataset.push_data({"id": "a"})
        dataset.push_data({"url": "u", "error": "x"})
        assert json.loads(export_items_json(dataset, include_errors=False)) == [{"id": "a"}]

    def test_empty(self, dataset) -> None:  # type: ignore[no-untyped-def]
        assert export_items_json(dataset) == "[]"
