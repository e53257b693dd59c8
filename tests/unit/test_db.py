"""Tests for the database layer: init, upsert, dedup, project-scoped fetch."""

from datetime import datetime

import pytest

from talent_funnel.core.db import count_candidates, fetch_candidates, init_db, upsert_candidate
from talent_funnel.core.schemas import Availability, Candidate


def _candidate(id: str = "c1", **kw: object) -> Candidate:
    defaults: dict[str, object] = {
        "id": id,
        "name": "Emma Davis",
        "job_title": "Charge Nurse",
        "location": "Denver, CO",
        "experience": 9,
        "skills": ["Leadership", "Triage"],
        "industry": "Healthcare",
        "availability": Availability.AVAILABLE,
        "last_active": datetime(2025, 3, 1, 12, 30),
    }
    defaults.update(kw)
    return Candidate(**defaults)  # type: ignore[arg-type]


@pytest.fixture()
def db(tmp_path):  # type: ignore[no-untyped-def]
    """Provide a fresh SQLite connection per test."""
    conn = init_db(tmp_path / "test.db")
    yield conn
    conn.close()


class TestInitDb:
    def test_creates_candidates_table(self, db) -> None:  # type: ignore[no-untyped-def]
        tables = {
            row[0]
            for row in db.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        }
        assert "candidates" in tables

    def test_creates_parent_dirs(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        conn = init_db(tmp_path / "nested" / "dir" / "test.db")
        assert (tmp_path / "nested" / "dir" / "test.db").exists()
        conn.close()

    def test_idempotent(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        init_db(tmp_path / "test.db").close()
        conn = init_db(tmp_path / "test.db")
        assert count_candidates(conn, "p1") == 0
        conn.close()


class TestUpsertCandidate:
    def test_insert_new(self, db) -> None:  # type: ignore[no-untyped-def]
        assert upsert_candidate(db, _candidate(), "p1") is True
        assert count_candidates(db, "p1") == 1

    def test_duplicate_ignored(self, db) -> None:  # type: ignore[no-untyped-def]
        upsert_candidate(db, _candidate(), "p1")
        assert upsert_candidate(db, _candidate(name="Changed"), "p1") is False
        assert fetch_candidates(db, "p1")[0].name == "Emma Davis"

    def test_same_id_other_project(self, db) -> None:  # type: ignore[no-untyped-def]
        assert upsert_candidate(db, _candidate(), "p1") is True
        assert upsert_candidate(db, _candidate(), "p2") is True
        assert count_candidates(db, "p1") == 1
        assert count_candidates(db, "p2") == 1


class TestFetchCandidates:
    def test_roundtrip_fields(self, db) -> None:  # type: ignore[no-untyped-def]
        original = _candidate()
        upsert_candidate(db, original, "p1")
        assert fetch_candidates(db, "p1") == [original]

    def test_insertion_order(self, db) -> None:  # type: ignore[no-untyped-def]
        for cid in ("b", "a", "c"):
            upsert_candidate(db, _candidate(cid), "p1")
        assert [c.id for c in fetch_candidates(db, "p1")] == ["b", "a", "c"]

    def test_scoped_to_project(self, db) -> None:  # type: ignore[no-untyped-def]
        upsert_candidate(db, _candidate("a"), "p1")
        upsert_candidate(db, _candidate("b"), "p2")
        assert [c.id for c in fetch_candidates(db, "p2")] == ["b"]
        assert fetch_candidates(db, "missing") == []

    def test_missing_experience_preserved(self, db) -> None:  # type: ignore[no-untyped-def]
        upsert_candidate(db, _candidate(experience=None, last_active=None), "p1")
        fetched = fetch_candidates(db, "p1")[0]
        assert fetched.experience is None
        assert fetched.last_active is None

    def test_malformed_row_skipped(self, db) -> None:  # type: ignore[no-untyped-def]
        upsert_candidate(db, _candidate("good"), "p1")
        upsert_candidate(db, _candidate("bad"), "p1")
        db.execute("UPDATE candidates SET experience = -3 WHERE id = 'bad'")
        db.commit()
        assert [c.id for c in fetch_candidates(db, "p1")] == ["good"]

    def test_corrupt_skills_json_skipped(self, db) -> None:  # type: ignore[no-untyped-def]
        upsert_candidate(db, _candidate("bad"), "p1")
        db.execute("UPDATE candidates SET skills_json = '{not json' WHERE id = 'bad'")
        db.commit()
        assert fetch_candidates(db, "p1") == []
