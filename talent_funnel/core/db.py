"""SQLite candidate store: project-scoped candidate records."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from talent_funnel.core.schemas import Candidate

logger = logging.getLogger(__name__)

_CANDIDATES_TABLE = """
CREATE TABLE IF NOT EXISTS candidates (
    id              TEXT    NOT NULL,
    project_id      TEXT    NOT NULL,
    name            TEXT    NOT NULL DEFAULT '',
    job_title       TEXT    NOT NULL DEFAULT '',
    location        TEXT    NOT NULL DEFAULT '',
    experience      INTEGER,
    skills_json     TEXT    NOT NULL DEFAULT '[]',
    industry        TEXT    NOT NULL DEFAULT '',
    education       TEXT    NOT NULL DEFAULT '',
    summary         TEXT    NOT NULL DEFAULT '',
    availability    TEXT    NOT NULL DEFAULT 'passive',
    last_active     TEXT,
    email           TEXT    NOT NULL DEFAULT '',
    phone           TEXT    NOT NULL DEFAULT '',
    source          TEXT    NOT NULL DEFAULT '',
    created_at      TEXT    NOT NULL,
    PRIMARY KEY (project_id, id)
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_CANDIDATES_TABLE)
    conn.commit()
    return conn


def upsert_candidate(conn: sqlite3.Connection, candidate: Candidate, project_id: str) -> bool:
    """Insert a candidate, ignoring if (project_id, id) already exists.

    Returns True if a new row was inserted, False if it was a duplicate.
    """
    c = candidate
    try:
        conn.execute(
            """
            INSERT INTO candidates
                (id, project_id, name, job_title, location, experience, skills_json,
                 industry, education, summary, availability, last_active,
                 email, phone, source, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                c.id,
                project_id,
                c.name,
                c.job_title,
                c.location,
                c.experience,
                json.dumps(c.skills),
                c.industry,
                c.education,
                c.summary,
                c.availability.value,
                c.last_active.isoformat() if c.last_active else None,
                c.email,
                c.phone,
                c.source,
                datetime.now().isoformat(),
            ),
        )
        conn.commit()
        return True
    except sqlite3.IntegrityError:
        return False


def _row_to_candidate(row: sqlite3.Row) -> Candidate:
    data = dict(row)
    data["skills"] = json.loads(data.pop("skills_json") or "[]")
    data.pop("project_id", None)
    data.pop("created_at", None)
    return Candidate.model_validate(data)


def fetch_candidates(conn: sqlite3.Connection, project_id: str) -> list[Candidate]:
    """Return every candidate stored for ``project_id``, in insertion order.

    Rows that no longer validate are skipped with a warning.
    """
    rows = conn.execute(
        "SELECT * FROM candidates WHERE project_id = ? ORDER BY rowid",
        (project_id,),
    ).fetchall()

    candidates: list[Candidate] = []
    for row in rows:
        try:
            candidates.append(_row_to_candidate(row))
        except (ValidationError, json.JSONDecodeError):
            logger.warning("Skipping malformed candidate row '%s'", row["id"], exc_info=True)
    logger.info("Fetched %d candidates for project '%s'", len(candidates), project_id)
    return candidates


def count_candidates(conn: sqlite3.Connection, project_id: str) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM candidates WHERE project_id = ?",
        (project_id,),
    ).fetchone()
    return int(row[0])
