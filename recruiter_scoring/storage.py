"""SQLite persistence layer for recruiter scoring.

Holds candidate submissions, their review history and the per-recruiter
slot preferences, using SQLite in WAL mode. Seeding and inspection go
through synchronous sqlite3 methods; the scoring pipeline uses the async
aiosqlite methods so that streaming reads and budget writes can interleave
on separate connections.
"""

from __future__ import annotations

import os
import sqlite3
import time
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import aiosqlite

# Default database path (overridable via RECRUITER_SCORING_DB_PATH env var)
_DEFAULT_DB_PATH = Path(
    os.environ.get("RECRUITER_SCORING_DB_PATH", "")
    or str(Path(__file__).resolve().parent.parent / "data" / "recruiter_scoring.db")
)

EXPERT_REVIEWED = "ExpertReviewed"

# SQL schema
_SCHEMA = """
CREATE TABLE IF NOT EXISTS submissions (
    submission_id TEXT PRIMARY KEY,
    agent_id TEXT NOT NULL,
    job_id TEXT NOT NULL,
    review_pass INTEGER,  -- NULL until reviewed
    review_inevitable INTEGER,  -- any non-NULL value marks an inevitable DQ
    submitted_at REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS review_events (
    event_id INTEGER PRIMARY KEY AUTOINCREMENT,
    submission_id TEXT NOT NULL REFERENCES submissions(submission_id),
    status TEXT NOT NULL,
    at REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_review_events_status_at
    ON review_events (status, at);

CREATE TABLE IF NOT EXISTS preferences (
    agent_id TEXT PRIMARY KEY,
    max_slots INTEGER NOT NULL,
    updated_at REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS score_history (
    entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
    agent_id TEXT NOT NULL,
    run_at REAL NOT NULL,
    score INTEGER NOT NULL,
    previous_max_slots INTEGER NOT NULL,
    new_max_slots INTEGER NOT NULL,
    total_submissions INTEGER NOT NULL,
    net_points REAL NOT NULL
);
"""

# Submissions with at least one ExpertReviewed event inside [start, end).
# Status and time range are checked on the same event row, and the GROUP BY
# counts each submission once however many of its events match.
_ELIGIBLE_SUBMISSIONS = """
SELECT s.submission_id AS submission_id,
       s.agent_id AS agent_id,
       s.job_id AS job_id,
       CASE WHEN s.review_pass = 1 THEN 1 ELSE 0 END AS pass,
       MIN(e.at) AS reviewed_at
FROM submissions s
JOIN review_events e ON e.submission_id = s.submission_id
WHERE e.status = :status
  AND e.at >= :start
  AND e.at < :end
  AND s.review_inevitable IS NULL
GROUP BY s.submission_id
"""

_JOB_TOTALS = f"""
WITH eligible AS ({_ELIGIBLE_SUBMISSIONS})
SELECT job_id, COUNT(*) AS total, SUM(pass) AS pass
FROM eligible
GROUP BY job_id
ORDER BY job_id
"""

_AGENT_JOB_TOTALS = f"""
WITH eligible AS ({_ELIGIBLE_SUBMISSIONS})
SELECT agent_id, job_id, COUNT(*) AS total, SUM(pass) AS pass
FROM eligible
GROUP BY agent_id, job_id
ORDER BY agent_id ASC, job_id ASC
"""


def _window_params(start: float, end: float) -> dict[str, Any]:
    return {"status": EXPERT_REVIEWED, "start": start, "end": end}


class SQLiteStorage:
    """SQLite storage for submissions, review history and slot preferences.

    Provides both synchronous and async methods. The synchronous methods
    use sqlite3 directly; async methods use aiosqlite.
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        self._db_path = str(db_path or _DEFAULT_DB_PATH)
        os.makedirs(os.path.dirname(self._db_path), exist_ok=True)
        self._init_db()

    @property
    def db_path(self) -> str:
        return self._db_path

    def _get_conn(self) -> sqlite3.Connection:
        """Get a new synchronous connection with WAL mode."""
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        conn = self._get_conn()
        try:
            conn.executescript(_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Submissions and review history
    # ------------------------------------------------------------------

    def save_submission(
        self,
        submission_id: str,
        agent_id: str,
        job_id: str,
        review_pass: bool | None = None,
        review_inevitable: bool | None = None,
        submitted_at: float | None = None,
    ) -> None:
        """Insert or replace a submission record."""
        conn = self._get_conn()
        try:
            conn.execute(
                """INSERT OR REPLACE INTO submissions
                   (submission_id, agent_id, job_id, review_pass,
                    review_inevitable, submitted_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    submission_id,
                    agent_id,
                    job_id,
                    None if review_pass is None else int(review_pass),
                    None if review_inevitable is None else int(review_inevitable),
                    submitted_at or time.time(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def add_review_event(self, submission_id: str, status: str, at: float) -> None:
        """Append an event to a submission's review history."""
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO review_events (submission_id, status, at) VALUES (?, ?, ?)",
                (submission_id, status, at),
            )
            conn.commit()
        finally:
            conn.close()

    def get_review_events(self, submission_id: str) -> list[dict[str, Any]]:
        """Review history for a submission, oldest first."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """SELECT submission_id, status, at FROM review_events
                   WHERE submission_id = ? ORDER BY at, event_id""",
                (submission_id,),
            ).fetchall()
            return [dict(r) for r in rows]
        finally:
            conn.close()

    def clear_submissions(self) -> None:
        """Delete all submissions and review events (for testing)."""
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM review_events")
            conn.execute("DELETE FROM submissions")
            conn.commit()
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Preferences (slot budgets)
    # ------------------------------------------------------------------

    def save_preference(self, agent_id: str, max_slots: int) -> None:
        """Create or overwrite a recruiter's slot budget."""
        conn = self._get_conn()
        try:
            conn.execute(
                """INSERT OR REPLACE INTO preferences (agent_id, max_slots, updated_at)
                   VALUES (?, ?, ?)""",
                (agent_id, max_slots, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    def get_preference(self, agent_id: str) -> dict[str, Any] | None:
        """Get a recruiter's slot budget. Returns dict or None."""
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM preferences WHERE agent_id = ?", (agent_id,)
            ).fetchone()
            if row is None:
                return None
            return dict(row)
        finally:
            conn.close()

    def get_score_history(self, agent_id: str | None = None) -> list[dict[str, Any]]:
        """Score history rows, oldest first, optionally for one recruiter."""
        conn = self._get_conn()
        try:
            if agent_id is not None:
                rows = conn.execute(
                    "SELECT * FROM score_history WHERE agent_id = ? ORDER BY entry_id",
                    (agent_id,),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM score_history ORDER BY entry_id"
                ).fetchall()
            return [dict(r) for r in rows]
        finally:
            conn.close()

    def clear_preferences(self) -> None:
        """Delete all preferences and score history (for testing)."""
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM score_history")
            conn.execute("DELETE FROM preferences")
            conn.commit()
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Async aggregation queries (via aiosqlite)
    # ------------------------------------------------------------------

    async def async_eligible_submissions(
        self, start: float, end: float
    ) -> list[dict[str, Any]]:
        """Submissions reviewed inside ``[start, end)`` with their first matching event."""
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                _ELIGIBLE_SUBMISSIONS + " ORDER BY submission_id",
                _window_params(start, end),
            )
            rows = await cursor.fetchall()
            return [dict(r) for r in rows]

    async def async_job_totals(self, start: float, end: float) -> list[dict[str, Any]]:
        """Total and passed eligible submissions per job."""
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_JOB_TOTALS, _window_params(start, end))
            rows = await cursor.fetchall()
            return [dict(r) for r in rows]

    async def async_iter_agent_job_totals(
        self, start: float, end: float
    ) -> AsyncIterator[dict[str, Any]]:
        """Stream total and passed eligible submissions per (agent, job).

        Rows are ordered by agent id, then job id, and fetched lazily from
        the cursor.
        """
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(_AGENT_JOB_TOTALS, _window_params(start, end)) as cursor:
                async for row in cursor:
                    yield dict(row)

    # ------------------------------------------------------------------
    # Async preference access
    # ------------------------------------------------------------------

    async def async_get_preference(self, agent_id: str) -> dict[str, Any] | None:
        """Async version of get_preference."""
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM preferences WHERE agent_id = ?", (agent_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return dict(row)

    async def async_update_max_slots(
        self,
        agent_id: str,
        expected_max_slots: int,
        new_max_slots: int,
        *,
        score: int,
        total_submissions: int,
        net_points: float,
        run_at: float | None = None,
    ) -> int:
        """Conditionally set max_slots and record the change in score history.

        The update only applies while the stored value still equals
        ``expected_max_slots``. Returns the number of matched rows (0 or 1);
        the history row is written in the same transaction only on a match.
        """
        now = time.time()
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("PRAGMA foreign_keys=ON")
            cursor = await db.execute(
                """UPDATE preferences SET max_slots = ?, updated_at = ?
                   WHERE agent_id = ? AND max_slots = ?""",
                (new_max_slots, now, agent_id, expected_max_slots),
            )
            matched = cursor.rowcount
            if matched:
                await db.execute(
                    """INSERT INTO score_history
                       (agent_id, run_at, score, previous_max_slots, new_max_slots,
                        total_submissions, net_points)
                       VALUES (?, ?, ?, ?, ?, ?, ?)""",
                    (
                        agent_id,
                        run_at or now,
                        score,
                        expected_max_slots,
                        new_max_slots,
                        total_submissions,
                        net_points,
                    ),
                )
            await db.commit()
            return matched

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def clear_all(self) -> None:
        """Clear all tables (for testing)."""
        self.clear_submissions()
        self.clear_preferences()


# Module-level singleton
_storage: SQLiteStorage | None = None


def get_storage(db_path: str | Path | None = None) -> SQLiteStorage:
    """Get or create the global storage instance."""
    global _storage
    if _storage is None:
        _storage = SQLiteStorage(db_path)
    return _storage


def reset_storage(db_path: str | Path | None = None) -> SQLiteStorage:
    """Reset the global storage instance (for testing)."""
    global _storage
    _storage = SQLiteStorage(db_path)
    return _storage
