"""Shared test configuration.

Uses a temporary SQLite database for each test session so tests
don't pollute the production database, and provides helpers for seeding
submissions with review history.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Use a temporary database for tests
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_recruiter_scoring.db")
os.environ["RECRUITER_SCORING_DB_PATH"] = _test_db_path

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear cached settings so each test gets fresh config."""
    from recruiter_scoring.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_storage():
    """Reset the SQLite storage between tests to prevent cross-contamination."""
    import recruiter_scoring.storage as storage_mod

    test_db = os.path.join(_test_db_dir, f"test_{os.getpid()}.db")
    storage_mod._storage = storage_mod.SQLiteStorage(test_db)
    storage_mod._storage.clear_all()
    yield
    storage_mod._storage.clear_all()


@pytest.fixture
def storage():
    """Create a fresh SQLiteStorage with a temporary database."""
    from recruiter_scoring.storage import SQLiteStorage

    tmpdir = tempfile.mkdtemp()
    return SQLiteStorage(os.path.join(tmpdir, "test_scoring.db"))


class Seeder:
    """Stores submissions with review history relative to ``NOW``."""

    def __init__(self, storage) -> None:
        self.storage = storage
        self._n = 0

    def submission(
        self,
        agent_id: str,
        job_id: str,
        passed: bool | None = True,
        reviewed_at: datetime | None = None,
        inevitable: bool | None = None,
        extra_events: list[tuple[str, datetime]] | None = None,
    ) -> str:
        """Store a submission with an ExpertReviewed event (default: a day before NOW)."""
        self._n += 1
        sid = f"sub-{self._n:05d}"
        self.storage.save_submission(
            submission_id=sid,
            agent_id=agent_id,
            job_id=job_id,
            review_pass=passed,
            review_inevitable=inevitable,
            submitted_at=(NOW - timedelta(days=10)).timestamp(),
        )
        when = reviewed_at if reviewed_at is not None else NOW - timedelta(days=1)
        self.storage.add_review_event(sid, "ExpertReviewed", when.timestamp())
        for status, at in extra_events or []:
            self.storage.add_review_event(sid, status, at.timestamp())
        return sid

    def job(self, agent_id: str, job_id: str, passed: int, total: int) -> None:
        """Store ``total`` reviewed submissions of which ``passed`` passed."""
        for i in range(total):
            self.submission(agent_id, job_id, passed=i < passed)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def seed(storage) -> Seeder:
    return Seeder(storage)
