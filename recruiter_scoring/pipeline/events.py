"""Eligible submission selection.

A submission is eligible for a run when at least one of its review events
is an ``ExpertReviewed`` event inside the window, and it does not carry an
inevitable disqualification marker. The earliest matching event is kept as
the submission's representative review.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from recruiter_scoring.pipeline.window import TimeWindow
from recruiter_scoring.storage import SQLiteStorage


@dataclass(frozen=True)
class EligibleSubmission:
    """A submission counted in the current window."""

    submission_id: str
    agent_id: str
    job_id: str
    passed: int  # 1 if the review passed, else 0
    reviewed_at: datetime  # earliest ExpertReviewed event in the window


class EventFilter:
    """Selects the submissions that count toward a window."""

    def __init__(self, storage: SQLiteStorage) -> None:
        self._storage = storage

    async def eligible_submissions(self, window: TimeWindow) -> list[EligibleSubmission]:
        rows = await self._storage.async_eligible_submissions(
            window.start_ts, window.end_ts
        )
        return [
            EligibleSubmission(
                submission_id=r["submission_id"],
                agent_id=r["agent_id"],
                job_id=r["job_id"],
                passed=r["pass"],
                reviewed_at=datetime.fromtimestamp(r["reviewed_at"], tz=timezone.utc),
            )
            for r in rows
        ]
