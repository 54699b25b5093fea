"""Job-level baselines and per-recruiter-per-job statistics.

Both aggregations run over the same eligible submissions (see
``recruiter_scoring.pipeline.events``). Baselines are materialized in full;
per-agent statistics are streamed in ascending agent order.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing
from dataclasses import dataclass

from recruiter_scoring.pipeline.window import TimeWindow
from recruiter_scoring.storage import SQLiteStorage


@dataclass(frozen=True)
class JobBaseline:
    """Volume and approval ratio of all eligible submissions for one job."""

    job_id: str
    total: int
    passed: int

    @property
    def approval_ratio(self) -> float:
        return self.passed / self.total


@dataclass(frozen=True)
class AgentJobStat:
    """Volume and passes of one recruiter on one job."""

    agent_id: str
    job_id: str
    total: int
    passed: int


class JobBaselineAggregator:
    """Builds the job id -> baseline map for a window."""

    def __init__(self, storage: SQLiteStorage) -> None:
        self._storage = storage

    async def baselines(self, window: TimeWindow) -> dict[str, JobBaseline]:
        rows = await self._storage.async_job_totals(window.start_ts, window.end_ts)
        return {
            r["job_id"]: JobBaseline(job_id=r["job_id"], total=r["total"], passed=r["pass"])
            for r in rows
            if r["total"] > 0
        }


class AgentJobAggregator:
    """Streams per-(agent, job) statistics sorted by agent id."""

    def __init__(self, storage: SQLiteStorage) -> None:
        self._storage = storage

    async def stream(self, window: TimeWindow) -> AsyncIterator[AgentJobStat]:
        rows = self._storage.async_iter_agent_job_totals(window.start_ts, window.end_ts)
        async with aclosing(rows):
            async for r in rows:
                yield AgentJobStat(
                    agent_id=r["agent_id"],
                    job_id=r["job_id"],
                    total=r["total"],
                    passed=r["pass"],
                )
