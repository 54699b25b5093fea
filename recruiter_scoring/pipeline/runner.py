"""Scoring run orchestration.

One run reads the clock once, builds the job baselines for the window,
streams per-recruiter statistics through the performance fold and applies
each recruiter's score to their slot budget, strictly one recruiter at a
time in agent order.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from contextlib import aclosing
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from recruiter_scoring.config import Settings, get_settings
from recruiter_scoring.pipeline.aggregation import AgentJobAggregator, JobBaselineAggregator
from recruiter_scoring.pipeline.budget import BudgetUpdate, BudgetUpdater
from recruiter_scoring.pipeline.scorer import PerformanceScorer
from recruiter_scoring.pipeline.transform import score_transform
from recruiter_scoring.pipeline.window import select_window
from recruiter_scoring.storage import SQLiteStorage, get_storage

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunSummary:
    """Write outcomes accumulated over every recruiter scored in a run."""

    inserted: int = 0
    matched: int = 0
    modified: int = 0
    deleted: int = 0
    upserted: int = 0
    skipped: int = 0
    skipped_agents: list[str] = field(default_factory=list)
    agents_scored: int = 0

    def record(self, update: BudgetUpdate) -> None:
        self.agents_scored += 1
        if update.result is None:
            self.skipped += 1
            self.skipped_agents.append(update.agent_id)
            return
        self.inserted += update.result.inserted
        self.matched += update.result.matched
        self.modified += update.result.modified
        self.deleted += update.result.deleted
        self.upserted += update.result.upserted

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RecruitersScoring:
    """Scores recruiters over the review window and adjusts their slots."""

    def __init__(
        self,
        storage: SQLiteStorage | None = None,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._storage = storage or get_storage()
        self._settings = settings or get_settings()
        self._clock = clock or utc_now

    async def run(self) -> RunSummary:
        """Run one full scoring pass and return its write summary.

        Aggregation query failures propagate; no partial summary is
        returned in that case.
        """
        now = self._clock()
        started = time.monotonic()
        logger.info("RecruitersScoring run at: %s", now.isoformat())

        window = select_window(now, self._settings.window_weeks)
        baselines = await JobBaselineAggregator(self._storage).baselines(window)
        logger.info(
            "Window %s -> %s: %d jobs with reviewed submissions",
            window.start.isoformat(),
            window.end.isoformat(),
            len(baselines),
        )

        scorer = PerformanceScorer(baselines)
        updater = BudgetUpdater(self._storage, self._settings.min_max_slots)
        stats = AgentJobAggregator(self._storage).stream(window)
        summary = RunSummary()

        async with aclosing(stats), aclosing(scorer.fold(stats)) as flushes:
            async for points in flushes:
                score = score_transform(
                    points.total_submissions,
                    points.net_points,
                    self._settings.growth_factor,
                    self._settings.diminishing_factor,
                )
                update = await updater.apply(points, score, run_at=now.timestamp())
                logger.debug(
                    "Agent %s: net=%.3f over %d submissions, score=%+d, slots %s -> %s",
                    points.agent_id,
                    points.net_points,
                    points.total_submissions,
                    score,
                    update.previous_max_slots,
                    update.new_max_slots,
                )
                summary.record(update)

        logger.info(
            "RecruitersScoring done in %.2fs: %d agents, %d matched, %d modified, %d skipped",
            time.monotonic() - started,
            summary.agents_scored,
            summary.matched,
            summary.modified,
            summary.skipped,
        )
        return summary
