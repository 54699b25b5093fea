"""Slot budget updates.

A recruiter's ``max_slots`` is moved by the run's score and clamped to a
floor. Per-recruiter failures (missing preference record, a concurrent
change, a database error) are logged and reported as skipped updates; they
never abort the run.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass

from recruiter_scoring.exceptions import AgentNotFoundError, BudgetConflictError
from recruiter_scoring.pipeline.scorer import AgentPoints
from recruiter_scoring.storage import SQLiteStorage

logger = logging.getLogger(__name__)

MIN_MAX_SLOTS = 1


@dataclass
class WriteResult:
    """Outcome counters of a persistence write (upsert-result shape)."""

    inserted: int = 0
    matched: int = 0
    modified: int = 0
    deleted: int = 0
    upserted: int = 0


@dataclass
class BudgetUpdate:
    """Result of applying one recruiter's score."""

    agent_id: str
    score: int
    previous_max_slots: int | None = None
    new_max_slots: int | None = None
    result: WriteResult | None = None
    error: str | None = None

    @property
    def skipped(self) -> bool:
        return self.result is None


def clamp_max_slots(current: int, score: int, floor: int = MIN_MAX_SLOTS) -> int:
    return max(floor, current + score)


class BudgetUpdater:
    """Applies score deltas to persisted slot budgets."""

    def __init__(self, storage: SQLiteStorage, min_max_slots: int = MIN_MAX_SLOTS) -> None:
        self._storage = storage
        self._floor = min_max_slots

    async def apply(
        self,
        points: AgentPoints,
        score: int,
        run_at: float | None = None,
    ) -> BudgetUpdate:
        """Read, clamp and conditionally write one recruiter's budget."""
        update = BudgetUpdate(agent_id=points.agent_id, score=score)
        try:
            update.result = await self._write(points, score, update, run_at)
        except (AgentNotFoundError, BudgetConflictError) as exc:
            logger.warning("Skipping budget update: %s", exc)
            update.error = str(exc)
        except sqlite3.Error as exc:
            logger.exception("Budget update failed for agent %s", points.agent_id)
            update.error = f"{type(exc).__name__}: {exc}"
        return update

    async def _write(
        self,
        points: AgentPoints,
        score: int,
        update: BudgetUpdate,
        run_at: float | None,
    ) -> WriteResult:
        pref = await self._storage.async_get_preference(points.agent_id)
        if pref is None:
            raise AgentNotFoundError(f"agent {points.agent_id} not found")

        current = pref["max_slots"]
        new = clamp_max_slots(current, score, self._floor)
        update.previous_max_slots = current
        update.new_max_slots = new

        matched = await self._storage.async_update_max_slots(
            points.agent_id,
            current,
            new,
            score=score,
            total_submissions=points.total_submissions,
            net_points=points.net_points,
            run_at=run_at or time.time(),
        )
        if not matched:
            raise BudgetConflictError(
                f"max_slots of agent {points.agent_id} changed during update"
            )
        return WriteResult(matched=matched, modified=matched if new != current else 0)
