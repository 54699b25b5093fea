"""Relative performance scoring.

Each recruiter is compared to the other recruiters working the same job: on
a job with approval ratio ``r``, a recruiter with ``total`` eligible
submissions is expected to get ``total * r`` of them approved. The
difference between actual and expected passes is that job's delta, and a
recruiter's net points are the sum of their deltas across every job in the
window. Deltas of all recruiters on one job sum to zero.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Mapping
from dataclasses import dataclass

from recruiter_scoring.exceptions import MissingBaselineError, UnsortedStreamError
from recruiter_scoring.pipeline.aggregation import AgentJobStat, JobBaseline

logger = logging.getLogger(__name__)


@dataclass
class AgentPoints:
    """Accumulated performance of one recruiter over the window."""

    agent_id: str
    total_submissions: int = 0
    net_points: float = 0.0


def relative_delta(stat: AgentJobStat, baseline: JobBaseline) -> float:
    """Passes above (or below) what the job's average ratio predicts."""
    return stat.passed - stat.total * baseline.approval_ratio


class PerformanceScorer:
    """Folds an agent-sorted stream of job statistics into per-agent points.

    The input stream must be ordered by agent id ascending. The order is
    checked as records arrive; a regression raises ``UnsortedStreamError``
    rather than emitting a second, partial accumulator for the same agent.
    """

    def __init__(self, baselines: Mapping[str, JobBaseline]) -> None:
        self._baselines = baselines

    async def fold(self, stats: AsyncIterable[AgentJobStat]) -> AsyncIterator[AgentPoints]:
        """Yield one ``AgentPoints`` per agent, in stream order.

        The accumulator for an agent is yielded as soon as the first record
        of the next agent arrives; the last agent is yielded once the stream
        is exhausted. An empty stream yields nothing.
        """
        current: AgentPoints | None = None
        async for stat in stats:
            if current is None:
                current = AgentPoints(agent_id=stat.agent_id)
            elif stat.agent_id != current.agent_id:
                if stat.agent_id < current.agent_id:
                    raise UnsortedStreamError(
                        f"agent {stat.agent_id!r} arrived after {current.agent_id!r}"
                    )
                logger.debug(
                    "Agent %s complete: %d submissions, %.3f points",
                    current.agent_id,
                    current.total_submissions,
                    current.net_points,
                )
                yield current
                current = AgentPoints(agent_id=stat.agent_id)

            baseline = self._baselines.get(stat.job_id)
            if baseline is None:
                raise MissingBaselineError(
                    f"no baseline for job {stat.job_id!r} (agent {stat.agent_id!r})"
                )
            current.total_submissions += stat.total
            current.net_points += relative_delta(stat, baseline)

        if current is not None:
            yield current
