"""Recruiter scoring pipeline.

Window selection, eligible submission filtering, job baselines, the
streaming per-recruiter performance fold, the score transform and slot
budget updates, wired together by ``RecruitersScoring``.
"""

from recruiter_scoring.pipeline.aggregation import (
    AgentJobAggregator,
    AgentJobStat,
    JobBaseline,
    JobBaselineAggregator,
)
from recruiter_scoring.pipeline.budget import BudgetUpdate, BudgetUpdater, WriteResult
from recruiter_scoring.pipeline.events import EligibleSubmission, EventFilter
from recruiter_scoring.pipeline.runner import RecruitersScoring, RunSummary
from recruiter_scoring.pipeline.scorer import AgentPoints, PerformanceScorer
from recruiter_scoring.pipeline.transform import score_transform
from recruiter_scoring.pipeline.window import TimeWindow, select_window

__all__ = [
    "AgentJobAggregator",
    "AgentJobStat",
    "JobBaseline",
    "JobBaselineAggregator",
    "BudgetUpdate",
    "BudgetUpdater",
    "WriteResult",
    "EligibleSubmission",
    "EventFilter",
    "RecruitersScoring",
    "RunSummary",
    "AgentPoints",
    "PerformanceScorer",
    "score_transform",
    "TimeWindow",
    "select_window",
]
