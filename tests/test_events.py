"""Tests for eligible submission selection and the aggregators built on it."""

from __future__ import annotations

from datetime import timedelta, timezone

import pytest

from recruiter_scoring.pipeline.aggregation import (
    AgentJobAggregator,
    JobBaselineAggregator,
)
from recruiter_scoring.pipeline.events import EventFilter
from recruiter_scoring.pipeline.window import select_window


class TestEventFilter:
    @pytest.mark.asyncio
    async def test_representative_event_is_earliest_in_window(self, seed, now):
        earliest = now - timedelta(days=4)
        sid = seed.submission(
            "a",
            "j1",
            passed=True,
            reviewed_at=now - timedelta(days=1),
            extra_events=[
                ("ExpertReviewed", earliest),
                ("ExpertReviewed", now - timedelta(days=30)),  # outside window
            ],
        )
        (sub,) = await EventFilter(seed.storage).eligible_submissions(select_window(now))
        assert sub.submission_id == sid
        assert sub.agent_id == "a"
        assert sub.job_id == "j1"
        assert sub.passed == 1
        assert sub.reviewed_at == earliest
        assert sub.reviewed_at.tzinfo == timezone.utc

    @pytest.mark.asyncio
    async def test_filters_out_ineligible(self, seed, now):
        keep = seed.submission("a", "j1", passed=False)
        seed.submission("a", "j1", inevitable=True)
        seed.submission("a", "j1", reviewed_at=now + timedelta(hours=1))
        seed.submission("a", "j1", reviewed_at=now - timedelta(weeks=2))
        subs = await EventFilter(seed.storage).eligible_submissions(select_window(now))
        assert [s.submission_id for s in subs] == [keep]
        assert subs[0].passed == 0


class TestJobBaselineAggregator:
    @pytest.mark.asyncio
    async def test_scenario_two_agents(self, seed, now):
        seed.job("agent-1", "job-1", passed=8, total=10)
        seed.job("agent-2", "job-1", passed=2, total=10)
        baselines = await JobBaselineAggregator(seed.storage).baselines(select_window(now))
        assert set(baselines) == {"job-1"}
        assert baselines["job-1"].total == 20
        assert baselines["job-1"].passed == 10
        assert baselines["job-1"].approval_ratio == 0.5

    @pytest.mark.asyncio
    async def test_baseline_bounds(self, seed, now):
        seed.job("a", "j1", passed=0, total=3)
        seed.job("a", "j2", passed=2, total=2)
        seed.job("b", "j3", passed=1, total=3)
        baselines = await JobBaselineAggregator(seed.storage).baselines(select_window(now))
        for baseline in baselines.values():
            assert 0 <= baseline.passed <= baseline.total
            assert 0.0 <= baseline.approval_ratio <= 1.0
            assert baseline.approval_ratio == baseline.passed / baseline.total


class TestAgentJobAggregator:
    @pytest.mark.asyncio
    async def test_stream_sorted_and_typed(self, seed, now):
        seed.job("b", "j1", passed=1, total=2)
        seed.job("a", "j2", passed=3, total=3)
        seed.job("a", "j1", passed=0, total=1)
        stats = [s async for s in AgentJobAggregator(seed.storage).stream(select_window(now))]
        assert [(s.agent_id, s.job_id, s.passed, s.total) for s in stats] == [
            ("a", "j1", 0, 1),
            ("a", "j2", 3, 3),
            ("b", "j1", 1, 2),
        ]
