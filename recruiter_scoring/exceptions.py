"""Exception hierarchy for recruiter scoring."""


class ScoringError(Exception):
    """Base for all recruiter scoring errors."""


class DomainError(ScoringError, ValueError):
    """A pure computation was called outside its domain."""


class UnsortedStreamError(ScoringError):
    """Per-agent statistics arrived out of agent order."""


class MissingBaselineError(ScoringError):
    """A per-agent statistic references a job with no baseline."""


class AgentNotFoundError(ScoringError):
    """No budget record exists for the agent."""


class BudgetConflictError(ScoringError):
    """The budget changed between read and conditional write."""
