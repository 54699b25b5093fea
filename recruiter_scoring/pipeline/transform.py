"""Conversion of net performance points into a slot delta.

Positive performance grows the budget with square-root dampening on volume,
so quality counts more than quantity. Non-positive performance shrinks it
quadratically, normalized by volume so a small batch of misses stays mild.
"""

from __future__ import annotations

import math

from recruiter_scoring.exceptions import DomainError

GROWTH_FACTOR = 10.0
DIMINISHING_FACTOR = 2.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity.

    ``2.5 -> 3`` and ``-2.5 -> -2``.
    """
    return math.floor(value + 0.5)


def raw_score(
    total_submissions: int,
    net_points: float,
    growth_factor: float = GROWTH_FACTOR,
    diminishing_factor: float = DIMINISHING_FACTOR,
) -> float:
    """Unrounded slot delta for a recruiter's window performance."""
    if total_submissions <= 0:
        raise DomainError("zero volume")
    if net_points > 0:
        return growth_factor * net_points / math.sqrt(total_submissions)
    return -diminishing_factor * net_points ** 2 / total_submissions


def score_transform(
    total_submissions: int,
    net_points: float,
    growth_factor: float = GROWTH_FACTOR,
    diminishing_factor: float = DIMINISHING_FACTOR,
) -> int:
    """Integer slot delta, rounded half up."""
    return round_half_up(
        raw_score(total_submissions, net_points, growth_factor, diminishing_factor)
    )
