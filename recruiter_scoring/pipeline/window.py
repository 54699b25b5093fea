"""Review window selection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval ``[start, end)`` bounding one scoring run."""

    start: datetime
    end: datetime

    @property
    def start_ts(self) -> float:
        return self.start.timestamp()

    @property
    def end_ts(self) -> float:
        return self.end.timestamp()

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def select_window(now: datetime, weeks: int = 1) -> TimeWindow:
    """Window of ``weeks`` weeks ending (exclusively) at ``now``."""
    return TimeWindow(start=now - timedelta(weeks=weeks), end=now)
