"""Aggregate analytics across all of a user's streak intervals.

Pure functions, no DB access - accepts interval snapshots as input.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from streaker.achievements import AchievementMilestone
from streaker.goals import GoalConfig
from streaker.levels import RankLevel, resolve_rank
from streaker.streaks import StreakInterval, find_active_interval, interval_duration
from streaker.timestamps import SECONDS_PER_DAY
from streaker.xp import active_xp


@dataclass(frozen=True)
class StreakAnalytics:
    """Durations are fractional days."""

    current_days: float
    record_days: float
    average_days: float
    ytd_days: float
    peak_xp: int
    peak_rank: RankLevel
    total_intervals: int


def year_to_date_days(intervals: list[StreakInterval], now: datetime | None = None) -> float:
    """Days of streak time falling inside the current calendar year.

    Each interval contributes its overlap with [Jan 1, Jan 1 next year);
    open intervals run until now.
    """
    now = now or datetime.now()
    year_start = datetime(now.year, 1, 1)
    next_year = datetime(now.year + 1, 1, 1)
    total_seconds = 0.0
    for interval in intervals:
        end = interval.end if interval.end is not None else now
        overlap_start = max(interval.start, year_start)
        overlap_end = min(end, next_year)
        if overlap_end > overlap_start:
            total_seconds += (overlap_end - overlap_start).total_seconds()
    return total_seconds / SECONDS_PER_DAY


def interval_xp(
    interval: StreakInterval,
    goal: GoalConfig | None = None,
    now: datetime | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> int:
    """Stored final XP for closed intervals, recomputed XP otherwise.

    A closed interval with no (or zero) stored snapshot is recomputed too.
    """
    if not interval.is_open and interval.final_xp:
        return interval.final_xp
    return active_xp(interval_duration(interval, now).days, goal, milestones)


def compute_analytics(
    intervals: list[StreakInterval],
    goal: GoalConfig | None = None,
    now: datetime | None = None,
    ranks: list[RankLevel] | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> StreakAnalytics:
    """Current, record, average and year-to-date durations plus peak XP/rank ever."""
    now = now or datetime.now()
    if not intervals:
        return StreakAnalytics(
            current_days=0.0,
            record_days=0.0,
            average_days=0.0,
            ytd_days=0.0,
            peak_xp=0,
            peak_rank=resolve_rank(0, ranks),
            total_intervals=0,
        )

    durations = [interval_duration(i, now).total_days for i in intervals]
    active = find_active_interval(intervals)
    current_days = interval_duration(active, now).total_days if active else 0.0
    peak_xp = max(interval_xp(i, goal, now, milestones) for i in intervals)

    return StreakAnalytics(
        current_days=current_days,
        record_days=max(durations),
        average_days=sum(durations) / len(durations),
        ytd_days=year_to_date_days(intervals, now),
        peak_xp=peak_xp,
        peak_rank=resolve_rank(peak_xp, ranks),
        total_intervals=len(intervals),
    )


def whole_days(days: float) -> int:
    """Floor fractional days for display."""
    return math.floor(days)
