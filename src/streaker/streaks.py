"""Streak intervals, journal entries and the current standing snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from streaker.achievements import AchievementMilestone
from streaker.goals import GoalConfig, GoalProgress, goal_met, goal_progress
from streaker.levels import RankLevel, next_rank, progress_percent, resolve_rank
from streaker.projections import RankProjection, estimate_next_rank
from streaker.timestamps import ZERO_DURATION, Duration, duration, normalize_instant
from streaker.xp import active_xp

DEFAULT_PAGE_SIZE = 7


@dataclass(frozen=True)
class StreakInterval:
    id: str
    start: datetime
    end: datetime | None = None  # None while the streak is still active
    final_xp: int | None = None  # snapshot taken when the interval closed
    goal_achieved: bool = False

    @property
    def is_open(self) -> bool:
        return self.end is None

    @classmethod
    def from_record(cls, record: dict[str, Any], now: datetime | None = None) -> StreakInterval:
        """Build from a raw store record with any supported timestamp shape."""
        raw_end = record.get("end")
        raw_final = record.get("final_xp")
        return cls(
            id=str(record.get("id", "")),
            start=normalize_instant(record.get("start"), now),
            end=normalize_instant(raw_end, now) if raw_end not in (None, "") else None,
            final_xp=int(raw_final) if raw_final is not None else None,
            goal_achieved=bool(record.get("goal_achieved", False)),
        )


@dataclass(frozen=True)
class JournalEntry:
    id: str
    text: str
    timestamp: datetime
    pinned: bool = False

    @classmethod
    def from_record(cls, record: dict[str, Any], now: datetime | None = None) -> JournalEntry:
        return cls(
            id=str(record.get("id", "")),
            text=str(record.get("text", "")),
            timestamp=normalize_instant(record.get("timestamp"), now),
            pinned=bool(record.get("pinned", False)),
        )


def sort_intervals(intervals: list[StreakInterval]) -> list[StreakInterval]:
    """Most recent start first."""
    return sorted(intervals, key=lambda i: i.start, reverse=True)


def find_active_interval(intervals: list[StreakInterval]) -> StreakInterval | None:
    """The open interval; if several are open, the most recently started wins."""
    return next((i for i in sort_intervals(intervals) if i.is_open), None)


def interval_duration(interval: StreakInterval, now: datetime | None = None) -> Duration:
    return duration(interval.start, interval.end, now)


def page_intervals(
    intervals: list[StreakInterval],
    limit: int = DEFAULT_PAGE_SIZE,
    now: datetime | None = None,
) -> tuple[list[tuple[StreakInterval, Duration]], bool]:
    """Return the first `limit` intervals with durations, plus whether more remain."""
    ordered = sort_intervals(intervals)
    limit = max(0, limit)
    rows = [(interval, interval_duration(interval, now)) for interval in ordered[:limit]]
    return rows, len(ordered) > limit


@dataclass
class Standing:
    """Live HUD snapshot for the active interval (zero-state when none)."""

    active: StreakInterval | None
    duration: Duration
    xp: int
    rank: RankLevel
    next_rank: RankLevel | None
    progress_percent: int
    next_rank_estimate: RankProjection | None
    goal: GoalProgress

    @property
    def rank_estimate_text(self) -> str:
        if self.next_rank_estimate is None:
            return "MAX RANK ACHIEVED"
        estimate = self.next_rank_estimate
        return f"EST. RANK UP: {estimate.days_text} ({estimate.date_text})"


def current_standing(
    intervals: list[StreakInterval],
    goal: GoalConfig | None = None,
    now: datetime | None = None,
    ranks: list[RankLevel] | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> Standing:
    """Duration, XP, rank, progress, next-rank estimate and goal progress."""
    now = now or datetime.now()
    active = find_active_interval(intervals)
    elapsed = interval_duration(active, now) if active else ZERO_DURATION
    xp = active_xp(elapsed.days, goal, milestones) if active else 0
    rank = resolve_rank(xp, ranks)
    upcoming = next_rank(rank, ranks)
    estimate = estimate_next_rank(elapsed.days, goal, now, ranks, milestones)
    return Standing(
        active=active,
        duration=elapsed,
        xp=xp,
        rank=rank,
        next_rank=upcoming,
        progress_percent=progress_percent(xp, rank, upcoming),
        next_rank_estimate=estimate,
        goal=goal_progress(goal, active, now),
    )


def close_snapshot(
    interval: StreakInterval,
    goal: GoalConfig | None = None,
    now: datetime | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> dict[str, Any]:
    """Values to record when closing interval at now: end, final_xp, goal_achieved."""
    # Never close before the start
    end = max(now or datetime.now(), interval.start)
    elapsed = duration(interval.start, end, end)
    return {
        "end": end,
        "final_xp": active_xp(elapsed.days, goal, milestones),
        "goal_achieved": goal_met(goal, elapsed.days, end),
    }
