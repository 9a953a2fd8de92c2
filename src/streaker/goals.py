"""Goal configuration and goal-progress descriptors.

A goal is either a day-count target or an explicit calendar date. When both
are present the day-count form wins for progress displays.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from streaker.timestamps import SECONDS_PER_DAY, calendar_key, duration, parse_calendar_date, start_of_day

if TYPE_CHECKING:
    from streaker.streaks import StreakInterval


@dataclass(frozen=True)
class GoalConfig:
    target_days: int | None = None
    target_date: date | None = None

    @property
    def has_goal(self) -> bool:
        return bool(self.target_days) or self.target_date is not None

    @classmethod
    def from_profile(cls, profile: dict) -> GoalConfig:
        """Build from stored profile strings (goal_days, goal_date). Bad values mean no goal."""
        raw_days = profile.get("goal_days")
        target_days: int | None = None
        if raw_days not in (None, ""):
            try:
                target_days = int(raw_days)
            except (TypeError, ValueError):
                target_days = None
        if target_days is not None and target_days <= 0:
            target_days = None
        return cls(target_days=target_days, target_date=parse_calendar_date(profile.get("goal_date")))


NO_GOAL = GoalConfig()


@dataclass(frozen=True)
class GoalProgress:
    label: str
    percent: float  # 0.0 to 100.0
    target_display: str


def goal_progress(
    goal: GoalConfig | None,
    active: StreakInterval | None,
    now: datetime | None = None,
) -> GoalProgress:
    """Describe progress toward the configured goal for the active interval."""
    now = now or datetime.now()
    goal = goal or NO_GOAL

    if goal.target_days:
        elapsed = duration(active.start, None, now).days if active else 0
        percent = min(100.0, elapsed / goal.target_days * 100)
        return GoalProgress(
            label=f"{goal.target_days} DAYS",
            percent=percent,
            target_display=f"{elapsed} / {goal.target_days}",
        )

    if goal.target_date is not None:
        label = f"UNTIL {goal.target_date.isoformat()}"
        if active is None:
            return GoalProgress(label=label, percent=0.0, target_display="-- / --")
        target = start_of_day(goal.target_date)
        total = max(0.001, (target - active.start).total_seconds())
        current = max(0.0, (now - active.start).total_seconds())
        percent = min(100.0, current / total * 100)
        days_left = math.ceil((target - now).total_seconds() / SECONDS_PER_DAY)
        display = f"{days_left} DAYS LEFT" if days_left > 0 else "COMPLETED"
        return GoalProgress(label=label, percent=percent, target_display=display)

    return GoalProgress(label="NO GOAL SET", percent=0.0, target_display="-- / --")


def goal_target_day(goal: GoalConfig | None, active: StreakInterval | None) -> str | None:
    """Calendar key of the goal target day.

    The explicit date wins here; otherwise start + target_days of the open
    interval. None when neither applies.
    """
    if goal is None:
        return None
    if goal.target_date is not None:
        return calendar_key(goal.target_date)
    if goal.target_days and active is not None:
        return calendar_key(active.start + timedelta(days=goal.target_days))
    return None


def goal_met(goal: GoalConfig | None, elapsed_days: int, end: datetime) -> bool:
    """Whether an interval ending at end with elapsed_days met the goal."""
    if goal is None:
        return False
    if goal.target_days:
        return elapsed_days >= goal.target_days
    if goal.target_date is not None:
        return end.date() >= goal.target_date
    return False
