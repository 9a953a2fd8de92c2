"""Per-day calendar classification for the streak calendar."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from streaker.goals import GoalConfig, goal_target_day
from streaker.streaks import StreakInterval, find_active_interval
from streaker.timestamps import calendar_key

VIEW_MONTHS: dict[str, int] = {"1M": 1, "3M": 3, "12M": 12}


@dataclass
class CalendarIndex:
    """Day-keyed lookups precomputed from all intervals."""

    active_days: set[str] = field(default_factory=set)
    start_days: set[str] = field(default_factory=set)
    end_days: dict[str, bool] = field(default_factory=dict)  # day -> goal achieved
    goal_day: str | None = None


@dataclass(frozen=True)
class CalendarDay:
    day: date
    active: bool
    is_start: bool
    is_end: bool
    goal_met: bool
    is_goal_day: bool
    is_today: bool

    @property
    def is_turnover(self) -> bool:
        """One interval ended and another started on this day."""
        return self.is_start and self.is_end


def build_calendar_index(
    intervals: list[StreakInterval],
    goal: GoalConfig | None = None,
    now: datetime | None = None,
) -> CalendarIndex:
    """Collect active, start and end days (inclusive, truncated to calendar days)."""
    now = now or datetime.now()
    index = CalendarIndex()
    for interval in intervals:
        start_day = interval.start.date()
        end_day = (interval.end or now).date()
        index.start_days.add(calendar_key(start_day))
        if interval.end is not None:
            index.end_days[calendar_key(end_day)] = interval.goal_achieved

        current = start_day
        while current <= end_day:
            index.active_days.add(calendar_key(current))
            current += timedelta(days=1)

    index.goal_day = goal_target_day(goal, find_active_interval(intervals))
    return index


def classify_days(
    index: CalendarIndex,
    start: date,
    end: date,
    today: date | None = None,
) -> list[CalendarDay]:
    """Classify every day from start to end inclusive."""
    if start > end:
        raise ValueError(f"start {start.isoformat()} is after end {end.isoformat()}")
    today = today or date.today()
    days: list[CalendarDay] = []
    current = start
    while current <= end:
        key = calendar_key(current)
        days.append(
            CalendarDay(
                day=current,
                active=key in index.active_days,
                is_start=key in index.start_days,
                is_end=key in index.end_days,
                goal_met=index.end_days.get(key, False),
                is_goal_day=key == index.goal_day,
                is_today=current == today,
            )
        )
        current += timedelta(days=1)
    return days


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def month_range(base: date, view: str = "3M") -> list[tuple[int, int]]:
    """(year, month) pairs for a view mode, starting at base's month."""
    if view not in VIEW_MONTHS:
        raise ValueError(f"Unknown view mode {view!r}. Must be one of: {', '.join(VIEW_MONTHS)}")
    months: list[tuple[int, int]] = []
    year, month = base.year, base.month
    for _ in range(VIEW_MONTHS[view]):
        months.append((year, month))
        month += 1
        if month > 12:
            month = 1
            year += 1
    return months


def shift_base(base: date, view: str, steps: int) -> date:
    """Move base by whole view windows (negative steps go back)."""
    months_total = base.year * 12 + (base.month - 1) + VIEW_MONTHS[view] * steps
    return date(months_total // 12, months_total % 12 + 1, 1)


def classify_months(
    index: CalendarIndex,
    base: date,
    view: str = "3M",
    today: date | None = None,
) -> dict[str, list[CalendarDay]]:
    """Classified days per visible month, keyed YYYY-MM."""
    result: dict[str, list[CalendarDay]] = {}
    for year, month in month_range(base, view):
        first, last = month_bounds(year, month)
        result[f"{year:04d}-{month:02d}"] = classify_days(index, first, last, today)
    return result
