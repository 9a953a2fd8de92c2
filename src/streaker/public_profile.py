"""Read-only public profile snapshot.

Builds the shareable view of a single user's progress, including only the
sections the user opted into.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from streaker.achievements import check_milestones
from streaker.calendar_view import build_calendar_index, classify_days, month_bounds
from streaker.goals import GoalConfig
from streaker.projections import project_ranks
from streaker.stats import compute_analytics, whole_days
from streaker.streaks import StreakInterval, find_active_interval, interval_duration

SECTIONS = ("stats", "awards", "calendar")


@dataclass(frozen=True)
class PublicSettings:
    enabled: bool = False
    show_stats: bool = False
    show_awards: bool = False
    show_calendar: bool = False

    @classmethod
    def from_profile(cls, profile: dict) -> PublicSettings:
        def flag(key: str) -> bool:
            return profile.get(key, "0") in ("1", "true", "True")

        return cls(
            enabled=flag("public_enabled"),
            show_stats=flag("public_show_stats"),
            show_awards=flag("public_show_awards"),
            show_calendar=flag("public_show_calendar"),
        )


def build_public_profile(
    settings: PublicSettings,
    username: str | None,
    intervals: list[StreakInterval],
    goal: GoalConfig | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Assemble the public dict. Disabled profiles return an unavailable marker."""
    now = now or datetime.now()
    if not settings.enabled:
        return {"available": False, "username": username}

    result: dict[str, Any] = {
        "available": True,
        "username": username or "anonymous",
        "hidden": not (settings.show_stats or settings.show_awards or settings.show_calendar),
    }

    if settings.show_stats:
        analytics = compute_analytics(intervals, goal, now)
        result["stats"] = {
            "current_days": whole_days(analytics.current_days),
            "record_days": whole_days(analytics.record_days),
            "average_days": round(analytics.average_days, 1),
            "ytd_days": whole_days(analytics.ytd_days),
            "peak_rank": analytics.peak_rank.title,
            "projections": [
                {"rank": p.rank.title, "xp": p.rank.xp_threshold, "days": p.days_text, "date": p.date_text}
                for p in project_ranks(whole_days(analytics.current_days), goal, now)
            ],
        }

    if settings.show_awards:
        active = find_active_interval(intervals)
        elapsed = interval_duration(active, now).days if active else 0
        result["awards"] = [
            {"name": s.definition.name, "icon": s.definition.icon, "xp": s.definition.xp_reward}
            for s in check_milestones(elapsed, goal)
            if s.unlocked
        ]

    if settings.show_calendar:
        index = build_calendar_index(intervals, goal, now)
        first, last = month_bounds(now.year, now.month)
        result["calendar"] = [
            {
                "date": d.day.isoformat(),
                "active": d.active,
                "start": d.is_start,
                "end": d.is_end,
                "goal_met": d.goal_met,
            }
            for d in classify_days(index, first, last, now.date())
        ]

    return result
