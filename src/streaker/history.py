"""Day-by-day XP ledger for a single streak interval.

An audit view, computed independently of active_xp(): for a closed interval
with no goal and no journal entries the ledger total equals active_xp().
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from streaker.achievements import AchievementMilestone, day_milestones
from streaker.goals import GoalConfig
from streaker.streaks import JournalEntry, StreakInterval, interval_duration
from streaker.timestamps import calendar_key
from streaker.xp import GOAL_BONUS_XP, JOURNAL_UPLOAD_XP, XP_PER_DAY

STREAK_STARTED = "STREAK STARTED"
DAILY_DISCIPLINE = "DAILY DISCIPLINE"
GOAL_ACHIEVED = "GOAL ACHIEVED"
JOURNAL_UPLOAD = "LOG ENTRY UPLOAD"
MEDAL_PREFIX = "MEDAL: "


@dataclass(frozen=True)
class HistoryEvent:
    date: datetime
    reason: str
    xp: int


def reconstruct(
    interval: StreakInterval,
    goal: GoalConfig | None = None,
    journal_entries: list[JournalEntry] | None = None,
    now: datetime | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> list[HistoryEvent]:
    """Replay interval from day 0 through its last whole day, newest first.

    Stops at the first day offset that lies in the future, so open intervals
    never show unearned events. Journal entries add one event each on the
    calendar day they were written.
    """
    now = now or datetime.now()
    total_days = interval_duration(interval, now).days
    medals = day_milestones(milestones)
    target_days = goal.target_days if goal is not None else None

    journal_by_day: dict[str, int] = {}
    for entry in journal_entries or []:
        key = calendar_key(entry.timestamp)
        journal_by_day[key] = journal_by_day.get(key, 0) + 1

    history: list[HistoryEvent] = []
    for offset in range(total_days + 1):
        day = interval.start + timedelta(days=offset)
        if day > now:
            break

        if offset > 0:
            history.append(HistoryEvent(day, DAILY_DISCIPLINE, XP_PER_DAY))
        else:
            history.append(HistoryEvent(day, STREAK_STARTED, 0))

        # Exact-day matches only
        for medal in medals:
            if medal.day_threshold == offset:
                history.append(HistoryEvent(day, f"{MEDAL_PREFIX}{medal.name}", medal.xp_reward))

        if target_days and offset == target_days:
            history.append(HistoryEvent(day, GOAL_ACHIEVED, GOAL_BONUS_XP))

        for _ in range(journal_by_day.get(calendar_key(day), 0)):
            history.append(HistoryEvent(day, JOURNAL_UPLOAD, JOURNAL_UPLOAD_XP))

    return sorted(history, key=lambda e: e.date, reverse=True)


def total_history_xp(events: list[HistoryEvent]) -> int:
    return sum(e.xp for e in events)
