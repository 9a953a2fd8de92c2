"""XP derivation for streaker.

Pure functions that convert elapsed streak days into XP points. XP is
derived from time alone, so the same function drives live display, close-time
snapshots and forward projection.
"""

from __future__ import annotations

from streaker.achievements import AchievementMilestone, day_milestones
from streaker.goals import GoalConfig

# Base XP values
XP_PER_DAY = 2
GOAL_BONUS_XP = 10
JOURNAL_UPLOAD_XP = 3


def milestone_xp(elapsed_days: int, milestones: list[AchievementMilestone] | None = None) -> int:
    """Sum the rewards of every day milestone reached by elapsed_days (cumulative)."""
    return sum(m.xp_reward for m in day_milestones(milestones) if m.day_threshold <= elapsed_days)


def goal_bonus(elapsed_days: int, goal: GoalConfig | None) -> int:
    """Flat bonus once a day-count goal is reached. Date goals earn no bonus."""
    if goal is not None and goal.target_days and elapsed_days >= goal.target_days:
        return GOAL_BONUS_XP
    return 0


def active_xp(
    elapsed_days: int,
    goal: GoalConfig | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> int:
    """Total XP for a streak that has lasted elapsed_days whole days.

    1. Base = elapsed_days * XP_PER_DAY.
    2. Add every day milestone with threshold <= elapsed_days.
    3. Add GOAL_BONUS_XP if a day-count goal is configured and reached.

    Works for hypothetical day counts too (projection). Negative input is
    treated as 0.
    """
    elapsed_days = max(0, int(elapsed_days))
    return (
        elapsed_days * XP_PER_DAY
        + milestone_xp(elapsed_days, milestones)
        + goal_bonus(elapsed_days, goal)
    )
