"""Achievement milestone definitions and medal status for streaker."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from streaker.goals import GoalConfig


class MilestoneKind(str, Enum):
    DAYS = "days"
    GOAL = "goal"


@dataclass(frozen=True)
class AchievementMilestone:
    name: str
    icon: str
    xp_reward: int
    day_threshold: int | None = None
    description: str = ""

    @property
    def kind(self) -> MilestoneKind:
        return MilestoneKind.DAYS if self.day_threshold is not None else MilestoneKind.GOAL


@dataclass
class MilestoneStatus:
    definition: AchievementMilestone
    progress: float  # 0.0 to 1.0
    unlocked: bool


ACHIEVEMENTS: list[AchievementMilestone] = [
    AchievementMilestone(
        name="Goal Getter",
        icon="\U0001f3c1",
        xp_reward=10,
        description="Achieve your set goal in a streak.",
    ),
    AchievementMilestone(name="Gotta Start Somewhere", icon="\U0001f331", xp_reward=10, day_threshold=1),
    AchievementMilestone(name="7-Day Streak", icon="⭐", xp_reward=25, day_threshold=7),
    AchievementMilestone(name="2-Week Streak", icon="\U0001f4c5", xp_reward=50, day_threshold=14),
    AchievementMilestone(name="30-Day Streak", icon="\U0001f3c6", xp_reward=125, day_threshold=30),
    AchievementMilestone(name="Two-Month Trekker", icon="\U0001f6b6", xp_reward=200, day_threshold=60),
    AchievementMilestone(name="Three-Month Shield", icon="\U0001f6e1️", xp_reward=300, day_threshold=90),
    AchievementMilestone(name="100-Day Streak", icon="\U0001f4af", xp_reward=100, day_threshold=100),
    AchievementMilestone(name="Four-Month Fortress", icon="\U0001f3f0", xp_reward=350, day_threshold=120),
    AchievementMilestone(name="Five-Month Focus", icon="\U0001f441️", xp_reward=400, day_threshold=150),
    AchievementMilestone(name="Six-Month Soarer", icon="\U0001f54a️", xp_reward=500, day_threshold=180),
    AchievementMilestone(name="Seven-Month Samurai", icon="⚔️", xp_reward=600, day_threshold=210),
    AchievementMilestone(name="Eight-Month Elite", icon="\U0001f48e", xp_reward=700, day_threshold=240),
    AchievementMilestone(name="Nine-Month Nirvana", icon="\U0001f9d8", xp_reward=800, day_threshold=270),
    AchievementMilestone(name="Ten-Month Titan", icon="\U0001f5ff", xp_reward=900, day_threshold=300),
    AchievementMilestone(name="Eleven-Month Emperor", icon="\U0001f451", xp_reward=950, day_threshold=330),
    AchievementMilestone(name="One-Year Victor", icon="\U0001f3c5", xp_reward=1000, day_threshold=365),
]


def day_milestones(milestones: list[AchievementMilestone] | None = None) -> list[AchievementMilestone]:
    """Milestones evaluated by elapsed days, ascending by threshold."""
    table = ACHIEVEMENTS if milestones is None else milestones
    return sorted(
        (m for m in table if m.day_threshold is not None),
        key=lambda m: m.day_threshold,
    )


def check_milestones(
    elapsed_days: int,
    goal: GoalConfig | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> list[MilestoneStatus]:
    """Check every milestone against the active streak's elapsed days.

    Day milestones unlock once elapsed_days reaches their threshold. The
    goal milestone unlocks when a day-count goal is configured and met; its
    XP is the flat goal bonus already counted by active_xp().
    """
    table = ACHIEVEMENTS if milestones is None else milestones
    elapsed_days = max(0, elapsed_days)
    results: list[MilestoneStatus] = []
    for milestone in table:
        if milestone.day_threshold is not None:
            threshold = milestone.day_threshold
            progress = min(elapsed_days / threshold, 1.0) if threshold > 0 else 1.0
        elif goal is not None and goal.target_days:
            progress = min(elapsed_days / goal.target_days, 1.0)
        else:
            progress = 0.0
        results.append(
            MilestoneStatus(definition=milestone, progress=progress, unlocked=progress >= 1.0)
        )
    return results


def get_closest_milestones(statuses: list[MilestoneStatus], n: int = 3) -> list[MilestoneStatus]:
    """Return the N locked milestones closest to unlocking (highest progress < 1.0)."""
    in_progress = [s for s in statuses if not s.unlocked]
    in_progress.sort(key=lambda s: s.progress, reverse=True)
    return in_progress[:n]
