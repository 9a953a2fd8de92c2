"""Forward simulation of rank-up dates.

Thresholds are non-uniform (milestone bonuses land on specific days), so each
target rank is simulated day by day on its own counter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from streaker.achievements import AchievementMilestone
from streaker.goals import GoalConfig
from streaker.levels import RankLevel, ranks_above, resolve_rank
from streaker.xp import active_xp

logger = logging.getLogger(__name__)

MAX_SIMULATION_DAYS = 5000
UNREACHABLE_DAYS_TEXT = "> 13 YEARS"
UNREACHABLE_DATE_TEXT = "UNKNOWN"


@dataclass(frozen=True)
class RankProjection:
    rank: RankLevel
    days_needed: int | None  # None when unreachable within MAX_SIMULATION_DAYS
    estimated_date: date | None

    @property
    def reachable(self) -> bool:
        return self.days_needed is not None

    @property
    def days_text(self) -> str:
        return f"{self.days_needed} DAYS" if self.reachable else UNREACHABLE_DAYS_TEXT

    @property
    def date_text(self) -> str:
        return self.estimated_date.isoformat() if self.estimated_date else UNREACHABLE_DATE_TEXT


def estimate_days_to_rank(
    current_days: int,
    target: RankLevel,
    goal: GoalConfig | None = None,
    now: datetime | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> RankProjection:
    """Simulate day by day from current_days until target's threshold is met.

    Runs for fewer than MAX_SIMULATION_DAYS steps; a rank still out of reach
    at that point (including one met only on the last day) is unreachable.
    """
    now = now or datetime.now()
    sim_days = max(0, int(current_days))
    days_needed = 0
    while (
        active_xp(sim_days, goal, milestones) < target.xp_threshold
        and days_needed < MAX_SIMULATION_DAYS
    ):
        sim_days += 1
        days_needed += 1
    if days_needed >= MAX_SIMULATION_DAYS:
        logger.debug(
            "Rank %s not reachable within %d simulated days", target.title, MAX_SIMULATION_DAYS
        )
        return RankProjection(rank=target, days_needed=None, estimated_date=None)
    return RankProjection(
        rank=target,
        days_needed=days_needed,
        estimated_date=(now + timedelta(days=days_needed)).date(),
    )


def project_ranks(
    current_days: int,
    goal: GoalConfig | None = None,
    now: datetime | None = None,
    ranks: list[RankLevel] | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> list[RankProjection]:
    """Projection rows for every rank above the one current_days earns."""
    current = resolve_rank(active_xp(current_days, goal, milestones), ranks)
    return [
        estimate_days_to_rank(current_days, rank, goal, now, milestones)
        for rank in ranks_above(current, ranks)
    ]


def estimate_next_rank(
    current_days: int,
    goal: GoalConfig | None = None,
    now: datetime | None = None,
    ranks: list[RankLevel] | None = None,
    milestones: list[AchievementMilestone] | None = None,
) -> RankProjection | None:
    """Projection for the next rank only, or None at max rank."""
    rows = project_ranks(current_days, goal, now, ranks, milestones)
    return rows[0] if rows else None
