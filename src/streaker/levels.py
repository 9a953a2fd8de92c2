"""Rank thresholds and rank resolution. Pure functions, no side effects."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class RankLevel:
    level: int
    xp_threshold: int
    title: str


RANKS: list[RankLevel] = [
    RankLevel(level=1, xp_threshold=0, title="NOVICE"),
    RankLevel(level=2, xp_threshold=150, title="APPRENTICE"),
    RankLevel(level=3, xp_threshold=400, title="JOURNEYMAN"),
    RankLevel(level=4, xp_threshold=900, title="EXPERT"),
    RankLevel(level=5, xp_threshold=2500, title="MASTER"),
    RankLevel(level=6, xp_threshold=4500, title="GRANDMASTER"),
    RankLevel(level=7, xp_threshold=6500, title="LEGEND"),
    RankLevel(level=8, xp_threshold=8000, title="DEMIGOD"),
]

MAX_RANK: RankLevel = RANKS[-1]


def resolve_rank(xp: int, ranks: list[RankLevel] | None = None) -> RankLevel:
    """Return the highest rank whose threshold xp meets. Level 1 is the floor."""
    table = ranks or RANKS
    for rank in sorted(table, key=lambda r: r.level, reverse=True):
        if xp >= rank.xp_threshold:
            return rank
    return min(table, key=lambda r: r.level)


def next_rank(current: RankLevel, ranks: list[RankLevel] | None = None) -> RankLevel | None:
    """Return the rank directly above current, or None at max rank."""
    table = ranks or RANKS
    return next((r for r in table if r.level == current.level + 1), None)


def ranks_above(current: RankLevel, ranks: list[RankLevel] | None = None) -> list[RankLevel]:
    table = ranks or RANKS
    return sorted((r for r in table if r.level > current.level), key=lambda r: r.level)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def progress_percent(xp: int, current: RankLevel, upcoming: RankLevel | None) -> int:
    """Percent progress from current's threshold to upcoming's.

    0 at the current threshold, 100 at the next one; 100 when at max rank.
    """
    if upcoming is None:
        return 100
    span = upcoming.xp_threshold - current.xp_threshold
    if span <= 0:
        return 100
    return round_half_up(100 * (xp - current.xp_threshold) / span)
