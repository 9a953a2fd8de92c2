"""Tests for rank thresholds and rank resolution."""

from streaker.levels import (
    MAX_RANK,
    RANKS,
    RankLevel,
    next_rank,
    progress_percent,
    ranks_above,
    resolve_rank,
)


class TestRankTable:
    def test_level_one_threshold_zero(self):
        assert RANKS[0].level == 1
        assert RANKS[0].xp_threshold == 0

    def test_ascending(self):
        for lower, upper in zip(RANKS, RANKS[1:]):
            assert lower.level + 1 == upper.level
            assert lower.xp_threshold < upper.xp_threshold

    def test_max_rank(self):
        assert MAX_RANK.title == "DEMIGOD"


class TestResolveRank:
    def test_zero_xp_is_novice(self):
        assert resolve_rank(0).title == "NOVICE"

    def test_negative_xp_floors_to_level_one(self):
        assert resolve_rank(-50).level == 1

    def test_just_under_apprentice(self):
        assert resolve_rank(149).title == "NOVICE"

    def test_exactly_apprentice(self):
        assert resolve_rank(150).title == "APPRENTICE"

    def test_scenario_values(self):
        assert resolve_rank(49).title == "NOVICE"
        assert resolve_rank(282).title == "APPRENTICE"

    def test_huge_xp_is_max_rank(self):
        assert resolve_rank(10**9) == MAX_RANK

    def test_monotonic(self):
        previous = resolve_rank(0).level
        for xp in range(0, 9000, 7):
            level = resolve_rank(xp).level
            assert level >= previous
            previous = level

    def test_custom_table(self):
        table = [RankLevel(1, 0, "A"), RankLevel(2, 10, "B")]
        assert resolve_rank(10, table).title == "B"
        assert resolve_rank(9, table).title == "A"


class TestNextRank:
    def test_next_of_novice(self):
        assert next_rank(RANKS[0]).title == "APPRENTICE"

    def test_none_at_max(self):
        assert next_rank(MAX_RANK) is None

    def test_ranks_above(self):
        above = ranks_above(RANKS[5])
        assert [r.title for r in above] == ["LEGEND", "DEMIGOD"]

    def test_nothing_above_max(self):
        assert ranks_above(MAX_RANK) == []


class TestProgressPercent:
    def test_zero_at_own_threshold(self):
        for current, upcoming in zip(RANKS, RANKS[1:]):
            assert progress_percent(current.xp_threshold, current, upcoming) == 0

    def test_hundred_at_next_threshold(self):
        for current, upcoming in zip(RANKS, RANKS[1:]):
            assert progress_percent(upcoming.xp_threshold, current, upcoming) == 100

    def test_halfway(self):
        # APPRENTICE 150 -> JOURNEYMAN 400: 275 is halfway
        assert progress_percent(275, RANKS[1], RANKS[2]) == 50

    def test_max_rank_is_hundred(self):
        assert progress_percent(12_000, MAX_RANK, None) == 100

    def test_rounds_half_up(self):
        current = RankLevel(1, 0, "A")
        upcoming = RankLevel(2, 200, "B")
        # 100 * 1 / 200 = 0.5
        assert progress_percent(1, current, upcoming) == 1

    def test_scenario_two_progress(self):
        # 100 * (282 - 150) / 250 = 52.8
        assert progress_percent(282, RANKS[1], RANKS[2]) == 53
