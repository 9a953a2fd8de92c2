"""Tests for the read-only public profile snapshot."""

from datetime import datetime, timedelta

from streaker.public_profile import PublicSettings, build_public_profile
from streaker.streaks import StreakInterval

NOW = datetime(2026, 4, 20, 12, 0)


def _intervals():
    return [
        StreakInterval("1", datetime(2026, 3, 1), datetime(2026, 3, 11), final_xp=69),
        StreakInterval("2", NOW - timedelta(days=8)),
    ]


class TestPublicSettings:
    def test_from_profile(self):
        settings = PublicSettings.from_profile(
            {"public_enabled": "1", "public_show_stats": "true", "public_show_awards": "0"}
        )
        assert settings.enabled
        assert settings.show_stats
        assert not settings.show_awards
        assert not settings.show_calendar

    def test_defaults_private(self):
        assert PublicSettings.from_profile({}) == PublicSettings()


class TestBuildPublicProfile:
    def test_disabled_is_unavailable(self):
        data = build_public_profile(PublicSettings(), "ana", _intervals(), None, NOW)
        assert data["available"] is False
        assert "stats" not in data

    def test_only_opted_in_sections(self):
        settings = PublicSettings(enabled=True, show_stats=True)
        data = build_public_profile(settings, "ana", _intervals(), None, NOW)
        assert data["available"] is True
        assert data["username"] == "ana"
        assert "stats" in data
        assert "awards" not in data
        assert "calendar" not in data

    def test_stats_section(self):
        settings = PublicSettings(enabled=True, show_stats=True)
        stats = build_public_profile(settings, "ana", _intervals(), None, NOW)["stats"]
        assert stats["current_days"] == 8
        assert stats["record_days"] == 10
        assert stats["peak_rank"] == "NOVICE"
        assert stats["projections"][0]["rank"] == "APPRENTICE"

    def test_awards_section(self):
        settings = PublicSettings(enabled=True, show_awards=True)
        awards = build_public_profile(settings, "ana", _intervals(), None, NOW)["awards"]
        assert [a["name"] for a in awards] == ["Gotta Start Somewhere", "7-Day Streak"]

    def test_calendar_section(self):
        settings = PublicSettings(enabled=True, show_calendar=True)
        calendar = build_public_profile(settings, "ana", _intervals(), None, NOW)["calendar"]
        assert len(calendar) == 30
        assert calendar[0]["date"] == "2026-04-01"
        active = [d["date"] for d in calendar if d["active"]]
        assert active[0] == "2026-04-12"
        assert active[-1] == "2026-04-20"

    def test_anonymous_username(self):
        settings = PublicSettings(enabled=True)
        assert build_public_profile(settings, None, [], None, NOW)["username"] == "anonymous"

    def test_all_sections_off_marked_hidden(self):
        settings = PublicSettings(enabled=True)
        data = build_public_profile(settings, "ana", _intervals(), None, NOW)
        assert data["available"] is True
        assert data["hidden"] is True
        assert not {"stats", "awards", "calendar"} & set(data)

    def test_any_section_on_not_hidden(self):
        settings = PublicSettings(enabled=True, show_awards=True)
        assert build_public_profile(settings, "ana", _intervals(), None, NOW)["hidden"] is False
