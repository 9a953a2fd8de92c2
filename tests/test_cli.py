"""Tests for CLI commands and display helpers."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import patch

import pytest

from streaker.cli import (
    build_parser,
    do_achievements,
    do_calendar,
    do_config_set,
    do_config_show,
    do_dashboard,
    do_delete,
    do_end,
    do_goal,
    do_history,
    do_journal_add,
    do_journal_delete,
    do_journal_list,
    do_journal_pin,
    do_log,
    do_projections,
    do_public_set,
    do_public_show,
    do_public_toggle,
    do_public_username,
    do_start,
    do_stats,
    main,
)
from streaker.config import load_config
from streaker.db import Database, StoreError
from streaker.display import format_number

NOW = datetime(2026, 3, 1, 12, 0)


@pytest.fixture
def db(tmp_path):
    """Create a temporary database for testing."""
    db_path = tmp_path / "test.db"
    database = Database(db_path=db_path)
    yield database
    database.close()


@pytest.fixture
def week_old_streak(db):
    """An open streak started exactly seven days before NOW."""
    db.start_interval(datetime(2026, 2, 22, 12, 0))
    return db


# ── Argument Parsing ──────────────────────────────────────────────────────────


class TestArgumentParsing:
    def test_no_args_defaults_to_none_command(self):
        args = build_parser().parse_args([])
        assert args.command is None

    def test_global_options(self):
        args = build_parser().parse_args(["--db", "/tmp/x.db", "--log-level", "DEBUG", "stats"])
        assert args.db == "/tmp/x.db"
        assert args.log_level == "DEBUG"
        assert args.command == "stats"

    def test_start_at(self):
        args = build_parser().parse_args(["start", "--at", "2026-01-01T08:00"])
        assert args.at == "2026-01-01T08:00"

    def test_log_limit(self):
        args = build_parser().parse_args(["log", "-n", "3"])
        assert args.limit == 3

    def test_goal_options_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["goal", "--days", "30", "--clear"])

    def test_goal_requires_option(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["goal"])

    def test_calendar_view_choices(self):
        args = build_parser().parse_args(["calendar", "--view", "12M", "--month", "2026-01"])
        assert args.view == "12M"
        assert args.month == "2026-01"
        with pytest.raises(SystemExit):
            build_parser().parse_args(["calendar", "--view", "6M"])

    def test_journal_subcommands(self):
        args = build_parser().parse_args(["journal", "pin", "4"])
        assert args.journal_command == "pin"
        assert args.entry_id == "4"

    def test_public_toggle_section(self):
        args = build_parser().parse_args(["public", "toggle", "awards"])
        assert args.public_command == "toggle"
        assert args.section == "awards"


    def test_calendar_shift(self):
        args = build_parser().parse_args(["calendar", "--view", "1M", "--shift", "-2"])
        assert args.shift == -2
        assert build_parser().parse_args(["calendar"]).shift == 0

    def test_config_set(self):
        args = build_parser().parse_args(["config", "set", "page_size", "12"])
        assert args.config_command == "set"
        assert args.key == "page_size"
        assert args.value == "12"

    def test_config_unknown_key(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["config", "set", "colour", "red"])

# ── Streak lifecycle ──────────────────────────────────────────────────────────


class TestStartEnd:
    def test_start_default_now(self, db):
        result = do_start(db, now=NOW)
        assert result["ok"] is True
        assert result["interval"]["start"] == "2026-03-01T12:00:00"

    def test_start_at(self, db):
        result = do_start(db, at="2026-02-01T08:30", now=NOW)
        assert result["interval"]["start"] == "2026-02-01T08:30:00"

    def test_start_invalid_time(self, db):
        assert do_start(db, at="yesterday", now=NOW) == {"ok": False, "reason": "invalid_time"}

    def test_start_in_future_refused(self, db):
        result = do_start(db, at="2026-03-04T12:00", now=NOW)
        assert result == {"ok": False, "reason": "future_start"}
        assert db.get_all_intervals() == []

    def test_start_with_utc_suffix(self, db):
        assert do_start(db, at="2026-02-01T08:30:00Z", now=NOW)["ok"] is True

    def test_start_refused_while_active(self, week_old_streak):
        result = do_start(week_old_streak, now=NOW)
        assert result == {"ok": False, "reason": "already_active"}

    def test_end_closes_and_restarts(self, week_old_streak):
        result = do_end(week_old_streak, now=NOW)
        assert result["ok"] is True
        assert result["final_xp"] == 49
        assert result["goal_achieved"] is False
        assert result["new_interval"]["start"] == "2026-03-01T12:00:00"
        closed = week_old_streak.get_interval(result["closed_id"])
        assert closed["final_xp"] == 49
        assert week_old_streak.get_open_interval()["id"] == result["new_interval"]["id"]

    def test_end_records_goal(self, week_old_streak):
        do_goal(week_old_streak, days=7)
        result = do_end(week_old_streak, now=NOW)
        assert result["final_xp"] == 59
        assert result["goal_achieved"] is True

    def test_end_without_active(self, db):
        assert do_end(db, now=NOW) == {"ok": False, "reason": "no_active"}

    def test_delete(self, week_old_streak):
        interval_id = week_old_streak.get_open_interval()["id"]
        assert do_delete(week_old_streak, interval_id)["ok"] is True
        assert week_old_streak.get_all_intervals() == []


# ── Views ─────────────────────────────────────────────────────────────────────


class TestDashboard:
    def test_no_data(self, db):
        assert do_dashboard(db, now=NOW) == {"ok": False, "reason": "no_data"}

    def test_week_old_streak(self, week_old_streak):
        data = do_dashboard(week_old_streak, now=NOW)
        assert data["ok"] is True
        assert data["active"] is True
        assert data["duration"] == "7d 0h"
        assert data["xp"] == 49
        assert data["rank_title"] == "NOVICE"
        assert data["next_rank_xp"] == 150
        assert data["progress_percent"] == 33
        assert data["goal_label"] == "NO GOAL SET"
        assert data["rank_estimate"].startswith("EST. RANK UP: 23 DAYS")
        assert [m["name"] for m in data["closest_milestones"]][0] == "2-Week Streak"

    def test_with_goal(self, week_old_streak):
        do_goal(week_old_streak, days=14)
        data = do_dashboard(week_old_streak, now=NOW)
        assert data["goal_label"] == "14 DAYS"
        assert data["goal_percent"] == 50.0
        assert data["goal_target"] == "7 / 14"


class TestLog:
    def test_rows_and_paging(self, week_old_streak):
        db = week_old_streak
        for _ in range(3):
            do_end(db, now=NOW)
        result = do_log(db, limit=2, now=NOW)
        assert len(result["rows"]) == 2
        assert result["has_more"] is True

    def test_row_fields(self, week_old_streak):
        result = do_log(week_old_streak, now=NOW)
        row = result["rows"][0]
        assert row["active"] is True
        assert row["days"] == 7
        assert row["xp"] == 49
        assert result["has_more"] is False


class TestHistory:
    def test_not_found(self, db):
        assert do_history(db, "99", now=NOW) == {"ok": False, "reason": "not_found"}

    def test_ledger_matches_xp(self, week_old_streak):
        interval_id = week_old_streak.get_open_interval()["id"]
        data = do_history(week_old_streak, interval_id, now=NOW)
        assert data["total_xp"] == 49
        assert data["events"][-1]["reason"] == "STREAK STARTED"

    def test_journal_entries_counted(self, week_old_streak):
        do_journal_add(week_old_streak, "held firm", now=datetime(2026, 2, 25, 20))
        interval_id = week_old_streak.get_open_interval()["id"]
        data = do_history(week_old_streak, interval_id, now=NOW)
        assert data["total_xp"] == 52


class TestGoalCommand:
    def test_days(self, db):
        assert do_goal(db, days=30) == {"ok": True, "goal_days": 30, "goal_date": None}
        assert db.get_profile("goal_days") == "30"

    def test_date(self, db):
        result = do_goal(db, target_date="2026-12-31")
        assert result["goal_date"] == "2026-12-31"

    def test_clear(self, db):
        do_goal(db, days=30)
        do_goal(db, clear=True)
        assert db.get_profile("goal_days") is None

    def test_invalid_date(self, db):
        assert do_goal(db, target_date="31.12.2026") == {"ok": False, "reason": "invalid_date"}

    def test_invalid_days(self, db):
        assert do_goal(db, days=0) == {"ok": False, "reason": "invalid_goal"}


class TestStats:
    def test_no_data(self, db):
        assert do_stats(db, now=NOW) == {"ok": False, "reason": "no_data"}

    def test_aggregates(self, week_old_streak):
        data = do_stats(week_old_streak, now=NOW)
        assert data["current_days"] == 7
        assert data["record_days"] == 7
        assert data["peak_xp"] == 49
        assert data["peak_rank"] == "NOVICE"
        assert data["total_intervals"] == 1


class TestProjections:
    def test_rows(self, week_old_streak):
        result = do_projections(week_old_streak, now=NOW)
        assert result["current_days"] == 7
        first = result["rows"][0]
        assert first["rank"] == "APPRENTICE"
        assert first["days_needed"] == 23
        assert first["date"] == "2026-03-24"

    def test_without_streak(self, db):
        result = do_projections(db, now=NOW)
        assert result["current_days"] == 0
        assert len(result["rows"]) == 7


class TestCalendarCommand:
    def test_months(self, week_old_streak):
        result = do_calendar(week_old_streak, view="3M", month="2026-02", now=NOW)
        assert list(result["months"]) == ["2026-02", "2026-03", "2026-04"]
        feb = result["months"]["2026-02"]
        assert [d["date"] for d in feb if d["is_start"]] == ["2026-02-22"]
        march = result["months"]["2026-03"]
        assert march[0]["is_today"] is True

    def test_shift_back_one_window(self, db):
        result = do_calendar(db, view="1M", month="2026-03", shift=-1, now=NOW)
        assert list(result["months"]) == ["2026-02"]

    def test_shift_forward_from_current_month(self, db):
        result = do_calendar(db, view="3M", shift=1, now=NOW)
        assert list(result["months"]) == ["2026-06", "2026-07", "2026-08"]

    def test_invalid_month(self, db):
        assert do_calendar(db, month="March", now=NOW) == {"ok": False, "reason": "invalid_month"}
        assert do_calendar(db, month="2026-13", now=NOW) == {"ok": False, "reason": "invalid_month"}


class TestAchievements:
    def test_unlocked(self, week_old_streak):
        result = do_achievements(week_old_streak, now=NOW)
        assert result["unlocked_count"] == 2
        unlocked = [m["name"] for m in result["milestones"] if m["unlocked"]]
        assert unlocked == ["Gotta Start Somewhere", "7-Day Streak"]


class TestJournalCommands:
    def test_add_list_pin_delete(self, db):
        entry = do_journal_add(db, "  first entry  ", now=NOW)["entry"]
        assert entry["text"] == "first entry"
        assert len(do_journal_list(db)["entries"]) == 1
        assert do_journal_pin(db, entry["id"])["pinned"] is True
        do_journal_delete(db, entry["id"])
        assert do_journal_list(db)["entries"] == []

    def test_empty_rejected(self, db):
        assert do_journal_add(db, "   ", now=NOW) == {"ok": False, "reason": "empty"}


class TestPublicCommands:
    def test_disabled_by_default(self, week_old_streak):
        assert do_public_show(week_old_streak, now=NOW)["available"] is False

    def test_enable_and_toggle(self, week_old_streak):
        db = week_old_streak
        do_public_set(db, "enabled", True)
        settings = do_public_toggle(db, "stats")["settings"]
        assert settings == {"enabled": True, "stats": True, "awards": False, "calendar": False}
        do_public_username(db, "ana")
        data = do_public_show(db, now=NOW)
        assert data["available"] is True
        assert data["username"] == "ana"
        assert data["stats"]["current_days"] == 7

    def test_hidden_sections_rendered(self, week_old_streak, capsys):
        do_public_set(week_old_streak, "enabled", True)
        capsys.readouterr()
        data = do_public_show(week_old_streak, now=NOW)
        assert data["hidden"] is True
        assert "User has hidden all data details." in capsys.readouterr().out


class TestConfigCommands:
    def test_set_page_size(self, tmp_path):
        path = tmp_path / "config.json"
        assert do_config_set("page_size", "12", path) == {"ok": True, "key": "page_size", "value": 12}
        assert load_config(path) == {"page_size": 12}

    def test_rejects_non_positive_page_size(self, tmp_path):
        path = tmp_path / "config.json"
        assert do_config_set("page_size", "0", path)["reason"] == "invalid_value"
        assert do_config_set("page_size", "lots", path)["reason"] == "invalid_value"
        assert load_config(path) == {}

    def test_log_level_upper_cased(self, tmp_path):
        path = tmp_path / "config.json"
        assert do_config_set("log_level", "debug", path)["value"] == "DEBUG"
        assert do_config_set("log_level", "LOUD", path)["reason"] == "invalid_value"

    def test_log_format_choices(self, tmp_path):
        path = tmp_path / "config.json"
        assert do_config_set("log_format", "xml", path)["reason"] == "invalid_value"
        assert do_config_set("log_format", "json", path)["ok"] is True

    def test_unknown_key(self, tmp_path):
        assert do_config_set("colour", "red", tmp_path / "config.json") == {
            "ok": False, "reason": "unknown_key",
        }

    def test_show_effective_values(self, tmp_path):
        path = tmp_path / "config.json"
        do_config_set("db_path", "/data/streaks.db", path)
        result = do_config_show(path)
        assert result["config"]["db_path"] == "/data/streaks.db"
        assert result["config"]["page_size"] == 7
        assert result["stored"] == {"db_path": "/data/streaks.db"}


# ── Entry point ───────────────────────────────────────────────────────────────


class TestMain:
    def test_start_via_main(self, tmp_path):
        db_path = tmp_path / "main.db"
        main(["--db", str(db_path), "start", "--at", "2026-01-01T08:00"])
        database = Database(db_path=db_path)
        try:
            assert database.get_open_interval()["start"] == "2026-01-01T08:00:00"
        finally:
            database.close()

    def test_config_skips_database(self, tmp_path):
        config_path = tmp_path / "config.json"
        with patch("streaker.cli.Database") as mock_database, \
                patch("streaker.config.DEFAULT_CONFIG_PATH", config_path):
            main(["config", "set", "page_size", "5"])
        mock_database.assert_not_called()
        assert load_config(config_path) == {"page_size": 5}

    def test_store_error_exits(self, tmp_path):
        with patch("streaker.cli.Database", side_effect=StoreError("disk gone")):
            with pytest.raises(SystemExit) as exc_info:
                main(["--db", str(tmp_path / "x.db"), "stats"])
        assert exc_info.value.code == 1


class TestFormatNumber:
    def test_small(self):
        assert format_number(42) == "42"

    def test_thousands(self):
        assert format_number(1200) == "1,200"

    def test_large(self):
        assert format_number(421543) == "421.5K"
