"""CLI commands for streaker."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path

from streaker.achievements import check_milestones, get_closest_milestones
from streaker.calendar_view import VIEW_MONTHS, build_calendar_index, classify_months, shift_base
from streaker.config import (
    CONFIG_KEYS,
    LOG_FORMATS,
    get_db_path,
    get_log_format,
    get_log_level,
    get_page_size,
    load_config,
    set_config_value,
)
from streaker.db import Database, StoreError
from streaker.display import (
    print_achievements,
    print_calendar,
    print_config,
    print_dashboard,
    print_error,
    print_history,
    print_interval_log,
    print_journal,
    print_message,
    print_no_data_message,
    print_projections,
    print_public_profile,
    print_public_settings,
    print_stats,
)
from streaker.goals import GoalConfig
from streaker.history import reconstruct, total_history_xp
from streaker.logging_config import init_logging
from streaker.projections import project_ranks
from streaker.public_profile import SECTIONS, PublicSettings, build_public_profile
from streaker.stats import compute_analytics, interval_xp, whole_days
from streaker.streaks import (
    DEFAULT_PAGE_SIZE,
    JournalEntry,
    StreakInterval,
    close_snapshot,
    current_standing,
    find_active_interval,
    interval_duration,
    page_intervals,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="streaker",
        description="Track streaks, earn XP and climb the ranks",
    )
    parser.add_argument("--db", default=None, help="Path to the SQLite database")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-format", choices=["text", "json"], default=None)
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("dashboard", help="Show current streak, rank and goal")
    start_p = subparsers.add_parser("start", help="Start a new streak")
    start_p.add_argument("--at", default=None, help="Start time (ISO 8601), defaults to now")
    subparsers.add_parser("end", help="End the active streak and start a fresh one")
    delete_p = subparsers.add_parser("delete", help="Delete a streak interval")
    delete_p.add_argument("interval_id")
    log_p = subparsers.add_parser("log", help="List streak intervals, most recent first")
    log_p.add_argument("--limit", "-n", type=int, default=None, help="Number of intervals to show")
    history_p = subparsers.add_parser("history", help="Show the XP ledger of one interval")
    history_p.add_argument("interval_id")
    goal_p = subparsers.add_parser("goal", help="Set or clear the goal")
    goal_group = goal_p.add_mutually_exclusive_group(required=True)
    goal_group.add_argument("--days", type=int, help="Day-count goal")
    goal_group.add_argument("--date", help="Target date (YYYY-MM-DD)")
    goal_group.add_argument("--clear", action="store_true", help="Remove the goal")
    subparsers.add_parser("stats", help="Aggregate analytics across all streaks")
    cal_p = subparsers.add_parser("calendar", help="Streak calendar")
    cal_p.add_argument("--view", choices=list(VIEW_MONTHS), default="3M")
    cal_p.add_argument("--month", default=None, help="First month to show (YYYY-MM)")
    cal_p.add_argument(
        "--shift", type=int, default=0, help="Move by whole windows (negative goes back)"
    )
    subparsers.add_parser("projections", help="Estimated rank-up dates")
    subparsers.add_parser("achievements", help="List all medals")
    journal_p = subparsers.add_parser("journal", help="Private journal")
    journal_sub = journal_p.add_subparsers(dest="journal_command")
    journal_add_p = journal_sub.add_parser("add", help="Write a journal entry")
    journal_add_p.add_argument("text")
    journal_sub.add_parser("list", help="List journal entries")
    journal_pin_p = journal_sub.add_parser("pin", help="Toggle pin on an entry")
    journal_pin_p.add_argument("entry_id")
    journal_del_p = journal_sub.add_parser("delete", help="Delete an entry")
    journal_del_p.add_argument("entry_id")
    public_p = subparsers.add_parser("public", help="Public profile (opt-in)")
    public_sub = public_p.add_subparsers(dest="public_command")
    public_sub.add_parser("show", help="Show the public profile")
    public_sub.add_parser("enable", help="Enable the public profile")
    public_sub.add_parser("disable", help="Disable the public profile")
    public_toggle_p = public_sub.add_parser("toggle", help="Toggle a public section")
    public_toggle_p.add_argument("section", choices=list(SECTIONS))
    public_user_p = public_sub.add_parser("username", help="Set the public display name")
    public_user_p.add_argument("username")
    config_p = subparsers.add_parser("config", help="Show or change settings")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Show the config file")
    config_set_p = config_sub.add_parser("set", help="Set a config value")
    config_set_p.add_argument("key", choices=list(CONFIG_KEYS))
    config_set_p.add_argument("value")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    command = args.command or "dashboard"

    init_logging(args.log_level or get_log_level(), args.log_format or get_log_format())

    if command == "config":
        if getattr(args, "config_command", None) == "set":
            do_config_set(args.key, args.value)
        else:
            do_config_show()
        return

    try:
        db = Database(Path(args.db).expanduser() if args.db else get_db_path())
    except StoreError as exc:
        logger.error("Store unavailable: %s", exc)
        print_error(str(exc))
        sys.exit(1)

    try:
        if command == "dashboard":
            do_dashboard(db)
        elif command == "start":
            do_start(db, at=args.at)
        elif command == "end":
            do_end(db)
        elif command == "delete":
            do_delete(db, args.interval_id)
        elif command == "log":
            do_log(db, limit=args.limit or get_page_size())
        elif command == "history":
            do_history(db, args.interval_id)
        elif command == "goal":
            do_goal(db, days=args.days, target_date=args.date, clear=args.clear)
        elif command == "stats":
            do_stats(db)
        elif command == "calendar":
            do_calendar(db, view=args.view, month=args.month, shift=args.shift)
        elif command == "projections":
            do_projections(db)
        elif command == "achievements":
            do_achievements(db)
        elif command == "journal":
            journal_cmd = getattr(args, "journal_command", None)
            if journal_cmd == "add":
                do_journal_add(db, args.text)
            elif journal_cmd == "pin":
                do_journal_pin(db, args.entry_id)
            elif journal_cmd == "delete":
                do_journal_delete(db, args.entry_id)
            else:
                do_journal_list(db)
        elif command == "public":
            public_cmd = getattr(args, "public_command", None)
            if public_cmd == "enable":
                do_public_set(db, "enabled", True)
            elif public_cmd == "disable":
                do_public_set(db, "enabled", False)
            elif public_cmd == "toggle":
                do_public_toggle(db, args.section)
            elif public_cmd == "username":
                do_public_username(db, args.username)
            else:
                do_public_show(db)
    except StoreError as exc:
        logger.error("Store operation failed: %s", exc)
        print_error(str(exc))
        sys.exit(1)
    finally:
        db.close()


def _load_intervals(db: Database, now: datetime | None = None) -> list[StreakInterval]:
    return [StreakInterval.from_record(r, now) for r in db.get_all_intervals()]


def _load_goal(db: Database) -> GoalConfig:
    return GoalConfig.from_profile(db.get_all_profile())


def do_dashboard(db: Database, now: datetime | None = None) -> dict:
    """Show the active streak, rank progress, next rank-up and goal progress."""
    now = now or datetime.now()
    intervals = _load_intervals(db, now)
    if not intervals:
        print_no_data_message()
        return {"ok": False, "reason": "no_data"}

    goal = _load_goal(db)
    standing = current_standing(intervals, goal, now)
    statuses = check_milestones(standing.duration.days if standing.active else 0, goal)
    closest = [
        {"name": s.definition.name, "progress": s.progress}
        for s in get_closest_milestones(statuses)
    ]

    data = {
        "ok": True,
        "active": standing.active is not None,
        "active_id": standing.active.id if standing.active else None,
        "duration": standing.duration.fmt,
        "days": standing.duration.days,
        "xp": standing.xp,
        "level": standing.rank.level,
        "rank_title": standing.rank.title,
        "next_rank_xp": standing.next_rank.xp_threshold if standing.next_rank else None,
        "progress_percent": standing.progress_percent,
        "rank_estimate": standing.rank_estimate_text,
        "goal_label": standing.goal.label,
        "goal_percent": standing.goal.percent,
        "goal_target": standing.goal.target_display,
        "closest_milestones": closest,
    }
    print_dashboard(data)
    return data


def _parse_when(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def do_start(db: Database, at: str | datetime | None = None, now: datetime | None = None) -> dict:
    """Open a new streak at `at` (default now). Refused while one is open."""
    now = now or datetime.now()
    try:
        start = at if isinstance(at, datetime) else _parse_when(at)
    except ValueError:
        print_error(f"Invalid start time: {at!r}. Use ISO 8601, e.g. 2026-01-31T08:00")
        return {"ok": False, "reason": "invalid_time"}
    start = start or now
    if start > now:
        print_error(f"Start time {start.isoformat()} is in the future.")
        return {"ok": False, "reason": "future_start"}

    if db.get_open_interval() is not None:
        print_error("A streak is already active. End it first with: streaker end")
        return {"ok": False, "reason": "already_active"}

    record = db.start_interval(start)
    print_message(f"Streak #{record['id']} started at {record['start']}")
    return {"ok": True, "interval": record}


def do_end(db: Database, now: datetime | None = None) -> dict:
    """Close the active streak with its XP snapshot and open a fresh one."""
    now = now or datetime.now()
    active = find_active_interval(_load_intervals(db, now))
    if active is None:
        print_error("No active streak to end.")
        return {"ok": False, "reason": "no_active"}

    snapshot = close_snapshot(active, _load_goal(db), now)
    new_record = db.end_interval(
        active.id,
        end=snapshot["end"],
        final_xp=snapshot["final_xp"],
        goal_achieved=snapshot["goal_achieved"],
        restart=True,
    )
    print_message(
        f"Streak #{active.id} ended with {snapshot['final_xp']} XP"
        + (" (goal achieved)" if snapshot["goal_achieved"] else "")
    )
    return {
        "ok": True,
        "closed_id": active.id,
        "final_xp": snapshot["final_xp"],
        "goal_achieved": snapshot["goal_achieved"],
        "new_interval": new_record,
    }


def do_delete(db: Database, interval_id: str) -> dict:
    db.delete_interval(interval_id)
    print_message(f"Streak #{interval_id} deleted")
    return {"ok": True, "deleted_id": interval_id}


def do_log(db: Database, limit: int = DEFAULT_PAGE_SIZE, now: datetime | None = None) -> dict:
    """List intervals, most recent first, up to limit."""
    now = now or datetime.now()
    intervals = _load_intervals(db, now)
    goal = _load_goal(db)
    page, has_more = page_intervals(intervals, limit, now)
    rows = [
        {
            "id": interval.id,
            "start": interval.start.date().isoformat(),
            "end": interval.end.date().isoformat() if interval.end else None,
            "active": interval.is_open,
            "duration": dur.fmt,
            "days": dur.days,
            "xp": interval_xp(interval, goal, now),
            "goal_achieved": interval.goal_achieved,
        }
        for interval, dur in page
    ]
    print_interval_log(rows, has_more)
    return {"ok": True, "rows": rows, "has_more": has_more}


def do_history(db: Database, interval_id: str, now: datetime | None = None) -> dict:
    """Reconstruct the day-by-day XP ledger of one interval."""
    now = now or datetime.now()
    record = db.get_interval(interval_id)
    if record is None:
        print_error(f"No streak with id {interval_id}")
        return {"ok": False, "reason": "not_found"}

    interval = StreakInterval.from_record(record, now)
    journal = [JournalEntry.from_record(r, now) for r in db.get_journal_entries()]
    events = reconstruct(interval, _load_goal(db), journal, now)
    data = {
        "ok": True,
        "interval_id": interval.id,
        "duration": interval_duration(interval, now).fmt,
        "events": [
            {"date": e.date.date().isoformat(), "reason": e.reason, "xp": e.xp} for e in events
        ],
        "total_xp": total_history_xp(events),
    }
    print_history(data)
    return data


def do_goal(
    db: Database,
    days: int | None = None,
    target_date: str | None = None,
    clear: bool = False,
) -> dict:
    """Set a day-count goal, a target-date goal, or clear the goal."""
    if clear:
        db.set_goal()
        print_message("Goal cleared")
        return {"ok": True, "goal_days": None, "goal_date": None}

    parsed_date: date | None = None
    if target_date is not None:
        try:
            parsed_date = date.fromisoformat(target_date)
        except ValueError:
            print_error(f"Invalid date: {target_date!r}. Use YYYY-MM-DD.")
            return {"ok": False, "reason": "invalid_date"}

    try:
        db.set_goal(days=days, target_date=parsed_date)
    except ValueError as exc:
        print_error(str(exc))
        return {"ok": False, "reason": "invalid_goal"}

    label = f"{days} days" if days is not None else f"until {parsed_date}"
    print_message(f"Goal set: {label}")
    return {
        "ok": True,
        "goal_days": days,
        "goal_date": parsed_date.isoformat() if parsed_date else None,
    }


def do_stats(db: Database, now: datetime | None = None) -> dict:
    """Show aggregate analytics across all intervals."""
    now = now or datetime.now()
    intervals = _load_intervals(db, now)
    if not intervals:
        print_no_data_message()
        return {"ok": False, "reason": "no_data"}

    analytics = compute_analytics(intervals, _load_goal(db), now)
    data = {
        "ok": True,
        "current_days": whole_days(analytics.current_days),
        "record_days": whole_days(analytics.record_days),
        "average_days": analytics.average_days,
        "ytd_days": whole_days(analytics.ytd_days),
        "peak_xp": analytics.peak_xp,
        "peak_rank": analytics.peak_rank.title,
        "total_intervals": analytics.total_intervals,
    }
    print_stats(data)
    return data


def do_projections(db: Database, now: datetime | None = None) -> dict:
    """Estimate rank-up days for every rank above the current one."""
    now = now or datetime.now()
    intervals = _load_intervals(db, now)
    goal = _load_goal(db)
    active = find_active_interval(intervals)
    current_days = interval_duration(active, now).days if active else 0
    rows = [
        {
            "rank": p.rank.title,
            "level": p.rank.level,
            "xp": p.rank.xp_threshold,
            "days": p.days_text,
            "date": p.date_text,
            "days_needed": p.days_needed,
        }
        for p in project_ranks(current_days, goal, now)
    ]
    print_projections(rows)
    return {"ok": True, "current_days": current_days, "rows": rows}


def _parse_month(value: str | None, today: date) -> date:
    if not value:
        return today.replace(day=1)
    year_str, month_str = value.split("-", 1)
    return date(int(year_str), int(month_str), 1)


def do_calendar(
    db: Database,
    view: str = "3M",
    month: str | None = None,
    now: datetime | None = None,
    shift: int = 0,
) -> dict:
    """Show the streak calendar for a 1, 3 or 12 month window.

    shift moves the window by whole views from month (or the current month).
    """
    now = now or datetime.now()
    try:
        base = shift_base(_parse_month(month, now.date()), view, shift)
    except ValueError:
        print_error(f"Invalid month: {month!r}. Use YYYY-MM.")
        return {"ok": False, "reason": "invalid_month"}

    index = build_calendar_index(_load_intervals(db, now), _load_goal(db), now)
    months = classify_months(index, base, view, now.date())
    rendered = {
        key: [
            {
                "date": d.day.isoformat(),
                "day": d.day.day,
                "weekday": d.day.weekday(),
                "active": d.active,
                "is_start": d.is_start,
                "is_end": d.is_end,
                "goal_met": d.goal_met,
                "is_goal_day": d.is_goal_day,
                "is_today": d.is_today,
            }
            for d in days
        ]
        for key, days in months.items()
    }
    print_calendar(rendered)
    return {"ok": True, "months": rendered, "goal_day": index.goal_day}


def do_achievements(db: Database, now: datetime | None = None) -> dict:
    """Show every medal against the active streak."""
    now = now or datetime.now()
    active = find_active_interval(_load_intervals(db, now))
    elapsed = interval_duration(active, now).days if active else 0
    milestones = [
        {
            "name": s.definition.name,
            "icon": s.definition.icon,
            "description": s.definition.description,
            "xp": s.definition.xp_reward,
            "days": s.definition.day_threshold,
            "progress": s.progress,
            "unlocked": s.unlocked,
        }
        for s in check_milestones(elapsed, _load_goal(db))
    ]
    print_achievements(milestones)
    return {
        "ok": True,
        "milestones": milestones,
        "unlocked_count": sum(1 for m in milestones if m["unlocked"]),
    }


def do_journal_add(db: Database, text: str, now: datetime | None = None) -> dict:
    text = text.strip()
    if not text:
        print_error("Journal entry is empty.")
        return {"ok": False, "reason": "empty"}
    entry = db.add_journal_entry(text, now or datetime.now())
    print_message(f"Journal entry #{entry['id']} saved")
    return {"ok": True, "entry": entry}


def do_journal_list(db: Database) -> dict:
    entries = db.get_journal_entries()
    print_journal(entries)
    return {"ok": True, "entries": entries}


def do_journal_pin(db: Database, entry_id: str) -> dict:
    pinned = db.toggle_journal_pin(entry_id)
    print_message(f"Journal entry #{entry_id} {'pinned' if pinned else 'unpinned'}")
    return {"ok": True, "entry_id": entry_id, "pinned": pinned}


def do_journal_delete(db: Database, entry_id: str) -> dict:
    db.delete_journal_entry(entry_id)
    print_message(f"Journal entry #{entry_id} deleted")
    return {"ok": True, "deleted_id": entry_id}


_PUBLIC_KEYS = {
    "enabled": "public_enabled",
    "stats": "public_show_stats",
    "awards": "public_show_awards",
    "calendar": "public_show_calendar",
}


def _public_settings_dict(db: Database) -> dict:
    settings = PublicSettings.from_profile(db.get_all_profile())
    return {
        "enabled": settings.enabled,
        "stats": settings.show_stats,
        "awards": settings.show_awards,
        "calendar": settings.show_calendar,
    }


def do_public_set(db: Database, key: str, value: bool) -> dict:
    """Set one public-profile flag (enabled, stats, awards, calendar)."""
    db.set_profile(_PUBLIC_KEYS[key], "1" if value else "0")
    settings = _public_settings_dict(db)
    print_public_settings(settings)
    return {"ok": True, "settings": settings}


def do_public_toggle(db: Database, section: str) -> dict:
    current = _public_settings_dict(db)[section]
    return do_public_set(db, section, not current)


def do_public_username(db: Database, username: str) -> dict:
    db.set_profile("username", username)
    print_message(f"Public name set to {username}")
    return {"ok": True, "username": username}


def do_public_show(db: Database, now: datetime | None = None) -> dict:
    """Render the read-only public profile as others would see it."""
    now = now or datetime.now()
    profile = db.get_all_profile()
    data = build_public_profile(
        PublicSettings.from_profile(profile),
        profile.get("username"),
        _load_intervals(db, now),
        GoalConfig.from_profile(profile),
        now,
    )
    print_public_profile(data)
    return data


def do_config_show(config_path: Path | None = None) -> dict:
    """Print the effective settings."""
    config = {
        "db_path": str(get_db_path(config_path) or "(default)"),
        "log_level": get_log_level(config_path),
        "log_format": get_log_format(config_path),
        "page_size": get_page_size(config_path),
    }
    print_config(config)
    return {"ok": True, "config": config, "stored": load_config(config_path)}


def do_config_set(key: str, value: str, config_path: Path | None = None) -> dict:
    """Validate and persist one setting."""
    if key not in CONFIG_KEYS:
        print_error(f"Unknown setting: {key!r}. Choose from {', '.join(CONFIG_KEYS)}.")
        return {"ok": False, "reason": "unknown_key"}

    stored: object = value.strip()
    if key == "page_size":
        try:
            stored = int(value)
        except ValueError:
            stored = 0
        if stored <= 0:
            print_error(f"page_size must be a positive integer, got {value!r}.")
            return {"ok": False, "reason": "invalid_value"}
    elif key == "log_format" and stored not in LOG_FORMATS:
        print_error(f"log_format must be one of {', '.join(LOG_FORMATS)}.")
        return {"ok": False, "reason": "invalid_value"}
    elif key == "log_level":
        stored = str(stored).upper()
        if not isinstance(getattr(logging, stored, None), int):
            print_error(f"Unknown log level: {value!r}.")
            return {"ok": False, "reason": "invalid_value"}
    elif not stored:
        print_error(f"{key} cannot be empty.")
        return {"ok": False, "reason": "invalid_value"}

    set_config_value(key, stored, config_path)
    print_message(f"{key} set to {stored}")
    return {"ok": True, "key": key, "value": stored}
