"""MCP server for streaker.

Exposes streak standing, analytics and projections as MCP tools.
Run via: python3 -m streaker.mcp_server
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from mcp.server.fastmcp import FastMCP

from streaker.calendar_view import VIEW_MONTHS, build_calendar_index, classify_months
from streaker.goals import GoalConfig
from streaker.streaks import StreakInterval

mcp = FastMCP(name="streaker")


def _get_db():
    from streaker.config import get_db_path
    from streaker.db import Database
    return Database(get_db_path())


def _load(db) -> tuple[list[StreakInterval], GoalConfig, dict]:
    now = datetime.now()
    profile = db.get_all_profile()
    intervals = [StreakInterval.from_record(r, now) for r in db.get_all_intervals()]
    return intervals, GoalConfig.from_profile(profile), profile


@mcp.tool()
def get_status() -> dict[str, Any]:
    """Get the active streak: duration, XP, rank, progress and goal progress."""
    db = _get_db()
    try:
        from streaker.streaks import current_standing
        intervals, goal, _ = _load(db)
        if not intervals:
            return {"error": "No streaks logged yet. Run streaker start first."}
        standing = current_standing(intervals, goal)
        return {
            "active": standing.active is not None,
            "duration": standing.duration.fmt,
            "days": standing.duration.days,
            "xp": standing.xp,
            "level": standing.rank.level,
            "rank": standing.rank.title,
            "next_rank": standing.next_rank.title if standing.next_rank else None,
            "next_rank_xp": standing.next_rank.xp_threshold if standing.next_rank else None,
            "progress_percent": standing.progress_percent,
            "rank_estimate": standing.rank_estimate_text,
            "goal": {
                "label": standing.goal.label,
                "percent": round(standing.goal.percent),
                "target": standing.goal.target_display,
            },
        }
    finally:
        db.close()


@mcp.tool()
def get_stats() -> dict[str, Any]:
    """Get aggregate analytics: current, record, average, year-to-date, peak rank."""
    db = _get_db()
    try:
        from streaker.stats import compute_analytics, whole_days
        intervals, goal, _ = _load(db)
        if not intervals:
            return {"error": "No data yet."}
        analytics = compute_analytics(intervals, goal)
        return {
            "current_days": whole_days(analytics.current_days),
            "record_days": whole_days(analytics.record_days),
            "average_days": round(analytics.average_days, 1),
            "ytd_days": whole_days(analytics.ytd_days),
            "peak_xp": analytics.peak_xp,
            "peak_rank": analytics.peak_rank.title,
            "total_intervals": analytics.total_intervals,
        }
    finally:
        db.close()


@mcp.tool()
def get_projections() -> dict[str, Any]:
    """Get estimated rank-up dates for every rank above the current one."""
    db = _get_db()
    try:
        from streaker.projections import project_ranks
        from streaker.streaks import find_active_interval, interval_duration
        intervals, goal, _ = _load(db)
        active = find_active_interval(intervals)
        current_days = interval_duration(active).days if active else 0
        rows = [
            {"rank": p.rank.title, "xp": p.rank.xp_threshold, "days": p.days_text, "date": p.date_text}
            for p in project_ranks(current_days, goal)
        ]
        return {"current_days": current_days, "projections": rows, "max_rank": not rows}
    finally:
        db.close()


@mcp.tool()
def get_calendar(month: str = "", view: str = "1M") -> dict[str, Any]:
    """Get per-day streak classification.

    month: first month as YYYY-MM (empty for the current month).
    view: 1M, 3M or 12M.
    """
    if view not in VIEW_MONTHS:
        return {"error": f"Invalid view. Must be one of: {', '.join(VIEW_MONTHS)}"}
    today = date.today()
    try:
        base = date.fromisoformat(f"{month}-01") if month else today.replace(day=1)
    except ValueError:
        return {"error": "Invalid month. Use YYYY-MM."}
    db = _get_db()
    try:
        intervals, goal, _ = _load(db)
        index = build_calendar_index(intervals, goal)
        months = classify_months(index, base, view, today)
        return {
            "goal_day": index.goal_day,
            "months": {
                key: [
                    {
                        "date": d.day.isoformat(), "active": d.active, "start": d.is_start,
                        "end": d.is_end, "goal_met": d.goal_met, "goal_day": d.is_goal_day,
                    }
                    for d in days
                ]
                for key, days in months.items()
            },
        }
    finally:
        db.close()


@mcp.tool()
def get_history(interval_id: str) -> dict[str, Any]:
    """Get the day-by-day XP ledger of one streak interval, newest first."""
    db = _get_db()
    try:
        from streaker.history import reconstruct, total_history_xp
        from streaker.streaks import JournalEntry
        record = db.get_interval(interval_id)
        if record is None:
            return {"error": f"No streak with id {interval_id}"}
        now = datetime.now()
        interval = StreakInterval.from_record(record, now)
        journal = [JournalEntry.from_record(r, now) for r in db.get_journal_entries()]
        goal = GoalConfig.from_profile(db.get_all_profile())
        events = reconstruct(interval, goal, journal, now)
        return {
            "interval_id": interval.id,
            "events": [
                {"date": e.date.date().isoformat(), "reason": e.reason, "xp": e.xp} for e in events
            ],
            "total_xp": total_history_xp(events),
        }
    finally:
        db.close()


@mcp.tool()
def get_achievements() -> dict[str, Any]:
    """Get all medals with unlock status for the active streak."""
    db = _get_db()
    try:
        from streaker.achievements import check_milestones
        from streaker.streaks import find_active_interval, interval_duration
        intervals, goal, _ = _load(db)
        active = find_active_interval(intervals)
        elapsed = interval_duration(active).days if active else 0
        result = [
            {
                "name": s.definition.name, "icon": s.definition.icon,
                "xp": s.definition.xp_reward, "days": s.definition.day_threshold,
                "progress_pct": int(s.progress * 100), "unlocked": s.unlocked,
            }
            for s in check_milestones(elapsed, goal)
        ]
        return {"achievements": result, "unlocked_count": sum(1 for a in result if a["unlocked"]),
                "total_count": len(result)}
    finally:
        db.close()


@mcp.tool()
def get_public_profile() -> dict[str, Any]:
    """Get the public profile snapshot, limited to the sections the user shares."""
    db = _get_db()
    try:
        from streaker.public_profile import PublicSettings, build_public_profile
        intervals, goal, profile = _load(db)
        return build_public_profile(
            PublicSettings.from_profile(profile), profile.get("username"), intervals, goal
        )
    finally:
        db.close()


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
