"""Rich terminal display for streaker."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

console = Console()

# Rank level -> Rich color name
_RANK_COLORS: dict[int, str] = {
    1: "grey70",
    2: "green3",
    3: "spring_green1",
    4: "deep_sky_blue1",
    5: "purple",
    6: "dark_violet",
    7: "gold1",
    8: "orange_red1",
}

_WEEKDAY_HEADERS = ["S", "M", "T", "W", "T", "F", "S"]


def rank_color(level: int) -> str:
    return _RANK_COLORS.get(level, "white")


def format_number(n: int) -> str:
    """Format large numbers: 421543 -> '421.5K', 1200 -> '1,200', 1234567 -> '1.2M'."""
    if n >= 1_000_000:
        value = n / 1_000_000
        if value >= 100:
            return f"{value:.0f}M"
        return f"{value:.1f}M"
    if n >= 10_000:
        value = n / 1_000
        if value >= 1000:
            return f"{value:.0f}K"
        return f"{value:.1f}K"
    return f"{n:,}"


def _bar(percent: float, width: int = 20) -> str:
    """Render a progress bar as text: [████████░░░░░░░░░░░░]."""
    ratio = max(0.0, min(percent / 100, 1.0))
    filled = int(ratio * width)
    return "[" + "█" * filled + "░" * (width - filled) + "]"


def print_dashboard(data: dict) -> None:
    """Print the HUD: status, session length, rank, XP bar, goal."""
    active = data.get("active", False)
    level = data.get("level", 1)
    color = rank_color(level)

    lines: list[str] = []
    lines.append("")
    status = "[bold green][ ACTIVE ][/]" if active else "[bold red][ STANDBY ][/]"
    lines.append(f"  STATUS   {status}")
    lines.append(f"  SESSION  [bold]{data.get('duration', '0d 0h')}[/]")
    lines.append("")

    lines.append(f"  [bold {color}]LVL {level} {data.get('rank_title', 'NOVICE')}[/]")
    lines.append(f"  {_bar(data.get('progress_percent', 0))} {data.get('progress_percent', 0)}%")
    next_xp = data.get("next_rank_xp")
    next_text = format_number(next_xp) if next_xp is not None else "MAX"
    lines.append(f"  {format_number(data.get('xp', 0))} / {next_text} XP")
    lines.append(f"  [bold]{data.get('rank_estimate', '')}[/]")
    lines.append("")

    lines.append(f"  [bold]GOAL[/]  {data.get('goal_label', 'NO GOAL SET')}")
    goal_percent = data.get("goal_percent", 0.0)
    lines.append(f"  {_bar(goal_percent)} {round(goal_percent)}%")
    lines.append(f"  {data.get('goal_target', '-- / --')}")

    closest = data.get("closest_milestones", [])
    if closest:
        lines.append("")
        lines.append("  [bold]Almost There:[/]")
        for ms in closest:
            lines.append(f"  ⏳ {ms['name']} ({int(ms['progress'] * 100)}%)")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]STREAKER[/]",
        box=box.ROUNDED,
        border_style=color,
        width=54,
    )
    console.print(panel)


def print_interval_log(rows: list[dict], has_more: bool = False) -> None:
    """Print the interval list, most recent first."""
    table = Table(title="Activity Log", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Period")
    table.add_column("Duration", justify="right")
    table.add_column("XP", justify="right")
    table.add_column("Goal", justify="center")

    if not rows:
        table.add_row("", "[grey50]NO DATA FOUND[/]", "", "", "")
    for row in rows:
        end_text = "PRESENT" if row["active"] else row["end"]
        style = "bold green" if row["active"] else ""
        goal_mark = "" if row["active"] else ("★" if row["goal_achieved"] else "✕")
        table.add_row(
            row["id"],
            f"{row['start']} - {end_text}",
            f"[{style}]{row['duration']}[/]" if style else row["duration"],
            format_number(row["xp"]),
            goal_mark,
        )
    console.print(table)
    if has_more:
        console.print("  [grey50]More intervals available. Use --limit to view more.[/]")


def print_history(data: dict) -> None:
    """Print the reconstructed XP ledger for one interval."""
    table = Table(
        title=f"Interval {data.get('interval_id', '')} History",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("Date")
    table.add_column("Event")
    table.add_column("XP", justify="right", style="green")

    events = data.get("events", [])
    if not events:
        table.add_row("", "[grey50]NO XP GENERATED YET[/]", "")
    for event in events:
        table.add_row(event["date"], event["reason"], f"+{event['xp']}")
    if events:
        table.add_section()
        table.add_row("", "[bold]Total[/]", f"[bold]{format_number(data.get('total_xp', 0))}[/]")
    console.print(table)


def print_stats(data: dict) -> None:
    """Print aggregate analytics as a table."""
    table = Table(title="Data Analytics", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Current", f"{data.get('current_days', 0)}d")
    table.add_row("Record", f"{data.get('record_days', 0)}d")
    table.add_row("Peak Rank", data.get("peak_rank", "NOVICE"))
    table.add_row("Peak XP", format_number(data.get("peak_xp", 0)))
    table.add_row("Total (YTD)", str(data.get("ytd_days", 0)))
    table.add_row("Average", f"{data.get('average_days', 0.0):.1f}d")
    table.add_row("Intervals", str(data.get("total_intervals", 0)))
    console.print(table)


def print_projections(rows: list[dict]) -> None:
    """Print estimated rank-up days for every rank above the current one."""
    if not rows:
        console.print(Panel("\n  MAX RANK ACHIEVED\n", title="[bold]Rank Projections[/]", width=54))
        return
    table = Table(title="Rank Projections", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Rank", style="bold")
    table.add_column("XP Req", justify="right")
    table.add_column("Est. Days", justify="right")
    table.add_column("Est. Date", justify="right")
    for row in rows:
        table.add_row(row["rank"], format_number(row["xp"]), row["days"], row["date"])
    console.print(table)
    console.print(
        "  [grey50]* Estimates based on current streak trajectory "
        "(Daily XP + Achievements + Goal Bonus).[/]"
    )


def _day_cell(day: dict) -> str:
    text = f"{day['day']:>2}"
    if day["is_end"] and day["is_start"]:
        # Turnover day: previous interval ended, new one started
        end_color = "gold1" if day["goal_met"] else "red"
        text = f"[bold {end_color} on green]{text}[/]"
    elif day["is_end"]:
        text = f"[bold black on gold1]{text}[/]" if day["goal_met"] else f"[bold white on red]{text}[/]"
    elif day["active"]:
        text = f"[bold black on green]{text}[/]"
    else:
        text = f"[grey50]{text}[/]"

    markers = ""
    if day["is_start"]:
        markers += "▶"
    if day["is_end"]:
        markers += "★" if day["goal_met"] else "✕"
    if day["is_goal_day"]:
        markers += "\U0001f3af"
    if day["is_today"]:
        text = f"[underline]{text}[/]"
    return text + markers


def print_calendar(months: dict[str, list[dict]]) -> None:
    """Print one grid per month. Each day dict comes from a CalendarDay."""
    for month_key, days in months.items():
        table = Table(title=month_key, box=box.SIMPLE, show_header=True, header_style="bold")
        for header in _WEEKDAY_HEADERS:
            table.add_column(header, justify="center", min_width=4)
        # Sunday-first grid
        week: list[str] = [""] * ((days[0]["weekday"] + 1) % 7) if days else []
        for day in days:
            week.append(_day_cell(day))
            if len(week) == 7:
                table.add_row(*week)
                week = []
        if week:
            table.add_row(*(week + [""] * (7 - len(week))))
        console.print(table)
    console.print(
        "  ▶ Start   ✕ End (Fail)   ★ Goal Met   \U0001f3af Target"
    )


def print_achievements(milestones: list[dict]) -> None:
    """Print all milestones with progress bars, unlocked first."""
    unlocked = [m for m in milestones if m.get("unlocked")]
    locked = [m for m in milestones if not m.get("unlocked")]

    table = Table(title="Medals", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Medal", min_width=20)
    table.add_column("XP", justify="right")
    table.add_column("Progress", min_width=18)

    for ms in unlocked + locked:
        icon = ms.get("icon", "") if ms.get("unlocked") else "\U0001f512"
        name_text = f"[bold]{ms['name']}[/]"
        if ms.get("description"):
            name_text += f"\n{ms['description']}"
        pct = int(ms.get("progress", 0.0) * 100)
        table.add_row(icon, name_text, f"+{ms['xp']}", f"{_bar(pct, width=10)} {pct}%")

    console.print(table)
    console.print("  [grey50]Medals reflect current active streak status only.[/]")


def print_journal(entries: list[dict]) -> None:
    """Print journal entries, newest first."""
    if not entries:
        console.print("  [grey50]Journal is empty.[/]")
        return
    for entry in entries:
        pin = " \U0001f4cc" if entry.get("pinned") else ""
        panel = Panel(
            Text(entry["text"]),
            title=f"#{entry['id']}  {entry['timestamp']}{pin}",
            title_align="left",
            box=box.ROUNDED,
            border_style="gold1" if entry.get("pinned") else "grey50",
            width=54,
        )
        console.print(panel)


def print_public_profile(data: dict) -> None:
    """Print the public profile snapshot."""
    if not data.get("available"):
        console.print(Panel(
            "\n  Public profile is disabled.\n",
            title="[bold]Public Profile[/]",
            box=box.ROUNDED,
            border_style="grey50",
            width=54,
        ))
        return

    lines = ["", f"  User: [bold]{data.get('username', 'anonymous')}[/]"]
    if data.get("hidden"):
        lines.append("  [grey50]User has hidden all data details.[/]")
    stats = data.get("stats")
    if stats:
        lines.append(f"  Current: {stats['current_days']}d   Record: {stats['record_days']}d")
        lines.append(f"  Peak Rank: {stats['peak_rank']}   YTD: {stats['ytd_days']}")
    awards = data.get("awards")
    if awards is not None:
        lines.append(f"  Medals: {' '.join(a['icon'] for a in awards) or 'none'}")
    calendar_days = data.get("calendar")
    if calendar_days is not None:
        active_days = sum(1 for d in calendar_days if d["active"])
        lines.append(f"  Active days this month: {active_days}")
    lines.append("")
    console.print(Panel(
        "\n".join(lines),
        title="[bold]Public Profile[/]",
        box=box.ROUNDED,
        border_style="green",
        width=54,
    ))


def print_config(config: dict) -> None:
    lines = [""]
    for key, value in config.items():
        lines.append(f"  {key:<14s} {escape(str(value))}")
    lines.append("")
    console.print(Panel("\n".join(lines), title="[bold]Config[/]", box=box.ROUNDED, width=54))


def print_public_settings(settings: dict) -> None:
    lines = [""]
    for key, value in settings.items():
        mark = "[green]ON[/]" if value else "[grey50]OFF[/]"
        lines.append(f"  {key:<14s} {mark}")
    lines.append("")
    console.print(Panel("\n".join(lines), title="[bold]Public Settings[/]", box=box.ROUNDED, width=54))


def print_message(message: str, style: str = "green") -> None:
    console.print(f"[{style}]{message}[/]")


def print_error(message: str) -> None:
    console.print(f"[red]{message}[/]")


def print_no_data_message() -> None:
    """Print message when no interval has been logged yet."""
    panel = Panel(
        "\n  No streaks logged yet. Run [bold]streaker start[/] to begin one.\n",
        title="[bold]STREAKER[/]",
        box=box.ROUNDED,
        border_style="grey50",
        width=54,
    )
    console.print(panel)
