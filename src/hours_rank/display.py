"""Rich terminal display for hours-rank."""

from __future__ import annotations

from datetime import datetime

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

_MEDALS = {1: "\U0001f947", 2: "\U0001f948", 3: "\U0001f949"}


def format_duration(seconds: int) -> str:
    """Format seconds as '1h 05m', '12m 30s' or '45s'."""
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"


def _short_ts(value: str | None) -> str:
    if not value:
        return "-"
    return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M")


def print_stats(data: dict) -> None:
    """Print the profile stats panel from UserStats.to_dict()."""
    color = data.get("level_color", "white")
    name = data.get("name") or data.get("id", "unknown")
    rank = data.get("rank", 0)
    rank_text = f"#{rank}" if rank else "unranked"

    lines: list[str] = []
    lines.append("")
    lines.append(f"  [bold]{name}[/]")
    lines.append(f"  [bold {color}]{data.get('level', 'Newbie')}[/]  |  Rank: [bold]{rank_text}[/]")

    if data.get("next_level"):
        remaining = format_duration(data.get("seconds_to_next_level") or 0)
        lines.append(f"  {remaining} to {data['next_level']}")

    lines.append("")
    lines.append(f"  ⏱️  Total: {data.get('total_hours', 0.0)}h  |  Sessions: {data.get('total_sessions', 0)}")
    lines.append(f"  \U0001f4ca Avg/session: {data.get('daily_avg', 0.0)}h")
    lines.append(f"  \U0001f525 Streak: {data.get('current_streak', 0)} days")
    lines.append(f"  \U0001f4c5 Active days: {data.get('active_days', 0)}")
    if data.get("last_active_date"):
        lines.append(f"     Last active: {data['last_active_date']}")

    if data.get("created_at"):
        lines.append("")
        lines.append(f"  Member since: {data['created_at'][:10]}")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]HOURS RANK[/]",
        box=box.ROUNDED,
        border_style=color,
        width=50,
    )
    console.print(panel)


def print_leaderboard(rows: list[dict]) -> None:
    """Print the leaderboard table. The caller's row is highlighted."""
    if not rows:
        console.print("[yellow]No tracked time yet. Start a session with: hours-rank start <project>[/]")
        return

    table = Table(
        title="Leaderboard",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("#", justify="right", width=4)
    table.add_column("Name", min_width=16)
    table.add_column("Level", min_width=12)
    table.add_column("Hours", justify="right")
    table.add_column("Streak", justify="right")

    for row in rows:
        rank = row.get("rank", 0)
        rank_text = _MEDALS.get(rank, str(rank))
        color = row.get("level_color", "white")
        name = row.get("name", "")
        style = "bold" if row.get("is_current_user") else None
        if row.get("is_current_user"):
            name = f"{name} (you)"
        table.add_row(
            rank_text,
            name,
            f"[{color}]{row.get('level', '')}[/]",
            f"{row.get('total_hours', 0.0)}h",
            f"{row.get('current_streak', 0)}d",
            style=style,
        )

    console.print(table)


def print_entries(page: dict) -> None:
    """Print one page of time entries."""
    table = Table(
        title=f"Time Entries (page {page['page']}/{max(page['total_pages'], 1)}, {page['total']} total)",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("ID", style="dim", width=8)
    table.add_column("Project", min_width=12)
    table.add_column("Started")
    table.add_column("Duration", justify="right")
    table.add_column("Description")

    for entry in page["data"]:
        if entry["end_time"] is None:
            duration = "[green]running[/]"
        else:
            duration = format_duration(entry["duration"])
        table.add_row(
            entry["id"][:8],
            entry["project_name"],
            _short_ts(entry["start_time"]),
            duration,
            entry.get("description") or "",
        )

    console.print(table)


def print_entry_result(title: str, entry: dict) -> None:
    """Print a short confirmation after a start/stop/edit."""
    lines = [
        "",
        f"  ID:       {entry['id']}",
        f"  Project:  {entry['project_name']}",
        f"  Started:  {_short_ts(entry['start_time'])}",
    ]
    if entry["end_time"] is not None:
        lines.append(f"  Stopped:  {_short_ts(entry['end_time'])}")
        lines.append(f"  Duration: {format_duration(entry['duration'])}")
    lines.append("")
    panel = Panel(
        "\n".join(lines),
        title=f"[bold]{title}[/]",
        box=box.ROUNDED,
        border_style="green",
        width=50,
    )
    console.print(panel)


def print_projects(page: dict) -> None:
    """Print one page of projects."""
    if not page["data"]:
        console.print("[yellow]No projects yet. Create one with: hours-rank projects create <name>[/]")
        return

    table = Table(
        title=f"Projects (page {page['page']}/{max(page['total_pages'], 1)}, {page['total']} total)",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("ID", style="dim", width=8)
    table.add_column("Name", min_width=12)
    table.add_column("Color")
    table.add_column("Description")

    for project in page["data"]:
        color = project["color"]
        table.add_row(
            project["id"][:8],
            f"[{color}]{project['name']}[/]",
            color,
            project.get("description") or "",
        )

    console.print(table)


def print_project_result(title: str, project: dict) -> None:
    color = project["color"]
    lines = [
        "",
        f"  ID:          {project['id']}",
        f"  Name:        [bold {color}]{project['name']}[/]",
        f"  Color:       {color}",
    ]
    if project.get("description"):
        lines.append(f"  Description: {project['description']}")
    lines.append("")
    panel = Panel(
        "\n".join(lines),
        title=f"[bold]{title}[/]",
        box=box.ROUNDED,
        border_style=color,
        width=60,
    )
    console.print(panel)


def print_not_configured_message() -> None:
    """Print message when no local user is configured."""
    panel = Panel(
        "\n  No user configured. Run [bold]hours-rank init --user-id <id> --name <name>[/] first.\n",
        title="[bold]HOURS RANK[/]",
        box=box.ROUNDED,
        border_style="grey50",
        width=50,
    )
    console.print(panel)


def print_error(message: str) -> None:
    console.print(f"[red]{message}[/]")
