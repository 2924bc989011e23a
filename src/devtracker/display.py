"""Rich terminal display for devtracker."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from devtracker.heatmap import DAY_LABELS, Heatmap
from devtracker.milestones import MAX_FREEZE_CREDITS

console = Console()

# Heatmap intensity levels 0-4 mapped to Rich colors (GitHub dark palette)
_LEVEL_COLORS: tuple[str, ...] = ("#161b22", "#0e4429", "#006d32", "#26a641", "#39d353")

_CATEGORY_COLORS: dict[str, str] = {
    "Study": "blue",
    "Coding": "green",
    "Health": "red1",
    "Personal": "magenta",
    "Other": "grey70",
}


def format_number(n: int) -> str:
    """Format large numbers: 421543 -> '421.5K', 1200 -> '1,200', 1234567 -> '1.2M'."""
    if n >= 1_000_000:
        value = n / 1_000_000
        if value >= 100:
            return f"{value:.0f}M"
        return f"{value:.1f}M"
    if n >= 10_000:
        return f"{n / 1_000:.1f}K"
    return f"{n:,}"


def _bar(current: int, total: int, width: int = 20) -> str:
    """Render a progress bar as text: [████████░░░░░░░░░░░░]."""
    if total <= 0:
        return "[" + "█" * width + "]"
    ratio = min(current / total, 1.0)
    filled = int(ratio * width)
    empty = width - filled
    return "[" + "█" * filled + "░" * empty + "]"


def print_dashboard(data: dict) -> None:
    """Print the main dashboard with streaks, freezes and the monthly view."""
    stats = data.get("stats", {})
    monthly = stats.get("monthly", {})
    credits = data.get("credits", 0)
    next_milestone = data.get("next_milestone")

    lines: list[str] = []
    lines.append("")
    lines.append(
        f"  \U0001f525 Streak: [bold]{stats.get('currentStreak', 0)}[/] days  |  "
        f"Best: {stats.get('maxStreak', 0)} days"
    )
    freezes_used = stats.get("freezesUsedInCurrentStreak", 0)
    lines.append(
        f"  ❄️  Freezes: {credits}/{MAX_FREEZE_CREDITS}"
        + (f"  ({freezes_used} protecting this streak)" if freezes_used else "")
    )
    if next_milestone is not None:
        lines.append(f"  Next credit at {next_milestone} days ({data.get('days_to_next', 0)} to go)")
    if data.get("title"):
        milestone = data.get("milestone")
        reached = f"  |  {milestone}-day milestone" if milestone else ""
        lines.append(f"  \U0001f3c6 {data['title']}{reached}")

    lines.append("")
    lines.append(
        f"  \U0001f4ca Logs: {format_number(stats.get('totalLogs', 0))}  |  "
        f"Active days: {format_number(stats.get('totalActiveDays', 0))}"
    )

    lines.append("")
    progress = monthly.get("progress", 0)
    lines.append(f"  [bold]{monthly.get('name', '')} {data.get('year', '')}[/]")
    lines.append(f"  {_bar(progress, 100)} {progress}%")
    lines.append(
        f"  {monthly.get('activeDays', 0)} active days, "
        f"{format_number(monthly.get('totalLogs', 0))} logs"
    )
    if data.get("days_left_in_year") is not None:
        lines.append(f"  [dim]{data['days_left_in_year']} days left in {data.get('year', '')}[/]")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title=f"[bold]DEVTRACKER[/] [dim]{data.get('user', '')}[/]",
        box=box.ROUNDED,
        border_style="green",
        width=56,
    )
    console.print(panel)


def print_heatmap(heatmap: Heatmap) -> None:
    """Print a GitHub-style contribution grid, weeks as columns."""
    header = "    "
    for index in range(len(heatmap.weeks)):
        label = heatmap.month_labels.get(index)
        header += label[0] if label else " "
    lines: list[str] = [header]

    for row, label in enumerate(DAY_LABELS):
        line = f"{label[:3]:<4}"
        for week in heatmap.weeks:
            cell = week[row]
            if cell is None:
                line += " "
            else:
                line += f"[{_LEVEL_COLORS[cell.level]}]■[/]"
        lines.append(line)

    lines.append("")
    legend = " ".join(f"[{color}]■[/]" for color in _LEVEL_COLORS)
    lines.append(f"    Less {legend} More")
    lines.append(
        f"    {format_number(heatmap.total)} logs on {heatmap.active_days} days in {heatmap.year}"
    )

    panel = Panel(
        "\n".join(lines),
        title=f"[bold]{heatmap.year}[/]",
        box=box.ROUNDED,
        border_style="grey50",
    )
    console.print(panel)


def print_days(days: list[dict], limit: int = 14) -> None:
    """Print the most recent days with their logs."""
    table = Table(
        title="Recent Activity",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("Date", width=12)
    table.add_column("ID", justify="right", width=5)
    table.add_column("Category", width=10)
    table.add_column("Title", min_width=20)

    for day in days[:limit]:
        for i, log in enumerate(day.get("logs", [])):
            category = log.get("category", "Other")
            color = _CATEGORY_COLORS.get(category, "white")
            table.add_row(
                day["date"] if i == 0 else "",
                str(log.get("id", "")),
                f"[{color}]{category}[/{color}]",
                log.get("title", ""),
            )
        table.add_section()

    console.print(table)


def print_freeze(state: dict, history: list[dict] | None = None) -> None:
    """Print freeze credits, lifetime counters and protected dates."""
    credits = state.get("credits", 0)
    lines: list[str] = []
    lines.append("")
    lines.append(f"  Credits:     {'❄️ ' * credits}{credits}/{MAX_FREEZE_CREDITS}")
    lines.append(f"  Earned:      {state.get('totalEarned', 0)}")
    lines.append(f"  Used:        {state.get('totalUsed', 0)}")
    lines.append(f"  Manual:      {state.get('manualActivations', 0)}")

    if history:
        lines.append("")
        lines.append("  [bold]Protected Days:[/]")
        for item in history[-7:]:
            how = "manual" if item.get("manual") else "auto"
            lines.append(f"  \U0001f6e1️  {item['date']} ({how})")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]Streak Freeze[/]",
        box=box.ROUNDED,
        border_style="cyan",
        width=50,
    )
    console.print(panel)


def print_earn_result(result: dict) -> None:
    if result.get("granted"):
        console.print(
            f"[cyan]\U0001f389 Earned freeze credit! {result.get('milestone')}-day milestone reached "
            f"({result.get('credits', 0)}/{MAX_FREEZE_CREDITS})[/]"
        )
    elif result.get("milestone") is not None:
        console.print(f"[yellow]Already at max freeze credits ({MAX_FREEZE_CREDITS})[/]")
    else:
        console.print("[grey50]No new milestone reached.[/]")


def print_activate_result(result: dict) -> None:
    console.print(
        f"[cyan]\U0001f6e1️  Freeze activated for {result.get('date')}. "
        f"{result.get('credits', 0)} credits left.[/]"
    )


def print_titles(streak: int, earned: list, upcoming) -> None:
    """Print unlocked streak titles and the next one on the ladder."""
    lines: list[str] = [""]
    if earned:
        for item in earned:
            lines.append(f"  \U0001f3c6 [bold]{item.title}[/] [dim]({item.days} days)[/]")
    else:
        lines.append("  [grey50]No titles yet. Log today to start a streak.[/]")
    if upcoming is not None:
        lines.append("")
        lines.append(f"  Next: {upcoming.title} at {upcoming.days} days")
        lines.append(f"  {_bar(streak, upcoming.days)} {streak}/{upcoming.days}")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title=f"[bold]Titles[/] [dim]{streak}-day streak[/]",
        box=box.ROUNDED,
        border_style="yellow",
        width=50,
    )
    console.print(panel)


_MOOD_ICONS: dict[str, str] = {
    "very-happy": "\U0001f604",
    "happy": "\U0001f642",
    "neutral": "\U0001f610",
    "sad": "\U0001f641",
    "very-sad": "\U0001f622",
    "excited": "\U0001f929",
    "stressed": "\U0001f62b",
    "tired": "\U0001f634",
}


def print_diary_entries(entries: list[dict], title: str = "Diary", full: bool = False) -> None:
    """Print diary entries as a table, or as panels with every field when full."""
    if not entries:
        console.print("[grey50]No diary entries.[/]")
        return

    if full:
        for entry in entries:
            lines = [entry["content"]]
            if entry.get("people"):
                lines.append(f"\n[dim]With:[/] {', '.join(entry['people'])}")
            if entry.get("gratitude"):
                lines.append(f"[dim]Grateful for:[/] {entry['gratitude']}")
            if entry.get("reflection"):
                lines.append(f"[dim]Reflection:[/] {entry['reflection']}")
            mood = _MOOD_ICONS.get(entry.get("mood", ""), "")
            console.print(
                Panel(
                    "\n".join(lines),
                    title=f"[bold]{entry['date']}[/] {mood} {entry.get('title') or ''}".rstrip(),
                    subtitle=f"[dim]#{entry['id']}  {title}[/]",
                    box=box.ROUNDED,
                    border_style="magenta",
                )
            )
        return

    table = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Date", width=12)
    table.add_column("ID", justify="right", width=5)
    table.add_column("Mood", width=6)
    table.add_column("Entry", min_width=24)
    for entry in entries:
        text = entry.get("title") or entry["content"]
        if len(text) > 60:
            text = text[:57] + "..."
        table.add_row(
            entry["date"],
            str(entry["id"]),
            f"{_MOOD_ICONS.get(entry.get('mood', ''), '')} {entry.get('moodIntensity', '')}",
            text,
        )
    console.print(table)


def print_diary_stats(stats: dict) -> None:
    avg = stats.get("avgMoodIntensity")
    lines = ["", f"  Entries:        {stats.get('totalEntries', 0)}"]
    lines.append(f"  Avg intensity:  {avg if avg is not None else '-'}")
    by_mood = stats.get("byMood", {})
    if by_mood:
        lines.append("")
        total = max(sum(by_mood.values()), 1)
        for mood, count in sorted(by_mood.items(), key=lambda kv: -kv[1]):
            lines.append(f"  {_MOOD_ICONS.get(mood, '')} {mood:<11} {_bar(count, total, 12)} {count}")
    lines.append("")
    console.print(
        Panel("\n".join(lines), title="[bold]Diary Stats[/]", box=box.ROUNDED, border_style="magenta", width=50)
    )


_STATUS_COLORS: dict[str, str] = {
    "unread": "grey70",
    "reading": "yellow",
    "completed": "green",
    "reviewed": "cyan",
    "archived": "grey50",
}


def print_resources(resources: list[dict], title: str = "Resources") -> None:
    if not resources:
        console.print("[grey50]No resources found.[/]")
        return

    table = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("ID", justify="right", width=5)
    table.add_column("Type", width=13)
    table.add_column("Title", min_width=20)
    table.add_column("Status", width=10)
    table.add_column("Rating", width=7)
    for res in resources:
        color = _STATUS_COLORS.get(res["status"], "white")
        pin = "\U0001f4cc " if res.get("isPinned") else ""
        table.add_row(
            str(res["id"]),
            res["resourceType"],
            f"{pin}{res['title']}",
            f"[{color}]{res['status']}[/{color}]",
            "★" * res.get("rating", 0),
        )
    console.print(table)


def print_resource_stats(stats: dict) -> None:
    avg = stats.get("avgRating")
    lines = ["", f"  Total:      {stats.get('totalResources', 0)}"]
    for status, color in _STATUS_COLORS.items():
        lines.append(f"  [{color}]{status.capitalize():<11}[/{color}] {stats.get(f'{status}Count', 0)}")
    lines.append(f"  Avg rating: {avg if avg is not None else '-'}")
    by_type = stats.get("byType", {})
    if by_type:
        lines.append("")
        lines.append("  " + ", ".join(f"{name} {count}" for name, count in sorted(by_type.items())))
    lines.append("")
    console.print(
        Panel("\n".join(lines), title="[bold]Library[/]", box=box.ROUNDED, border_style="blue", width=50)
    )


def print_success(message: str) -> None:
    console.print(f"[green]{message}[/]")


def print_log_added(result: dict) -> None:
    console.print(f"[green]Logged '{result.get('title')}' on {result.get('date')} (#{result.get('id')})[/]")


def print_log_deleted(result: dict) -> None:
    if result.get("ok"):
        console.print(f"[green]Deleted log #{result.get('id')}[/]")
    else:
        console.print(f"[red]Log #{result.get('id')} not found[/]")


def print_export_result(result: dict) -> None:
    console.print(
        f"[green]Exported {result.get('total_days', 0)} days "
        f"({result.get('total_logs', 0)} logs) to [bold]{result.get('output', '')}[/][/]"
    )


def print_error(message: str) -> None:
    console.print(f"[red]{message}[/]")


def print_no_data_message() -> None:
    """Print message when no data is available."""
    panel = Panel(
        "\n  No activity yet. Run [bold]devtracker log <title>[/] to record your first entry.\n",
        title="[bold]DEVTRACKER[/]",
        box=box.ROUNDED,
        border_style="grey50",
        width=56,
    )
    console.print(panel)
