"""CLI commands for devtracker."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from devtracker.config import get_db_path, get_default_user, set_db_path, set_default_user
from devtracker.dates import days_left_in_year, validate_date
from devtracker.db import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    MOODS,
    PRIORITIES,
    RESOURCE_STATUSES,
    RESOURCE_TYPES,
    Database,
)
from devtracker.display import (
    console,
    print_activate_result,
    print_dashboard,
    print_days,
    print_diary_entries,
    print_diary_stats,
    print_earn_result,
    print_error,
    print_export_result,
    print_freeze,
    print_heatmap,
    print_log_added,
    print_log_deleted,
    print_no_data_message,
    print_resource_stats,
    print_resources,
    print_success,
    print_titles,
)
from devtracker.errors import NotFoundError, TrackerError
from devtracker.export import build_export, default_export_path, write_export
from devtracker.freeze import activate_freeze, earn_freeze, sync_freeze
from devtracker.heatmap import build_heatmap
from devtracker.milestones import (
    current_title,
    days_to_next_milestone,
    earned_titles,
    get_current_milestone,
    get_next_milestone,
    next_title,
)
from devtracker.streaks import compute_snapshot

logger = logging.getLogger(__name__)


def _split_list(raw: str | None) -> list[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="devtracker",
        description="Track daily activity, streaks and freeze credits",
    )
    parser.add_argument("--user", "-u", default=None, help="User id (default: configured user)")
    parser.add_argument("--db", default=None, help="Database path override")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    dash_p = subparsers.add_parser("dashboard", help="Show streaks and monthly progress")
    dash_p.add_argument("--year", "-y", type=int, default=None, help="Reporting year")

    log_p = subparsers.add_parser("log", help="Log an activity")
    log_p.add_argument("title", help="What you did")
    log_p.add_argument("--date", "-d", default=None, help="YYYY-MM-DD (default: today)")
    log_p.add_argument("--category", "-c", choices=CATEGORIES, default=DEFAULT_CATEGORY)
    log_p.add_argument("--description", default="", help="Optional details")

    unlog_p = subparsers.add_parser("unlog", help="Delete a logged activity")
    unlog_p.add_argument("log_id", type=int, help="Log id (see 'devtracker days')")

    days_p = subparsers.add_parser("days", help="List recent days and their logs")
    days_p.add_argument("--limit", "-n", type=int, default=14)

    heat_p = subparsers.add_parser("heatmap", help="Show the contribution heatmap")
    heat_p.add_argument("--year", "-y", type=int, default=None)

    subparsers.add_parser("titles", help="Show streak titles earned so far")

    freeze_p = subparsers.add_parser("freeze", help="Streak freeze credits")
    freeze_sub = freeze_p.add_subparsers(dest="freeze_command")
    freeze_sub.add_parser("show", help="Show freeze credits")
    freeze_sub.add_parser("earn", help="Claim a credit for a reached milestone")
    activate_p = freeze_sub.add_parser("activate", help="Spend a credit on a missed day")
    activate_p.add_argument("date", help="YYYY-MM-DD")
    freeze_sub.add_parser("history", help="List protected days")

    diary_p = subparsers.add_parser("diary", help="Personal diary, one entry per day")
    diary_sub = diary_p.add_subparsers(dest="diary_command")
    diary_add = diary_sub.add_parser("add", help="Write (or rewrite) the entry for a day")
    diary_add.add_argument("content", help="Entry text")
    diary_add.add_argument("--date", "-d", default=None, help="YYYY-MM-DD (default: today)")
    diary_add.add_argument("--title", default="")
    diary_add.add_argument("--mood", "-m", choices=MOODS, default="neutral")
    diary_add.add_argument("--intensity", "-i", type=int, default=5, help="Mood intensity 1-10")
    diary_add.add_argument("--people", default=None, help="Comma-separated names")
    diary_add.add_argument("--gratitude", default="")
    diary_add.add_argument("--reflection", default="")
    diary_list = diary_sub.add_parser("list", help="Timeline of entries, newest first")
    diary_list.add_argument("--year", "-y", type=int, default=None)
    diary_list.add_argument("--limit", "-n", type=int, default=20)
    diary_show = diary_sub.add_parser("show", help="Show the entry for a day")
    diary_show.add_argument("date", help="YYYY-MM-DD")
    diary_sub.add_parser("on-this-day", help="Entries written on today's date in past years")
    diary_sub.add_parser("stats", help="Entry count and mood breakdown")
    diary_delete = diary_sub.add_parser("delete", help="Delete an entry")
    diary_delete.add_argument("entry_id", type=int)

    res_p = subparsers.add_parser("resource", help="Learning resource library")
    res_sub = res_p.add_subparsers(dest="resource_command")
    res_add = res_sub.add_parser("add", help="Save a resource")
    res_add.add_argument("title")
    res_add.add_argument("--type", "-t", dest="resource_type", choices=RESOURCE_TYPES, default="article")
    res_add.add_argument("--url", default="")
    res_add.add_argument("--description", default="")
    res_add.add_argument("--category", default="")
    res_add.add_argument("--tags", default=None, help="Comma-separated tags")
    res_add.add_argument("--priority", "-p", choices=PRIORITIES, default="medium")
    res_list = res_sub.add_parser("list", help="List resources (archived hidden)")
    res_list.add_argument("--status", "-s", choices=RESOURCE_STATUSES, default=None)
    res_list.add_argument("--type", "-t", dest="resource_type", choices=RESOURCE_TYPES, default=None)
    res_list.add_argument("--priority", "-p", choices=PRIORITIES, default=None)
    res_list.add_argument("--tag", default=None)
    res_list.add_argument("--limit", "-n", type=int, default=50)
    res_search = res_sub.add_parser("search", help="Search titles, descriptions and tags")
    res_search.add_argument("query")
    res_complete = res_sub.add_parser("complete", help="Mark a resource as completed")
    res_complete.add_argument("resource_id", type=int)
    res_rate = res_sub.add_parser("rate", help="Rate a resource 1-5")
    res_rate.add_argument("resource_id", type=int)
    res_rate.add_argument("rating", type=int)
    res_pin = res_sub.add_parser("pin", help="Pin or unpin a resource")
    res_pin.add_argument("resource_id", type=int)
    res_delete = res_sub.add_parser("delete", help="Delete a resource")
    res_delete.add_argument("resource_id", type=int)
    res_sub.add_parser("stats", help="Counts by status, type and priority")

    export_p = subparsers.add_parser("export", help="Export all data as JSON")
    export_p.add_argument("--output", "-o", default=None, help="Output file path")

    setup_p = subparsers.add_parser("setup", help="Configure default user and database")
    setup_p.add_argument("--username", default=None, help="Default user id")
    setup_p.add_argument("--db-path", default=None, help="Database location")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    command = args.command or "dashboard"

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if command == "setup":
        do_setup(username=args.username, db_path=args.db_path)
        return

    user_id = args.user or get_default_user()
    db = Database(db_path=Path(args.db).expanduser() if args.db else get_db_path())
    today = date.today()

    try:
        if command == "dashboard":
            do_dashboard(db, user_id, today=today, year=args.year)
        elif command == "log":
            do_log(db, user_id, args.title, day=args.date, category=args.category,
                   description=args.description, today=today)
        elif command == "unlog":
            do_unlog(db, user_id, args.log_id)
        elif command == "days":
            do_days(db, user_id, limit=args.limit)
        elif command == "heatmap":
            do_heatmap(db, user_id, year=args.year or today.year)
        elif command == "titles":
            do_titles(db, user_id, today=today)
        elif command == "freeze":
            freeze_cmd = getattr(args, "freeze_command", None)
            if freeze_cmd == "earn":
                do_freeze_earn(db, user_id, today=today)
            elif freeze_cmd == "activate":
                do_freeze_activate(db, user_id, args.date, today=today)
            elif freeze_cmd == "history":
                do_freeze_show(db, user_id, with_history=True)
            else:
                do_freeze_show(db, user_id)
        elif command == "diary":
            _run_diary(db, user_id, args, today)
        elif command == "resource":
            _run_resource(db, user_id, args)
        elif command == "export":
            do_export(db, user_id, output=args.output)
    except (TrackerError, ValueError) as exc:
        logger.info("Rejected %s for user=%s: %s", command, user_id, exc)
        print_error(str(exc))
        sys.exit(1)
    finally:
        db.close()


def _run_diary(db: Database, user_id: str, args: argparse.Namespace, today: date) -> None:
    diary_cmd = getattr(args, "diary_command", None)
    if diary_cmd == "add":
        do_diary_add(db, user_id, args.content, day=args.date, title=args.title, mood=args.mood,
                     mood_intensity=args.intensity, people=_split_list(args.people),
                     gratitude=args.gratitude, reflection=args.reflection, today=today)
    elif diary_cmd == "show":
        do_diary_show(db, user_id, args.date)
    elif diary_cmd == "on-this-day":
        do_diary_on_this_day(db, user_id, today=today)
    elif diary_cmd == "stats":
        do_diary_stats(db, user_id)
    elif diary_cmd == "delete":
        do_diary_delete(db, user_id, args.entry_id)
    else:
        do_diary_list(db, user_id, year=getattr(args, "year", None), limit=getattr(args, "limit", 20))


def _run_resource(db: Database, user_id: str, args: argparse.Namespace) -> None:
    res_cmd = getattr(args, "resource_command", None)
    if res_cmd == "add":
        do_resource_add(db, user_id, args.title, resource_type=args.resource_type, url=args.url,
                        description=args.description, category=args.category,
                        tags=_split_list(args.tags), priority=args.priority)
    elif res_cmd == "search":
        do_resource_search(db, user_id, args.query)
    elif res_cmd == "complete":
        do_resource_complete(db, user_id, args.resource_id)
    elif res_cmd == "rate":
        do_resource_rate(db, user_id, args.resource_id, args.rating)
    elif res_cmd == "pin":
        do_resource_pin(db, user_id, args.resource_id)
    elif res_cmd == "delete":
        do_resource_delete(db, user_id, args.resource_id)
    elif res_cmd == "stats":
        do_resource_stats(db, user_id)
    else:
        do_resource_list(db, user_id, status=getattr(args, "status", None),
                         resource_type=getattr(args, "resource_type", None),
                         priority=getattr(args, "priority", None), tag=getattr(args, "tag", None),
                         limit=getattr(args, "limit", 50))


def do_dashboard(db: Database, user_id: str, today: date | None = None, year: int | None = None) -> dict:
    """Show streaks, freeze credits and the monthly view.

    Claims a freeze credit first if the current streak crossed a milestone.
    """
    today = today or date.today()
    year = year or today.year
    if not db.get_day_records(user_id):
        print_no_data_message()
        return {"ok": False, "reason": "no_data"}

    snapshot, state, earned = sync_freeze(db, user_id, today, year)
    title = current_title(snapshot.current_streak)
    data = {
        "user": user_id,
        "year": year,
        "stats": snapshot.to_dict(),
        "credits": state.credits,
        "milestone": get_current_milestone(snapshot.current_streak),
        "next_milestone": get_next_milestone(snapshot.current_streak),
        "days_to_next": days_to_next_milestone(snapshot.current_streak),
        "title": title.title if title else None,
        "days_left_in_year": days_left_in_year(today) if year == today.year else None,
    }
    if earned.granted:
        print_earn_result({"granted": True, "milestone": earned.milestone, "credits": earned.credits})
    print_dashboard(data)
    return {"ok": True, **data, "earned": earned.granted}


def do_log(
    db: Database,
    user_id: str,
    title: str,
    day: str | None = None,
    category: str = DEFAULT_CATEGORY,
    description: str = "",
    today: date | None = None,
) -> dict:
    """Validate the date and append a log entry."""
    today = today or date.today()
    day = validate_date(day or today.isoformat(), today)
    log_id = db.add_log(user_id, day, title, description=description, category=category)
    logger.debug("Added log %s for user=%s on %s", log_id, user_id, day)
    result = {"ok": True, "id": log_id, "date": day, "title": title.strip()}
    print_log_added(result)
    return result


def do_unlog(db: Database, user_id: str, log_id: int) -> dict:
    result = {"ok": db.delete_log(user_id, log_id), "id": log_id}
    print_log_deleted(result)
    return result


def do_days(db: Database, user_id: str, limit: int = 14) -> dict:
    days = db.get_days(user_id)
    if not days:
        print_no_data_message()
        return {"ok": False, "reason": "no_data"}
    print_days(days, limit=limit)
    return {"ok": True, "days": days[:limit]}


def do_heatmap(db: Database, user_id: str, year: int) -> dict:
    heatmap = build_heatmap(db.get_day_records(user_id), year)
    print_heatmap(heatmap)
    return {"ok": True, "year": year, "total": heatmap.total, "active_days": heatmap.active_days}


def do_titles(db: Database, user_id: str, today: date | None = None) -> dict:
    """List the streak titles the current streak has unlocked."""
    today = today or date.today()
    snapshot = compute_snapshot(
        db.get_day_records(user_id), today.year, db.get_freeze_state(user_id), today
    )
    streak = snapshot.current_streak
    earned = earned_titles(streak)
    upcoming = next_title(streak)
    print_titles(streak, earned, upcoming)
    return {
        "ok": True,
        "streak": streak,
        "earned": [t.title for t in earned],
        "next": upcoming.title if upcoming else None,
    }


def do_freeze_show(db: Database, user_id: str, with_history: bool = False) -> dict:
    state = db.get_freeze_state(user_id).to_dict()
    history = db.get_freeze_history(user_id) if with_history else None
    print_freeze(state, history)
    return {"ok": True, **state, "history": history}


def do_freeze_earn(db: Database, user_id: str, today: date | None = None) -> dict:
    """Check the current streak against the milestones and claim a credit."""
    today = today or date.today()
    snapshot = compute_snapshot(
        db.get_day_records(user_id), today.year, db.get_freeze_state(user_id), today
    )
    earned = earn_freeze(db, user_id, snapshot.current_streak, snapshot.current_streak_start)
    result = {"ok": True, "granted": earned.granted, "milestone": earned.milestone, "credits": earned.credits}
    print_earn_result(result)
    return result


def do_freeze_activate(db: Database, user_id: str, day: str, today: date | None = None) -> dict:
    """Spend a credit on a missed day. Raises TrackerError when rejected."""
    state = activate_freeze(db, user_id, day, today or date.today())
    result = {"ok": True, "date": day, "credits": state.credits}
    print_activate_result(result)
    return result


# ── Diary ─────────────────────────────────────────────────────────────────────


def do_diary_add(
    db: Database,
    user_id: str,
    content: str,
    day: str | None = None,
    today: date | None = None,
    **fields,
) -> dict:
    """Write the diary entry for a day, replacing any existing one."""
    today = today or date.today()
    day = validate_date(day or today.isoformat(), today)
    entry = db.save_diary_entry(user_id, day, content, **fields)
    print_success(f"Saved diary entry for {day} (#{entry['id']})")
    return {"ok": True, **entry}


def do_diary_list(db: Database, user_id: str, year: int | None = None, limit: int = 20) -> dict:
    entries = db.get_diary_entries(user_id, year=year, limit=limit)
    print_diary_entries(entries, title=f"Diary {year}" if year else "Diary")
    return {"ok": True, "entries": entries}


def do_diary_show(db: Database, user_id: str, day: str) -> dict:
    entry = db.get_diary_entry(user_id, day)
    if entry is None:
        raise NotFoundError("No entry for this date")
    print_diary_entries([entry], title=day, full=True)
    return {"ok": True, **entry}


def do_diary_on_this_day(db: Database, user_id: str, today: date | None = None) -> dict:
    today = today or date.today()
    entries = db.get_diary_on_this_day(user_id, today)
    print_diary_entries(entries, title=f"On this day ({today.strftime('%b %d')})", full=True)
    return {"ok": True, "entries": entries}


def do_diary_stats(db: Database, user_id: str) -> dict:
    stats = db.get_diary_stats(user_id)
    print_diary_stats(stats)
    return {"ok": True, **stats}


def do_diary_delete(db: Database, user_id: str, entry_id: int) -> dict:
    if not db.delete_diary_entry(user_id, entry_id):
        raise NotFoundError("Entry not found")
    print_success(f"Deleted diary entry #{entry_id}")
    return {"ok": True, "id": entry_id}


# ── Resources ─────────────────────────────────────────────────────────────────


def do_resource_add(db: Database, user_id: str, title: str, **fields) -> dict:
    resource_id = db.add_resource(user_id, title, **fields)
    print_success(f"Saved resource '{title.strip()}' (#{resource_id})")
    return {"ok": True, **db.get_resource(user_id, resource_id)}


def do_resource_list(db: Database, user_id: str, limit: int = 50, **filters) -> dict:
    resources = db.get_resources(user_id, limit=limit, **filters)
    print_resources(resources)
    return {"ok": True, "resources": resources}


def do_resource_search(db: Database, user_id: str, query: str) -> dict:
    resources = db.search_resources(user_id, query)
    print_resources(resources, title=f"Results for '{query}'")
    return {"ok": True, "resources": resources}


def _found(resource: dict | None) -> dict:
    if resource is None:
        raise NotFoundError("Resource not found")
    return resource


def do_resource_complete(db: Database, user_id: str, resource_id: int) -> dict:
    resource = _found(db.complete_resource(user_id, resource_id))
    print_success(f"Completed '{resource['title']}'")
    return {"ok": True, **resource}


def do_resource_rate(db: Database, user_id: str, resource_id: int, rating: int) -> dict:
    resource = _found(db.rate_resource(user_id, resource_id, rating))
    print_success(f"Rated '{resource['title']}' {'★' * rating}")
    return {"ok": True, **resource}


def do_resource_pin(db: Database, user_id: str, resource_id: int) -> dict:
    pinned = db.toggle_resource_pin(user_id, resource_id)
    if pinned is None:
        raise NotFoundError("Resource not found")
    print_success(f"{'Pinned' if pinned else 'Unpinned'} resource #{resource_id}")
    return {"ok": True, "id": resource_id, "isPinned": pinned}


def do_resource_delete(db: Database, user_id: str, resource_id: int) -> dict:
    if not db.delete_resource(user_id, resource_id):
        raise NotFoundError("Resource not found")
    print_success(f"Deleted resource #{resource_id}")
    return {"ok": True, "id": resource_id}


def do_resource_stats(db: Database, user_id: str) -> dict:
    stats = db.get_resource_stats(user_id)
    print_resource_stats(stats)
    return {"ok": True, **stats}


def do_export(db: Database, user_id: str, output: str | None = None) -> dict:
    doc = build_export(db, user_id)
    output_path = Path(output) if output else default_export_path(user_id)
    write_export(doc, output_path)
    result = {
        "ok": True,
        "output": str(output_path),
        "total_days": doc["stats"]["totalDays"],
        "total_logs": doc["stats"]["totalLogs"],
    }
    print_export_result(result)
    return result


def do_setup(username: str | None = None, db_path: str | None = None) -> dict:
    """Persist the default user and/or database location."""
    result: dict = {"ok": True, "username": None, "db_path": None}
    if username:
        set_default_user(username)
        result["username"] = username
    if db_path:
        expanded = Path(db_path).expanduser().resolve()
        set_db_path(expanded)
        result["db_path"] = str(expanded)
    console.print(
        f"[green]Configured user: {get_default_user()}  database: {get_db_path()}[/]"
    )
    return result
