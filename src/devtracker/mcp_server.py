"""MCP server for devtracker.

Exposes streak stats and freeze operations, plus the diary and resource library,
as MCP tools so an assistant can query and update them mid-conversation.
Run via: python3 -m devtracker.mcp_server
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from mcp.server.fastmcp import FastMCP

logger = logging.getLogger(__name__)

mcp = FastMCP(name="devtracker")


def _get_db():
    from devtracker.config import get_db_path
    from devtracker.db import Database
    return Database(db_path=get_db_path())


def _user(user_id: str) -> str:
    from devtracker.config import get_default_user
    return user_id or get_default_user()


@mcp.tool()
def get_stats(year: int = 0, user_id: str = "") -> dict[str, Any]:
    """Get streak stats: current/longest streak, freezes in use, totals, and the monthly view.

    year: reporting year for the monthly view (0 = current year).
    """
    from devtracker.freeze import sync_freeze
    from devtracker.milestones import current_title, get_next_milestone

    user_id = _user(user_id)
    today = date.today()
    db = _get_db()
    try:
        if not db.get_day_records(user_id):
            return {"error": "No activity yet. Log something first."}
        snapshot, state, earned = sync_freeze(db, user_id, today, year or today.year)
        title = current_title(snapshot.current_streak)
        return {
            **snapshot.to_dict(),
            "credits": state.credits,
            "nextMilestone": get_next_milestone(snapshot.current_streak),
            "title": title.title if title else None,
            "creditEarned": earned.granted,
        }
    finally:
        db.close()


@mcp.tool()
def get_days(limit: int = 30, user_id: str = "") -> dict[str, Any]:
    """Get the most recent logged days with their activity entries."""
    db = _get_db()
    try:
        days = db.get_days(_user(user_id))
        return {"days": days[:limit], "total": len(days)}
    finally:
        db.close()


@mcp.tool()
def log_activity(title: str, day: str = "", category: str = "Other",
                 description: str = "", user_id: str = "") -> dict[str, Any]:
    """Log an activity entry. day defaults to today (YYYY-MM-DD)."""
    from devtracker.dates import validate_date
    from devtracker.errors import TrackerError

    today = date.today()
    db = _get_db()
    try:
        day = validate_date(day or today.isoformat(), today)
        log_id = db.add_log(_user(user_id), day, title, description=description, category=category)
        return {"id": log_id, "date": day}
    except (TrackerError, ValueError) as exc:
        return {"error": str(exc)}
    finally:
        db.close()


@mcp.tool()
def get_freeze(user_id: str = "") -> dict[str, Any]:
    """Get freeze credits, protected dates and lifetime counters."""
    db = _get_db()
    try:
        user_id = _user(user_id)
        state = db.get_freeze_state(user_id)
        return {**state.to_dict(), "history": db.get_freeze_history(user_id)}
    finally:
        db.close()


@mcp.tool()
def activate_freeze(day: str, user_id: str = "") -> dict[str, Any]:
    """Spend one freeze credit to protect a missed past day (YYYY-MM-DD)."""
    from devtracker import freeze
    from devtracker.errors import TrackerError

    db = _get_db()
    try:
        state = freeze.activate_freeze(db, _user(user_id), day, date.today())
        return {"msg": "Freeze activated successfully!", "credits": state.credits, "date": day}
    except TrackerError as exc:
        logger.info("Freeze activation rejected: %s", exc.message)
        return {"error": exc.message}
    finally:
        db.close()


@mcp.tool()
def earn_freeze(user_id: str = "") -> dict[str, Any]:
    """Claim a freeze credit if the current streak reached a new 7-day milestone (max 5 credits)."""
    from devtracker import freeze
    from devtracker.streaks import compute_snapshot

    user_id = _user(user_id)
    today = date.today()
    db = _get_db()
    try:
        snapshot = compute_snapshot(
            db.get_day_records(user_id), today.year, db.get_freeze_state(user_id), today
        )
        result = freeze.earn_freeze(db, user_id, snapshot.current_streak, snapshot.current_streak_start)
        return {"isNew": result.granted, "milestone": result.milestone, "credits": result.credits}
    finally:
        db.close()


@mcp.tool()
def get_heatmap(year: int = 0, user_id: str = "") -> dict[str, Any]:
    """Get per-day log counts and intensity levels (0-4) for a calendar year."""
    from devtracker.heatmap import build_heatmap

    year = year or date.today().year
    db = _get_db()
    try:
        heatmap = build_heatmap(db.get_day_records(_user(user_id)), year)
        cells = [
            {"date": cell.date, "count": cell.count, "level": cell.level}
            for week in heatmap.weeks for cell in week if cell and cell.count
        ]
        return {"year": year, "days": cells, "total": heatmap.total, "activeDays": heatmap.active_days}
    finally:
        db.close()


@mcp.tool()
def get_titles(user_id: str = "") -> dict[str, Any]:
    """Get the streak titles unlocked by the current streak and the next one to reach."""
    from devtracker.milestones import earned_titles, next_title
    from devtracker.streaks import compute_snapshot

    user_id = _user(user_id)
    today = date.today()
    db = _get_db()
    try:
        snapshot = compute_snapshot(
            db.get_day_records(user_id), today.year, db.get_freeze_state(user_id), today
        )
        upcoming = next_title(snapshot.current_streak)
        return {
            "streak": snapshot.current_streak,
            "titles": [{"days": t.days, "title": t.title} for t in earned_titles(snapshot.current_streak)],
            "next": {"days": upcoming.days, "title": upcoming.title} if upcoming else None,
        }
    finally:
        db.close()


@mcp.tool()
def save_diary_entry(content: str, day: str = "", title: str = "", mood: str = "neutral",
                     mood_intensity: int = 5, people: list[str] | None = None,
                     gratitude: str = "", reflection: str = "", user_id: str = "") -> dict[str, Any]:
    """Write the diary entry for a day (YYYY-MM-DD, default today), replacing any existing one.

    mood: very-happy, happy, neutral, sad, very-sad, excited, stressed or tired.
    mood_intensity: 1-10.
    """
    from devtracker.dates import validate_date
    from devtracker.errors import TrackerError

    today = date.today()
    db = _get_db()
    try:
        day = validate_date(day or today.isoformat(), today)
        return db.save_diary_entry(
            _user(user_id), day, content, title=title, mood=mood, mood_intensity=mood_intensity,
            people=people or [], gratitude=gratitude, reflection=reflection,
        )
    except (TrackerError, ValueError) as exc:
        return {"error": str(exc)}
    finally:
        db.close()


@mcp.tool()
def get_diary(day: str = "", year: int = 0, limit: int = 20, user_id: str = "") -> dict[str, Any]:
    """Get one diary entry by day, or the newest entries (optionally for one year)."""
    db = _get_db()
    try:
        user_id = _user(user_id)
        if day:
            entry = db.get_diary_entry(user_id, day)
            return entry if entry else {"error": "No entry for this date"}
        entries = db.get_diary_entries(user_id, year=year or None, limit=limit)
        return {"entries": entries, "count": len(entries)}
    finally:
        db.close()


@mcp.tool()
def diary_on_this_day(user_id: str = "") -> dict[str, Any]:
    """Get diary entries written on today's month and day in past years."""
    today = date.today()
    db = _get_db()
    try:
        entries = db.get_diary_on_this_day(_user(user_id), today)
        return {"date": today.isoformat(), "entries": entries}
    finally:
        db.close()


@mcp.tool()
def get_diary_stats(user_id: str = "") -> dict[str, Any]:
    """Get the diary entry count, average mood intensity and entries per mood."""
    db = _get_db()
    try:
        return db.get_diary_stats(_user(user_id))
    finally:
        db.close()


@mcp.tool()
def add_resource(title: str, resource_type: str = "article", url: str = "", description: str = "",
                 category: str = "", tags: list[str] | None = None, priority: str = "medium",
                 user_id: str = "") -> dict[str, Any]:
    """Save a learning resource.

    resource_type: article, video, tutorial, documentation, tool, code, book, course, podcast or other.
    priority: high, medium or low.
    """
    db = _get_db()
    try:
        user_id = _user(user_id)
        resource_id = db.add_resource(
            user_id, title, resource_type=resource_type, url=url, description=description,
            category=category, tags=tags or [], priority=priority,
        )
        return db.get_resource(user_id, resource_id)
    except ValueError as exc:
        return {"error": str(exc)}
    finally:
        db.close()


@mcp.tool()
def list_resources(query: str = "", status: str = "", resource_type: str = "", tag: str = "",
                   limit: int = 50, user_id: str = "") -> dict[str, Any]:
    """List saved resources, pinned first. A query searches titles, descriptions and tags.

    Archived resources are hidden unless status is "archived".
    """
    db = _get_db()
    try:
        user_id = _user(user_id)
        if query:
            resources = db.search_resources(user_id, query, limit=limit)
        else:
            resources = db.get_resources(
                user_id, status=status or None, resource_type=resource_type or None,
                tag=tag or None, limit=limit,
            )
        return {"resources": resources, "count": len(resources)}
    finally:
        db.close()


@mcp.tool()
def complete_resource(resource_id: int, user_id: str = "") -> dict[str, Any]:
    """Mark a resource as completed."""
    db = _get_db()
    try:
        resource = db.complete_resource(_user(user_id), resource_id)
        return resource if resource else {"error": "Resource not found"}
    finally:
        db.close()


@mcp.tool()
def rate_resource(resource_id: int, rating: int, user_id: str = "") -> dict[str, Any]:
    """Rate a resource from 1 to 5."""
    db = _get_db()
    try:
        resource = db.rate_resource(_user(user_id), resource_id, rating)
        return resource if resource else {"error": "Resource not found"}
    except ValueError as exc:
        return {"error": str(exc)}
    finally:
        db.close()


@mcp.tool()
def get_resource_stats(user_id: str = "") -> dict[str, Any]:
    """Get resource counts per status, type and priority plus the average rating."""
    db = _get_db()
    try:
        return db.get_resource_stats(_user(user_id))
    finally:
        db.close()


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
