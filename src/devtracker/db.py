"""SQLite database layer for devtracker."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import date as date_type
from datetime import datetime, timezone
from pathlib import Path

from devtracker.dates import parse_date
from devtracker.milestones import MAX_FREEZE_CREDITS
from devtracker.streaks import DayRecord, FreezeState

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".devtracker" / "data.db"

CATEGORIES = ("Study", "Coding", "Health", "Personal", "Other")
DEFAULT_CATEGORY = "Other"
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000

MOODS = ("very-happy", "happy", "neutral", "sad", "very-sad", "excited", "stressed", "tired")
MAX_DIARY_CONTENT_LENGTH = 5000
MAX_DIARY_NOTE_LENGTH = 1000
MAX_PERSON_LENGTH = 100

RESOURCE_TYPES = (
    "article", "video", "tutorial", "documentation", "tool",
    "code", "book", "course", "podcast", "other",
)
PRIORITIES = ("high", "medium", "low")
RESOURCE_STATUSES = ("unread", "reading", "completed", "reviewed", "archived")
MAX_URL_LENGTH = 500
MAX_CATEGORY_LENGTH = 100
MAX_TAG_LENGTH = 50
MAX_NOTES_LENGTH = 2000

_RESOURCE_COLUMNS = {
    "title": "title",
    "description": "description",
    "resource_type": "resource_type",
    "url": "url",
    "category": "category",
    "subcategory": "subcategory",
    "tags": "tags",
    "priority": "priority",
    "status": "status",
    "rating": "rating",
    "notes": "notes",
    "source_date": "source_date",
}


def _now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def _choice(value: str, allowed: tuple[str, ...], label: str) -> str:
    if value not in allowed:
        raise ValueError(f"Unknown {label} {value!r}. Must be one of: {', '.join(allowed)}")
    return value


def _clean_list(values, max_length: int) -> list[str]:
    cleaned = [str(v).strip()[:max_length] for v in values or ()]
    return [v for v in cleaned if v]


def _diary_row(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "date": row["date"],
        "title": row["title"],
        "content": row["content"],
        "mood": row["mood"],
        "moodIntensity": row["mood_intensity"],
        "people": json.loads(row["people"] or "[]"),
        "gratitude": row["gratitude"],
        "reflection": row["reflection"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


def _resource_row(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "title": row["title"],
        "description": row["description"],
        "resourceType": row["resource_type"],
        "url": row["url"],
        "category": row["category"],
        "subcategory": row["subcategory"],
        "tags": json.loads(row["tags"] or "[]"),
        "priority": row["priority"],
        "status": row["status"],
        "rating": row["rating"],
        "notes": row["notes"],
        "isPinned": bool(row["is_pinned"]),
        "sourceDate": row["source_date"],
        "completionDate": row["completion_date"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


class Database:
    """SQLite database manager with WAL mode."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.init_db()

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                date TEXT NOT NULL,
                title TEXT NOT NULL,
                description TEXT DEFAULT '',
                category TEXT DEFAULT 'Other',
                created_at TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_logs_user_date ON logs (user_id, date);

            CREATE TABLE IF NOT EXISTS freeze_state (
                user_id TEXT PRIMARY KEY,
                credits INTEGER DEFAULT 0 CHECK (credits BETWEEN 0 AND 5),
                total_earned INTEGER DEFAULT 0,
                total_used INTEGER DEFAULT 0,
                manual_activations INTEGER DEFAULT 0,
                last_earned_milestone INTEGER DEFAULT 0,
                last_earned TEXT
            );

            CREATE TABLE IF NOT EXISTS freeze_dates (
                user_id TEXT NOT NULL,
                date TEXT NOT NULL,
                manual BOOLEAN DEFAULT 1,
                created_at TEXT,
                PRIMARY KEY (user_id, date)
            );

            CREATE TABLE IF NOT EXISTS milestone_awards (
                user_id TEXT NOT NULL,
                streak_start TEXT NOT NULL,
                milestone INTEGER NOT NULL,
                earned_at TEXT,
                PRIMARY KEY (user_id, streak_start, milestone)
            );

            CREATE TABLE IF NOT EXISTS diary_entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                date TEXT NOT NULL,
                title TEXT DEFAULT '',
                content TEXT NOT NULL,
                mood TEXT DEFAULT 'neutral',
                mood_intensity INTEGER DEFAULT 5 CHECK (mood_intensity BETWEEN 1 AND 10),
                people TEXT DEFAULT '[]',
                gratitude TEXT DEFAULT '',
                reflection TEXT DEFAULT '',
                created_at TEXT,
                updated_at TEXT,
                UNIQUE (user_id, date)
            );

            CREATE TABLE IF NOT EXISTS resources (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                title TEXT NOT NULL,
                description TEXT DEFAULT '',
                resource_type TEXT DEFAULT 'article',
                url TEXT DEFAULT '',
                category TEXT DEFAULT '',
                subcategory TEXT DEFAULT '',
                tags TEXT DEFAULT '[]',
                priority TEXT DEFAULT 'medium',
                status TEXT DEFAULT 'unread',
                rating INTEGER DEFAULT 0 CHECK (rating BETWEEN 0 AND 5),
                notes TEXT DEFAULT '',
                is_pinned INTEGER DEFAULT 0,
                source_date TEXT,
                completion_date TEXT,
                created_at TEXT,
                updated_at TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_resources_user_status ON resources (user_id, status);
        """)
        self.conn.commit()

    # ── Activity logs ─────────────────────────────────────────────────────

    def add_log(
        self,
        user_id: str,
        date: str,
        title: str,
        description: str = "",
        category: str = DEFAULT_CATEGORY,
    ) -> int:
        """Append a log to a day and return its id.

        Raises ValueError for an empty title or an unknown category.
        """
        title = (title or "").strip()[:MAX_TITLE_LENGTH]
        if not title:
            raise ValueError("Title must be 1-200 characters")
        _choice(category, CATEGORIES, "category")
        description = (description or "").strip()[:MAX_DESCRIPTION_LENGTH]
        cur = self.conn.execute(
            "INSERT INTO logs (user_id, date, title, description, category, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (user_id, date, title, description, category, _now()),
        )
        self.conn.commit()
        return int(cur.lastrowid)

    def delete_log(self, user_id: str, log_id: int) -> bool:
        """Delete one log. Returns False if it does not exist for this user."""
        cur = self.conn.execute(
            "DELETE FROM logs WHERE id = ? AND user_id = ?", (log_id, user_id)
        )
        self.conn.commit()
        return cur.rowcount > 0

    def get_logs(self, user_id: str, date: str | None = None) -> list[dict]:
        """Return logs for a user, optionally restricted to one date."""
        if date is None:
            rows = self.conn.execute(
                "SELECT * FROM logs WHERE user_id = ? ORDER BY date, id", (user_id,)
            ).fetchall()
        else:
            rows = self.conn.execute(
                "SELECT * FROM logs WHERE user_id = ? AND date = ? ORDER BY id",
                (user_id, date),
            ).fetchall()
        return [dict(row) for row in rows]

    def get_day_records(self, user_id: str) -> list[DayRecord]:
        """Return one DayRecord per date with at least one log, oldest first."""
        rows = self.conn.execute(
            "SELECT date, COUNT(*) AS log_count FROM logs WHERE user_id = ? "
            "GROUP BY date ORDER BY date",
            (user_id,),
        ).fetchall()
        return [DayRecord(date=row["date"], log_count=row["log_count"]) for row in rows]

    def get_days(self, user_id: str) -> list[dict]:
        """Return {date, logs} documents, newest day first."""
        days: dict[str, list[dict]] = {}
        for log in self.get_logs(user_id):
            days.setdefault(log["date"], []).append({
                "id": log["id"],
                "title": log["title"],
                "description": log["description"],
                "category": log["category"],
                "createdAt": log["created_at"],
            })
        return [{"date": d, "logs": days[d]} for d in sorted(days, reverse=True)]

    def has_logs_on(self, user_id: str, date: str) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM logs WHERE user_id = ? AND date = ? LIMIT 1", (user_id, date)
        ).fetchone()
        return row is not None

    # ── Freeze state ──────────────────────────────────────────────────────

    def _ensure_freeze_row(self, user_id: str) -> None:
        self.conn.execute(
            "INSERT OR IGNORE INTO freeze_state (user_id) VALUES (?)", (user_id,)
        )
        self.conn.commit()

    def get_freeze_state(self, user_id: str) -> FreezeState:
        """Return the user's freeze state, defaulting to an empty one."""
        row = self.conn.execute(
            "SELECT * FROM freeze_state WHERE user_id = ?", (user_id,)
        ).fetchone()
        dates = self.conn.execute(
            "SELECT date FROM freeze_dates WHERE user_id = ? ORDER BY date", (user_id,)
        ).fetchall()
        used_dates = frozenset(r["date"] for r in dates)
        if row is None:
            return FreezeState(used_dates=used_dates)
        return FreezeState(
            credits=row["credits"],
            used_dates=used_dates,
            total_earned=row["total_earned"],
            total_used=row["total_used"],
            manual_activations=row["manual_activations"],
            last_earned_milestone=row["last_earned_milestone"],
        )

    def get_freeze_history(self, user_id: str) -> list[dict]:
        """Return consumed freeze dates with how and when they were used."""
        rows = self.conn.execute(
            "SELECT date, manual, created_at FROM freeze_dates WHERE user_id = ? ORDER BY date",
            (user_id,),
        ).fetchall()
        return [
            {"date": r["date"], "manual": bool(r["manual"]), "createdAt": r["created_at"]}
            for r in rows
        ]

    def _grant_credit(self, user_id: str, cap: int) -> bool:
        cur = self.conn.execute(
            "UPDATE freeze_state SET credits = credits + 1, total_earned = total_earned + 1, "
            "last_earned = ? WHERE user_id = ? AND credits < ?",
            (_now(), user_id, cap),
        )
        return cur.rowcount == 1

    def increment_credits(self, user_id: str, cap: int = MAX_FREEZE_CREDITS) -> bool:
        """Grant one credit unless the user already holds `cap` credits.

        The cap check and the increment happen in one UPDATE statement so two
        concurrent grants cannot push the balance past the cap.
        """
        self._ensure_freeze_row(user_id)
        granted = self._grant_credit(user_id, cap)
        self.conn.commit()
        logger.debug("increment_credits user=%s granted=%s", user_id, granted)
        return granted

    def consume_credit(self, user_id: str, date: str, manual: bool = True) -> bool:
        """Spend one credit to protect `date`.

        Returns False, leaving the state untouched, when no credit is left or
        the date is already frozen.
        """
        self._ensure_freeze_row(user_id)
        cur = self.conn.execute(
            "UPDATE freeze_state SET credits = credits - 1, total_used = total_used + 1, "
            "manual_activations = manual_activations + ? WHERE user_id = ? AND credits > 0",
            (1 if manual else 0, user_id),
        )
        if cur.rowcount == 0:
            self.conn.rollback()
            return False
        try:
            self.conn.execute(
                "INSERT INTO freeze_dates (user_id, date, manual, created_at) VALUES (?, ?, ?, ?)",
                (user_id, date, manual, _now()),
            )
        except sqlite3.IntegrityError:
            self.conn.rollback()
            return False
        self.conn.commit()
        return True

    def get_credited_milestone(self, user_id: str, streak_start: str) -> int:
        """Highest milestone already credited to the streak starting at streak_start.

        Awards recorded for a later start belong to a stretch that has since
        been joined onto this streak, so they count too.
        """
        row = self.conn.execute(
            "SELECT MAX(milestone) AS milestone FROM milestone_awards "
            "WHERE user_id = ? AND streak_start >= ?",
            (user_id, streak_start),
        ).fetchone()
        return row["milestone"] or 0

    def claim_milestone(
        self, user_id: str, streak_start: str, milestone: int, cap: int = MAX_FREEZE_CREDITS
    ) -> bool:
        """Record a milestone award and grant its credit in one transaction.

        Returns False, recording nothing, when the award already exists or the
        credit cap is reached.
        """
        self._ensure_freeze_row(user_id)
        cur = self.conn.execute(
            "INSERT OR IGNORE INTO milestone_awards (user_id, streak_start, milestone, earned_at) "
            "VALUES (?, ?, ?, ?)",
            (user_id, streak_start, milestone, _now()),
        )
        if cur.rowcount == 0 or not self._grant_credit(user_id, cap):
            self.conn.rollback()
            return False
        self.conn.execute(
            "UPDATE freeze_state SET last_earned_milestone = ? WHERE user_id = ?",
            (milestone, user_id),
        )
        self.conn.commit()
        return True

    # ── Diary ─────────────────────────────────────────────────────────────

    def save_diary_entry(
        self,
        user_id: str,
        date: str,
        content: str,
        title: str = "",
        mood: str = "neutral",
        mood_intensity: int = 5,
        people: list[str] | tuple[str, ...] = (),
        gratitude: str = "",
        reflection: str = "",
    ) -> dict:
        """Create the entry for a date, or replace it if one exists.

        Raises ValueError for empty content, an unknown mood or an intensity
        outside 1-10.
        """
        content = (content or "").strip()
        if not content:
            raise ValueError("Content required")
        if len(content) > MAX_DIARY_CONTENT_LENGTH:
            raise ValueError(f"Content must be at most {MAX_DIARY_CONTENT_LENGTH} characters")
        _choice(mood, MOODS, "mood")
        if not 1 <= mood_intensity <= 10:
            raise ValueError("Mood intensity must be 1-10")
        now = _now()
        self.conn.execute(
            "INSERT INTO diary_entries (user_id, date, title, content, mood, mood_intensity, "
            "people, gratitude, reflection, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(user_id, date) DO UPDATE SET title = excluded.title, "
            "content = excluded.content, mood = excluded.mood, "
            "mood_intensity = excluded.mood_intensity, people = excluded.people, "
            "gratitude = excluded.gratitude, reflection = excluded.reflection, "
            "updated_at = excluded.updated_at",
            (
                user_id,
                date,
                (title or "").strip()[:MAX_TITLE_LENGTH],
                content,
                mood,
                mood_intensity,
                json.dumps(_clean_list(people, MAX_PERSON_LENGTH)),
                (gratitude or "").strip()[:MAX_DIARY_NOTE_LENGTH],
                (reflection or "").strip()[:MAX_DIARY_NOTE_LENGTH],
                now,
                now,
            ),
        )
        self.conn.commit()
        return self.get_diary_entry(user_id, date)

    def get_diary_entry(self, user_id: str, date: str) -> dict | None:
        row = self.conn.execute(
            "SELECT * FROM diary_entries WHERE user_id = ? AND date = ?", (user_id, date)
        ).fetchone()
        return _diary_row(row) if row else None

    def get_diary_entries(
        self, user_id: str, year: int | None = None, limit: int | None = None, offset: int = 0
    ) -> list[dict]:
        """Timeline of entries, newest first, optionally for one year."""
        sql = "SELECT * FROM diary_entries WHERE user_id = ?"
        params: list = [user_id]
        if year is not None:
            sql += " AND date LIKE ?"
            params.append(f"{year:04d}-%")
        sql += " ORDER BY date DESC LIMIT ? OFFSET ?"
        params += [-1 if limit is None else limit, offset]
        return [_diary_row(row) for row in self.conn.execute(sql, params).fetchall()]

    def get_diary_on_this_day(self, user_id: str, today: str | date_type) -> list[dict]:
        """Entries written on today's month and day in any year, newest first."""
        day = parse_date(today)
        rows = self.conn.execute(
            "SELECT * FROM diary_entries WHERE user_id = ? AND date LIKE ? ORDER BY date DESC",
            (user_id, f"%-{day.month:02d}-{day.day:02d}"),
        ).fetchall()
        return [_diary_row(row) for row in rows]

    def get_diary_stats(self, user_id: str) -> dict:
        row = self.conn.execute(
            "SELECT COUNT(*) AS total, AVG(mood_intensity) AS avg_intensity "
            "FROM diary_entries WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        by_mood = self.conn.execute(
            "SELECT mood, COUNT(*) AS n FROM diary_entries WHERE user_id = ? GROUP BY mood",
            (user_id,),
        ).fetchall()
        avg = row["avg_intensity"]
        return {
            "totalEntries": row["total"],
            "avgMoodIntensity": round(avg, 1) if avg is not None else None,
            "byMood": {r["mood"]: r["n"] for r in by_mood},
        }

    def delete_diary_entry(self, user_id: str, entry_id: int) -> bool:
        cur = self.conn.execute(
            "DELETE FROM diary_entries WHERE id = ? AND user_id = ?", (entry_id, user_id)
        )
        self.conn.commit()
        return cur.rowcount > 0

    # ── Resource library ──────────────────────────────────────────────────

    def add_resource(
        self,
        user_id: str,
        title: str,
        resource_type: str = "article",
        description: str = "",
        url: str = "",
        category: str = "",
        subcategory: str = "",
        tags: list[str] | tuple[str, ...] = (),
        priority: str = "medium",
        status: str = "unread",
        source_date: str | None = None,
    ) -> int:
        """Save a resource to the library and return its id.

        Raises ValueError for an empty title or an unknown type, priority or status.
        """
        title = (title or "").strip()
        if not title or len(title) > MAX_TITLE_LENGTH:
            raise ValueError("Title must be 1-200 characters")
        _choice(resource_type, RESOURCE_TYPES, "resource type")
        _choice(priority, PRIORITIES, "priority")
        _choice(status, RESOURCE_STATUSES, "status")
        now = _now()
        cur = self.conn.execute(
            "INSERT INTO resources (user_id, title, description, resource_type, url, category, "
            "subcategory, tags, priority, status, source_date, completion_date, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                user_id,
                title,
                (description or "").strip()[:MAX_DESCRIPTION_LENGTH],
                resource_type,
                (url or "").strip()[:MAX_URL_LENGTH],
                (category or "").strip()[:MAX_CATEGORY_LENGTH],
                (subcategory or "").strip()[:MAX_CATEGORY_LENGTH],
                json.dumps(_clean_list(tags, MAX_TAG_LENGTH)),
                priority,
                status,
                source_date,
                now if status == "completed" else None,
                now,
                now,
            ),
        )
        self.conn.commit()
        return int(cur.lastrowid)

    def get_resource(self, user_id: str, resource_id: int) -> dict | None:
        row = self.conn.execute(
            "SELECT * FROM resources WHERE id = ? AND user_id = ?", (resource_id, user_id)
        ).fetchone()
        return _resource_row(row) if row else None

    def get_resources(
        self,
        user_id: str,
        status: str | None = None,
        resource_type: str | None = None,
        priority: str | None = None,
        tag: str | None = None,
        include_archived: bool = False,
        limit: int | None = 50,
        offset: int = 0,
    ) -> list[dict]:
        """List resources, pinned first and then newest first.

        Archived resources are hidden unless asked for by status or include_archived.
        """
        sql = "SELECT * FROM resources WHERE user_id = ?"
        params: list = [user_id]
        if status:
            sql += " AND status = ?"
            params.append(status)
        elif not include_archived:
            sql += " AND status != 'archived'"
        if resource_type:
            sql += " AND resource_type = ?"
            params.append(resource_type)
        if priority:
            sql += " AND priority = ?"
            params.append(priority)
        sql += " ORDER BY is_pinned DESC, created_at DESC, id DESC"
        resources = [_resource_row(row) for row in self.conn.execute(sql, params).fetchall()]
        if tag:
            resources = [r for r in resources if tag in r["tags"]]
        end = None if limit is None else offset + limit
        return resources[offset:end]

    def search_resources(self, user_id: str, query: str, limit: int = 50) -> list[dict]:
        """Case-insensitive match on title, description or tags, archived excluded."""
        escaped = query.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        rows = self.conn.execute(
            "SELECT * FROM resources WHERE user_id = ? AND status != 'archived' AND "
            "(title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\' OR tags LIKE ? ESCAPE '\\') "
            "ORDER BY is_pinned DESC, created_at DESC, id DESC LIMIT ?",
            (user_id, pattern, pattern, pattern, limit),
        ).fetchall()
        return [_resource_row(row) for row in rows]

    def update_resource(self, user_id: str, resource_id: int, **fields) -> dict | None:
        """Update the given fields and return the resource, or None if it does not exist.

        Moving to 'completed' stamps the completion date.
        """
        current = self.get_resource(user_id, resource_id)
        if current is None:
            return None
        unknown = set(fields) - set(_RESOURCE_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown resource fields: {', '.join(sorted(unknown))}")
        if "title" in fields:
            fields["title"] = (fields["title"] or "").strip()
            if not fields["title"] or len(fields["title"]) > MAX_TITLE_LENGTH:
                raise ValueError("Title must be 1-200 characters")
        if "resource_type" in fields:
            _choice(fields["resource_type"], RESOURCE_TYPES, "resource type")
        if "priority" in fields:
            _choice(fields["priority"], PRIORITIES, "priority")
        if "status" in fields:
            _choice(fields["status"], RESOURCE_STATUSES, "status")
        if "rating" in fields and not 0 <= int(fields["rating"]) <= 5:
            raise ValueError("Rating must be 0-5")
        if "notes" in fields:
            fields["notes"] = (fields["notes"] or "")[:MAX_NOTES_LENGTH]
        if "tags" in fields:
            fields["tags"] = json.dumps(_clean_list(fields["tags"], MAX_TAG_LENGTH))

        now = _now()
        assignments = [f"{_RESOURCE_COLUMNS[name]} = ?" for name in fields]
        params = list(fields.values())
        if fields.get("status") == "completed" and current["status"] != "completed":
            assignments.append("completion_date = ?")
            params.append(now)
        assignments.append("updated_at = ?")
        params.append(now)
        self.conn.execute(
            f"UPDATE resources SET {', '.join(assignments)} WHERE id = ? AND user_id = ?",
            (*params, resource_id, user_id),
        )
        self.conn.commit()
        return self.get_resource(user_id, resource_id)

    def complete_resource(self, user_id: str, resource_id: int) -> dict | None:
        return self.update_resource(user_id, resource_id, status="completed")

    def rate_resource(self, user_id: str, resource_id: int, rating: int) -> dict | None:
        """Set a 1-5 rating. Raises ValueError outside that range."""
        if not 1 <= rating <= 5:
            raise ValueError("Rating must be 1-5")
        return self.update_resource(user_id, resource_id, rating=rating)

    def toggle_resource_pin(self, user_id: str, resource_id: int) -> bool | None:
        """Flip the pinned flag and return the new value, or None if not found."""
        cur = self.conn.execute(
            "UPDATE resources SET is_pinned = 1 - is_pinned, updated_at = ? "
            "WHERE id = ? AND user_id = ?",
            (_now(), resource_id, user_id),
        )
        self.conn.commit()
        if cur.rowcount == 0:
            return None
        return self.get_resource(user_id, resource_id)["isPinned"]

    def delete_resource(self, user_id: str, resource_id: int) -> bool:
        cur = self.conn.execute(
            "DELETE FROM resources WHERE id = ? AND user_id = ?", (resource_id, user_id)
        )
        self.conn.commit()
        return cur.rowcount > 0

    def get_resource_stats(self, user_id: str) -> dict:
        """Counts per status, type and priority plus the average of rated resources."""
        status_counts = {
            r["status"]: r["n"]
            for r in self.conn.execute(
                "SELECT status, COUNT(*) AS n FROM resources WHERE user_id = ? GROUP BY status",
                (user_id,),
            ).fetchall()
        }
        by_type = self.conn.execute(
            "SELECT resource_type, COUNT(*) AS n FROM resources WHERE user_id = ? "
            "GROUP BY resource_type",
            (user_id,),
        ).fetchall()
        by_priority = self.conn.execute(
            "SELECT priority, COUNT(*) AS n FROM resources WHERE user_id = ? GROUP BY priority",
            (user_id,),
        ).fetchall()
        avg = self.conn.execute(
            "SELECT AVG(rating) AS avg FROM resources WHERE user_id = ? AND rating > 0", (user_id,)
        ).fetchone()["avg"]
        stats = {"totalResources": sum(status_counts.values())}
        for status in RESOURCE_STATUSES:
            stats[f"{status}Count"] = status_counts.get(status, 0)
        stats["avgRating"] = round(avg, 2) if avg is not None else None
        stats["byType"] = {r["resource_type"]: r["n"] for r in by_type}
        stats["byPriority"] = {r["priority"]: r["n"] for r in by_priority}
        return stats

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()
