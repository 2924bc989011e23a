"""JSON backup export for devtracker."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from devtracker.db import Database

logger = logging.getLogger(__name__)

EXPORT_SCHEMA_VERSION = 1


def build_export(db: Database, user_id: str, now: datetime | None = None) -> dict:
    """Collect a user's days, freeze state, diary and resources into one backup document."""
    now = now or datetime.now(tz=timezone.utc)
    days = sorted(db.get_days(user_id), key=lambda d: d["date"])
    return {
        "schemaVersion": EXPORT_SCHEMA_VERSION,
        "exportDate": now.isoformat(),
        "user": {
            "id": user_id,
            "streakFreeze": db.get_freeze_state(user_id).to_dict(),
        },
        "activities": days,
        "diary": list(reversed(db.get_diary_entries(user_id))),
        "resources": db.get_resources(user_id, include_archived=True, limit=None),
        "stats": {
            "totalDays": len(days),
            "totalLogs": sum(len(d["logs"]) for d in days),
        },
    }


def default_export_path(user_id: str, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now(tz=timezone.utc)).strftime("%Y-%m-%d")
    return Path(f"devtracker-{user_id}-{stamp}.json")


def write_export(doc: dict, output_path: Path) -> None:
    """Write an export document to output_path using atomic write."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(dir=output_path.parent, suffix=".tmp")
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
            json.dump(doc, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, output_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            logger.warning("Could not remove temporary export file %s", tmp_path)
        raise
    logger.info("Wrote export to %s", output_path)
