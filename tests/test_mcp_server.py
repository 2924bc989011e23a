"""Tests for the MCP server tool functions."""
from datetime import date, timedelta
from unittest.mock import MagicMock, patch

import pytest

from devtracker.db import Database
from devtracker.mcp_server import (
    activate_freeze,
    add_resource,
    complete_resource,
    diary_on_this_day,
    earn_freeze,
    get_days,
    get_diary,
    get_diary_stats,
    get_freeze,
    get_heatmap,
    get_resource_stats,
    get_stats,
    get_titles,
    list_resources,
    log_activity,
    rate_resource,
    save_diary_entry,
)

USER = "alice"


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "mcp.db"
    with patch("devtracker.mcp_server._get_db", side_effect=lambda: Database(db_path=path)):
        yield path


def _seed(path, days: int) -> None:
    db = Database(db_path=path)
    try:
        today = date.today()
        for i in range(days):
            db.add_log(USER, (today - timedelta(days=i)).isoformat(), f"Day {i}")
    finally:
        db.close()


class TestGetStats:
    def test_no_data_returns_error(self, db_path):
        assert "error" in get_stats(user_id=USER)

    def test_reports_streak(self, db_path):
        _seed(db_path, 3)
        result = get_stats(user_id=USER)
        assert result["currentStreak"] == 3
        assert result["totalActiveDays"] == 3
        assert result["nextMilestone"] == 7
        assert result["title"] == "Getting Started"
        assert result["creditEarned"] is False

    def test_awards_credit(self, db_path):
        _seed(db_path, 7)
        result = get_stats(user_id=USER)
        assert result["creditEarned"] is True
        assert result["credits"] == 1

    @patch("devtracker.mcp_server._get_db")
    def test_closes_db(self, mock_get_db):
        mock_db = MagicMock()
        mock_db.get_day_records.return_value = []
        mock_get_db.return_value = mock_db
        get_stats(user_id=USER)
        mock_db.close.assert_called_once()


class TestLogActivity:
    def test_logs_today(self, db_path):
        result = log_activity("Read docs", user_id=USER)
        assert result["date"] == date.today().isoformat()
        assert get_days(user_id=USER)["total"] == 1

    def test_bad_category(self, db_path):
        assert "error" in log_activity("Read docs", category="Gaming", user_id=USER)

    def test_future_date(self, db_path):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        assert log_activity("Later", day=tomorrow, user_id=USER) == {"error": "Date cannot be in the future"}


class TestFreezeTools:
    def test_get_freeze_empty(self, db_path):
        result = get_freeze(user_id=USER)
        assert result["credits"] == 0
        assert result["usedDates"] == []
        assert result["history"] == []

    def test_activate_without_credit(self, db_path):
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        assert activate_freeze(yesterday, user_id=USER) == {"error": "No freeze credits available"}

    def test_earn_then_activate(self, db_path):
        db = Database(db_path=db_path)
        try:
            start = date.today() - timedelta(days=2)
            for i in range(7):
                db.add_log(USER, (start - timedelta(days=i)).isoformat(), "Work")
        finally:
            db.close()
        # Gap of two days: nothing to earn until the missing day is covered
        assert earn_freeze(user_id=USER)["isNew"] is False

        db = Database(db_path=db_path)
        try:
            db.increment_credits(USER)
        finally:
            db.close()
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        result = activate_freeze(yesterday, user_id=USER)
        assert result["credits"] == 0

        earned = earn_freeze(user_id=USER)
        assert earned["isNew"] is True
        assert earned["milestone"] == 7
        assert get_freeze(user_id=USER)["usedDates"] == [yesterday]


class TestGetHeatmap:
    def test_counts_current_year(self, db_path):
        db = Database(db_path=db_path)
        try:
            today = date.today().isoformat()
            db.add_log(USER, today, "A")
            db.add_log(USER, today, "B")
        finally:
            db.close()
        result = get_heatmap(user_id=USER)
        assert result["total"] == 2
        assert result["activeDays"] == 1
        assert result["days"] == [{"date": date.today().isoformat(), "count": 2, "level": 2}]


class TestGetTitles:
    def test_titles_for_current_streak(self, db_path):
        _seed(db_path, 5)
        result = get_titles(user_id=USER)
        assert result["streak"] == 5
        assert [t["title"] for t in result["titles"]] == ["First Step", "Getting Started", "Warming Up"]
        assert result["next"] == {"days": 7, "title": "One Week Wonder"}


class TestDiaryTools:
    def test_save_and_get_today(self, db_path):
        saved = save_diary_entry("Paired on the migration", mood="excited", people=["Sam"], user_id=USER)
        assert saved["date"] == date.today().isoformat()
        entry = get_diary(day=date.today().isoformat(), user_id=USER)
        assert entry["people"] == ["Sam"]
        assert get_diary(user_id=USER)["count"] == 1

    def test_invalid_entry_returns_error(self, db_path):
        assert save_diary_entry("Hi", mood_intensity=11, user_id=USER) == {"error": "Mood intensity must be 1-10"}
        assert "error" in save_diary_entry("Hi", day="2026/01/01", user_id=USER)

    def test_missing_day(self, db_path):
        assert get_diary(day="2026-01-01", user_id=USER) == {"error": "No entry for this date"}

    def test_on_this_day_and_stats(self, db_path):
        save_diary_entry("Today", mood="happy", mood_intensity=9, user_id=USER)
        result = diary_on_this_day(user_id=USER)
        assert result["entries"][0]["content"] == "Today"
        assert get_diary_stats(user_id=USER)["byMood"]["happy"] == 1


class TestResourceTools:
    def test_add_search_complete(self, db_path):
        added = add_resource("Designing Data-Intensive Applications", resource_type="book",
                             tags=["databases"], user_id=USER)
        add_resource("Intro video", resource_type="video", user_id=USER)
        found = list_resources(query="databases", user_id=USER)
        assert [r["id"] for r in found["resources"]] == [added["id"]]
        assert list_resources(resource_type="video", user_id=USER)["count"] == 1

        assert complete_resource(added["id"], user_id=USER)["status"] == "completed"
        assert rate_resource(added["id"], 4, user_id=USER)["rating"] == 4
        stats = get_resource_stats(user_id=USER)
        assert stats["completedCount"] == 1
        assert stats["avgRating"] == 4.0

    def test_errors(self, db_path):
        assert "error" in add_resource("Thing", resource_type="blog", user_id=USER)
        assert complete_resource(99, user_id=USER) == {"error": "Resource not found"}
        assert rate_resource(99, 3, user_id=USER) == {"error": "Resource not found"}
        resource_id = add_resource("Thing", user_id=USER)["id"]
        assert rate_resource(resource_id, 0, user_id=USER) == {"error": "Rating must be 1-5"}
