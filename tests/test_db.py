"""Tests for the SQLite database layer."""

import pytest

from devtracker.db import Database
from devtracker.streaks import DayRecord, FreezeState

USER = "alice"


@pytest.fixture
def db(tmp_path):
    """Create a temporary database for testing."""
    db_path = tmp_path / "test.db"
    database = Database(db_path=db_path)
    yield database
    database.close()


class TestDatabaseCreation:
    def test_creates_db_file(self, tmp_path):
        db_path = tmp_path / "sub" / "test.db"
        database = Database(db_path=db_path)
        assert db_path.exists()
        database.close()

    def test_tables_exist(self, db):
        cursor = db.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        tables = {row["name"] for row in cursor.fetchall()}
        assert {"logs", "freeze_state", "freeze_dates", "milestone_awards", "diary_entries", "resources"} <= tables

    def test_wal_mode_enabled(self, db):
        result = db.conn.execute("PRAGMA journal_mode").fetchone()
        assert result[0] == "wal"


class TestLogs:
    def test_add_and_get(self, db):
        log_id = db.add_log(USER, "2026-01-05", "Read a chapter", category="Study")
        logs = db.get_logs(USER, "2026-01-05")
        assert len(logs) == 1
        assert logs[0]["id"] == log_id
        assert logs[0]["title"] == "Read a chapter"
        assert logs[0]["category"] == "Study"

    def test_title_is_trimmed_and_truncated(self, db):
        db.add_log(USER, "2026-01-05", "  " + "x" * 300 + "  ")
        assert len(db.get_logs(USER)[0]["title"]) == 200

    def test_empty_title_rejected(self, db):
        with pytest.raises(ValueError):
            db.add_log(USER, "2026-01-05", "   ")

    def test_unknown_category_rejected(self, db):
        with pytest.raises(ValueError):
            db.add_log(USER, "2026-01-05", "Run", category="Sports")

    def test_default_category(self, db):
        db.add_log(USER, "2026-01-05", "Something")
        assert db.get_logs(USER)[0]["category"] == "Other"

    def test_delete_log(self, db):
        log_id = db.add_log(USER, "2026-01-05", "Run")
        assert db.delete_log(USER, log_id) is True
        assert db.get_logs(USER) == []

    def test_delete_other_users_log(self, db):
        log_id = db.add_log(USER, "2026-01-05", "Run")
        assert db.delete_log("bob", log_id) is False
        assert len(db.get_logs(USER)) == 1

    def test_has_logs_on(self, db):
        db.add_log(USER, "2026-01-05", "Run")
        assert db.has_logs_on(USER, "2026-01-05") is True
        assert db.has_logs_on(USER, "2026-01-06") is False


class TestDayRecords:
    def test_grouped_counts_oldest_first(self, db):
        db.add_log(USER, "2026-01-06", "A")
        db.add_log(USER, "2026-01-05", "B")
        db.add_log(USER, "2026-01-05", "C")
        assert db.get_day_records(USER) == [
            DayRecord("2026-01-05", 2),
            DayRecord("2026-01-06", 1),
        ]

    def test_emptied_day_disappears(self, db):
        log_id = db.add_log(USER, "2026-01-05", "A")
        db.add_log(USER, "2026-01-06", "B")
        db.delete_log(USER, log_id)
        assert db.get_day_records(USER) == [DayRecord("2026-01-06", 1)]

    def test_users_are_isolated(self, db):
        db.add_log(USER, "2026-01-05", "A")
        assert db.get_day_records("bob") == []

    def test_get_days_newest_first(self, db):
        db.add_log(USER, "2026-01-05", "A", category="Coding")
        db.add_log(USER, "2026-01-06", "B")
        days = db.get_days(USER)
        assert [d["date"] for d in days] == ["2026-01-06", "2026-01-05"]
        assert days[1]["logs"][0]["title"] == "A"
        assert days[1]["logs"][0]["category"] == "Coding"


class TestFreezeState:
    def test_new_user_defaults(self, db):
        assert db.get_freeze_state(USER) == FreezeState.empty()

    def test_increment_credits(self, db):
        assert db.increment_credits(USER) is True
        state = db.get_freeze_state(USER)
        assert state.credits == 1
        assert state.total_earned == 1

    def test_increment_respects_cap(self, db):
        for _ in range(5):
            assert db.increment_credits(USER) is True
        assert db.increment_credits(USER) is False
        state = db.get_freeze_state(USER)
        assert state.credits == 5
        assert state.total_earned == 5

    def test_consume_credit(self, db):
        db.increment_credits(USER)
        assert db.consume_credit(USER, "2026-01-05") is True
        state = db.get_freeze_state(USER)
        assert state.credits == 0
        assert state.used_dates == frozenset({"2026-01-05"})
        assert state.total_used == 1
        assert state.manual_activations == 1

    def test_consume_without_credit(self, db):
        assert db.consume_credit(USER, "2026-01-05") is False
        assert db.get_freeze_state(USER).used_dates == frozenset()

    def test_consume_same_date_twice_rolls_back(self, db):
        db.increment_credits(USER)
        db.increment_credits(USER)
        assert db.consume_credit(USER, "2026-01-05") is True
        assert db.consume_credit(USER, "2026-01-05") is False
        state = db.get_freeze_state(USER)
        assert state.credits == 1
        assert state.total_used == 1

    def test_automatic_consumption_not_counted_as_manual(self, db):
        db.increment_credits(USER)
        db.consume_credit(USER, "2026-01-05", manual=False)
        state = db.get_freeze_state(USER)
        assert state.manual_activations == 0
        history = db.get_freeze_history(USER)
        assert [(h["date"], h["manual"]) for h in history] == [("2026-01-05", False)]

    def test_claim_milestone_grants_credit(self, db):
        assert db.claim_milestone(USER, "2026-01-01", 7) is True
        state = db.get_freeze_state(USER)
        assert state.credits == 1
        assert state.total_earned == 1
        assert state.last_earned_milestone == 7
        assert db.get_credited_milestone(USER, "2026-01-01") == 7

    def test_claim_milestone_once_per_streak(self, db):
        assert db.claim_milestone(USER, "2026-01-01", 7) is True
        assert db.claim_milestone(USER, "2026-01-01", 7) is False
        assert db.get_freeze_state(USER).credits == 1

    def test_claim_at_cap_records_nothing(self, db):
        for _ in range(5):
            db.increment_credits(USER)
        assert db.claim_milestone(USER, "2026-01-01", 7) is False
        assert db.get_credited_milestone(USER, "2026-01-01") == 0
        assert db.get_freeze_state(USER).last_earned_milestone == 0

    def test_credited_milestone_includes_later_starts(self, db):
        db.claim_milestone(USER, "2026-01-01", 7)
        db.claim_milestone(USER, "2026-01-20", 14)
        assert db.get_credited_milestone(USER, "2026-01-01") == 14
        assert db.get_credited_milestone(USER, "2026-01-20") == 14
        assert db.get_credited_milestone(USER, "2026-02-01") == 0

    def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "data.db"
        first = Database(db_path=path)
        first.increment_credits(USER)
        first.close()
        second = Database(db_path=path)
        assert second.get_freeze_state(USER).credits == 1
        second.close()


class TestDiary:
    def test_save_and_get(self, db):
        entry = db.save_diary_entry(
            USER, "2026-03-08", "  Shipped the parser  ", title="Good day", mood="happy",
            mood_intensity=8, people=["Sam", " ", "Kim"],
        )
        assert entry["content"] == "Shipped the parser"
        assert entry["mood"] == "happy"
        assert entry["moodIntensity"] == 8
        assert entry["people"] == ["Sam", "Kim"]
        assert db.get_diary_entry(USER, "2026-03-08") == entry

    def test_one_entry_per_day(self, db):
        first = db.save_diary_entry(USER, "2026-03-08", "Morning")
        second = db.save_diary_entry(USER, "2026-03-08", "Evening", mood="tired")
        assert second["id"] == first["id"]
        assert second["content"] == "Evening"
        assert len(db.get_diary_entries(USER)) == 1

    def test_empty_content_rejected(self, db):
        with pytest.raises(ValueError, match="Content required"):
            db.save_diary_entry(USER, "2026-03-08", "   ")

    def test_unknown_mood_rejected(self, db):
        with pytest.raises(ValueError, match="Unknown mood"):
            db.save_diary_entry(USER, "2026-03-08", "Hi", mood="grumpy")

    @pytest.mark.parametrize("intensity", [0, 11])
    def test_intensity_out_of_range(self, db, intensity):
        with pytest.raises(ValueError, match="1-10"):
            db.save_diary_entry(USER, "2026-03-08", "Hi", mood_intensity=intensity)

    def test_timeline_newest_first_and_by_year(self, db):
        db.save_diary_entry(USER, "2025-12-31", "Old year")
        db.save_diary_entry(USER, "2026-01-02", "A")
        db.save_diary_entry(USER, "2026-03-01", "B")
        assert [e["date"] for e in db.get_diary_entries(USER)] == ["2026-03-01", "2026-01-02", "2025-12-31"]
        assert [e["date"] for e in db.get_diary_entries(USER, year=2026)] == ["2026-03-01", "2026-01-02"]
        assert [e["date"] for e in db.get_diary_entries(USER, limit=1, offset=1)] == ["2026-01-02"]

    def test_on_this_day_across_years(self, db):
        db.save_diary_entry(USER, "2024-03-09", "Two years ago")
        db.save_diary_entry(USER, "2025-03-09", "Last year")
        db.save_diary_entry(USER, "2025-03-10", "Other day")
        entries = db.get_diary_on_this_day(USER, "2026-03-09")
        assert [e["date"] for e in entries] == ["2025-03-09", "2024-03-09"]

    def test_stats(self, db):
        assert db.get_diary_stats(USER) == {"totalEntries": 0, "avgMoodIntensity": None, "byMood": {}}
        db.save_diary_entry(USER, "2026-03-01", "A", mood="happy", mood_intensity=7)
        db.save_diary_entry(USER, "2026-03-02", "B", mood="happy", mood_intensity=8)
        db.save_diary_entry(USER, "2026-03-03", "C", mood="sad", mood_intensity=3)
        stats = db.get_diary_stats(USER)
        assert stats["totalEntries"] == 3
        assert stats["avgMoodIntensity"] == 6.0
        assert stats["byMood"] == {"happy": 2, "sad": 1}

    def test_delete_is_scoped_to_user(self, db):
        entry = db.save_diary_entry(USER, "2026-03-01", "Mine")
        assert db.delete_diary_entry("bob", entry["id"]) is False
        assert db.delete_diary_entry(USER, entry["id"]) is True
        assert db.get_diary_entry(USER, "2026-03-01") is None


class TestResources:
    def test_add_and_get(self, db):
        resource_id = db.add_resource(
            USER, " SQLite internals ", resource_type="documentation",
            url="https://sqlite.org", tags=["db", "", "sql"], priority="high",
        )
        resource = db.get_resource(USER, resource_id)
        assert resource["title"] == "SQLite internals"
        assert resource["resourceType"] == "documentation"
        assert resource["tags"] == ["db", "sql"]
        assert resource["status"] == "unread"
        assert resource["rating"] == 0
        assert resource["isPinned"] is False
        assert resource["completionDate"] is None

    @pytest.mark.parametrize("field, value", [
        ("resource_type", "blog"),
        ("priority", "urgent"),
        ("status", "done"),
    ])
    def test_unknown_choice_rejected(self, db, field, value):
        with pytest.raises(ValueError, match="Unknown"):
            db.add_resource(USER, "Thing", **{field: value})

    def test_empty_title_rejected(self, db):
        with pytest.raises(ValueError):
            db.add_resource(USER, "  ")

    def test_list_hides_archived_and_pins_first(self, db):
        first = db.add_resource(USER, "First")
        db.add_resource(USER, "Second")
        db.add_resource(USER, "Gone", status="archived")
        db.toggle_resource_pin(USER, first)
        assert [r["title"] for r in db.get_resources(USER)] == ["First", "Second"]
        assert [r["title"] for r in db.get_resources(USER, status="archived")] == ["Gone"]
        assert len(db.get_resources(USER, include_archived=True)) == 3

    def test_filter_by_type_priority_and_tag(self, db):
        db.add_resource(USER, "Talk", resource_type="video", tags=["python"])
        db.add_resource(USER, "Book", resource_type="book", priority="low", tags=["python", "design"])
        assert [r["title"] for r in db.get_resources(USER, resource_type="video")] == ["Talk"]
        assert [r["title"] for r in db.get_resources(USER, priority="low")] == ["Book"]
        assert [r["title"] for r in db.get_resources(USER, tag="design")] == ["Book"]

    def test_search_matches_title_description_and_tags(self, db):
        db.add_resource(USER, "Async patterns")
        db.add_resource(USER, "Talk", description="Covers ASYNC generators")
        db.add_resource(USER, "Notes", tags=["asyncio"])
        db.add_resource(USER, "Unrelated")
        db.add_resource(USER, "Archived async", status="archived")
        assert sorted(r["title"] for r in db.search_resources(USER, "async")) == [
            "Async patterns", "Notes", "Talk",
        ]

    def test_search_treats_wildcards_literally(self, db):
        db.add_resource(USER, "100% coverage")
        db.add_resource(USER, "Plain")
        assert [r["title"] for r in db.search_resources(USER, "%")] == ["100% coverage"]

    def test_complete_stamps_completion_date(self, db):
        resource_id = db.add_resource(USER, "Course", resource_type="course")
        completed = db.complete_resource(USER, resource_id)
        assert completed["status"] == "completed"
        assert completed["completionDate"] is not None

    def test_update_unknown_resource(self, db):
        assert db.update_resource(USER, 999, status="reading") is None

    def test_update_unknown_field_rejected(self, db):
        resource_id = db.add_resource(USER, "Thing")
        with pytest.raises(ValueError, match="Unknown resource fields"):
            db.update_resource(USER, resource_id, owner="bob")

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, db, rating):
        resource_id = db.add_resource(USER, "Thing")
        with pytest.raises(ValueError, match="1-5"):
            db.rate_resource(USER, resource_id, rating)

    def test_toggle_pin(self, db):
        resource_id = db.add_resource(USER, "Thing")
        assert db.toggle_resource_pin(USER, resource_id) is True
        assert db.toggle_resource_pin(USER, resource_id) is False
        assert db.toggle_resource_pin("bob", resource_id) is None

    def test_delete(self, db):
        resource_id = db.add_resource(USER, "Thing")
        assert db.delete_resource(USER, resource_id) is True
        assert db.get_resource(USER, resource_id) is None
        assert db.delete_resource(USER, resource_id) is False

    def test_stats(self, db):
        rated = db.add_resource(USER, "Rated", resource_type="video")
        db.add_resource(USER, "Unrated", priority="high")
        db.add_resource(USER, "Old", status="archived")
        db.rate_resource(USER, rated, 4)
        stats = db.get_resource_stats(USER)
        assert stats["totalResources"] == 3
        assert stats["unreadCount"] == 2
        assert stats["archivedCount"] == 1
        assert stats["completedCount"] == 0
        assert stats["avgRating"] == 4.0
        assert stats["byType"] == {"video": 1, "article": 2}
        assert stats["byPriority"] == {"medium": 2, "high": 1}
