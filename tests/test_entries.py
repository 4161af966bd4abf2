"""Tests for the per-kind entry store."""

import sqlite3
from datetime import date

import pytest

from fitflow import entries
from fitflow.db import connect


class TestCreateAndRead:
    def test_create_fills_defaults(self, uid):
        entry_id = entries.create_entry(uid, "activities", {"name": "Running", "duration": 30})
        entry = entries.get_entry(uid, "activities", entry_id)

        assert entry["name"] == "Running"
        assert entry["duration"] == 30
        assert entry["entry_date"] == date.today().isoformat()
        assert len(entry["time"]) == 5  # HH:MM
        assert entry["user_id"] == uid

    def test_store_owned_fields_are_ignored(self, uid, other_uid):
        entry_id = entries.create_entry(
            uid, "water", {"amount": 500, "id": "forged", "user_id": other_uid}
        )
        assert entry_id != "forged"
        assert entries.get_entry(uid, "water", entry_id)["user_id"] == uid
        assert entries.get_entry(other_uid, "water", entry_id) is None

    def test_invalid_payload_raises_value_error(self, uid):
        with pytest.raises(ValueError, match="mood_level"):
            entries.create_entry(uid, "mood", {"mood_level": 9, "mood_type": "Happy"})

        with pytest.raises(ValueError):
            entries.create_entry(uid, "activities", {"duration": 10})

    def test_unknown_kind(self, uid):
        with pytest.raises(ValueError, match="unknown entry kind"):
            entries.create_entry(uid, "steps", {})

    def test_kind_is_part_of_the_key(self, uid):
        entry_id = entries.create_entry(uid, "sleep", {"duration": 7})
        assert entries.get_entry(uid, "water", entry_id) is None


class TestListing:
    def test_day_listing_is_newest_first_and_scoped(self, uid, other_uid):
        first = entries.create_entry(uid, "diets", {"meal_type": "Breakfast", "entry_date": "2026-10-16"})
        second = entries.create_entry(uid, "diets", {"meal_type": "Lunch", "entry_date": "2026-10-16"})
        entries.create_entry(uid, "diets", {"meal_type": "Dinner", "entry_date": "2026-10-15"})
        entries.create_entry(other_uid, "diets", {"meal_type": "Snack", "entry_date": "2026-10-16"})

        items = entries.list_entries_for_day(uid, "diets", date(2026, 10, 16))
        assert [i["id"] for i in items] == [second, first]

    def test_range_is_inclusive_and_oldest_first(self, uid):
        for day in ("2026-10-01", "2026-10-03", "2026-10-05", "2026-10-07"):
            entries.create_entry(uid, "sleep", {"duration": 7, "entry_date": day})

        items = entries.list_entries_range(uid, "sleep", "2026-10-03", "2026-10-05")
        assert [i["entry_date"] for i in items] == ["2026-10-03", "2026-10-05"]

    def test_range_rejects_reversed_bounds(self, uid):
        with pytest.raises(ValueError):
            entries.list_entries_range(uid, "sleep", date(2026, 10, 5), date(2026, 10, 1))


class TestUpdateDelete:
    def test_partial_update_is_revalidated(self, uid):
        entry_id = entries.create_entry(uid, "mood", {"mood_level": 3, "mood_type": "Calm"})

        updated = entries.update_entry(uid, "mood", entry_id, {"mood_level": 5})
        assert updated["mood_level"] == 5
        assert updated["mood_type"] == "Calm"

        with pytest.raises(ValueError):
            entries.update_entry(uid, "mood", entry_id, {"mood_level": 0})
        assert entries.get_entry(uid, "mood", entry_id)["mood_level"] == 5

    def test_update_can_move_an_entry_to_another_day(self, uid):
        entry_id = entries.create_entry(uid, "water", {"amount": 250, "entry_date": "2026-10-16"})
        entries.update_entry(uid, "water", entry_id, {"entry_date": "2026-10-14"})

        assert entries.list_entries_for_day(uid, "water", "2026-10-16") == []
        assert len(entries.list_entries_for_day(uid, "water", "2026-10-14")) == 1

    def test_update_missing_returns_none(self, uid):
        assert entries.update_entry(uid, "water", "nope", {"amount": 1}) is None

    def test_delete(self, uid, other_uid):
        entry_id = entries.create_entry(uid, "hobbies", {"name": "Guitar", "duration": 20})

        assert entries.delete_entry(other_uid, "hobbies", entry_id) is False
        assert entries.delete_entry(uid, "hobbies", entry_id) is True
        assert entries.delete_entry(uid, "hobbies", entry_id) is False


class TestSelectedDate:
    def test_refresh_goes_back_to_today(self):
        assert entries.resolve_selected_date("01-01-2026", refresh=True) == date.today()

    def test_handed_over_date_is_used(self):
        assert entries.resolve_selected_date("01-01-2026") == date(2026, 1, 1)

    def test_nothing_given_means_today(self):
        assert entries.resolve_selected_date(None) == date.today()


class TestTimeFields:
    def test_twelve_hour_input_is_stored_as_24h(self, uid):
        entry_id = entries.create_entry(uid, "activities", {"name": "Walk", "time": "07:30 PM"})
        assert entries.get_entry(uid, "activities", entry_id)["time"] == "19:30"

        entry_id = entries.create_entry(
            uid, "sleep", {"bed_time": "11:00 PM", "wake_time": "6:45 AM", "duration": 7.75}
        )
        entry = entries.get_entry(uid, "sleep", entry_id)
        assert (entry["bed_time"], entry["wake_time"]) == ("23:00", "06:45")

    def test_hobby_start_and_end(self, uid):
        entry_id = entries.create_entry(
            uid, "hobbies", {"name": "Piano", "start_time": "5:00 PM", "end_time": "17:45"}
        )
        entry = entries.get_entry(uid, "hobbies", entry_id)
        assert (entry["start_time"], entry["end_time"]) == ("17:00", "17:45")

    def test_malformed_time_is_rejected(self, uid):
        with pytest.raises(ValueError, match="time"):
            entries.create_entry(uid, "water", {"amount": 250, "time": "banana"})
        with pytest.raises(ValueError, match="bed_time"):
            entries.create_entry(uid, "sleep", {"bed_time": "7PM"})

    def test_malformed_time_on_update(self, uid):
        entry_id = entries.create_entry(uid, "diets", {"meal_type": "Lunch", "time": "12:30"})
        with pytest.raises(ValueError):
            entries.update_entry(uid, "diets", entry_id, {"time": "noon"})
        assert entries.get_entry(uid, "diets", entry_id)["time"] == "12:30"

    def test_empty_optional_time_means_absent(self, uid):
        entry_id = entries.create_entry(uid, "sleep", {"bed_time": "", "duration": 8})
        assert entries.get_entry(uid, "sleep", entry_id)["bed_time"] is None


class TestConnection:
    def test_pragmas_are_applied(self):
        with connect() as conn:
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
            assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"

    def test_entries_need_an_existing_user(self):
        with pytest.raises(sqlite3.IntegrityError):
            entries.create_entry("no-such-user", "water", {"amount": 100})
