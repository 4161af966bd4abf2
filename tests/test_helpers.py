"""Tests for the small pure helpers: time formatting, BMI and locale resolution."""

from datetime import date, datetime

import pytest

from fitflow.bmi import bmi_category, calculate_bmi
from fitflow.localization import resolve_locale
from fitflow.timefmt import (
    format_duration,
    format_navigation_date,
    format_quality,
    format_sleep_duration,
    format_time_for_display,
    parse_navigation_date,
    round_half_up,
    time_input_value,
)


# ---------------------------------------------------------------------------
# Time of day
# ---------------------------------------------------------------------------

class TestTimeOfDay:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("07:30 PM", "19:30"),
            ("12:05 AM", "00:05"),
            ("12:45 PM", "12:45"),
            ("09:15 AM", "09:15"),
            ("21:00", "21:00"),
        ],
    )
    def test_time_input_value(self, raw, expected):
        assert time_input_value(raw) == expected

    def test_time_input_value_pads_and_accepts_lowercase(self):
        assert time_input_value("7:05") == "07:05"
        assert time_input_value("7:05 pm") == "19:05"

    @pytest.mark.parametrize("raw", ["banana", "7PM", "25:00", "10:75", "13:00 PM", "", "7:5"])
    def test_time_input_value_rejects_malformed(self, raw):
        with pytest.raises(ValueError, match="invalid time"):
            time_input_value(raw)

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("19:30", "07:30 PM"),
            ("00:10", "12:10 AM"),
            ("12:00", "12:00 PM"),
            ("08:05", "08:05 AM"),
        ],
    )
    def test_format_time_for_display(self, raw, expected):
        assert format_time_for_display(raw) == expected

    def test_display_passes_through_empty_and_12h(self):
        assert format_time_for_display(None) == ""
        assert format_time_for_display("") == ""
        assert format_time_for_display("07:30 PM") == "07:30 PM"


# ---------------------------------------------------------------------------
# Navigation dates
# ---------------------------------------------------------------------------

class TestNavigationDate:
    def test_day_month_year(self):
        assert parse_navigation_date("16-10-2026") == date(2026, 10, 16)

    def test_iso_and_datetime_values(self):
        assert parse_navigation_date("2026-10-16") == date(2026, 10, 16)
        assert parse_navigation_date("2026-10-16T08:00:00Z") == date(2026, 10, 16)
        assert parse_navigation_date(datetime(2026, 10, 16, 23, 59)) == date(2026, 10, 16)

    def test_garbage_falls_back_to_today(self):
        assert parse_navigation_date("not a date") == date.today()
        assert parse_navigation_date("31-02-2026") == date.today()
        assert parse_navigation_date(None) == date.today()

    def test_format_round_trips(self):
        d = date(2026, 3, 7)
        assert format_navigation_date(d) == "07-03-2026"
        assert parse_navigation_date(format_navigation_date(d)) == d


# ---------------------------------------------------------------------------
# Durations / quality
# ---------------------------------------------------------------------------

class TestDurations:
    @pytest.mark.parametrize(
        "minutes, expected",
        [(None, "0 min"), (0, "0 min"), (45, "45 min"), (90, "1h 30m"), (120, "2h")],
    )
    def test_format_duration(self, minutes, expected):
        assert format_duration(minutes) == expected

    @pytest.mark.parametrize(
        "hours, expected",
        [(None, "0h 0m"), (7.5, "7h 30m"), (8, "8h"), (6.25, "6h 15m")],
    )
    def test_format_sleep_duration(self, hours, expected):
        assert format_sleep_duration(hours) == expected

    def test_sleep_minutes_round_half_up(self):
        # 0.375h is exactly 22.5 minutes
        assert format_sleep_duration(7.375) == "7h 23m"

    def test_round_half_up(self):
        assert round_half_up(22.5) == 23
        assert round_half_up(2.5) == 3
        assert round_half_up(7.25, 1) == 7.3

    def test_format_quality(self):
        assert format_quality(1) == "Poor"
        assert format_quality(4) == "Very Good"
        assert format_quality(None) == "Unknown"
        assert format_quality(9) == "Unknown"


# ---------------------------------------------------------------------------
# BMI
# ---------------------------------------------------------------------------

class TestBmi:
    def test_calculate(self):
        assert calculate_bmi(70, 175) == 22.9

    def test_missing_inputs_give_zero(self):
        assert calculate_bmi(0, 175) == 0.0
        assert calculate_bmi(70, None) == 0.0

    @pytest.mark.parametrize(
        "bmi, category",
        [(17.0, "Underweight"), (18.5, "Normal"), (24.9, "Normal"), (25, "Overweight"), (30, "Obese")],
    )
    def test_category_boundaries(self, bmi, category):
        assert bmi_category(bmi)["category"] == category


# ---------------------------------------------------------------------------
# Locale
# ---------------------------------------------------------------------------

class TestLocale:
    def test_stored_preference_wins(self):
        assert resolve_locale("de", "fr-CA,fr;q=0.9") == "de"

    def test_browser_language_is_used_next(self):
        assert resolve_locale(None, "fr-CA,fr;q=0.9,en;q=0.8") == "fr"

    def test_unsupported_falls_back_to_english(self):
        assert resolve_locale("xx", "nl-NL") == "en"
        assert resolve_locale(None, None) == "en"
