# fitflow/timefmt.py
"""
Time and date formatting shared by the entry store, the calendar view and the
insights charts.

Times of day travel as strings. New entries use 24-hour "HH:MM"; older ones may
carry "HH:MM AM/PM", so every helper here accepts both.
"""
import math
from datetime import date, datetime
from typing import Optional, Union

QUALITY_LABELS = {
    1: "Poor",
    2: "Fair",
    3: "Good",
    4: "Very Good",
    5: "Excellent",
}


def round_half_up(value: float, digits: int = 0):
    """Round half away from zero for positive values (2.45 -> 2.5, not 2.4)."""
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5) / scale
    return int(rounded) if digits == 0 else rounded


def current_time() -> str:
    return datetime.now().strftime("%H:%M")


def _is_12h(time: str) -> bool:
    return "AM" in time or "PM" in time


def time_input_value(time: str) -> str:
    """
    Normalize a time of day to 24-hour "HH:MM". Accepts "19:30", "7:30" and
    "07:30 PM"; raises ValueError for anything else.
    """
    raw = (time or "").strip().upper()
    period = None
    if raw.endswith(("AM", "PM")):
        period, raw = raw[-2:], raw[:-2].strip()

    hour_str, sep, minute_str = raw.partition(":")
    if not sep or not hour_str.isdigit() or not minute_str.isdigit() or len(minute_str) != 2:
        raise ValueError(f"invalid time: {time!r}")
    hour, minute = int(hour_str), int(minute_str)

    if period:
        if not 1 <= hour <= 12:
            raise ValueError(f"invalid time: {time!r}")
        if period == "PM" and hour != 12:
            hour += 12
        if period == "AM" and hour == 12:
            hour = 0

    if hour > 23 or minute > 59:
        raise ValueError(f"invalid time: {time!r}")
    return f"{hour:02d}:{minute:02d}"


def format_time_for_display(time: Optional[str]) -> str:
    """24-hour "19:30" -> "07:30 PM". Empty and 12-hour input pass through."""
    if not time or _is_12h(time):
        return time or ""

    try:
        hour_str, _, minute_str = time.partition(":")
        hour = int(hour_str)
        minute = int(minute_str or 0)
    except ValueError:
        return time

    period = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    return f"{hour12:02d}:{minute:02d} {period}"


def date_input_value(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def parse_navigation_date(value: Union[str, date, None]) -> date:
    """
    Dates handed between views travel as DD-MM-YYYY. ISO dates and datetimes
    are accepted too; anything unreadable falls back to today.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = (value or "").strip()
    if raw:
        parts = raw.split("-")
        if len(parts) == 3 and len(parts[0]) == 2:
            try:
                day, month, year = (int(p) for p in parts)
                return date(year, month, day)
            except ValueError:
                pass
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            pass

    return date.today()


def format_navigation_date(d: date) -> str:
    return d.strftime("%d-%m-%Y")


def format_duration(minutes: Optional[float]) -> str:
    if not minutes:
        return "0 min"
    minutes = int(minutes)
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"


def format_sleep_duration(hours: Optional[float]) -> str:
    if not hours:
        return "0h 0m"
    whole = int(hours)
    minutes = round_half_up((hours - whole) * 60)
    return f"{whole}h {minutes}m" if minutes > 0 else f"{whole}h"


def format_quality(quality: Optional[int]) -> str:
    return QUALITY_LABELS.get(quality or 0, "Unknown")
