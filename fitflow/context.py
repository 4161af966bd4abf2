# fitflow/context.py
from datetime import date
from typing import Any, Dict, List, Optional

from fitflow.entries import list_entries_for_day
from fitflow.insights import sleep_hours, water_liters
from fitflow.timefmt import (
    format_duration,
    format_quality,
    format_sleep_duration,
    format_time_for_display,
)

DEFAULT_SLEEP_GOAL = 8
DEFAULT_WATER_GOAL = 2


def _day_entries(uid: str, day: date) -> Dict[str, List[Dict[str, Any]]]:
    return {
        kind: list_entries_for_day(uid, kind, day)
        for kind in ("activities", "diets", "hobbies", "mood", "water", "sleep")
    }


def build_user_data(uid: str, day: date, profile: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Snapshot of one day of the user's data, handed to the AI assistant."""
    profile = profile or {}
    e = _day_entries(uid, day)

    def _or_none(key):
        return profile.get(key) or None

    return {
        "profile": {
            "weight": _or_none("weight"),
            "height": _or_none("height"),
            "bmi": _or_none("bmi"),
            "sleep_goal": _or_none("sleep_goal"),
            "water_goal": _or_none("water_goal"),
        },
        "today": {
            "date": day.isoformat(),
            "sleep": {
                "entries": [
                    {
                        "id": s["id"],
                        "bed_time": s.get("bed_time"),
                        "wake_time": s.get("wake_time"),
                        "duration": s.get("duration") or s.get("hours"),
                        "quality": s.get("quality"),
                    }
                    for s in e["sleep"]
                ],
                "total_hours": sum(sleep_hours(s) for s in e["sleep"]),
                "goal": _or_none("sleep_goal"),
            },
            "water": {
                "entries": [
                    {
                        "id": w["id"],
                        "amount": w.get("amount") or ((w.get("liters") or 0) * 1000),
                        "time": w.get("time"),
                    }
                    for w in e["water"]
                ],
                "total_liters": sum(water_liters(w) for w in e["water"]),
                "goal": _or_none("water_goal"),
            },
            "activities": [
                {
                    "id": a["id"],
                    "name": a.get("name"),
                    "duration": a.get("duration"),
                    "time": a.get("time"),
                    "calories_burned": a.get("calories_burned"),
                }
                for a in e["activities"]
            ],
            "total_activity_minutes": sum(a.get("duration") or 0 for a in e["activities"]),
            "diets": [
                {
                    "id": d["id"],
                    "meal_type": d.get("meal_type"),
                    "food_items": d.get("food_items"),
                    "calories": d.get("calories"),
                    "time": d.get("time"),
                }
                for d in e["diets"]
            ],
            "hobbies": [
                {
                    "id": h["id"],
                    "name": h.get("name") or h.get("type"),
                    "duration": h.get("duration"),
                    "time": h.get("time"),
                    "category": h.get("category"),
                }
                for h in e["hobbies"]
            ],
            "total_hobby_minutes": sum(h.get("duration") or 0 for h in e["hobbies"]),
            "moods": [
                {
                    "id": m["id"],
                    "mood_level": m.get("mood_level"),
                    "mood_type": m.get("mood_type"),
                    "time": m.get("time"),
                    "factors": m.get("factors") or [],
                }
                for m in e["mood"]
            ],
        },
    }


def _fmt_num(value: float) -> str:
    return f"{value:.1f}".rstrip("0").rstrip(".")


def daily_goals(uid: str, day: date, profile: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    profile = profile or {}
    sleep_goal = profile.get("sleep_goal") or DEFAULT_SLEEP_GOAL
    water_goal = profile.get("water_goal") or DEFAULT_WATER_GOAL

    total_sleep = sum(sleep_hours(s) for s in list_entries_for_day(uid, "sleep", day))
    total_water = sum(water_liters(w) for w in list_entries_for_day(uid, "water", day))

    return {
        "date": day.isoformat(),
        "sleep": {
            "goal": sleep_goal,
            "total": total_sleep,
            "progress": f"{total_sleep:.1f}h / {_fmt_num(sleep_goal)}h" if total_sleep > 0
            else f"0h / {_fmt_num(sleep_goal)}h",
        },
        "water": {
            "goal": water_goal,
            "total": total_water,
            "progress": f"{total_water:.1f}L / {_fmt_num(water_goal)}L" if total_water > 0
            else f"0L / {_fmt_num(water_goal)}L",
        },
    }


def _mentions(notes: Optional[str], word: str) -> Optional[str]:
    if notes and (word in notes or word.capitalize() in notes):
        return notes
    return None


def calendar_day(uid: str, day: date) -> Dict[str, Any]:
    """Display rows for every category on one calendar day."""
    e = _day_entries(uid, day)

    return {
        "date": day.isoformat(),
        "activities": [
            {
                "id": a["id"],
                "name": a.get("name"),
                "duration": format_duration(a.get("duration")),
                "calories": a.get("calories_burned") or 0,
                "time": format_time_for_display(a.get("time")),
            }
            for a in e["activities"]
        ],
        "diets": [
            {
                "id": d["id"],
                "meal": d.get("meal_type"),
                "food": d.get("food_items"),
                "calories": d.get("calories"),
                "time": format_time_for_display(d.get("time")),
            }
            for d in e["diets"]
        ],
        "hobbies": [
            {
                "id": h["id"],
                "hobby": h.get("name") or h.get("type") or "Hobby",
                "duration": format_duration(h.get("duration")),
                "time": format_time_for_display(h.get("time")),
                "book": _mentions(h.get("notes"), "book"),
                "song": _mentions(h.get("notes"), "song"),
            }
            for h in e["hobbies"]
        ],
        "sleep": [
            {
                "id": s["id"],
                "bedtime": format_time_for_display(s.get("bed_time")) or "N/A",
                "wakeup": format_time_for_display(s.get("wake_time")) or "N/A",
                "duration": format_sleep_duration(s.get("duration") or s.get("hours")),
                "quality": format_quality(s.get("quality")),
            }
            for s in e["sleep"]
        ],
        "water": [
            {
                "id": w["id"],
                "amount": f"{_fmt_num(w.get('amount') or (w.get('liters') or 0) * 1000)}ml",
                "time": format_time_for_display(w.get("time")),
            }
            for w in e["water"]
        ],
        "mood": [
            {
                "id": m["id"],
                "mood": m.get("mood_type"),
                "note": m.get("notes") or f"Mood level: {m.get('mood_level')}/5",
                "time": format_time_for_display(m.get("time")),
            }
            for m in e["mood"]
        ],
    }
