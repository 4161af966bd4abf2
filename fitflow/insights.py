# fitflow/insights.py
"""
Daily rollups and summary statistics behind the insights charts.

Raw entries are bucketed by their `entry_date` into one bucket per calendar day
of the requested window (days without entries get an empty bucket, so charts
always have a continuous x axis). Statistics are then taken over the days that
actually have data: a day with 0 logged is treated as "not logged", not as a
bad day.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from fitflow.entries import list_entries_range
from fitflow.timefmt import round_half_up

ALLOWED_RANGES = (7, 30, 90)


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def days_between(start: date, end: date) -> List[date]:
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def get_date_range(days_back: int, today: Optional[date] = None) -> Tuple[date, date]:
    """(today - days_back, today), both inclusive."""
    end = today or date.today()
    return end - timedelta(days=days_back), end


def format_chart_date(day: date, days_back: int) -> str:
    if days_back <= 7:
        return day.strftime("%a")  # Mon, Tue
    return f"{day.strftime('%b')} {day.day}"  # Jan 1


def _group_by_day(entries: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    by_day: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for e in entries:
        by_day[str(e.get("entry_date") or "")[:10]].append(e)
    return by_day


def sleep_hours(entry: Dict[str, Any]) -> float:
    return entry.get("duration") or entry.get("hours") or 0


def water_liters(entry: Dict[str, Any]) -> float:
    amount = entry.get("amount")
    if amount:
        return amount / 1000
    return entry.get("liters") or 0


# -------------------------
# Daily series
# -------------------------
def aggregate_sleep_by_day(
    entries: List[Dict[str, Any]], start: date, end: date, goal: Optional[float] = None
) -> List[Dict[str, Any]]:
    by_day = _group_by_day(entries)
    out = []
    for d in days_between(start, end):
        key = d.isoformat()
        day_entries = by_day.get(key, [])
        qualities = [e["quality"] for e in day_entries if e.get("quality") is not None]
        out.append(
            {
                "date": key,
                "hours": sum(sleep_hours(e) for e in day_entries),
                "quality": sum(qualities) / len(qualities) if qualities else None,
                "goal": goal,
            }
        )
    return out


def aggregate_water_by_day(
    entries: List[Dict[str, Any]], start: date, end: date, goal: Optional[float] = None
) -> List[Dict[str, Any]]:
    by_day = _group_by_day(entries)
    return [
        {
            "date": d.isoformat(),
            "liters": sum(water_liters(e) for e in by_day.get(d.isoformat(), [])),
            "goal": goal,
        }
        for d in days_between(start, end)
    ]


def aggregate_activity_by_day(
    entries: List[Dict[str, Any]], start: date, end: date
) -> List[Dict[str, Any]]:
    by_day = _group_by_day(entries)
    out = []
    for d in days_between(start, end):
        day_entries = by_day.get(d.isoformat(), [])
        calories = sum(e.get("calories_burned") or 0 for e in day_entries)
        out.append(
            {
                "date": d.isoformat(),
                "minutes": sum(e.get("duration") or 0 for e in day_entries),
                "calories": calories if calories > 0 else None,
            }
        )
    return out


def aggregate_diet_by_day(
    entries: List[Dict[str, Any]], start: date, end: date
) -> List[Dict[str, Any]]:
    by_day = _group_by_day(entries)
    out = []
    for d in days_between(start, end):
        day_entries = by_day.get(d.isoformat(), [])
        out.append(
            {
                "date": d.isoformat(),
                "calories": sum(e.get("calories") or 0 for e in day_entries),
                "meal_count": len(day_entries),
            }
        )
    return out


# -------------------------
# Breakdowns
# -------------------------
def group_activities_by_type(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    groups: Dict[str, Dict[str, Any]] = {}
    for e in entries:
        name = e.get("name") or "Unknown"
        g = groups.setdefault(
            name, {"name": name, "total_minutes": 0, "count": 0, "total_calories": 0}
        )
        g["total_minutes"] += e.get("duration") or 0
        g["count"] += 1
        g["total_calories"] += e.get("calories_burned") or 0
    return sorted(groups.values(), key=lambda g: g["total_minutes"], reverse=True)


def group_diets_by_meal_type(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    groups: Dict[str, Dict[str, Any]] = {}
    for e in entries:
        meal_type = e.get("meal_type") or "Unknown"
        g = groups.setdefault(meal_type, {"meal_type": meal_type, "count": 0, "total_calories": 0})
        g["count"] += 1
        g["total_calories"] += e.get("calories") or 0

    out = []
    for g in groups.values():
        g["average_calories"] = round_half_up(g["total_calories"] / g["count"]) if g["count"] else 0
        out.append(g)
    return sorted(out, key=lambda g: g["count"], reverse=True)


# -------------------------
# Summary statistics
# -------------------------
def _goal_stats(data: List[Dict[str, Any]], field: str) -> Dict[str, Any]:
    values = [d[field] for d in data if d[field] > 0]
    if not values:
        return {"average": 0, "min": 0, "max": 0, "goal_achievement": 0, "consistency": 0}

    goal = data[0].get("goal") if data else None
    met = len([v for v in values if v >= goal]) if goal else 0

    return {
        "average": round_half_up(sum(values) / len(values), 1),
        "min": round_half_up(min(values), 1),
        "max": round_half_up(max(values), 1),
        "goal_achievement": _percent(met, len(values)) if goal else 0,
        "consistency": _percent(len(values), len(data)),
    }


def calculate_sleep_stats(data: List[Dict[str, Any]]) -> Dict[str, Any]:
    return _goal_stats(data, "hours")


def calculate_water_stats(data: List[Dict[str, Any]]) -> Dict[str, Any]:
    return _goal_stats(data, "liters")


def calculate_activity_stats(data: List[Dict[str, Any]]) -> Dict[str, Any]:
    minutes = [d["minutes"] for d in data if d["minutes"] > 0]
    calories = [d["calories"] for d in data if d.get("calories") is not None and d["calories"] > 0]

    if not minutes:
        return {
            "total_minutes": 0,
            "average_minutes": 0,
            "min_minutes": 0,
            "max_minutes": 0,
            "total_calories": 0,
            "average_calories": 0,
            "consistency": 0,
        }

    total_minutes = sum(minutes)
    total_calories = sum(calories)
    return {
        "total_minutes": round_half_up(total_minutes),
        "average_minutes": round_half_up(total_minutes / len(minutes), 1),
        "min_minutes": round_half_up(min(minutes)),
        "max_minutes": round_half_up(max(minutes)),
        "total_calories": round_half_up(total_calories),
        "average_calories": round_half_up(total_calories / len(calories), 1) if calories else 0,
        "consistency": _percent(len(minutes), len(data)),
    }


def calculate_diet_stats(data: List[Dict[str, Any]]) -> Dict[str, Any]:
    calories = [d["calories"] for d in data if d["calories"] > 0]
    meal_counts = [d["meal_count"] for d in data if d["meal_count"] > 0]

    if not calories:
        return {
            "total_calories": 0,
            "average_calories": 0,
            "min_calories": 0,
            "max_calories": 0,
            "total_meals": 0,
            "average_meals_per_day": 0,
            "consistency": 0,
        }

    total_calories = sum(calories)
    total_meals = sum(meal_counts)
    return {
        "total_calories": round_half_up(total_calories),
        "average_calories": round_half_up(total_calories / len(calories), 1),
        "min_calories": round_half_up(min(calories)),
        "max_calories": round_half_up(max(calories)),
        "total_meals": total_meals,
        "average_meals_per_day": round_half_up(total_meals / len(meal_counts), 1) if meal_counts else 0,
        "consistency": _percent(len(calories), len(data)),
    }


# -------------------------
# Insights page
# -------------------------
def build_insights(
    uid: str, days_back: int, profile: Dict[str, Any], today: Optional[date] = None
) -> Dict[str, Any]:
    if days_back not in ALLOWED_RANGES:
        raise ValueError(f"days must be one of {', '.join(str(r) for r in ALLOWED_RANGES)}")

    start, end = get_date_range(days_back, today)
    sleep_goal = profile.get("sleep_goal") or None
    water_goal = profile.get("water_goal") or None

    sleep_entries = list_entries_range(uid, "sleep", start, end)
    water_entries = list_entries_range(uid, "water", start, end)
    activity_entries = list_entries_range(uid, "activities", start, end)
    diet_entries = list_entries_range(uid, "diets", start, end)

    sleep = aggregate_sleep_by_day(sleep_entries, start, end, sleep_goal)
    water = aggregate_water_by_day(water_entries, start, end, water_goal)
    activity = aggregate_activity_by_day(activity_entries, start, end)
    diet = aggregate_diet_by_day(diet_entries, start, end)

    return {
        "days": days_back,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "labels": [format_chart_date(d, days_back) for d in days_between(start, end)],
        "sleep": {"series": sleep, "stats": calculate_sleep_stats(sleep)},
        "water": {"series": water, "stats": calculate_water_stats(water)},
        "activity": {
            "series": activity,
            "stats": calculate_activity_stats(activity),
            "by_type": group_activities_by_type(activity_entries),
        },
        "diet": {
            "series": diet,
            "stats": calculate_diet_stats(diet),
            "by_meal_type": group_diets_by_meal_type(diet_entries),
        },
    }
