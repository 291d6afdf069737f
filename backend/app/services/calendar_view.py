"""
Weekly calendar projection (pure functions, Monday-start weeks).

Bucketing rules:
- a shift belongs to the single day equal to its shift_date;
- a time-off request belongs to every day with start_date <= day <= end_date (both ends inclusive).
"""
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List


def week_start(day: date) -> date:
    """Monday on or before day."""
    return day - timedelta(days=day.weekday())


def week_days(week_of: date) -> List[date]:
    start = week_start(week_of)
    return [start + timedelta(days=i) for i in range(7)]


def week_bounds(week_of: date) -> tuple[date, date]:
    start = week_start(week_of)
    return start, start + timedelta(days=6)


def shifts_on(day: date, shifts: Iterable[Any]) -> List[Any]:
    return [s for s in shifts if s.shift_date == day]


def time_off_on(day: date, requests: Iterable[Any]) -> List[Any]:
    return [r for r in requests if r.start_date <= day <= r.end_date]


def build_week(week_of: date, shifts: Iterable[Any], time_off: Iterable[Any]) -> List[Dict[str, Any]]:
    """Seven buckets Monday..Sunday: {"date", "shifts", "time_off"}; inputs need shift_date / start_date / end_date."""
    shifts = list(shifts)
    time_off = list(time_off)
    return [
        {"date": d, "shifts": shifts_on(d, shifts), "time_off": time_off_on(d, time_off)}
        for d in week_days(week_of)
    ]
