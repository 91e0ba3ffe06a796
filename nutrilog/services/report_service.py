"""
Report Service

Nutrition report over a range of days: per-day totals, range totals and
averages over the days that have logged activity.
"""

from typing import Any, Dict, Iterable, Mapping

from nutrilog.services.nutrition_service import TOTAL_KEYS, aggregate_log, empty_totals
from nutrilog.services.streak_service import is_active_day
from nutrilog.utils.dates import day_range, normalize


def build_report(logs: Iterable[Mapping[str, Any]], start: Any, end: Any) -> Dict[str, Any]:
    """
    Build a nutrition report for start..end (inclusive).

    Args:
        logs: Daily logs of the user; logs outside the range are ignored
        start: First day of the range
        end: Last day of the range

    Returns:
        Dictionary with range bounds, per-day rows, totals, averages,
        activeDays and cheatDays
    """
    start_key = normalize(start)
    end_key = normalize(end)
    if start_key > end_key:
        start_key, end_key = end_key, start_key

    by_day = {log["date"]: log for log in logs if log and log.get("date")}

    days = []
    totals = empty_totals()
    active_days = 0
    cheat_days = 0
    for day in day_range(start_key, end_key):
        log = by_day.get(day)
        day_totals = aggregate_log(log)
        active = is_active_day(log)
        cheat = bool(log and log.get("isCheatDay"))

        for key in TOTAL_KEYS:
            totals[key] += day_totals[key] or 0
        if active:
            active_days += 1
        if cheat:
            cheat_days += 1

        days.append({
            "date": day,
            "totals": day_totals,
            "active": active,
            "isCheatDay": cheat,
        })

    averages = {
        key: round(totals[key] / active_days, 1) if active_days else 0.0
        for key in TOTAL_KEYS
    }

    return {
        "start": start_key,
        "end": end_key,
        "days": days,
        "totals": totals,
        "averages": averages,
        "activeDays": active_days,
        "cheatDays": cheat_days,
    }
