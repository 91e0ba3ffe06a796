"""
Weight Service

"Current weight" is the most recently known weight: the day's own entry,
else the latest earlier day that has one, else the profile weight. The
fallback chain is an ordered list of resolvers so the precedence can be
tested one step at a time.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from nutrilog.utils.dates import day_range, normalize
from nutrilog.utils.enums import Trend

WeightResolver = Callable[[str, Optional[Mapping], Optional[Mapping], Optional[Iterable[Mapping]]], Optional[float]]


def _weight_of(record: Optional[Mapping]) -> Optional[float]:
    if not record:
        return None
    weight = record.get("weight")
    if weight is None or isinstance(weight, bool):
        return None
    return weight


def from_day_log(day, day_log, profile, history) -> Optional[float]:
    return _weight_of(day_log)


def from_prior_logs(day, day_log, profile, history) -> Optional[float]:
    """Latest log strictly before day with a weight."""
    if not history:
        return None
    prior = [log for log in history if log and log.get("date") and log["date"] < day]
    for log in sorted(prior, key=lambda l: l["date"], reverse=True):
        weight = _weight_of(log)
        if weight is not None:
            return weight
    return None


def from_profile(day, day_log, profile, history) -> Optional[float]:
    return _weight_of(profile)


WEIGHT_CHAIN: List[WeightResolver] = [from_day_log, from_prior_logs, from_profile]


def resolve_current_weight(
    day: Any,
    day_log: Optional[Mapping],
    profile: Optional[Mapping],
    history: Optional[Iterable[Mapping]] = None,
    chain: Optional[List[WeightResolver]] = None,
) -> Optional[float]:
    """First defined weight from the chain, or None."""
    day_key = normalize(day)
    history = list(history) if history is not None else None
    for resolver in chain or WEIGHT_CHAIN:
        weight = resolver(day_key, day_log, profile, history)
        if weight is not None:
            return weight
    return None


def weight_series(
    start: Any,
    end: Any,
    logs: Iterable[Mapping],
    default_weight: Optional[float] = None,
) -> List[Dict[str, Any]]:
    """
    One point per day from start to end, oldest first.

    Days without a logged weight carry the latest earlier measurement
    forward; days before the first measurement use default_weight. Days
    that still have no value are left out.
    """
    by_day = {log["date"]: _weight_of(log) for log in logs if log and log.get("date")}

    points = []
    last_known = None
    for day in day_range(start, end):
        measured = by_day.get(day)
        if measured is not None:
            last_known = measured
            points.append({"date": day, "weight": measured, "measured": True})
            continue
        carried = last_known if last_known is not None else default_weight
        if carried is not None:
            points.append({"date": day, "weight": carried, "measured": False})
    return points


def weight_trend(series: List[Mapping[str, Any]]) -> Dict[str, Any]:
    if not series:
        return {"start": None, "end": None, "change": 0.0, "trend": Trend.NEUTRAL.value}

    start_weight = series[0]["weight"]
    end_weight = series[-1]["weight"]
    change = end_weight - start_weight
    if change < 0:
        trend = Trend.DOWN
    elif change > 0:
        trend = Trend.UP
    else:
        trend = Trend.NEUTRAL
    return {
        "start": start_weight,
        "end": end_weight,
        "change": round(abs(change), 2),
        "trend": trend.value,
    }
