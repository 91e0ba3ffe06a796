"""
Nutrition Service

Reduces a day's food entries into nutrient totals. Entries arrive from
clients and older rows in every shape imaginable, so the reduction is
total: an entry without usable nutrition data contributes nothing and the
remaining entries are still summed.
"""

import logging
import math
from typing import Any, Dict, Iterable, Mapping, Optional

from nutrilog.utils.enums import MEAL_TYPES

logger = logging.getLogger(__name__)

MACROS = ["protein", "carbs", "fat"]
TOTAL_KEYS = ["calories", "protein", "carbs", "fat", "water"]

# Goal key for every totals key
GOAL_KEYS = {
    "calories": "dailyCalories",
    "protein": "dailyProtein",
    "carbs": "dailyCarbs",
    "fat": "dailyFat",
    "water": "dailyWater",
}


def _finite_number(value: Any) -> Optional[float]:
    """Return value as float when it is a real, finite number; else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def empty_totals() -> Dict[str, float]:
    return {key: 0.0 for key in TOTAL_KEYS}


def entry_calories(entry: Any) -> Optional[float]:
    """Calories per reference serving, or None when the entry is unusable."""
    if not isinstance(entry, Mapping):
        return None
    food_item = entry.get("foodItem")
    if not isinstance(food_item, Mapping):
        return None
    nutrition = food_item.get("nutrition")
    if not isinstance(nutrition, Mapping):
        return None
    return _finite_number(nutrition.get("calories"))


def is_valid_entry(entry: Any) -> bool:
    """Entry has a food item with nutrition and a finite calorie value."""
    return entry_calories(entry) is not None


def serving_factor(entry: Mapping) -> float:
    """
    Multiplier relative to the 100-unit reference serving.

    A missing, non-numeric or zero servingAmount counts as one reference
    serving. Negative amounts are passed through unchanged.
    """
    amount = _finite_number(entry.get("servingAmount"))
    if not amount:
        return 1.0
    return amount / 100.0


def entry_totals(entry: Any) -> Dict[str, float]:
    """Contribution of a single entry; zeros when the entry is invalid."""
    totals = empty_totals()
    calories = entry_calories(entry)
    if calories is None:
        return totals

    factor = serving_factor(entry)
    nutrition = entry["foodItem"]["nutrition"]
    totals["calories"] = calories * factor
    for key in MACROS:
        totals[key] = (_finite_number(nutrition.get(key)) or 0.0) * factor
    return totals


def aggregate(entries: Iterable[Any], water_intake: Any = 0) -> Dict[str, float]:
    """
    Sum nutrient totals over a day's food entries.

    Args:
        entries: Food entries of one day
        water_intake: The day's waterIntake, passed through unchanged

    Returns:
        Dictionary with calories, protein, carbs, fat and water

    Raises:
        TypeError: If entries is None
    """
    if entries is None:
        raise TypeError("aggregate() requires a list of food entries, got None")

    totals = empty_totals()
    for index, entry in enumerate(entries):
        if not is_valid_entry(entry):
            logger.debug("Skipping food entry %d without usable nutrition data", index)
            continue
        contribution = entry_totals(entry)
        for key in ("calories", "protein", "carbs", "fat"):
            totals[key] += contribution[key]

    totals["water"] = water_intake if water_intake is not None else 0
    return totals


def aggregate_log(log: Optional[Mapping]) -> Dict[str, float]:
    if not log:
        return empty_totals()
    return aggregate(log.get("foodEntries") or [], log.get("waterIntake"))


def aggregate_by_meal(entries: Iterable[Any]) -> Dict[str, Dict[str, float]]:
    """Totals per meal type; every meal bucket is present, water is always 0."""
    if entries is None:
        raise TypeError("aggregate_by_meal() requires a list of food entries, got None")

    grouped: Dict[str, list] = {meal: [] for meal in MEAL_TYPES}
    for entry in entries:
        meal_type = entry.get("mealType") if isinstance(entry, Mapping) else None
        if meal_type not in grouped:
            logger.debug("Food entry with unknown meal type %r left out of meal totals", meal_type)
            continue
        grouped[meal_type].append(entry)

    return {meal: aggregate(items, 0) for meal, items in grouped.items()}


def compare_to_goals(totals: Mapping[str, Any], goals: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Progress of each total against the matching daily goal."""
    progress = {}
    for key, goal_key in GOAL_KEYS.items():
        consumed = _finite_number(totals.get(key)) or 0.0
        target = _finite_number(goals.get(goal_key)) if goals else None
        has_target = target is not None and target > 0
        progress[key] = {
            "consumed": consumed,
            "target": target,
            "remaining": max(0.0, target - consumed) if has_target else None,
            "percent": round(consumed / target * 100, 1) if has_target else None,
        }
    return progress
