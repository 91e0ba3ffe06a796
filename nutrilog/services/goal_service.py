"""
Goal Service

Daily targets come from the first source that has a numeric calorie goal:
the user's active goal, then the goals kept on the profile, then the
configured defaults.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

GOAL_FIELDS = ["dailyCalories", "dailyProtein", "dailyCarbs", "dailyFat", "dailyWater"]

GoalSource = Callable[[], Optional[Mapping[str, Any]]]


def _usable(goals: Optional[Mapping[str, Any]]) -> bool:
    if not goals:
        return False
    calories = goals.get("dailyCalories")
    return isinstance(calories, (int, float)) and not isinstance(calories, bool)


def resolve_goals(sources: List[GoalSource], defaults: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Walk goal sources in order and return the first usable one.

    Missing optional targets of the chosen source are filled from defaults
    so the result always has every goal field.
    """
    for source in sources:
        goals = source()
        if _usable(goals):
            return {
                field: goals.get(field) if goals.get(field) is not None else defaults.get(field)
                for field in GOAL_FIELDS
            }
    return {field: defaults.get(field) for field in GOAL_FIELDS}


def goals_for_user(active_goal: Optional[Mapping], profile: Optional[Mapping], defaults: Mapping) -> Dict[str, Any]:
    return resolve_goals(
        [
            lambda: active_goal,
            lambda: (profile or {}).get("goals"),
        ],
        defaults,
    )


def default_goals_from_config(config: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "dailyCalories": config.get("DEFAULT_DAILY_CALORIES", 2000),
        "dailyProtein": config.get("DEFAULT_DAILY_PROTEIN", 50.0),
        "dailyCarbs": config.get("DEFAULT_DAILY_CARBS", 250.0),
        "dailyFat": config.get("DEFAULT_DAILY_FAT", 70.0),
        "dailyWater": config.get("DEFAULT_DAILY_WATER", 2000.0),
    }
