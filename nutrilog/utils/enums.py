from enum import Enum

class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"

class SyncState(str, Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"
    MUTATED = "mutated"

class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"

MEAL_TYPES = [e.value for e in MealType]
