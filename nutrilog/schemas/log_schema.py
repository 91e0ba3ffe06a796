"""
Daily log mapping

Attribute names are the persisted (snake_case) names, data_keys are the
camelCase names the engine and the API use. load() maps engine -> storage,
dump() maps storage -> engine. Unknown keys are rejected rather than
dropped so no field disappears silently across the boundary.
"""

from typing import Any, Dict

from marshmallow import Schema, fields, validate, validates_schema, ValidationError, RAISE

from nutrilog.utils.dates import is_day_key, parse_timestamp
from nutrilog.utils.enums import MEAL_TYPES


def validate_day_key(value: str) -> None:
    if not is_day_key(value):
        raise ValidationError("Expected a calendar day in YYYY-MM-DD format")


def validate_timestamp(value: str) -> None:
    try:
        parse_timestamp(value)
    except ValueError:
        raise ValidationError("Expected an ISO-8601 timestamp")


class NutritionSchema(Schema):
    calories = fields.Float(allow_none=True)
    protein = fields.Float(allow_none=True)
    carbs = fields.Float(allow_none=True)
    fat = fields.Float(allow_none=True)
    sugar = fields.Float(allow_none=True)
    fiber = fields.Float(allow_none=True)
    sodium = fields.Float(allow_none=True)
    potassium = fields.Float(allow_none=True)
    serving_size = fields.Str(allow_none=True, data_key="servingSize")
    serving_size_grams = fields.Float(allow_none=True, data_key="servingSizeGrams")


class FoodItemSchema(Schema):
    id = fields.Str(required=True, validate=validate.Length(min=1, max=36))
    name = fields.Str(required=True, validate=validate.Length(min=1))
    brand = fields.Str(allow_none=True)
    barcode = fields.Str(allow_none=True)
    nutrition = fields.Nested(NutritionSchema, allow_none=True, load_default=None)
    image = fields.Str(allow_none=True)


class FoodEntrySchema(Schema):
    id = fields.Str(required=True, validate=validate.Length(min=1, max=36))
    food_item = fields.Nested(FoodItemSchema, allow_none=True, load_default=None, data_key="foodItem")
    serving_amount = fields.Float(allow_none=True, load_default=None, data_key="servingAmount")
    meal_type = fields.Str(required=True, data_key="mealType", validate=validate.OneOf(MEAL_TYPES))
    time_consumed = fields.Str(required=True, data_key="timeConsumed", validate=validate_timestamp)


class DailyLogSchema(Schema):
    date = fields.Str(required=True, validate=validate_day_key)
    food_entries = fields.List(fields.Nested(FoodEntrySchema), load_default=list, data_key="foodEntries")
    water_intake = fields.Float(load_default=0.0, data_key="waterIntake", validate=validate.Range(min=0))
    weight = fields.Float(allow_none=True, load_default=None, validate=validate.Range(min=0))
    daily_notes = fields.Str(allow_none=True, load_default=None, data_key="dailyNotes")
    is_cheat_day = fields.Bool(load_default=False, data_key="isCheatDay")

    @validates_schema
    def validate_unique_entry_ids(self, data, **kwargs):
        ids = [entry["id"] for entry in data.get("food_entries") or []]
        if len(ids) != len(set(ids)):
            raise ValidationError("Duplicate food entry id", field_name="foodEntries")


class LogRangeQuerySchema(Schema):
    start = fields.Str(allow_none=True, load_default=None, validate=validate_day_key)
    end = fields.Str(allow_none=True, load_default=None, validate=validate_day_key)


def log_to_storage(log: Dict[str, Any]) -> Dict[str, Any]:
    """Engine (camelCase) daily log -> storage row dict. Raises ValidationError."""
    return DailyLogSchema().load(log, unknown=RAISE)


def log_from_storage(row: Dict[str, Any]) -> Dict[str, Any]:
    """Storage row dict -> engine (camelCase) daily log."""
    return DailyLogSchema().dump(row)


def empty_log(day: str) -> Dict[str, Any]:
    return {
        "date": day,
        "foodEntries": [],
        "waterIntake": 0,
        "weight": None,
        "dailyNotes": None,
        "isCheatDay": False,
    }
