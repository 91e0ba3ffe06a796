from typing import Any, Dict

from marshmallow import Schema, fields, validate, pre_load, RAISE

from nutrilog.schemas.log_schema import validate_day_key

GENDERS = ["male", "female", "divers"]
ACTIVITY_LEVELS = ["sedentary", "lightly_active", "moderately_active", "very_active", "extremely_active"]


class GoalsSchema(Schema):
    daily_calories = fields.Float(allow_none=True, data_key="dailyCalories")
    daily_protein = fields.Float(allow_none=True, data_key="dailyProtein")
    daily_carbs = fields.Float(allow_none=True, data_key="dailyCarbs")
    daily_fat = fields.Float(allow_none=True, data_key="dailyFat")
    daily_water = fields.Float(allow_none=True, data_key="dailyWater")


class UserProfileSchema(Schema):
    id = fields.Str(required=True, validate=validate.Length(min=1, max=36))
    name = fields.Str(allow_none=True)
    birth_date = fields.Str(allow_none=True, data_key="birthDate", validate=validate_day_key)
    age = fields.Int(allow_none=True, validate=validate.Range(min=0, max=150))
    weight = fields.Float(allow_none=True, validate=validate.Range(min=0))
    height = fields.Float(allow_none=True, validate=validate.Range(min=0))
    gender = fields.Str(allow_none=True, validate=validate.OneOf(GENDERS))
    activity_level = fields.Str(allow_none=True, data_key="activityLevel", validate=validate.OneOf(ACTIVITY_LEVELS))
    goals = fields.Nested(GoalsSchema, allow_none=True)
    weight_goal = fields.Float(allow_none=True, data_key="weightGoal")

    @pre_load
    def trim_birth_date(self, data, **kwargs):
        # Clients have sent full timestamps ("1990-05-17T00:00:00.000Z")
        birth_date = data.get("birthDate") if isinstance(data, dict) else None
        if isinstance(birth_date, str) and "T" in birth_date:
            data = dict(data)
            data["birthDate"] = birth_date.split("T", 1)[0]
        return data


class ProfileUpdateSchema(UserProfileSchema):
    # id comes from the token on PUT /users/me
    id = fields.Str(validate=validate.Length(min=1, max=36))


def profile_to_storage(profile: Dict[str, Any]) -> Dict[str, Any]:
    return UserProfileSchema().load(profile, unknown=RAISE)


def profile_from_storage(row: Dict[str, Any]) -> Dict[str, Any]:
    return UserProfileSchema().dump(row)
