from flask import current_app, request
from marshmallow import ValidationError, RAISE

from nutrilog.schemas.profile_schema import ProfileUpdateSchema
from nutrilog.services.weight_service import resolve_current_weight, weight_series, weight_trend
from nutrilog.utils.dates import shift_day, today
from nutrilog.utils.errors import ProfileNotFound, TransientStoreError
from nutrilog.utils.http import ok, error, json_body, arg_int, validation_error, store_unavailable

# Earlier logs consulted for the weight carried into the first day of a series
CARRY_IN_DAYS = 90


def _engine():
    return current_app.extensions["nutrilog"]


def get_profile_handler():
    try:
        profile = _engine()["profiles"].get_profile(request.user_id)
    except ProfileNotFound as e:
        return error("PROFILE_NOT_FOUND", str(e), 404)
    except TransientStoreError as e:
        return store_unavailable(e)
    return ok(profile)


def update_profile_handler():
    """Upsert the caller's profile; fields not in the body keep their stored value."""
    user_id = request.user_id
    body = json_body()
    body.pop("id", None)

    try:
        ProfileUpdateSchema().load(body, unknown=RAISE)
    except ValidationError as e:
        return validation_error(e)

    profiles = _engine()["profiles"]
    try:
        profiles.save_profile(user_id, body)
        profile = profiles.get_profile(user_id)
    except TransientStoreError as e:
        return store_unavailable(e)

    return ok(profile)


def weight_history_handler():
    user_id = request.user_id
    days = arg_int("days", 30, min_value=1, max_value=365)
    end = today()
    start = shift_day(end, -(days - 1))

    engine = _engine()
    try:
        logs = engine["logs"].list_range(user_id, start, end)
        earlier = engine["logs"].list_range(user_id, shift_day(start, -CARRY_IN_DAYS), shift_day(start, -1))
        try:
            profile = engine["profiles"].get_profile(user_id)
        except ProfileNotFound:
            profile = None
    except TransientStoreError as e:
        return store_unavailable(e)

    series = weight_series(start, end, logs, default_weight=resolve_current_weight(start, None, profile, earlier))
    today_log = next((log for log in logs if log["date"] == end), None)
    return ok({
        "start": start,
        "end": end,
        "points": series,
        "trend": weight_trend(series),
        "currentWeight": resolve_current_weight(end, today_log, profile, earlier + logs),
    })
