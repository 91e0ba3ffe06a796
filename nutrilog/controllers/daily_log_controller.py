"""
Daily Log Controller

Remote-store endpoints for daily logs: list a range, read one day, full
upsert of one day, and the derived summary of a day (totals, per-meal
totals, goal progress, streak and current weight).
"""

from typing import Any, Dict

from flask import current_app, request
from marshmallow import ValidationError, EXCLUDE

from nutrilog.schemas.log_schema import LogRangeQuerySchema, empty_log, validate_day_key
from nutrilog.services.goal_service import goals_for_user
from nutrilog.services.nutrition_service import aggregate_by_meal, aggregate_log, compare_to_goals
from nutrilog.services.streak_service import streak_from_repository
from nutrilog.services.weight_service import resolve_current_weight
from nutrilog.utils.dates import normalize, shift_day, today
from nutrilog.utils.errors import LogNotFound, ProfileNotFound, TransientStoreError
from nutrilog.utils.http import ok, error, json_body, validation_error, store_unavailable

# Default range for GET /daily-logs without a start
DEFAULT_RANGE_DAYS = 7

# How far back the summary looks for the last logged weight
WEIGHT_LOOKBACK_DAYS = 90


def _engine() -> Dict[str, Any]:
    return current_app.extensions["nutrilog"]


def _check_day(day: str):
    try:
        validate_day_key(day)
    except ValidationError as e:
        return validation_error(ValidationError({"date": e.messages}))
    return None


def list_logs_handler():
    try:
        query = LogRangeQuerySchema().load(request.args.to_dict(), unknown=EXCLUDE)
    except ValidationError as e:
        return validation_error(e)

    end = query["end"] or today()
    start = query["start"] or shift_day(end, -(DEFAULT_RANGE_DAYS - 1))
    if start > end:
        return error("VALIDATION_ERROR", "start must not be after end", 400)

    try:
        logs = _engine()["logs"].list_range(request.user_id, start, end)
    except TransientStoreError as e:
        return store_unavailable(e)

    return ok({"start": start, "end": end, "logs": logs})


def get_log_handler(day: str):
    invalid = _check_day(day)
    if invalid:
        return invalid

    try:
        log = _engine()["logs"].fetch_by_day(request.user_id, day)
    except LogNotFound as e:
        return error("LOG_NOT_FOUND", str(e), 404)
    except TransientStoreError as e:
        return store_unavailable(e)

    return ok(log)


def save_log_handler():
    body = json_body()
    # Any date-like value is accepted and keyed by the local calendar day
    body["date"] = normalize(body.get("date"))

    repository = _engine()["logs"]
    try:
        repository.save(request.user_id, body)
        saved = repository.fetch_by_day(request.user_id, body["date"])
    except ValidationError as e:
        return validation_error(e)
    except TransientStoreError as e:
        return store_unavailable(e)

    current_app.logger.info(
        "Saved daily log %s for user %s (%d entries)",
        saved["date"], request.user_id, len(saved["foodEntries"]),
    )
    return ok(saved)


def log_summary_handler(day: str):
    invalid = _check_day(day)
    if invalid:
        return invalid

    engine = _engine()
    settings = engine["settings"]
    repository = engine["logs"]
    profiles = engine["profiles"]
    user_id = request.user_id

    try:
        try:
            log = repository.fetch_by_day(user_id, day)
            exists = True
        except LogNotFound:
            log = empty_log(day)
            exists = False

        try:
            profile = profiles.get_profile(user_id)
        except ProfileNotFound:
            profile = None

        goals = goals_for_user(profiles.get_active_goal(user_id), profile, settings.default_goals)
        history = repository.list_range(user_id, shift_day(day, -WEIGHT_LOOKBACK_DAYS), shift_day(day, -1))
        streak = streak_from_repository(repository, user_id, day, settings.streak_max_lookback)
    except TransientStoreError as e:
        return store_unavailable(e)

    totals = aggregate_log(log)
    return ok({
        "date": day,
        "exists": exists,
        "isCheatDay": bool(log.get("isCheatDay")),
        "totals": totals,
        "byMeal": aggregate_by_meal(log["foodEntries"]),
        "goals": goals,
        "progress": compare_to_goals(totals, goals),
        "streak": streak,
        "currentWeight": resolve_current_weight(day, log, profile, history),
    })
