from flask import current_app, request
from marshmallow import ValidationError, EXCLUDE

from nutrilog.schemas.log_schema import LogRangeQuerySchema
from nutrilog.services.report_service import build_report
from nutrilog.utils.dates import shift_day, today
from nutrilog.utils.errors import TransientStoreError
from nutrilog.utils.http import ok, error, validation_error, store_unavailable

DEFAULT_REPORT_DAYS = 7


def nutrition_report_handler():
    try:
        query = LogRangeQuerySchema().load(request.args.to_dict(), unknown=EXCLUDE)
    except ValidationError as e:
        return validation_error(e)

    end = query["end"] or today()
    start = query["start"] or shift_day(end, -(DEFAULT_REPORT_DAYS - 1))
    if start > end:
        return error("VALIDATION_ERROR", "start must not be after end", 400)

    try:
        logs = current_app.extensions["nutrilog"]["logs"].list_range(request.user_id, start, end)
    except TransientStoreError as e:
        return store_unavailable(e)

    return ok(build_report(logs, start, end))
