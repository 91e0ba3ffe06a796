from flask import Blueprint
from nutrilog.utils.auth import require_auth
from nutrilog.controllers.daily_log_controller import (
    list_logs_handler,
    get_log_handler,
    save_log_handler,
    log_summary_handler,
)

daily_log_bp = Blueprint("daily_log", __name__, url_prefix="/api/daily-logs")

@daily_log_bp.get("")
@require_auth
def list_logs():
    return list_logs_handler()


@daily_log_bp.post("")
@require_auth
def save_log():
    return save_log_handler()


@daily_log_bp.get("/<day>")
@require_auth
def get_log(day):
    return get_log_handler(day)


@daily_log_bp.get("/<day>/summary")
@require_auth
def log_summary(day):
    return log_summary_handler(day)
