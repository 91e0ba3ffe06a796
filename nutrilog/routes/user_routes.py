from flask import Blueprint
from nutrilog.utils.auth import require_auth
from nutrilog.controllers.user_controller import (
    get_profile_handler,
    update_profile_handler,
    weight_history_handler,
)

user_bp = Blueprint("user", __name__, url_prefix="/api/users")

@user_bp.get("/me")
@require_auth
def get_profile():
    return get_profile_handler()


@user_bp.put("/me")
@require_auth
def update_profile():
    return update_profile_handler()


@user_bp.get("/me/weight-history")
@require_auth
def weight_history():
    return weight_history_handler()
