from flask import Blueprint
from nutrilog.controllers.home_controller import health_check

home_bp = Blueprint("home", __name__)

@home_bp.get("/api/health")
def health():
    return health_check()
