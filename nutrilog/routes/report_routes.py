from flask import Blueprint
from nutrilog.utils.auth import require_auth
from nutrilog.controllers.report_controller import nutrition_report_handler

report_bp = Blueprint("report", __name__, url_prefix="/api/reports")

@report_bp.get("/nutrition")
@require_auth
def nutrition_report():
    return nutrition_report_handler()
