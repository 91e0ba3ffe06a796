from typing import Any, Dict, Optional
from flask import current_app, request, jsonify
from marshmallow import ValidationError

def ok(payload: Any, status: int = 200):
    return jsonify(payload), status


def error(code: str, message: str, status: int = 400, **extra):
    body: Dict[str, Any] = {"error": {"code": code, "message": message}}
    if extra:
        body["error"].update(extra)
    return jsonify(body), status


def validation_error(exc: ValidationError):
    return error("VALIDATION_ERROR", "Invalid input", 400, fields=exc.messages)


def store_unavailable(exc: Exception):
    current_app.logger.error("Store unavailable: %s", exc)
    return error("STORE_UNAVAILABLE", "Storage is temporarily unavailable", 503)

def json_body() -> Dict[str, Any]:
    # force=True allows a missing Content-Type header; non-object bodies count as empty
    data = request.get_json(force=True, silent=True)
    if isinstance(data, dict):
        return data
    return {}


def arg_int(name: str, default: int, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    try:
        v = int(request.args.get(name, default))
    except (TypeError, ValueError):
        v = default
    if min_value is not None:
        v = max(min_value, v)
    if max_value is not None:
        v = min(max_value, v)
    return v
