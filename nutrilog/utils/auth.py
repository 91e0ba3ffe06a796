from functools import wraps
from flask import request, jsonify, current_app
import jwt


def decode_token(token: str):
    return jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])


def require_auth(f):
    """Accept a Bearer token issued by the auth service; sets request.user_id."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return jsonify({"error": {"code": "UNAUTHORIZED", "message": "Missing Bearer token"}}), 401
        token = auth_header.split(" ", 1)[1]
        try:
            payload = decode_token(token)
            request.user_id = str(payload["sub"])  # type: ignore
        except (jwt.InvalidTokenError, KeyError):
            return jsonify({"error": {"code": "UNAUTHORIZED", "message": "Invalid token"}}), 401
        return f(*args, **kwargs)
    return wrapper

__all__ = ["decode_token", "require_auth"]
