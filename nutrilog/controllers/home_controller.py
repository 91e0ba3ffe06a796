from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from nutrilog.extensions import db
from nutrilog.utils.dates import today


def health_check():
    db_status = "healthy"
    try:
        # Ping the database
        db.session.execute(db.text("SELECT 1"))
    except SQLAlchemyError as e:
        current_app.logger.error("Health check database ping failed: %s", e)
        db_status = f"unhealthy: {str(e)}"

    return jsonify({
        "status": "online",
        "database": db_status,
        "today": today(),
    })
