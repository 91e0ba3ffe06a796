from flask import Flask
from flask_migrate import Migrate

from nutrilog.extensions import db, cors
from nutrilog.routes import register_routes
from nutrilog.models.user import User
from nutrilog.models.user_goal import UserGoal
from nutrilog.models.food_item import FoodItem
from nutrilog.models.daily_log import DailyLog, FoodEntry
from nutrilog.repositories.sql_repository import SqlLogRepository, SqlProfileStore
from nutrilog.services.settings import EngineSettings
from nutrilog.utils.dates import set_default_timezone
from nutrilog.utils.session import SessionState

# Process-wide: the default timezone is module state shared by every app
process_session = SessionState()


def create_app(config_object="config.Config"):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Initialize database
    db.init_app(app)

    # Initialize Flask-Migrate
    Migrate(app, db)

    # CORS Configuration
    cors.init_app(app,
                  origins=app.config.get("CORS_ORIGINS") or [],
                  supports_credentials=True,
                  allow_headers=["Content-Type", "Authorization"],
                  methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                  expose_headers=["Content-Type", "Authorization"])

    settings = EngineSettings.from_config(app.config)
    process_session.run_once("default_timezone", lambda: set_default_timezone(settings.timezone))

    app.extensions["nutrilog"] = {
        "settings": settings,
        "session": process_session,
        "logs": SqlLogRepository(app),
        "profiles": SqlProfileStore(app),
    }

    register_routes(app)

    return app
