from dotenv import load_dotenv
import os

load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///nutrilog.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:8081").split(",")
        if origin.strip()
    ]

    # Calendar days are keyed in this zone ("user-local" for the server)
    NUTRILOG_TIMEZONE = os.getenv("NUTRILOG_TIMEZONE", "UTC")

    # Streak walk is bounded as a cost control; set to -1 for no bound
    STREAK_MAX_LOOKBACK_DAYS = int(os.getenv("STREAK_MAX_LOOKBACK_DAYS", "30"))

    # Minimum gap between two "set water" requests for the same day
    WATER_SET_MIN_INTERVAL_MS = int(os.getenv("WATER_SET_MIN_INTERVAL_MS", "500"))

    # Goal fallbacks when neither an active goal nor profile goals exist
    DEFAULT_DAILY_CALORIES = 2000
    DEFAULT_DAILY_PROTEIN = 50.0
    DEFAULT_DAILY_CARBS = 250.0
    DEFAULT_DAILY_FAT = 70.0
    DEFAULT_DAILY_WATER = 2000.0


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    NUTRILOG_TIMEZONE = "Europe/Berlin"
    WATER_SET_MIN_INTERVAL_MS = 500
