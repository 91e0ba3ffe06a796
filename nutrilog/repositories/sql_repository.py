"""
SQL Storage

Flask-SQLAlchemy backed implementations of the storage boundary. Each call
runs in its own app context so the stores can be used from request
handlers and from worker threads alike. Database errors are rolled back
and re-raised as TransientStoreError.
"""

import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from nutrilog.extensions import db
from nutrilog.models.daily_log import DailyLog, FoodEntry
from nutrilog.models.food_item import FoodItem
from nutrilog.models.user import User
from nutrilog.models.user_goal import UserGoal
from nutrilog.repositories.base import LogRepository, ProfileStore
from nutrilog.schemas.log_schema import log_from_storage, log_to_storage
from nutrilog.schemas.profile_schema import profile_from_storage, profile_to_storage
from nutrilog.utils.errors import LogNotFound, ProfileNotFound, TransientStoreError

logger = logging.getLogger(__name__)

NUTRITION_COLUMNS = [
    "calories", "protein", "carbs", "fat", "sugar", "fiber",
    "sodium", "potassium", "serving_size", "serving_size_grams",
]
GOAL_COLUMNS = ["daily_calories", "daily_protein", "daily_carbs", "daily_fat", "daily_water"]
PROFILE_COLUMNS = ["name", "age", "weight", "height", "gender", "activity_level", "weight_goal"]


class _SqlStore:

    def __init__(self, app):
        self.app = app

    @contextmanager
    def _session(self, operation: str):
        with self.app.app_context():
            try:
                yield db.session
            except SQLAlchemyError as exc:
                db.session.rollback()
                logger.error("Database error during %s: %s", operation, exc)
                raise TransientStoreError(f"STORE_UNAVAILABLE: {operation} failed") from exc


def _food_item_row(item: Optional[FoodItem]) -> Optional[Dict[str, Any]]:
    if item is None:
        return None
    nutrition = {column: getattr(item, column) for column in NUTRITION_COLUMNS}
    return {
        "id": item.id,
        "name": item.name,
        "brand": item.brand,
        "barcode": item.barcode,
        "nutrition": nutrition if any(v is not None for v in nutrition.values()) else None,
        "image": item.image,
    }


class SqlLogRepository(_SqlStore, LogRepository):

    def fetch_by_day(self, user_id: str, day: str) -> Dict[str, Any]:
        day_value = date.fromisoformat(day)
        with self._session("fetch"):
            log = DailyLog.query.filter_by(user_id=user_id, date=day_value).first()
            if not log:
                raise LogNotFound(user_id, day)
            return log_from_storage(self._rows_for([log])[0])

    def list_range(self, user_id: str, start_day: str, end_day: str) -> List[Dict[str, Any]]:
        start = date.fromisoformat(start_day)
        end = date.fromisoformat(end_day)
        with self._session("list_range"):
            logs = (
                DailyLog.query
                .filter(DailyLog.user_id == user_id)
                .filter(DailyLog.date >= start)
                .filter(DailyLog.date <= end)
                .order_by(DailyLog.date.asc())
                .all()
            )
            return [log_from_storage(row) for row in self._rows_for(logs)]

    def save(self, user_id: str, log: Dict[str, Any]) -> None:
        row = log_to_storage(log)
        day_value = date.fromisoformat(row["date"])

        with self._session("save"):
            daily_log = DailyLog.query.filter_by(user_id=user_id, date=day_value).first()
            if not daily_log:
                daily_log = DailyLog(user_id=user_id, date=day_value)
                db.session.add(daily_log)

            daily_log.water_intake = row["water_intake"]
            daily_log.weight = row["weight"]
            daily_log.daily_notes = row["daily_notes"]
            daily_log.is_cheat_day = row["is_cheat_day"]
            db.session.flush()

            # Replace children of the parent: delete by daily_log_id, then bulk insert
            FoodEntry.query.filter_by(daily_log_id=daily_log.id).delete(synchronize_session=False)

            entries = sorted(row["food_entries"], key=lambda e: e["time_consumed"])
            for position, entry in enumerate(entries):
                item = entry.get("food_item")
                if item:
                    self._ensure_food_item(item)
                db.session.add(FoodEntry(
                    id=entry["id"],
                    daily_log_id=daily_log.id,
                    food_item_id=item["id"] if item else None,
                    serving_amount=entry.get("serving_amount"),
                    meal_type=entry["meal_type"],
                    time_consumed=entry["time_consumed"],
                    position=position,
                ))

            db.session.commit()
            logger.debug("Saved daily log %s for %s with %d entries", row["date"], user_id, len(entries))

    def _ensure_food_item(self, item: Dict[str, Any]) -> None:
        """Add a catalog row for an unknown item id; existing rows are never rewritten by a log save."""
        if db.session.get(FoodItem, item["id"]) is not None:
            return
        nutrition = item.get("nutrition") or {}
        db.session.add(FoodItem(
            id=item["id"],
            name=item["name"],
            brand=item.get("brand"),
            barcode=item.get("barcode"),
            image=item.get("image"),
            **{column: nutrition.get(column) for column in NUTRITION_COLUMNS},
        ))
        # Later entries of the same save must see the new row
        db.session.flush()

    def _rows_for(self, logs: List[DailyLog]) -> List[Dict[str, Any]]:
        log_ids = [log.id for log in logs]
        entries = (
            FoodEntry.query
            .filter(FoodEntry.daily_log_id.in_(log_ids or [0]))
            .order_by(FoodEntry.position.asc())
            .all()
        )
        item_ids = {e.food_item_id for e in entries if e.food_item_id}
        items = {
            item.id: item
            for item in FoodItem.query.filter(FoodItem.id.in_(list(item_ids) or [""])).all()
        }

        entries_by_log: Dict[int, List[FoodEntry]] = {}
        for entry in entries:
            entries_by_log.setdefault(entry.daily_log_id, []).append(entry)

        return [
            {
                "date": log.date.isoformat(),
                "food_entries": [
                    {
                        "id": entry.id,
                        "food_item": _food_item_row(items.get(entry.food_item_id)),
                        "serving_amount": entry.serving_amount,
                        "meal_type": entry.meal_type,
                        "time_consumed": entry.time_consumed,
                    }
                    for entry in entries_by_log.get(log.id, [])
                ],
                "water_intake": log.water_intake or 0,
                "weight": log.weight,
                "daily_notes": log.daily_notes,
                "is_cheat_day": bool(log.is_cheat_day),
            }
            for log in logs
        ]


class SqlProfileStore(_SqlStore, ProfileStore):

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        with self._session("get_profile"):
            user = db.session.get(User, user_id)
            if not user:
                raise ProfileNotFound(user_id)
            row = {column: getattr(user, column) for column in PROFILE_COLUMNS}
            row["id"] = user.id
            row["birth_date"] = user.birth_date.isoformat() if user.birth_date else None
            row["goals"] = {column: getattr(user, column) for column in GOAL_COLUMNS}
            return profile_from_storage(row)

    def save_profile(self, user_id: str, profile: Dict[str, Any]) -> None:
        incoming = profile_to_storage({**profile, "id": user_id})

        with self._session("save_profile"):
            user = db.session.get(User, user_id)
            if not user:
                user = User(id=user_id, name=incoming.get("name") or "")
                db.session.add(user)

            # Only fields present in the payload are written
            for column in PROFILE_COLUMNS:
                if column in incoming:
                    setattr(user, column, incoming[column])
            if "birth_date" in incoming:
                birth_date = incoming["birth_date"]
                user.birth_date = date.fromisoformat(birth_date) if birth_date else None
            for column, value in (incoming.get("goals") or {}).items():
                setattr(user, column, value)
            if user.name is None:
                user.name = ""

            db.session.commit()

    def get_active_goal(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._session("get_active_goal"):
            goal = (
                UserGoal.query
                .filter_by(user_id=user_id)
                .order_by(UserGoal.updated_at.desc())
                .first()
            )
            if not goal:
                return None
            return {
                "dailyCalories": goal.daily_calories,
                "dailyProtein": goal.daily_protein,
                "dailyCarbs": goal.daily_carbs,
                "dailyFat": goal.daily_fat,
                "dailyWater": goal.daily_water,
            }
