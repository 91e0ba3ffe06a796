from nutrilog.extensions import db

class DailyLog(db.Model):
    __tablename__ = "daily_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    water_intake = db.Column(db.Float, nullable=False, default=0)
    weight = db.Column(db.Float)
    daily_notes = db.Column(db.Text)
    is_cheat_day = db.Column(db.Boolean, nullable=False, default=False)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now(), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("user_id", "date", name="uk_daily_log_user_date"),
    )


class FoodEntry(db.Model):
    __tablename__ = "food_entries"

    id = db.Column(db.String(36), primary_key=True)
    daily_log_id = db.Column(db.Integer, db.ForeignKey("daily_logs.id", ondelete="CASCADE"), nullable=False, index=True)
    food_item_id = db.Column(db.String(36), db.ForeignKey("food_items.id"), nullable=True)
    serving_amount = db.Column(db.Float)
    meal_type = db.Column(db.String(20), nullable=False)
    # Stored verbatim as ISO-8601 text so no timezone conversion happens at rest
    time_consumed = db.Column(db.String(40), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
