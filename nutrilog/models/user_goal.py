import uuid

from nutrilog.extensions import db

class UserGoal(db.Model):
    __tablename__ = "user_goals"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    goal_type_id = db.Column(db.String(36))
    is_custom = db.Column(db.Boolean, nullable=False, default=False)
    daily_calories = db.Column(db.Integer)
    daily_protein = db.Column(db.Float)
    daily_carbs = db.Column(db.Float)
    daily_fat = db.Column(db.Float)
    daily_water = db.Column(db.Float)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now(), nullable=False)
