from nutrilog.extensions import db

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False, default="")
    birth_date = db.Column(db.Date)
    age = db.Column(db.Integer)
    weight = db.Column(db.Float)
    height = db.Column(db.Float)
    gender = db.Column(db.String(10))
    activity_level = db.Column(db.String(30))
    daily_calories = db.Column(db.Integer)
    daily_protein = db.Column(db.Float)
    daily_carbs = db.Column(db.Float)
    daily_fat = db.Column(db.Float)
    daily_water = db.Column(db.Float)
    weight_goal = db.Column(db.Float)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now(), nullable=False)
