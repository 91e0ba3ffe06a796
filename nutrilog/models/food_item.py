from nutrilog.extensions import db

class FoodItem(db.Model):
    """Nutrition facts per 100 serving units."""
    __tablename__ = "food_items"

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    brand = db.Column(db.String(255))
    barcode = db.Column(db.String(100))
    calories = db.Column(db.Float)
    protein = db.Column(db.Float)
    carbs = db.Column(db.Float)
    fat = db.Column(db.Float)
    sugar = db.Column(db.Float)
    fiber = db.Column(db.Float)
    sodium = db.Column(db.Float)
    potassium = db.Column(db.Float)
    serving_size = db.Column(db.String(100))
    serving_size_grams = db.Column(db.Float)
    image = db.Column(db.String(255))
