from nutrilog import create_app
from nutrilog.extensions import db
from nutrilog.models.user import User
from nutrilog.models.user_goal import UserGoal
from nutrilog.utils.dates import shift_day, today

DEMO_USER_ID = "demo-user"

app = create_app()

FOODS = {
    "oat": {"id": "food-oat", "name": "Rolled oats", "brand": None, "barcode": None, "image": None,
            "nutrition": {"calories": 389, "protein": 16.9, "carbs": 66.3, "fat": 6.9,
                          "servingSize": "100 g", "servingSizeGrams": 100}},
    "egg": {"id": "food-egg", "name": "Boiled egg", "brand": None, "barcode": None, "image": None,
            "nutrition": {"calories": 155, "protein": 13.0, "carbs": 1.1, "fat": 11.0,
                          "servingSize": "100 g", "servingSizeGrams": 100}},
    "banana": {"id": "food-banana", "name": "Banana", "brand": None, "barcode": None, "image": None,
               "nutrition": {"calories": 89, "protein": 1.1, "carbs": 22.8, "fat": 0.3,
                             "servingSize": "100 g", "servingSizeGrams": 100}},
    "chicken": {"id": "food-chicken", "name": "Roast chicken", "brand": None, "barcode": None, "image": None,
                "nutrition": {"calories": 239, "protein": 27.3, "carbs": 0.0, "fat": 13.6,
                              "servingSize": "100 g", "servingSizeGrams": 100}},
}


def entry(day, n, food, amount, meal_type, hour):
    return {
        "id": f"{day}-{n}",
        "foodItem": FOODS[food],
        "servingAmount": amount,
        "mealType": meal_type,
        "timeConsumed": f"{day}T{hour:02d}:00:00",
    }


with app.app_context():
    # ensure tables exist (non-destructive: won't alter existing columns)
    db.create_all()

    if not db.session.get(User, DEMO_USER_ID):
        db.session.add(User(
            id=DEMO_USER_ID, name="Demo User", birth_date=None, age=30,
            weight=72.5, height=178, gender="male", activity_level="moderately_active",
            daily_calories=2200, daily_water=2500,
        ))
        db.session.add(UserGoal(user_id=DEMO_USER_ID, goal_type_id="maintain", is_custom=False,
                                daily_calories=2200, daily_protein=110, daily_carbs=250,
                                daily_fat=70, daily_water=2500))
        db.session.commit()

logs = app.extensions["nutrilog"]["logs"]

# three consecutive active days ending today
end = today()
for offset in range(3):
    day = shift_day(end, -offset)
    logs.save(DEMO_USER_ID, {
        "date": day,
        "foodEntries": [
            entry(day, 1, "oat", 60, "breakfast", 8),
            entry(day, 2, "banana", 120, "breakfast", 8),
            entry(day, 3, "chicken", 150, "lunch", 13),
        ],
        "waterIntake": 1500 + offset * 250,
        "weight": 72.5 + offset * 0.2 if offset != 1 else None,
        "dailyNotes": None,
        "isCheatDay": False,
    })

print(f"Seed OK: user {DEMO_USER_ID} with logs {shift_day(end, -2)}..{end}")
