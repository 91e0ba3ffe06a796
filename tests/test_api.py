import asyncio

from factories import make_entry, make_log
from nutrilog.utils.dates import shift_day, today


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200, r.data
    data = r.get_json()
    assert data["status"] == "online"
    assert data["database"] == "healthy"


def test_requires_bearer_token(client):
    r = client.get("/api/daily-logs/2024-03-01")
    assert r.status_code == 401
    assert r.get_json()["error"]["code"] == "UNAUTHORIZED"

    r2 = client.get("/api/daily-logs/2024-03-01", headers={"Authorization": "Bearer nope"})
    assert r2.status_code == 401


def test_save_and_fetch_daily_log(client, auth_headers):
    headers = auth_headers()
    log = make_log(entries=[make_entry("a", calories=200, serving=150)], water=750.0, weight=70.0, notes="ok")

    r = client.post("/api/daily-logs", json=log, headers=headers)
    assert r.status_code == 200, r.data
    assert r.get_json() == log

    r2 = client.get("/api/daily-logs/2024-03-01", headers=headers)
    assert r2.status_code == 200
    assert r2.get_json()["foodEntries"][0]["id"] == "a"

    # another user sees nothing
    r3 = client.get("/api/daily-logs/2024-03-01", headers=auth_headers("user-2"))
    assert r3.status_code == 404
    assert r3.get_json()["error"]["code"] == "LOG_NOT_FOUND"


def test_post_normalizes_date(client, auth_headers):
    log = make_log(water=100.0)
    log["date"] = "2024-03-01T21:15:00Z"
    r = client.post("/api/daily-logs", json=log, headers=auth_headers())
    assert r.status_code == 200, r.data
    assert r.get_json()["date"] == "2024-03-01"


def test_post_rejects_invalid_log(client, auth_headers):
    bad = make_log(entries=[make_entry("a", meal="brunch")])
    r = client.post("/api/daily-logs", json=bad, headers=auth_headers())
    assert r.status_code == 400
    body = r.get_json()["error"]
    assert body["code"] == "VALIDATION_ERROR"
    assert "foodEntries" in body["fields"]


def test_invalid_day_in_path(client, auth_headers):
    r = client.get("/api/daily-logs/2024-13-01", headers=auth_headers())
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_range(client, auth_headers):
    headers = auth_headers()
    for day in ["2024-03-01", "2024-03-02", "2024-03-05"]:
        client.post("/api/daily-logs", json=make_log(day, water=100.0), headers=headers)

    r = client.get("/api/daily-logs?start=2024-03-01&end=2024-03-04", headers=headers)
    assert r.status_code == 200, r.data
    data = r.get_json()
    assert [log["date"] for log in data["logs"]] == ["2024-03-01", "2024-03-02"]

    r2 = client.get("/api/daily-logs?start=2024-03-04&end=2024-03-01", headers=headers)
    assert r2.status_code == 400


def test_summary(client, auth_headers):
    headers = auth_headers()
    client.put("/api/users/me", json={"name": "Ana", "weight": 80.0, "goals": {"dailyCalories": 1800}},
               headers=headers)
    client.post("/api/daily-logs", json=make_log("2024-03-08", water=300.0, weight=78.0), headers=headers)
    client.post("/api/daily-logs", json=make_log("2024-03-09", water=500.0), headers=headers)
    client.post("/api/daily-logs", json=make_log("2024-03-10", entries=[
        make_entry("a", day="2024-03-10", calories=400, serving=50, meal="lunch"),
        make_entry("b", day="2024-03-10", calories=300, meal="dinner", hour=19),
    ], water=1000.0, cheat=True), headers=headers)

    r = client.get("/api/daily-logs/2024-03-10/summary", headers=headers)
    assert r.status_code == 200, r.data
    data = r.get_json()
    assert data["exists"] is True
    assert data["isCheatDay"] is True
    assert data["totals"]["calories"] == 500
    assert data["totals"]["water"] == 1000
    assert data["byMeal"]["lunch"]["calories"] == 200
    assert data["goals"]["dailyCalories"] == 1800
    assert data["progress"]["calories"]["remaining"] == 1300
    assert data["streak"] == 3
    assert data["currentWeight"] == 78.0


def test_summary_of_empty_day_uses_defaults(client, auth_headers):
    r = client.get("/api/daily-logs/2024-03-10/summary", headers=auth_headers())
    assert r.status_code == 200, r.data
    data = r.get_json()
    assert data["exists"] is False
    assert data["streak"] == 0
    assert data["goals"]["dailyCalories"] == 2000
    assert data["currentWeight"] is None


def test_profile_update_keeps_omitted_fields(client, auth_headers):
    headers = auth_headers()
    r = client.get("/api/users/me", headers=headers)
    assert r.status_code == 404

    r1 = client.put("/api/users/me", json={"name": "Ana", "birthDate": "1990-05-17T00:00:00.000Z", "weight": 70},
                    headers=headers)
    assert r1.status_code == 200, r1.data
    assert r1.get_json()["birthDate"] == "1990-05-17"

    r2 = client.put("/api/users/me", json={"weight": 68.5}, headers=headers)
    assert r2.status_code == 200, r2.data
    profile = r2.get_json()
    assert profile["weight"] == 68.5
    assert profile["birthDate"] == "1990-05-17"
    assert profile["id"] == "user-1"


def test_profile_update_validation(client, auth_headers):
    r = client.put("/api/users/me", json={"gender": "robot"}, headers=auth_headers())
    assert r.status_code == 400
    assert "gender" in r.get_json()["error"]["fields"]

    r2 = client.put("/api/users/me", json={"shoeSize": 42}, headers=auth_headers())
    assert r2.status_code == 400


def test_weight_history(client, auth_headers):
    headers = auth_headers()
    end = today()
    client.put("/api/users/me", json={"name": "Ana", "weight": 82.0}, headers=headers)
    client.post("/api/daily-logs", json=make_log(shift_day(end, -3), weight=80.0), headers=headers)
    client.post("/api/daily-logs", json=make_log(shift_day(end, -1), weight=79.0), headers=headers)

    r = client.get("/api/users/me/weight-history?days=5", headers=headers)
    assert r.status_code == 200, r.data
    data = r.get_json()
    assert data["end"] == end
    assert [p["weight"] for p in data["points"]] == [82.0, 80.0, 80.0, 79.0, 79.0]
    assert data["trend"] == {"start": 82.0, "end": 79.0, "change": 3.0, "trend": "down"}
    assert data["currentWeight"] == 79.0


def test_nutrition_report(client, auth_headers):
    headers = auth_headers()
    client.post("/api/daily-logs", json=make_log("2024-03-01", entries=[make_entry("a", calories=600)]),
                headers=headers)
    client.post("/api/daily-logs", json=make_log("2024-03-02", water=400.0, cheat=True), headers=headers)

    r = client.get("/api/reports/nutrition?start=2024-03-01&end=2024-03-03", headers=headers)
    assert r.status_code == 200, r.data
    data = r.get_json()
    assert len(data["days"]) == 3
    assert data["totals"]["calories"] == 600
    assert data["activeDays"] == 2
    assert data["cheatDays"] == 1
    assert data["averages"]["calories"] == 300


def test_summary_inside_a_running_event_loop(client, auth_headers):
    headers = auth_headers()
    client.post("/api/daily-logs", json=make_log("2024-03-10", water=500.0), headers=headers)

    async def fetch():
        return client.get("/api/daily-logs/2024-03-10/summary", headers=headers)

    r = asyncio.run(fetch())
    assert r.status_code == 200, r.data
    assert r.get_json()["streak"] == 1
