import asyncio

import pytest

from factories import make_entry, make_log
from nutrilog.repositories.memory import InMemoryLogRepository
from nutrilog.services.streak_service import (
    compute_streak,
    is_active_day,
    streak_for_user,
    streak_from_repository,
)
from nutrilog.utils.dates import shift_day
from nutrilog.utils.errors import LogNotFound, TransientStoreError

DAY = "2024-03-10"


def active_log(day, calories=120.0):
    return make_log(day, entries=[make_entry(f"{day}-1", day=day, calories=calories)])


def lookup_for(logs):
    by_day = {log["date"]: log for log in logs}
    return by_day.get


def test_three_active_days_then_gap():
    logs = [active_log(shift_day(DAY, -offset)) for offset in range(3)]
    assert compute_streak(DAY, lookup_for(logs)) == 3


def test_inactive_reference_day_is_zero():
    logs = [make_log(DAY, water=0.0), active_log(shift_day(DAY, -1))]
    assert compute_streak(DAY, lookup_for(logs)) == 0


def test_water_alone_makes_a_day_active():
    assert is_active_day(make_log(DAY, water=250.0))
    assert not is_active_day(make_log(DAY, water=float("nan")))


def test_zero_or_missing_calories_are_not_activity():
    assert not is_active_day(make_log(DAY, entries=[make_entry("a", calories=0)]))
    assert not is_active_day(make_log(DAY, entries=[make_entry("a", calories=None)]))
    assert not is_active_day(None)


def test_walk_uses_calendar_days_across_month_end():
    logs = [active_log("2024-03-01"), active_log("2024-02-29"), active_log("2024-02-28")]
    assert compute_streak("2024-03-01", lookup_for(logs)) == 3


def test_lookback_bound_caps_the_count():
    logs = [active_log(shift_day(DAY, -offset)) for offset in range(40)]
    # offsets 0..30 inclusive
    assert compute_streak(DAY, lookup_for(logs), max_lookback=30) == 31
    assert compute_streak(DAY, lookup_for(logs), max_lookback=0) == 1
    assert compute_streak(DAY, lookup_for(logs), max_lookback=None) == 40


def test_negative_lookback_is_rejected():
    with pytest.raises(ValueError):
        compute_streak(DAY, lookup_for([]), max_lookback=-1)


def test_lookup_errors_end_the_walk():
    logs = {shift_day(DAY, -offset): active_log(shift_day(DAY, -offset)) for offset in range(5)}

    def flaky(day):
        if day == shift_day(DAY, -2):
            raise TransientStoreError("down")
        return logs[day]

    def strict(day):
        if day == shift_day(DAY, -3):
            raise LogNotFound("user-1", day)
        return logs[day]

    assert compute_streak(DAY, flaky) == 2
    assert compute_streak(DAY, strict) == 3


def test_streak_for_user_bulk_fetches_the_window():
    repository = InMemoryLogRepository()
    for offset in range(4):
        repository.save("user-1", active_log(shift_day(DAY, -offset)))
    repository.save("user-2", active_log(shift_day(DAY, -4)))

    assert asyncio.run(streak_for_user(repository, "user-1", DAY)) == 4
    assert repository.fetch_count == 0


def test_streak_for_user_without_bound_walks_several_windows():
    repository = InMemoryLogRepository()
    for offset in range(70):
        repository.save("user-1", active_log(shift_day(DAY, -offset)))

    assert asyncio.run(streak_for_user(repository, "user-1", DAY, max_lookback=None)) == 70
    assert asyncio.run(streak_for_user(repository, "user-1", DAY, max_lookback=30)) == 31


def test_streak_from_repository_runs_without_an_event_loop():
    repository = InMemoryLogRepository()
    for offset in range(3):
        repository.save("user-1", active_log(shift_day(DAY, -offset)))

    assert streak_from_repository(repository, "user-1", DAY) == 3
    assert streak_from_repository(repository, "user-1", shift_day(DAY, -5)) == 0
