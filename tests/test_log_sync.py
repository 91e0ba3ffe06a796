import asyncio

import pytest
from marshmallow import ValidationError

from factories import make_entry, make_log
from nutrilog.repositories.memory import InMemoryLogRepository, InMemoryProfileStore
from nutrilog.services.log_sync_service import LogSynchronizer
from nutrilog.utils.enums import SyncState
from nutrilog.utils.errors import TransientStoreError

USER = "user-1"
DAY = "2024-03-01"


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def repository():
    return InMemoryLogRepository()


@pytest.fixture()
def profiles():
    store = InMemoryProfileStore()
    store.save_profile(USER, {"id": USER, "name": "Ana", "birthDate": "1990-05-17", "weight": 70.0, "height": 165.0})
    return store


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def sync(repository, profiles, clock):
    return LogSynchronizer(USER, repository, profiles, water_min_interval_ms=500, clock=clock)


def test_missing_log_is_synthesized_empty(sync, repository):
    assert sync.state == SyncState.UNLOADED

    log = asyncio.run(sync.load(DAY))

    assert log == {"date": DAY, "foodEntries": [], "waterIntake": 0, "weight": None,
                   "dailyNotes": None, "isCheatDay": False}
    assert sync.state == SyncState.LOADED
    assert sync.day == DAY
    assert repository.save_count == 0


def test_load_normalizes_the_day(sync, repository):
    repository.save(USER, make_log(DAY, water=300.0))
    log = asyncio.run(sync.load("2024-03-01T12:00:00Z"))
    assert log["waterIntake"] == 300


def test_load_failure_leaves_state_untouched(sync, repository):
    repository.save(USER, make_log(DAY, water=300.0))

    async def scenario():
        await sync.load(DAY)
        repository.fail_next()
        with pytest.raises(TransientStoreError):
            await sync.load("2024-03-02")

    asyncio.run(scenario())
    assert sync.day == DAY
    assert sync.log.value["waterIntake"] == 300
    assert sync.state == SyncState.LOADED


def test_mutating_before_load_is_an_error(sync):
    with pytest.raises(RuntimeError):
        asyncio.run(sync.toggle_cheat_day())


def test_water_survives_failed_save_and_reconciles_on_load(sync, repository):
    repository.save(USER, make_log(DAY, water=0.0))

    async def scenario():
        await sync.load(DAY)
        repository.fail_next()

        shown = sync.mutate_water(250)
        # visible before the save has run
        assert shown == 250
        assert sync.log.value["waterIntake"] == 250
        assert sync.log.pending
        assert sync.state == SyncState.MUTATED

        await sync.wait_for_pending()
        assert sync.log.value["waterIntake"] == 250
        assert not sync.log.pending
        assert isinstance(sync.log.error, TransientStoreError)
        assert repository.fetch_by_day(USER, DAY)["waterIntake"] == 0

        # the store catches up, e.g. from another device
        repository.save(USER, make_log(DAY, water=250.0))
        reloaded = await sync.load(DAY)
        assert reloaded["waterIntake"] == 250
        assert sync.log.error is None

    asyncio.run(scenario())


def test_water_deltas_are_saved_in_order_and_clamped(sync, repository):
    async def scenario():
        await sync.load(DAY)
        sync.mutate_water(500)
        sync.mutate_water(250)
        assert sync.mutate_water(-2000) == 0
        await sync.wait_for_pending()

    asyncio.run(scenario())
    assert repository.fetch_by_day(USER, DAY)["waterIntake"] == 0
    assert repository.save_count == 3
    assert sync.state == SyncState.LOADED


def test_set_water_is_debounced(sync, repository, clock):
    async def scenario():
        await sync.load(DAY)
        assert await sync.set_water(300.4) is True
        clock.advance(0.1)
        assert await sync.set_water(900) is False
        clock.advance(0.5)
        assert await sync.set_water(-20) is True

    asyncio.run(scenario())
    assert sync.log.value["waterIntake"] == 0
    assert repository.save_count == 2


def test_set_water_rounds(sync, repository):
    asyncio.run(_load_and(sync, lambda: sync.set_water(1249.6)))
    assert repository.fetch_by_day(USER, DAY)["waterIntake"] == 1250


def test_non_numeric_water_is_rejected(sync):
    async def scenario():
        await sync.load(DAY)
        with pytest.raises(ValueError):
            sync.mutate_water(float("nan"))
        with pytest.raises(ValueError):
            await sync.set_water("lots")

    asyncio.run(scenario())


def test_weight_goes_to_log_and_profile_keeping_birth_date(sync, repository, profiles):
    assert asyncio.run(_load_and(sync, lambda: sync.mutate_weight(68.5))) is True

    assert repository.fetch_by_day(USER, DAY)["weight"] == 68.5
    profile = profiles.get_profile(USER)
    assert profile["weight"] == 68.5
    assert profile["birthDate"] == "1990-05-17"
    assert profile["name"] == "Ana"
    assert profile["height"] == 165.0
    assert sync.profile.value["birthDate"] == "1990-05-17"
    assert sync.current_weight() == 68.5


def test_weight_with_reconcile_refetches(sync, repository):
    asyncio.run(_load_and(sync, lambda: sync.mutate_weight(71.0, reconcile=True)))
    assert repository.fetch_count == 2
    assert sync.log.value["weight"] == 71.0
    assert sync.state == SyncState.LOADED


def test_weight_save_failure_is_reported(sync, repository):
    async def scenario():
        await sync.load(DAY)
        await sync.load_profile()
        repository.fail_next()
        return await sync.mutate_weight(66.0)

    assert asyncio.run(scenario()) is False
    assert sync.log.value["weight"] == 66.0
    assert isinstance(sync.log.error, TransientStoreError)
    assert sync.state == SyncState.MUTATED


def test_cheat_day_toggle_is_persisted(sync, repository):
    async def scenario():
        await sync.load(DAY)
        assert await sync.toggle_cheat_day() is True
        assert repository.fetch_by_day(USER, DAY)["isCheatDay"] is True
        assert await sync.toggle_cheat_day() is False

    asyncio.run(scenario())
    assert repository.fetch_by_day(USER, DAY)["isCheatDay"] is False


def test_entries_are_fully_replaced(sync, repository):
    repository.save(USER, make_log(DAY, entries=[make_entry("a"), make_entry("b")]))

    async def scenario():
        await sync.load(DAY)
        await sync.add_or_replace_entries([
            make_entry("d", calories=50, hour=20),
            make_entry("c", calories=200, hour=7),
        ])

    asyncio.run(scenario())
    stored = repository.fetch_by_day(USER, DAY)["foodEntries"]
    assert [e["id"] for e in stored] == ["c", "d"]
    assert sync.totals()["calories"] == 250


def test_add_and_remove_entry(sync, repository):
    async def scenario():
        await sync.load(DAY)
        await sync.add_entry(make_entry("a", calories=100))
        await sync.add_entry(make_entry("b", calories=300, hour=12))
        # same id replaces
        await sync.add_entry(make_entry("a", calories=150))
        assert await sync.remove_entry("b") is True
        assert await sync.remove_entry("missing") is False

    asyncio.run(scenario())
    stored = repository.fetch_by_day(USER, DAY)["foodEntries"]
    assert [e["id"] for e in stored] == ["a"]
    assert stored[0]["foodItem"]["nutrition"]["calories"] == 150


def test_invalid_entries_are_kept_locally_but_not_saved(sync, repository):
    bad = make_entry("x")
    bad["mealType"] = "brunch"

    asyncio.run(_load_and(sync, lambda: sync.add_or_replace_entries([bad])))
    assert isinstance(sync.log.error, ValidationError)
    assert sync.log.value["foodEntries"][0]["mealType"] == "brunch"
    assert repository.save_count == 0


def test_notes(sync, repository):
    asyncio.run(_load_and(sync, lambda: sync.set_notes("ran 5k")))
    assert repository.fetch_by_day(USER, DAY)["dailyNotes"] == "ran 5k"


def test_current_weight_falls_back_to_history_and_profile(sync, profiles):
    async def scenario():
        await sync.load(DAY)
        await sync.load_profile()

    asyncio.run(scenario())
    assert sync.current_weight() == 70.0
    assert sync.current_weight([make_log("2024-02-28", weight=71.5)]) == 71.5


def test_missing_profile_loads_as_none(repository):
    sync = LogSynchronizer("nobody", repository, InMemoryProfileStore())
    assert asyncio.run(sync.load_profile()) is None
    assert LogSynchronizer("nobody", repository).current_weight() is None


async def _load_and(sync, action):
    await sync.load(DAY)
    return await action()
