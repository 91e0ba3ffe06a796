"""
Log Synchronizer

Owns the in-memory daily log of one user for one day and drives its
persistence. Mutations are applied locally first (optimistic) and saved
afterwards; the repository is the only place execution yields. Saves are
serialized in issue order, but a caller that needs a save to be finished
must await it (or wait_for_pending()).

A failed save never rolls the local value back. The error is logged and
kept on the Optimistic wrapper; the next load() reconciles with the store.
"""

import asyncio
import copy
import logging
import math
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

from marshmallow import ValidationError

from nutrilog.repositories.base import LogRepository, ProfileStore
from nutrilog.schemas.log_schema import empty_log
from nutrilog.services.nutrition_service import aggregate_log
from nutrilog.services.weight_service import resolve_current_weight
from nutrilog.utils.dates import normalize
from nutrilog.utils.enums import SyncState
from nutrilog.utils.errors import LogNotFound, ProfileNotFound, TransientStoreError

logger = logging.getLogger(__name__)

DEFAULT_WATER_MIN_INTERVAL_MS = 500


class Optimistic:
    """A locally visible value plus the state of the writes behind it."""

    def __init__(self, value: Any = None):
        self.value = value
        self.error: Optional[Exception] = None
        self._in_flight = 0

    @property
    def pending(self) -> bool:
        return self._in_flight > 0

    def __repr__(self):
        return f"Optimistic(value={self.value!r}, pending={self.pending}, error={self.error!r})"


def _finite(value: Any) -> bool:
    return (
        not isinstance(value, bool)
        and isinstance(value, (int, float))
        and math.isfinite(value)
    )


class LogSynchronizer:
    """
    Per-user synchronizer for the currently loaded day.

    Args:
        user_id: Owner of the logs
        repository: Daily log storage
        profiles: Profile storage; weight updates skip the profile when None
        water_min_interval_ms: Minimum gap between accepted set_water() calls
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        user_id: str,
        repository: LogRepository,
        profiles: Optional[ProfileStore] = None,
        *,
        water_min_interval_ms: int = DEFAULT_WATER_MIN_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.user_id = user_id
        self.repository = repository
        self.profiles = profiles
        self.water_min_interval_ms = water_min_interval_ms
        self._clock = clock

        self.state = SyncState.UNLOADED
        self.day: Optional[str] = None
        self._log = Optimistic()
        self._profile = Optimistic()

        self._save_lock: Optional[asyncio.Lock] = None
        self._tasks: Set[asyncio.Task] = set()
        self._last_water_set: Optional[float] = None
        self._water_set_in_flight = False

    @property
    def log(self) -> Optimistic:
        return self._log

    @property
    def profile(self) -> Optimistic:
        return self._profile

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, day: Any = None) -> Dict[str, Any]:
        """
        Load the log of a day, synthesizing an empty one when none exists.

        Raises:
            TransientStoreError: If the store is unavailable; local state
                is left as it was
        """
        day_key = normalize(day)
        await self.wait_for_pending()

        try:
            log = await asyncio.to_thread(self.repository.fetch_by_day, self.user_id, day_key)
        except LogNotFound:
            logger.info("No daily log for %s on %s, starting an empty one", self.user_id, day_key)
            log = empty_log(day_key)

        self.day = day_key
        self._log = Optimistic(log)
        self.state = SyncState.LOADED
        return log

    async def load_profile(self) -> Optional[Dict[str, Any]]:
        if self.profiles is None:
            return None
        try:
            profile = await asyncio.to_thread(self.profiles.get_profile, self.user_id)
        except ProfileNotFound:
            profile = None
        self._profile = Optimistic(profile)
        return profile

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mutate_water(self, delta: float) -> float:
        """
        Add delta to the day's water immediately and save in the background.

        Must be called from a running event loop. Returns the new amount.
        """
        if not _finite(delta):
            raise ValueError(f"water delta must be a finite number, got {delta!r}")
        log = self._require_log()

        current = log.get("waterIntake") or 0
        log["waterIntake"] = max(0, current + delta)
        self._mark_mutated()
        self._spawn(self._save_log())
        return log["waterIntake"]

    async def set_water(self, amount: float) -> bool:
        """
        Replace the day's water with amount, rounded and clamped at 0.

        Requests within water_min_interval_ms of the previous accepted one,
        or while its save is still running, are dropped.

        Returns:
            True when the value was applied, False when debounced
        """
        if not _finite(amount):
            raise ValueError(f"water amount must be a finite number, got {amount!r}")
        log = self._require_log()

        now = self._clock()
        too_soon = (
            self._last_water_set is not None
            and (now - self._last_water_set) * 1000 < self.water_min_interval_ms
        )
        if too_soon or self._water_set_in_flight:
            logger.info("Ignoring set_water(%s) for %s: previous request still settling", amount, self.day)
            return False

        self._last_water_set = now
        log["waterIntake"] = max(0, round(amount))
        self._mark_mutated()

        self._water_set_in_flight = True
        try:
            await self._save_log()
        finally:
            self._water_set_in_flight = False
        return True

    async def mutate_weight(self, new_weight: float, reconcile: bool = False) -> bool:
        """
        Write a weight into the day's log and the user profile.

        The cached profile is saved whole with only its weight replaced, so
        fields such as birthDate survive the write.

        Args:
            new_weight: Weight for the loaded day
            reconcile: Re-fetch the day's log after a successful save

        Returns:
            True when every save succeeded
        """
        if not _finite(new_weight) or new_weight < 0:
            raise ValueError(f"weight must be a non-negative number, got {new_weight!r}")
        log = self._require_log()

        log["weight"] = new_weight
        self._mark_mutated()

        if self.profiles is not None and self._profile.value is None:
            try:
                await self.load_profile()
            except TransientStoreError as exc:
                logger.error("Could not load profile of %s before weight update: %s", self.user_id, exc)

        if self.profiles is not None:
            profile = dict(self._profile.value or {"id": self.user_id})
            profile["weight"] = new_weight
            self._profile.value = profile

        saved = await self._save_log()
        if self.profiles is not None:
            saved = await self._save_profile() and saved

        if reconcile and saved:
            await self._refetch()
        return saved

    async def toggle_cheat_day(self) -> bool:
        log = self._require_log()
        log["isCheatDay"] = not log.get("isCheatDay")
        self._mark_mutated()
        await self._save_log()
        return log["isCheatDay"]

    async def add_or_replace_entries(self, entries: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Replace every food entry of the day with entries (no merge)."""
        if entries is None:
            raise TypeError("add_or_replace_entries() requires a list of entries, got None")
        log = self._require_log()

        replacement = sorted(
            (copy.deepcopy(dict(entry)) for entry in entries),
            key=lambda e: e.get("timeConsumed") or "",
        )
        log["foodEntries"] = replacement
        self._mark_mutated()
        await self._save_log()
        return replacement

    async def add_entry(self, entry: Mapping[str, Any]) -> List[Dict[str, Any]]:
        log = self._require_log()
        entries = [e for e in log.get("foodEntries") or [] if e.get("id") != entry.get("id")]
        entries.append(entry)
        return await self.add_or_replace_entries(entries)

    async def remove_entry(self, entry_id: str) -> bool:
        log = self._require_log()
        entries = log.get("foodEntries") or []
        remaining = [e for e in entries if e.get("id") != entry_id]
        if len(remaining) == len(entries):
            return False
        await self.add_or_replace_entries(remaining)
        return True

    async def set_notes(self, text: Optional[str]) -> None:
        log = self._require_log()
        log["dailyNotes"] = text or None
        self._mark_mutated()
        await self._save_log()

    async def wait_for_pending(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def totals(self) -> Dict[str, float]:
        return aggregate_log(self._log.value)

    def current_weight(self, history: Optional[Iterable[Mapping]] = None) -> Optional[float]:
        if self.day is None:
            return resolve_current_weight(None, None, self._profile.value, history)
        return resolve_current_weight(self.day, self._log.value, self._profile.value, history)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_log(self) -> Dict[str, Any]:
        if self.state == SyncState.UNLOADED or self._log.value is None:
            raise RuntimeError("load() must be called before mutating the daily log")
        return self._log.value

    def _mark_mutated(self) -> None:
        self.state = SyncState.MUTATED

    def _spawn(self, coro) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _lock(self) -> asyncio.Lock:
        # Created lazily so the lock binds to the loop that first saves
        if self._save_lock is None:
            self._save_lock = asyncio.Lock()
        return self._save_lock

    def _save_log(self):
        """Snapshot the log now; the returned coroutine performs the save."""
        snapshot = copy.deepcopy(self._log.value)
        return self._persist(self._log, self.repository.save, snapshot, f"daily log {snapshot.get('date')}")

    def _save_profile(self):
        snapshot = copy.deepcopy(self._profile.value)
        return self._persist(self._profile, self.profiles.save_profile, snapshot, "profile")

    def _persist(self, target: Optimistic, write: Callable, snapshot: Dict[str, Any], what: str):
        # Counted as pending from the moment the snapshot is taken
        target._in_flight += 1

        async def run() -> bool:
            try:
                async with self._lock():
                    await asyncio.to_thread(write, self.user_id, snapshot)
            except (TransientStoreError, ValidationError) as exc:
                logger.error("Saving %s for %s failed: %s", what, self.user_id, exc)
                target.error = exc
                return False
            finally:
                target._in_flight -= 1

            target.error = None
            if target is self._log and not target.pending and self.state == SyncState.MUTATED:
                self.state = SyncState.LOADED
            return True

        return run()

    async def _refetch(self) -> None:
        try:
            log = await asyncio.to_thread(self.repository.fetch_by_day, self.user_id, self.day)
        except (LogNotFound, TransientStoreError) as exc:
            logger.warning("Could not re-fetch daily log %s for %s: %s", self.day, self.user_id, exc)
            return
        if not self._log.pending:
            self._log = Optimistic(log)
            self.state = SyncState.LOADED
