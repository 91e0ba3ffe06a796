"""
In-memory storage

Keeps rows in storage form (snake_case), so every read and write goes
through the same mapping layer as the SQL store. Used for offline runs and
tests; fail_next() injects transient failures.
"""

import copy
import threading
from typing import Any, Dict, List, Optional, Tuple

from nutrilog.repositories.base import LogRepository, ProfileStore
from nutrilog.schemas.log_schema import log_from_storage, log_to_storage
from nutrilog.schemas.profile_schema import profile_from_storage, profile_to_storage
from nutrilog.utils.errors import LogNotFound, ProfileNotFound, TransientStoreError


class _FailureInjector:
    def __init__(self):
        self._lock = threading.Lock()
        self._remaining = 0

    def fail_next(self, count: int = 1) -> None:
        with self._lock:
            self._remaining = count

    def check(self, operation: str) -> None:
        with self._lock:
            if self._remaining > 0:
                self._remaining -= 1
                raise TransientStoreError(f"STORE_UNAVAILABLE: simulated failure during {operation}")


class InMemoryLogRepository(LogRepository):

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._failures = _FailureInjector()
        self.save_count = 0
        self.fetch_count = 0

    def fail_next(self, count: int = 1) -> None:
        self._failures.fail_next(count)

    def fetch_by_day(self, user_id: str, day: str) -> Dict[str, Any]:
        self._failures.check("fetch")
        with self._lock:
            self.fetch_count += 1
            row = self._rows.get((user_id, day))
            if row is None:
                raise LogNotFound(user_id, day)
            return log_from_storage(copy.deepcopy(row))

    def save(self, user_id: str, log: Dict[str, Any]) -> None:
        self._failures.check("save")
        row = log_to_storage(log)
        # Entries are replaced wholesale, never merged with the stored set
        row["food_entries"] = sorted(row["food_entries"], key=lambda e: e["time_consumed"])
        with self._lock:
            self.save_count += 1
            self._rows[(user_id, row["date"])] = row

    def list_range(self, user_id: str, start_day: str, end_day: str) -> List[Dict[str, Any]]:
        self._failures.check("list_range")
        with self._lock:
            rows = [
                copy.deepcopy(row)
                for (owner, day), row in self._rows.items()
                if owner == user_id and start_day <= day <= end_day
            ]
        rows.sort(key=lambda r: r["date"])
        return [log_from_storage(row) for row in rows]


class InMemoryProfileStore(ProfileStore):

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._goals: Dict[str, Dict[str, Any]] = {}
        self._failures = _FailureInjector()

    def fail_next(self, count: int = 1) -> None:
        self._failures.fail_next(count)

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        self._failures.check("get_profile")
        with self._lock:
            row = self._rows.get(user_id)
            if row is None:
                raise ProfileNotFound(user_id)
            return profile_from_storage(copy.deepcopy(row))

    def save_profile(self, user_id: str, profile: Dict[str, Any]) -> None:
        self._failures.check("save_profile")
        incoming = profile_to_storage({**profile, "id": user_id})
        with self._lock:
            row = self._rows.setdefault(user_id, {})
            row.update(incoming)

    def set_active_goal(self, user_id: str, goal: Optional[Dict[str, Any]]) -> None:
        with self._lock:
            if goal is None:
                self._goals.pop(user_id, None)
            else:
                self._goals[user_id] = dict(goal)

    def get_active_goal(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            goal = self._goals.get(user_id)
            return dict(goal) if goal is not None else None
