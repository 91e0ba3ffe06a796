"""
Storage boundary

The engine only talks to storage through these interfaces. Every method is
a blocking call; the synchronizer runs them off the event loop.
Implementations accept and return engine-shaped (camelCase) dicts and do
the snake_case mapping themselves.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class LogRepository(ABC):

    @abstractmethod
    def fetch_by_day(self, user_id: str, day: str) -> Dict[str, Any]:
        """Return the log for (user, day). Raises LogNotFound / TransientStoreError."""

    @abstractmethod
    def save(self, user_id: str, log: Dict[str, Any]) -> None:
        """Upsert: overwrite scalar fields, fully replace the entry collection."""

    @abstractmethod
    def list_range(self, user_id: str, start_day: str, end_day: str) -> List[Dict[str, Any]]:
        """Logs with start_day <= date <= end_day, oldest first."""


class ProfileStore(ABC):

    @abstractmethod
    def get_profile(self, user_id: str) -> Dict[str, Any]:
        """Raises ProfileNotFound / TransientStoreError."""

    @abstractmethod
    def save_profile(self, user_id: str, profile: Dict[str, Any]) -> None:
        """Upsert; fields absent from profile keep their stored value."""

    def get_active_goal(self, user_id: str) -> Optional[Dict[str, Any]]:
        return None
