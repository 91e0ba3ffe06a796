"""
Streak Service

A streak is the number of consecutive active days ending at a reference
day. The walk goes backward one calendar day at a time and stops at the
first day without activity. It is bounded by max_lookback as a cost
control, so a longer real streak is undercounted.
"""

import asyncio
import logging
import math
from typing import Any, Callable, Dict, Mapping, Optional

from nutrilog.repositories.base import LogRepository
from nutrilog.services.nutrition_service import entry_calories
from nutrilog.utils.dates import normalize, shift_day
from nutrilog.utils.errors import LogNotFound, TransientStoreError

logger = logging.getLogger(__name__)

DEFAULT_MAX_LOOKBACK = 30

# Days fetched per list_range call when walking without a bound
UNBOUNDED_WINDOW = 31

LogLookup = Callable[[str], Optional[Mapping[str, Any]]]


def is_active_day(log: Optional[Mapping[str, Any]]) -> bool:
    """Positive calories on at least one valid entry, or positive water."""
    if not log:
        return False

    for entry in log.get("foodEntries") or []:
        calories = entry_calories(entry)
        if calories is not None and calories > 0:
            return True

    water = log.get("waterIntake")
    return (
        not isinstance(water, bool)
        and isinstance(water, (int, float))
        and math.isfinite(water)
        and water > 0
    )


def _check_lookback(max_lookback: Optional[int]) -> None:
    if max_lookback is not None and max_lookback < 0:
        raise ValueError("max_lookback must be >= 0 or None")


def compute_streak(
    reference_day: Any,
    log_lookup: LogLookup,
    max_lookback: Optional[int] = DEFAULT_MAX_LOOKBACK,
) -> int:
    """
    Count consecutive active days ending at reference_day.

    Args:
        reference_day: Day the walk starts from (normalized to a day key)
        log_lookup: Returns the log for a day key, or None when there is none
        max_lookback: Largest offset checked (inclusive); None for no bound

    Returns:
        Streak length, 0 when reference_day itself is inactive
    """
    _check_lookback(max_lookback)
    start = normalize(reference_day)

    count = 0
    offset = 0
    while max_lookback is None or offset <= max_lookback:
        day = shift_day(start, -offset)
        try:
            log = log_lookup(day)
        except LogNotFound:
            log = None
        except TransientStoreError as exc:
            logger.warning("Streak walk stopped at %s, log could not be loaded: %s", day, exc)
            break

        if not is_active_day(log):
            break
        count += 1
        offset += 1

    return count


def streak_from_repository(
    repository: LogRepository,
    user_id: str,
    reference_day: Any,
    max_lookback: Optional[int] = DEFAULT_MAX_LOOKBACK,
) -> int:
    """compute_streak over logs bulk-fetched with list_range."""
    _check_lookback(max_lookback)
    start = normalize(reference_day)

    if max_lookback is not None:
        logs = repository.list_range(user_id, shift_day(start, -max_lookback), start)
        by_day = {log["date"]: log for log in logs}
        return compute_streak(start, by_day.get, max_lookback)

    # No bound: fetch window after window until a window ends the streak
    total = 0
    window_end = start
    while True:
        window_start = shift_day(window_end, -(UNBOUNDED_WINDOW - 1))
        logs = repository.list_range(user_id, window_start, window_end)
        by_day: Dict[str, Mapping] = {log["date"]: log for log in logs}
        found = compute_streak(window_end, by_day.get, UNBOUNDED_WINDOW - 1)
        total += found
        if found < UNBOUNDED_WINDOW:
            return total
        window_end = shift_day(window_start, -1)


async def streak_for_user(
    repository: LogRepository,
    user_id: str,
    reference_day: Any,
    max_lookback: Optional[int] = DEFAULT_MAX_LOOKBACK,
) -> int:
    return await asyncio.to_thread(streak_from_repository, repository, user_id, reference_day, max_lookback)
