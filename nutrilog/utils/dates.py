"""
Date Helpers

Every daily log is keyed by a calendar day string (YYYY-MM-DD) resolved in
the user's local timezone. Anything date-like that reaches the engine goes
through normalize() first, which never raises and falls back to "today".

The local timezone is never derived from UTC formatting: a meal logged at
23:30 in New York belongs to that New York day, not to the UTC day after.
"""

import logging
import math
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from email.utils import parsedate_to_datetime
from typing import Any, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Tried in order after parse_timestamp
FALLBACK_FORMATS = (
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%m/%d/%Y",
    "%d %b %Y",
    "%b %d %Y",
    "%a %b %d %Y",
    "%Y-%m-%d %H:%M:%S",
    # Browser locale renderings of a date and time
    "%m/%d/%Y, %I:%M:%S %p",
    "%m/%d/%Y, %I:%M %p",
    "%m/%d/%Y, %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%d.%m.%Y, %H:%M:%S",
    "%d.%m.%Y %H:%M",
)

TzLike = Union[str, tzinfo, None]

_default_tz: tzinfo = timezone.utc


def resolve_timezone(value: TzLike = None) -> tzinfo:
    """Return a tzinfo for an IANA name, a tzinfo, or the module default."""
    if value is None:
        return _default_tz
    if isinstance(value, tzinfo):
        return value
    try:
        return ZoneInfo(str(value))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to UTC", value)
        return timezone.utc


def set_default_timezone(value: TzLike) -> tzinfo:
    """Set the zone used as "local" when callers pass no tz."""
    global _default_tz
    _default_tz = timezone.utc if value is None else resolve_timezone(value)
    return _default_tz


def get_default_timezone() -> tzinfo:
    return _default_tz


def parse_timestamp(text: str) -> datetime:
    """
    datetime.fromisoformat that also takes a trailing "Z" for UTC, as
    produced by JavaScript's toISOString().

    Raises:
        ValueError: If text is not an ISO-8601 date or timestamp
    """
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def today(tz: TzLike = None) -> str:
    return datetime.now(resolve_timezone(tz)).date().isoformat()


def is_day_key(value: Any) -> bool:
    """True for a YYYY-MM-DD string naming a real calendar day."""
    if not isinstance(value, str) or not DAY_KEY_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _local_day(moment: datetime, zone: tzinfo) -> str:
    # Naive datetimes are taken as already local
    if moment.tzinfo is None or moment.utcoffset() is None:
        return moment.date().isoformat()
    return moment.astimezone(zone).date().isoformat()


def _parse_string(value: str, zone: tzinfo) -> Optional[str]:
    text = value.strip()
    if not text:
        return None

    if is_day_key(text):
        return text

    if "T" in text:
        head = text.split("T", 1)[0]
        if is_day_key(head):
            return head

    try:
        return _local_day(parse_timestamp(text), zone)
    except ValueError:
        pass

    for fmt in FALLBACK_FORMATS:
        try:
            return _local_day(datetime.strptime(text, fmt), zone)
        except ValueError:
            continue

    try:
        return _local_day(parsedate_to_datetime(text), zone)
    except (TypeError, ValueError, IndexError):
        return None


def normalize(value: Any = None, tz: TzLike = None) -> str:
    """
    Canonicalize a date-like value into a calendar day key.

    Args:
        value: YYYY-MM-DD string, ISO timestamp, other date string,
            date/datetime, POSIX timestamp (seconds), or None
        tz: Zone treated as local; defaults to the configured zone

    Returns:
        YYYY-MM-DD string; today's local day when the input is absent
        or cannot be parsed
    """
    zone = resolve_timezone(tz)
    result = None
    try:
        if isinstance(value, datetime):
            result = _local_day(value, zone)
        elif isinstance(value, date):
            result = value.isoformat()
        elif isinstance(value, bool):
            result = None
        elif isinstance(value, (int, float)):
            if math.isfinite(value):
                result = datetime.fromtimestamp(value, zone).date().isoformat()
        elif isinstance(value, str):
            result = _parse_string(value, zone)
    except (OverflowError, OSError, ValueError) as exc:
        logger.debug("Date input %r could not be converted: %s", value, exc)
        result = None

    if result is None:
        if value is not None and value != "":
            logger.debug("Unparseable date input %r, using today", value)
        return today(zone)
    return result


def parse_day(value: Any, tz: TzLike = None) -> date:
    return date.fromisoformat(normalize(value, tz))


def shift_day(value: Any, days: int, tz: TzLike = None) -> str:
    """Calendar arithmetic on day keys (DST-safe: no 24h steps involved)."""
    return (parse_day(value, tz) + timedelta(days=days)).isoformat()


def day_range(start: Any, end: Any, tz: TzLike = None) -> List[str]:
    """Inclusive list of day keys from start to end; empty when end < start."""
    first = parse_day(start, tz)
    last = parse_day(end, tz)
    span = (last - first).days
    return [(first + timedelta(days=offset)).isoformat() for offset in range(span + 1)]
