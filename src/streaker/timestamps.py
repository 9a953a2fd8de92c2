"""Timestamp normalization and interval arithmetic for streaker.

Every instant that enters the engine passes through normalize_instant(), so
the rest of the code only ever sees naive local datetimes. Calendar days are
keyed as ISO strings (YYYY-MM-DD).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400
SECONDS_PER_HOUR = 3_600

# Zero-argument converters exposed by server-side timestamp types
_CONVERTER_NAMES = ("to_datetime", "ToDatetime", "todatetime")


@dataclass(frozen=True)
class Duration:
    """Elapsed time between two instants, floored to whole days and hours."""

    days: int
    hours: int
    total_seconds: float

    @property
    def total_days(self) -> float:
        return self.total_seconds / SECONDS_PER_DAY

    @property
    def fmt(self) -> str:
        return f"{self.days}d {self.hours}h"


ZERO_DURATION = Duration(days=0, hours=0, total_seconds=0.0)


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _from_epoch_seconds(seconds: Any, scale: int = 1) -> datetime | None:
    try:
        return datetime.fromtimestamp(float(seconds) / scale)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _parse(raw: Any) -> datetime | None:
    if isinstance(raw, datetime):
        return _to_local_naive(raw)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        # Bare numbers are epoch milliseconds
        return _from_epoch_seconds(raw, scale=1000)
    if isinstance(raw, str):
        try:
            return _to_local_naive(datetime.fromisoformat(raw.strip().replace("Z", "+00:00")))
        except ValueError:
            return None

    for name in _CONVERTER_NAMES:
        converter = getattr(raw, name, None)
        if callable(converter):
            try:
                converted = converter()
            except (TypeError, ValueError, OverflowError, OSError):
                return None
            if isinstance(converted, (datetime, date)):
                return _parse(converted)
            return None

    if isinstance(raw, dict):
        seconds = raw.get("seconds")
    else:
        seconds = getattr(raw, "seconds", None)
    if seconds is not None:
        return _from_epoch_seconds(seconds)
    return None


def normalize_instant(raw: Any, now: datetime | None = None) -> datetime:
    """Coerce a heterogeneous timestamp into a naive local datetime.

    Accepts datetime/date objects, objects with a zero-argument datetime
    converter (to_datetime() / ToDatetime()), dicts or objects with an epoch
    ``seconds`` field, epoch-millisecond numbers and ISO-8601 strings
    (a trailing ``Z`` is read as UTC). Anything missing or unparseable
    becomes ``now``; this function never raises.
    """
    fallback = now if now is not None else datetime.now()
    if raw is None or raw == "":
        return fallback
    parsed = _parse(raw)
    if parsed is None:
        logger.debug("Unparseable timestamp %r, substituting now", raw)
        return fallback
    return parsed


def duration(start: Any, end: Any = None, now: datetime | None = None) -> Duration:
    """Elapsed time from start to end (or now, for an open interval).

    Negative spans (clock skew, malformed data) clamp to zero.
    """
    start_dt = normalize_instant(start, now)
    end_dt = normalize_instant(end, now)
    diff = end_dt - start_dt
    if diff < timedelta(0):
        return ZERO_DURATION
    return Duration(
        days=diff.days,
        hours=diff.seconds // SECONDS_PER_HOUR,
        total_seconds=diff.total_seconds(),
    )


def calendar_key(instant: datetime | date) -> str:
    """Return the YYYY-MM-DD key of the calendar day holding instant."""
    if isinstance(instant, datetime):
        return instant.date().isoformat()
    return instant.isoformat()


def same_calendar_day(a: datetime | date, b: datetime | date) -> bool:
    return calendar_key(a) == calendar_key(b)


def parse_calendar_date(value: str | None) -> date | None:
    """Parse an explicit YYYY-MM-DD goal date. Returns None if absent or malformed."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)
