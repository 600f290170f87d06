"""Clock and UTC helpers.

Every timestamp in the domain is timezone-aware UTC. Components that expire
or cache things take a ``Clock`` instead of reading the wall clock, so a test
can freeze or advance time.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """The default clock: current time in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize ``dt`` to UTC.

    Naive datetimes are taken to already be UTC; aware ones are converted.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_expired(expiry: datetime | None, now: datetime) -> bool:
    """Whether ``expiry`` lies strictly before ``now``.

    An entry whose expiry equals ``now`` is still live. ``None`` never
    expires.
    """
    if expiry is None:
        return False
    return ensure_utc(expiry) < ensure_utc(now)


def add_hours(dt: datetime, hours: float) -> datetime:
    return dt + timedelta(hours=hours)


def datetime_to_iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()


def iso_to_datetime(iso_string: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp (``Z`` suffix accepted) into UTC.

    Raises:
        ValueError: If the string is not ISO 8601
    """
    if iso_string is None:
        return None
    return ensure_utc(datetime.fromisoformat(iso_string.replace("Z", "+00:00")))
