"""
Time helpers (timestamps are stored as UTC, appointments in local wall-clock time)
"""
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Optional

from gamezone.config import UTC_OFFSET_HOURS

MS_PER_HOUR = Decimal(3_600_000)
LOCAL_TZ = timezone(timedelta(hours=UTC_OFFSET_HOURS))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops the offset)"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def elapsed_hours(start: datetime, end: datetime) -> Decimal:
    """Fractional hours between two instants, from whole milliseconds, unrounded"""
    delta = ensure_utc(end) - ensure_utc(start)
    ms = (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000
    return Decimal(ms) / MS_PER_HOUR


def add_hours(dt: datetime, hours: Decimal) -> datetime:
    ms = int((Decimal(hours) * MS_PER_HOUR).to_integral_value())
    return ensure_utc(dt) + timedelta(milliseconds=ms)


def local_now(now: Optional[datetime] = None) -> datetime:
    """Wall-clock time at the shop (appointments are stored in local time)"""
    return ensure_utc(now or utcnow()).astimezone(LOCAL_TZ)


def format_datetime_local(dt: Optional[datetime]) -> Optional[str]:
    """UTC instant rendered as a local time string"""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(LOCAL_TZ).strftime("%Y-%m-%d %H:%M:%S")
