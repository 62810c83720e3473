"""Rendering helpers for instants and offsets (epoch milliseconds)."""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_datetime(instant_ms: int, tz: Optional[tzinfo] = None) -> datetime:
    """Convert epoch milliseconds to a datetime in ``tz`` (local zone if None)."""
    moment = _EPOCH + timedelta(milliseconds=instant_ms)
    return moment.astimezone(tz)


def format_instant(instant_ms: int, tz: Optional[tzinfo] = None) -> str:
    """Render as ``YYYY-MM-DD HH:MM:SS.mmm``."""
    moment = to_datetime(instant_ms, tz)
    return f"{moment:%Y-%m-%d %H:%M:%S}.{moment.microsecond // 1000:03d}"


def to_iso8601(instant_ms: int) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    moment = to_datetime(instant_ms, timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_offset(offset_ms: int) -> str:
    sign = "+" if offset_ms > 0 else ""
    return f"{sign}{offset_ms}ms"
