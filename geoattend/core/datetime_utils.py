"""
Timezone helpers. Timestamps are stored in UTC; work rules (start time,
grace period, which calendar day a check-in belongs to) use the
organisation's fixed UTC offset.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    """Current UTC time, wrapped so tests can patch it."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp (SQLite drops tzinfo) to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_tz_offset(tz_offset: str) -> timezone:
    """Turn ``+05:30`` / ``-04:00`` into a fixed-offset timezone."""
    sign = 1 if tz_offset[0] == "+" else -1
    offset_parts = tz_offset[1:].split(":")
    offset_hours = int(offset_parts[0])
    offset_mins = int(offset_parts[1]) if len(offset_parts) > 1 else 0
    return timezone(timedelta(hours=sign * offset_hours, minutes=sign * offset_mins))


def local_day(ts: datetime, tz_offset: str) -> str:
    """YYYY-MM-DD of ``ts`` in the organisation's timezone."""
    return ensure_utc(ts).astimezone(parse_tz_offset(tz_offset)).date().isoformat()


def local_hhmm(ts: datetime | None, tz_offset: str) -> str | None:
    if ts is None:
        return None
    return ensure_utc(ts).astimezone(parse_tz_offset(tz_offset)).strftime("%H:%M")


def is_late(check_in: datetime, work_start: str, grace_minutes: int, tz_offset: str) -> bool:
    """True if ``check_in`` (local time) is after work_start + grace."""
    local_time = ensure_utc(check_in).astimezone(parse_tz_offset(tz_offset))
    start_hour, start_min = (int(p) for p in work_start.split(":")[:2])
    cutoff = local_time.replace(
        hour=start_hour, minute=start_min, second=0, microsecond=0
    ) + timedelta(minutes=grace_minutes)
    return local_time > cutoff
