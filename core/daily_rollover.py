"""Shared helpers for the roulette's local day (default midnight ET).

Environment variables:
- ROULETTE_TZ: IANA timezone name. Defaults to "America/New_York".
"""
from __future__ import annotations

import os
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo


def _safe_int(val, *, minimum: int, maximum: int, default: int) -> int:
    try:
        num = int(str(val).strip())
    except Exception:
        return default
    return max(minimum, min(maximum, num))


def env_int(name: str, default: int, *, minimum: int = -(2 ** 31), maximum: int = 2 ** 31) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return _safe_int(raw, minimum=minimum, maximum=maximum, default=default)


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(str(raw).strip())
    except Exception:
        return default


_ROULETTE_TZ_NAME = os.getenv("ROULETTE_TZ", "America/New_York")
ROULETTE_TZ = ZoneInfo(_ROULETTE_TZ_NAME)


def roulette_timezone() -> ZoneInfo:
    """Return the configured roulette timezone (default America/New_York)."""
    return ROULETTE_TZ


def roulette_tz_label() -> str:
    return _ROULETTE_TZ_NAME


def local_now(tz: ZoneInfo | None = None) -> datetime:
    return datetime.now(tz or ROULETTE_TZ)


def to_local(dt: datetime | None, tz: ZoneInfo | None = None) -> datetime:
    """Aware datetime in ``tz``. Naive values are taken as already local."""
    tz = tz or ROULETTE_TZ
    if dt is None:
        return datetime.now(tz)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def local_day(dt: datetime | None = None, tz: ZoneInfo | None = None) -> date:
    return to_local(dt, tz).date()


def next_midnight(dt: datetime | None = None, tz: ZoneInfo | None = None) -> datetime:
    now = to_local(dt, tz)
    return datetime.combine(now.date() + timedelta(days=1), time(0, 0), tzinfo=now.tzinfo)


def next_hour_start(hour: int, dt: datetime | None = None, tz: ZoneInfo | None = None) -> datetime:
    """Next ``hour:00:00`` strictly after ``dt`` (today if not reached yet, else tomorrow)."""
    now = to_local(dt, tz)
    target = datetime.combine(now.date(), time(hour % 24, 0), tzinfo=now.tzinfo)
    if target <= now:
        target = datetime.combine(now.date() + timedelta(days=1), time(hour % 24, 0), tzinfo=now.tzinfo)
    return target


def seconds_until(target: datetime, dt: datetime | None = None, tz: ZoneInfo | None = None) -> float:
    """Elapsed seconds, not wall-clock: a DST day is 23 or 25 hours long."""
    now = to_local(dt, tz)
    # same-zone aware subtraction ignores the UTC offset change
    return max(0.0, target.timestamp() - now.timestamp())
