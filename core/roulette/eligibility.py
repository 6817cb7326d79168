"""Daily spin eligibility.

A user may spin once per local day, and only while the clock is inside the
daily spin window ``[start_hour, end_hour)``. The state is recomputed from
the wall clock on every check; nothing assumes a lock has expired.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from core.daily_rollover import next_hour_start, next_midnight, roulette_timezone, seconds_until, to_local
from core.roulette.records import SpinRecord, SpinRecordStore

logger = logging.getLogger(__name__)

DEFAULT_START_HOUR = 0
DEFAULT_END_HOUR = 10


def _hour_label(hour: int) -> str:
    return f"{hour % 24:02d}:00"


@dataclass(frozen=True)
class Unlocked:
    @property
    def message(self) -> str:
        return "Spin is ready!"


@dataclass(frozen=True)
class LockedForWindow:
    until: datetime

    @property
    def message(self) -> str:
        return f"The wheel opens at {self.until.strftime('%H:%M')}."


@dataclass(frozen=True)
class LockedAlreadySpun:
    until: datetime

    @property
    def message(self) -> str:
        return "You already spun today. Come back after midnight!"


LockState = Union[Unlocked, LockedForWindow, LockedAlreadySpun]


def is_unlocked(state: LockState) -> bool:
    return isinstance(state, Unlocked)


def in_window(hour: int, start_hour: int, end_hour: int) -> bool:
    """Half-open ``[start_hour, end_hour)``; wraps past midnight when start > end."""
    if start_hour == end_hour:
        return True
    if start_hour < end_hour:
        return start_hour <= hour < end_hour
    return hour >= start_hour or hour < end_hour


class EligibilityGate:
    def __init__(
        self,
        store: SpinRecordStore,
        *,
        start_hour: int = DEFAULT_START_HOUR,
        end_hour: int = DEFAULT_END_HOUR,
        tz: Optional[ZoneInfo] = None,
    ):
        if not (0 <= start_hour <= 23 and 0 <= end_hour <= 24):
            raise ValueError(f"bad spin window [{start_hour}, {end_hour})")
        self.store = store
        self.start_hour = start_hour
        self.end_hour = end_hour
        self.tz = tz or roulette_timezone()
        record = store.load()
        self._last_spin_date: Optional[date] = record.last_spin_date if record else None

    @property
    def last_spin_date(self) -> Optional[date]:
        return self._last_spin_date

    @property
    def window_label(self) -> str:
        return f"{_hour_label(self.start_hour)}–{_hour_label(self.end_hour)}"

    def check(self, now: Optional[datetime] = None) -> LockState:
        local = to_local(now, self.tz)
        if self._last_spin_date == local.date():
            return LockedAlreadySpun(until=next_midnight(local))
        if not in_window(local.hour, self.start_hour, self.end_hour):
            return LockedForWindow(until=next_hour_start(self.start_hour, local))
        return Unlocked()

    def seconds_remaining(self, now: Optional[datetime] = None) -> float:
        state = self.check(now)
        if isinstance(state, Unlocked):
            return 0.0
        return seconds_until(state.until, now, self.tz)

    @property
    def whole_day(self) -> bool:
        return self.start_hour == self.end_hour or (self.start_hour == 0 and self.end_hour == 24)

    def seconds_until_close(self, now: Optional[datetime] = None) -> Optional[float]:
        """Seconds until the window's end hour; None when the window never closes."""
        if self.whole_day:
            return None
        local = to_local(now, self.tz)
        return seconds_until(next_hour_start(self.end_hour, local), local, self.tz)

    def record_spin(self, now: Optional[datetime] = None) -> LockState:
        local = to_local(now, self.tz)
        self.store.save(SpinRecord(last_spin_date=local.date()))
        self._last_spin_date = local.date()
        logger.info("Recorded spin for %s", local.date().isoformat())
        return self.check(local)

    def reset(self) -> LockState:
        self.store.clear()
        self._last_spin_date = None
        logger.info("Spin record cleared")
        return Unlocked()
