"""Periodic callbacks tied to a screen's visible lifetime.

Each ticker owns its own ``asyncio.Task``; ``start()`` and ``stop()`` are
explicit and idempotent. Nothing here is global.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, Sequence

from core.constants import STATUS_ROTATE_SECONDS
from core.daily_rollover import local_now
from core.roulette.eligibility import EligibilityGate, LockState, is_unlocked

logger = logging.getLogger(__name__)


class PeriodicTask:
    def __init__(
        self,
        interval: float,
        *,
        name: str = "periodic",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.interval = float(interval)
        self.name = name
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name=self.name)

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def _loop(self):
        while True:
            await self._sleep(self.interval)
            try:
                keep_going = await self.tick()
            except Exception:
                logger.exception("[%s] tick failed", self.name)
                keep_going = True
            if keep_going is False:
                break
        self._task = None

    async def tick(self) -> Optional[bool]:
        """Run once per interval. Return False to stop the task."""
        raise NotImplementedError


class LockCountdown(PeriodicTask):
    """Once-per-second countdown while the gate is locked.

    ``on_tick(remaining_seconds)`` fires every second; when the remaining time
    reaches zero the gate is re-checked against the clock and
    ``on_change(state)`` fires with whatever it says. If the gate is still
    locked (the clock moved) the countdown keeps going.
    """

    def __init__(
        self,
        gate: EligibilityGate,
        *,
        on_tick: Optional[Callable[[int], None]] = None,
        on_change: Optional[Callable[[LockState], None]] = None,
        clock: Callable[[], datetime] = local_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        super().__init__(1.0, name="lock-countdown", sleep=sleep)
        self.gate = gate
        self.on_tick = on_tick
        self.on_change = on_change
        self.clock = clock
        self.remaining = 0

    def start(self) -> None:
        self.remaining = int(self.gate.seconds_remaining(self.clock()))
        super().start()

    async def tick(self) -> Optional[bool]:
        self.remaining = max(0, self.remaining - 1)
        if self.on_tick is not None:
            self.on_tick(self.remaining)
        if self.remaining > 0:
            return True

        state = self.gate.check(self.clock())
        if self.on_change is not None:
            self.on_change(state)
        if is_unlocked(state):
            return False
        self.remaining = int(self.gate.seconds_remaining(self.clock()))
        return True


class WindowCloseWatch(PeriodicTask):
    """One-shot re-check at the end of the spin window while the gate is open.

    Sleeps until the window's end hour, then fires ``on_change(state)`` once
    the gate reports a lock. If the clock says the gate is still open the
    wait is re-armed. Never starts for a window that spans the whole day.
    """

    def __init__(
        self,
        gate: EligibilityGate,
        *,
        on_change: Optional[Callable[[LockState], None]] = None,
        clock: Callable[[], datetime] = local_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        super().__init__(0.0, name="window-close", sleep=sleep)
        self.gate = gate
        self.on_change = on_change
        self.clock = clock

    def _arm(self) -> bool:
        seconds = self.gate.seconds_until_close(self.clock())
        if seconds is None:
            return False
        self.interval = max(1.0, seconds)
        return True

    def start(self) -> None:
        if self.running or not self._arm():
            return
        super().start()

    async def tick(self) -> Optional[bool]:
        state = self.gate.check(self.clock())
        if is_unlocked(state):
            return self._arm()
        if self.on_change is not None:
            self.on_change(state)
        return False


class StatusTicker(PeriodicTask):
    """Cycles through a fixed list of status messages."""

    def __init__(
        self,
        messages: Sequence[str],
        on_message: Callable[[str], Awaitable[None]],
        *,
        interval: float = STATUS_ROTATE_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        super().__init__(interval, name="status-ticker", sleep=sleep)
        self.messages = list(messages)
        self.on_message = on_message
        self.index = 0

    def current(self) -> Optional[str]:
        if not self.messages:
            return None
        return self.messages[self.index % len(self.messages)]

    async def tick(self) -> Optional[bool]:
        message = self.current()
        if message is None:
            return False
        await self.on_message(message)
        self.index = (self.index + 1) % len(self.messages)
        return True
