"""Rotation animation for the wheel.

The controller does not decide anything: it is handed a ``SpinOutcome`` and
eases the wheel from its current orientation to the outcome's resting
orientation, then tells its listeners which item won.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from core.roulette.errors import InvalidState
from core.roulette.selector import TAU, SpinOutcome

logger = logging.getLogger(__name__)

SPIN_SECONDS = 3.0
FPS = 30


def ease_out_cubic(progress: float) -> float:
    p = min(1.0, max(0.0, progress))
    return 1 - (1 - p) ** 3


def spin_end_angle(start: float, outcome: SpinOutcome) -> float:
    """Absolute angle the wheel stops at when spun from ``start``.

    The travel is always forward (clockwise) and the stop angle is congruent
    to ``outcome.resting_angle``.
    """
    base = start - (start % TAU)
    end = base + outcome.rotation_angle
    if end <= start:
        end += TAU
    return end


def frame_angles(start: float, end: float, frames: int) -> List[float]:
    """Eased orientation for each of ``frames`` frames, first = start, last = end."""
    frames = max(2, int(frames))
    out = []
    for i in range(frames):
        prog = ease_out_cubic(i / (frames - 1))
        out.append(start + (end - start) * prog)
    out[-1] = end
    return out


@dataclass(frozen=True)
class SpinCompleted:
    outcome: SpinOutcome
    item: str


class AnimationHandle:
    """One spin in flight. Await ``wait()`` for the completion event."""

    def __init__(self, outcome: SpinOutcome, items: Tuple[str, ...], start: float, end: float):
        self.outcome = outcome
        self.items = items
        self.start_angle = start
        self.end_angle = end
        self.cancelled = False
        self.event: Optional[SpinCompleted] = None
        self._task: Optional[asyncio.Task] = None

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> Optional[SpinCompleted]:
        if self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
        return self.event


Listener = Callable[[SpinCompleted], None]
FrameHook = Callable[[float], None]


class WheelAnimationController:
    def __init__(
        self,
        items: Sequence[str] = (),
        *,
        duration: float = SPIN_SECONDS,
        fps: int = FPS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_frame: Optional[FrameHook] = None,
    ):
        self._items: Tuple[str, ...] = tuple(items)
        self.duration = float(duration)
        self.fps = max(1, int(fps))
        self._sleep = sleep
        self.on_frame = on_frame
        self.rotation = 0.0
        self._listeners: List[Listener] = []
        self._handle: Optional[AnimationHandle] = None

    @property
    def items(self) -> Tuple[str, ...]:
        return self._items

    def set_items(self, items: Sequence[str]) -> None:
        # an in-flight spin keeps the snapshot it started with
        self._items = tuple(items)

    @property
    def is_spinning(self) -> bool:
        return self._handle is not None

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def resting_angle(self, outcome: SpinOutcome) -> float:
        return outcome.resting_angle

    def start_spin(self, outcome: SpinOutcome) -> AnimationHandle:
        if not self._items:
            raise InvalidState("cannot spin an empty wheel")
        if self._handle is not None:
            raise InvalidState("a spin is already in flight")
        if not 0 <= outcome.selected_index < len(self._items):
            raise InvalidState(
                f"outcome index {outcome.selected_index} out of range for {len(self._items)} items"
            )

        start = self.rotation
        end = spin_end_angle(start, outcome)
        handle = AnimationHandle(outcome, self._items, start, end)
        self._handle = handle
        handle._task = asyncio.get_running_loop().create_task(
            self._run(handle), name="wheel-spin"
        )
        return handle

    def cancel(self) -> None:
        handle = self._handle
        if handle is None:
            return
        handle.cancelled = True
        self._handle = None
        if handle._task is not None:
            handle._task.cancel()

    async def _run(self, handle: AnimationHandle) -> None:
        frames = max(2, int(round(self.duration * self.fps)) + 1)
        step = self.duration / (frames - 1)
        for i, angle in enumerate(frame_angles(handle.start_angle, handle.end_angle, frames)):
            if self._handle is not handle:
                return
            if i:
                await self._sleep(step)
                if self._handle is not handle:
                    return
            self.rotation = angle
            if self.on_frame is not None:
                self.on_frame(angle)

        self.rotation = handle.end_angle % TAU
        self._handle = None
        item = handle.items[handle.outcome.selected_index]
        event = SpinCompleted(outcome=handle.outcome, item=item)
        handle.event = event
        logger.info("Spin settled on #%s %r", handle.outcome.selected_index, item)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Spin completion listener failed")
