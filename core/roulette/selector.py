"""Index-first winner selection and the wheel geometry it relies on.

Segments are laid out clockwise starting at the pointer (top of the wheel).
Segment ``i`` covers the wheel-frame arc ``[i*s, (i+1)*s)`` with
``s = 2*pi / n``. Rotating the wheel clockwise by ``theta`` brings the
wheel-frame angle ``(-theta) mod 2*pi`` under the pointer.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from core.roulette.errors import InvalidState

TAU = 2 * math.pi

MIN_FULL_TURNS = 3
MAX_FULL_TURNS = 5
# how close (fraction of a segment) the pointer may land to a segment edge
EDGE_MARGIN = 0.10


@dataclass(frozen=True)
class SpinOutcome:
    selected_index: int
    selected_item: str
    rotation_angle: float  # radians, clockwise, measured from the zero orientation

    @property
    def resting_angle(self) -> float:
        return self.rotation_angle % TAU


def segment_angle(item_count: int) -> float:
    if item_count <= 0:
        raise InvalidState("wheel has no segments")
    return TAU / item_count


def index_to_angle_range(index: int, item_count: int) -> Tuple[float, float]:
    """Wheel-frame arc ``[start, end)`` drawn for segment ``index``."""
    s = segment_angle(item_count)
    if not 0 <= index < item_count:
        raise IndexError(f"segment {index} out of range for {item_count} items")
    return index * s, (index + 1) * s


def angle_to_index(rotation: float, item_count: int) -> int:
    """Index of the segment under the pointer after rotating by ``rotation``.

    A pointer sitting exactly on a boundary belongs to the segment whose arc
    starts there.
    """
    s = segment_angle(item_count)
    alpha = (-rotation) % TAU
    return int(math.floor(alpha / s + 1e-12)) % item_count


def resting_angle(index: int, item_count: int, offset: float = 0.5) -> float:
    """Orientation in ``[0, 2*pi)`` that puts ``offset`` of segment ``index`` under the pointer."""
    start, end = index_to_angle_range(index, item_count)
    return (-(start + (end - start) * offset)) % TAU


class RandomSelector:
    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random

    def pick_index(self, item_count: int) -> int:
        if item_count <= 0:
            raise InvalidState("cannot spin an empty wheel")
        return self._rng.randrange(item_count)

    def select(self, items: Sequence[str]) -> SpinOutcome:
        snapshot = tuple(items)
        index = self.pick_index(len(snapshot))
        offset = self._rng.uniform(EDGE_MARGIN, 1.0 - EDGE_MARGIN)
        turns = self._rng.randint(MIN_FULL_TURNS, MAX_FULL_TURNS)
        angle = turns * TAU + resting_angle(index, len(snapshot), offset)
        return SpinOutcome(
            selected_index=index,
            selected_item=snapshot[index],
            rotation_angle=angle,
        )
