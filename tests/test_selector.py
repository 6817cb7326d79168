import math
import random

import pytest

from core.roulette.errors import InvalidState
from core.roulette.selector import (
    MIN_FULL_TURNS,
    TAU,
    RandomSelector,
    angle_to_index,
    index_to_angle_range,
    resting_angle,
)


@pytest.mark.parametrize("count", [1, 2, 3, 5, 7, 12, 37])
def test_select_index_in_range(count):
    selector = RandomSelector(random.Random(count))
    items = [f"item{i}" for i in range(count)]
    for _ in range(200):
        outcome = selector.select(items)
        assert 0 <= outcome.selected_index < count
        assert outcome.selected_item == items[outcome.selected_index]


def test_select_covers_every_segment():
    selector = RandomSelector(random.Random(42))
    seen = {selector.pick_index(6) for _ in range(500)}
    assert seen == set(range(6))


def test_select_empty_wheel_raises():
    with pytest.raises(InvalidState):
        RandomSelector().select([])
    with pytest.raises(InvalidState):
        RandomSelector().pick_index(0)


def test_rotation_lands_on_selected_segment():
    selector = RandomSelector(random.Random(7))
    items = ["a", "b", "c", "d", "e"]
    for _ in range(300):
        outcome = selector.select(items)
        assert outcome.rotation_angle >= MIN_FULL_TURNS * TAU
        assert angle_to_index(outcome.rotation_angle, len(items)) == outcome.selected_index
        assert angle_to_index(outcome.resting_angle, len(items)) == outcome.selected_index


def test_select_snapshot_is_not_affected_by_later_mutation():
    items = ["a", "b", "c"]
    outcome = RandomSelector(random.Random(1)).select(items)
    picked = outcome.selected_item
    items[outcome.selected_index] = "changed"
    assert outcome.selected_item == picked


@pytest.mark.parametrize("count", [1, 2, 3, 4, 6, 9, 13])
def test_index_and_angle_mappings_are_inverse(count):
    for i in range(count):
        start, end = index_to_angle_range(i, count)
        # pointer exactly on the segment's opening boundary belongs to that segment
        assert angle_to_index(-start, count) == i
        assert angle_to_index(-(start + end) / 2, count) == i
        assert angle_to_index(resting_angle(i, count), count) == i
        # just before the closing boundary is still this segment
        assert angle_to_index(-(end - 1e-9), count) == i


def test_boundary_tie_break_picks_segment_starting_there():
    # rotation 0 puts the 0/last boundary under the pointer
    assert angle_to_index(0.0, 4) == 0
    assert angle_to_index(-math.pi / 2, 4) == 1


def test_index_out_of_range():
    with pytest.raises(IndexError):
        index_to_angle_range(4, 4)
