import asyncio
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from core.restaurants import Restaurant
from core.roulette.animation import WheelAnimationController
from core.roulette.eligibility import EligibilityGate
from core.roulette.records import MemorySpinRecordStore

TZ = ZoneInfo("America/New_York")


def at(year=2025, month=5, day=25, hour=3, minute=0, second=0) -> datetime:
    return datetime(year, month, day, hour, minute, second, tzinfo=TZ)


async def fast_sleep(_seconds: float) -> None:
    await asyncio.sleep(0)


async def settle(rounds: int = 50) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingPresenter:
    def __init__(self):
        self.wheels = []
        self.winners = []
        self.locks = []
        self.codes = []
        self.maps = []
        self.shared = []

    def display_wheel(self, items):
        self.wheels.append(tuple(items))

    def display_winner(self, restaurant):
        self.winners.append(restaurant)

    def display_spin_locked(self, state):
        self.locks.append(state)

    def display_discount_code(self, code):
        self.codes.append(code)

    def open_external_map(self, latitude, longitude, name):
        self.maps.append((latitude, longitude, name))

    def share_text(self, text):
        self.shared.append(text)


def make_restaurant(i: int, name: str) -> Restaurant:
    return Restaurant(
        id=str(i),
        name=name,
        discount=f"{i * 5}% off",
        address=f"{i} Night St",
        latitude=37.0 + i / 100,
        longitude=-122.0 - i / 100,
        cuisine="Late Night",
        rating=4.0,
        open_until="2:00 AM",
    )


@pytest.fixture
def restaurants():
    names = ["Taco Time", "Burger Joint", "Pizza Paradise", "Midnight Ramen", "Tasty Bites"]
    return [make_restaurant(i, n) for i, n in enumerate(names, start=1)]


@pytest.fixture
def store():
    return MemorySpinRecordStore()


@pytest.fixture
def gate(store):
    return EligibilityGate(store, start_hour=0, end_hour=10, tz=TZ)


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def controller():
    return WheelAnimationController(duration=0.1, fps=20, sleep=fast_sleep)
