"""One screen's worth of roulette: gate + selector + animation + presenter."""
from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime
from typing import Optional, Protocol, Sequence, Tuple

from core.constants import DISCOUNT_CODES
from core.daily_rollover import local_now
from core.restaurants import Restaurant, share_text
from core.roulette.animation import AnimationHandle, SpinCompleted, WheelAnimationController
from core.roulette.eligibility import EligibilityGate, LockState, Unlocked, is_unlocked
from core.roulette.errors import InvalidState, Locked
from core.roulette.selector import RandomSelector, SpinOutcome
from core.roulette.ticker import LockCountdown, WindowCloseWatch

logger = logging.getLogger(__name__)


class Presenter(Protocol):
    def display_wheel(self, items: Sequence[str]) -> None: ...
    def display_winner(self, restaurant: Restaurant) -> None: ...
    def display_spin_locked(self, state: LockState) -> None: ...
    def display_discount_code(self, code: str) -> None: ...
    def open_external_map(self, latitude: float, longitude: float, name: str) -> None: ...
    def share_text(self, text: str) -> None: ...


class SpinSession:
    def __init__(
        self,
        restaurants: Sequence[Restaurant],
        gate: EligibilityGate,
        presenter: Presenter,
        *,
        selector: Optional[RandomSelector] = None,
        controller: Optional[WheelAnimationController] = None,
        discount_codes: Sequence[str] = DISCOUNT_CODES,
        rng: Optional[random.Random] = None,
        clock=local_now,
        sleep=asyncio.sleep,
    ):
        self.restaurants: Tuple[Restaurant, ...] = tuple(restaurants)
        self.gate = gate
        self.presenter = presenter
        self.selector = selector or RandomSelector()
        self.controller = controller or WheelAnimationController()
        self.controller.set_items(self.items)
        self.controller.add_listener(self._on_spin_completed)
        self.discount_codes = list(discount_codes)
        self._rng = rng or random
        self.clock = clock

        self.outcome: Optional[SpinOutcome] = None
        self.handle: Optional[AnimationHandle] = None
        self.winner: Optional[Restaurant] = None
        self.discount_code: Optional[str] = None
        self.state: LockState = Unlocked()
        self._snapshot: Tuple[Restaurant, ...] = ()
        self.countdown = LockCountdown(gate, on_change=self._on_lock_change, clock=clock, sleep=sleep)
        self.window_watch = WindowCloseWatch(gate, on_change=self._on_lock_change, clock=clock, sleep=sleep)

    @property
    def items(self) -> Tuple[str, ...]:
        return tuple(r.name for r in self.restaurants)

    @property
    def can_spin(self) -> bool:
        return bool(self.restaurants) and is_unlocked(self.state) and not self.controller.is_spinning

    def start(self) -> LockState:
        self.presenter.display_wheel(self.items)
        return self.lock_state()

    def stop(self) -> None:
        self.countdown.stop()
        self.window_watch.stop()
        self.controller.cancel()
        self.controller.remove_listener(self._on_spin_completed)

    def set_restaurants(self, restaurants: Sequence[Restaurant]) -> None:
        self.restaurants = tuple(restaurants)
        self.controller.set_items(self.items)
        self.presenter.display_wheel(self.items)

    def lock_state(self, now: Optional[datetime] = None) -> LockState:
        self.state = self.gate.check(now or self.clock())
        self.presenter.display_spin_locked(self.state)
        self._sync_countdown()
        return self.state

    def request_spin(self, now: Optional[datetime] = None) -> SpinOutcome:
        now = now or self.clock()
        state = self.gate.check(now)
        if not is_unlocked(state):
            self.state = state
            raise Locked(state)
        if not self.restaurants:
            raise InvalidState("no restaurants on the wheel")
        if self.controller.is_spinning:
            raise InvalidState("the wheel is already spinning")

        self._snapshot = self.restaurants
        outcome = self.selector.select(self.items)
        # the daily spin is consumed here, before the wheel settles
        self.state = self.gate.record_spin(now)
        self.outcome = outcome
        self.winner = None
        self.discount_code = None
        self.handle = self.controller.start_spin(outcome)
        logger.info("Spin requested: #%s %r", outcome.selected_index, outcome.selected_item)
        return outcome

    def reset(self) -> LockState:
        self.state = self.gate.reset()
        self.presenter.display_spin_locked(self.state)
        self._sync_countdown()
        return self.state

    def open_map(self) -> None:
        if self.winner is None:
            return
        r = self.winner
        self.presenter.open_external_map(r.latitude, r.longitude, r.name)

    def share(self) -> None:
        if self.winner is None:
            return
        self.presenter.share_text(share_text(self.winner))

    def draw_discount_code(self) -> Optional[str]:
        if not self.discount_codes:
            return None
        return self._rng.choice(self.discount_codes)

    def _on_spin_completed(self, event: SpinCompleted) -> None:
        if event.outcome is not self.outcome:
            return
        self.winner = self._snapshot[event.outcome.selected_index]
        self.presenter.display_winner(self.winner)
        self.discount_code = self.draw_discount_code()
        if self.discount_code:
            self.presenter.display_discount_code(self.discount_code)
        self.lock_state()

    def _on_lock_change(self, state: LockState) -> None:
        self.state = state
        self.presenter.display_spin_locked(state)
        # countdown hands over to the window watch on unlock, and back on lock
        if is_unlocked(state):
            self._start_quietly(self.window_watch)
        elif not self.countdown.running:
            self._start_quietly(self.countdown)

    def _sync_countdown(self) -> None:
        if is_unlocked(self.state):
            self.countdown.stop()
            self._start_quietly(self.window_watch)
        else:
            self.window_watch.stop()
            self._start_quietly(self.countdown)

    @staticmethod
    def _start_quietly(ticker) -> None:
        try:
            ticker.start()
        except RuntimeError:
            # no running loop (e.g. called from sync code); the next check re-evaluates
            pass
