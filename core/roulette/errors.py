"""Errors raised by the roulette core. All of them are recoverable."""
from __future__ import annotations


class RouletteError(Exception):
    """Base class for roulette errors."""


class DataLoadError(RouletteError):
    """The bundled restaurant dataset is missing or unreadable."""


class InvalidState(RouletteError):
    """Spin requested with an empty wheel or while one is already in flight."""


class Locked(RouletteError):
    """Spin requested while the eligibility gate forbids it."""

    def __init__(self, state):
        self.state = state
        super().__init__(getattr(state, "message", str(state)))
