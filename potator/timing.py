"""Frame timing and fixed-rate update scheduling."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from .components import LaunchingParams

_NS_PER_SECOND = 1_000_000_000


class FixedStep(ABC):
    """Something updated at a fixed tick rate."""

    @abstractmethod
    def set_tick_rate(self, tick_rate: int) -> None:
        """Told the number of ticks per second before updates begin."""

    @abstractmethod
    def update(self) -> None:
        """Advance by one tick."""


class FrameClock:
    """Measures the time between consecutive ``update`` calls.

    ``now`` returns a monotonic time in nanoseconds.
    """

    def __init__(self, now: Callable[[], int] = time.monotonic_ns) -> None:
        self._now = now
        self._last_time: int | None = None
        self._frame_time_ns = 0

    def update(self) -> None:
        now = self._now()
        if self._last_time is not None:
            self._frame_time_ns = now - self._last_time
        self._last_time = now

    @property
    def frame_time_ns(self) -> int:
        """Length of the last frame in nanoseconds; zero before two updates."""
        return self._frame_time_ns

    @property
    def frame_time(self) -> float:
        """Length of the last frame in seconds."""
        return self._frame_time_ns / _NS_PER_SECOND


class FixedStepTracker:
    """Runs subscribers as many fixed ticks as the elapsed frame time allows."""

    def __init__(self, params: LaunchingParams, clock: FrameClock) -> None:
        if params.fixed_step_rate <= 0:
            raise ValueError("fixed step rate must be positive")
        self._tick_rate = params.fixed_step_rate
        self._fixed_step_ns = _NS_PER_SECOND // self._tick_rate
        self._clock = clock
        self._accumulator_ns = 0
        self._subscribers: list[FixedStep] = []

    @property
    def tick_rate(self) -> int:
        return self._tick_rate

    @property
    def fixed_step_ns(self) -> int:
        return self._fixed_step_ns

    def subscribe(self, subscriber: FixedStep) -> None:
        subscriber.set_tick_rate(self._tick_rate)
        self._subscribers.append(subscriber)

    def update(self) -> None:
        self._accumulator_ns += self._clock.frame_time_ns
        while self._accumulator_ns >= self._fixed_step_ns:
            for subscriber in self._subscribers:
                subscriber.update()
            self._accumulator_ns -= self._fixed_step_ns