from __future__ import annotations

import math
import time
from collections.abc import Callable

import numpy as np


class DriftingClock:
    """Clock whose hidden time advances by |N(step_mean, step_sigma)| per tick.

    The hidden time lives on a float continuum; readings are whole seconds.
    """

    def __init__(
        self,
        start: float,
        rng: np.random.Generator,
        step_mean: float = 1.0,
        step_sigma: float = 1e-4,
    ) -> None:
        self.internal = float(start)
        self.rng = rng
        self.step_mean = float(step_mean)
        self.step_sigma = float(step_sigma)

    def tick(self) -> int:
        blip = abs(float(self.rng.normal(self.step_mean, self.step_sigma)))
        self.internal += blip
        return self.read()

    def read(self) -> int:
        return int(round(self.internal))


class SensorBank:
    """Several identical drifting clocks sampled together on every tick."""

    def __init__(
        self,
        num_sensors: int,
        start: float,
        rng: np.random.Generator,
        step_mean: float = 1.0,
        step_sigma: float = 1e-4,
    ) -> None:
        if int(num_sensors) < 1:
            raise ValueError(f"Need at least one sensor, got {num_sensors}")
        self.clocks = [DriftingClock(start, rng, step_mean, step_sigma) for _ in range(int(num_sensors))]

    def __len__(self) -> int:
        return len(self.clocks)

    def tick(self) -> list[int]:
        return [c.tick() for c in self.clocks]


class SystemClock:
    """Whole-second unix time from a wall clock (``time.time`` by default)."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    def now(self) -> float:
        return float(self._clock())

    def read(self) -> int:
        return int(self.now())

    def seconds_to_next(self, interval: float) -> float:
        """Wait that lands ``interval`` seconds after the start of the current second."""
        if interval <= 0.0:
            return 0.0
        now = self.now()
        return max(0.0, float(interval) - (now - math.floor(now)))
