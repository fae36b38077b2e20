from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Generic

import numpy as np

from .numeric import Num, require_fixed, require_float


@dataclass(frozen=True)
class FilterState(Generic[Num]):
    """Scalar Kalman state; each update returns a new one.

    The three uncertainty-like fields are stored as magnitudes. For unsigned
    fixed-point formats ``abs`` is the identity.
    """

    estimate: Num
    uncertainty: Num
    measurement_uncertainty: Num
    process_noise: Num

    def __post_init__(self) -> None:
        object.__setattr__(self, "uncertainty", abs(self.uncertainty))
        object.__setattr__(self, "measurement_uncertainty", abs(self.measurement_uncertainty))
        object.__setattr__(self, "process_noise", abs(self.process_noise))


Update = Callable[[FilterState, Num], FilterState]


def construct(estimate: Num, uncertainty: Num, measurement_uncertainty: Num, process_noise: Num) -> FilterState:
    """Initial state; negative spreads are folded to their magnitude."""
    return FilterState(estimate, uncertainty, measurement_uncertainty, process_noise)


def _ieee_div(a, b):
    """a / b with IEEE 754 results (inf/nan) for a zero divisor, keeping numpy scalar types."""
    if b != 0:
        return a / b
    with np.errstate(divide="ignore", invalid="ignore"):
        q = np.divide(np.float64(a), np.float64(b))
    return type(b)(q) if isinstance(b, np.floating) else float(q)


def update_float(state: FilterState, observation: Num) -> FilterState:
    """Fold one observation into a floating-point state.

    gain = P / (P + R); x' = x + gain (z - x); P' = (1 - gain) P + Q.
    Both P and R zero is not guarded: the gain is nan and propagates into the
    returned state.
    """
    require_float(state.estimate, state.uncertainty, observation)

    gain = _ieee_div(state.uncertainty, state.uncertainty + state.measurement_uncertainty)
    estimate = state.estimate + gain * (observation - state.estimate)
    # process noise is added here in place of a separate predict step
    uncertainty = (1 - gain) * state.uncertainty + state.process_noise

    return FilterState(estimate, uncertainty, state.measurement_uncertainty, state.process_noise)


def update_fixed(state: FilterState, observation: Num) -> FilterState:
    """Fold one observation into a fixed-point state.

    Same recursion as ``update_float``. The innovation is only ever taken as
    a non-negative magnitude so unsigned formats never underflow; overflow and
    division by zero follow the format's own rules.
    """
    require_fixed(state.estimate, state.uncertainty, observation)
    fmt = state.estimate.fmt

    gain = state.uncertainty / (state.uncertainty + state.measurement_uncertainty)

    if observation >= state.estimate:
        estimate = state.estimate + gain * (observation - state.estimate)
    else:
        estimate = state.estimate - gain * (state.estimate - observation)

    uncertainty = (fmt.one - gain) * state.uncertainty + state.process_noise

    return FilterState(estimate, uncertainty, state.measurement_uncertainty, state.process_noise)


def iter_filter(state: FilterState, observations: Iterable, update: Update = update_float) -> Iterator[FilterState]:
    """Yield the state after every observation."""
    for z in observations:
        state = update(state, z)
        yield state


def run_filter(state: FilterState, observations: Iterable, update: Update = update_float) -> FilterState:
    """Fold all observations and return the final state."""
    for z in observations:
        state = update(state, z)
    return state


def steady_state_uncertainty(measurement_uncertainty, process_noise) -> float:
    """Fixed point P* of P' = (1 - P/(P+R)) P + Q, i.e. (Q + sqrt(Q^2 + 4QR)) / 2."""
    R = abs(float(measurement_uncertainty))
    Q = abs(float(process_noise))
    return 0.5 * (Q + float(np.sqrt(Q * Q + 4.0 * Q * R)))


def steady_state_lag(measurement_uncertainty, process_noise, rate: float = 1.0) -> float:
    """Asymptotic estimate lag behind observations rising by ``rate`` per update.

    At P* the gain is K = P*/(P*+R) and the lag e solves e = (1-K)(e+rate),
    giving e = rate * R / P*.
    """
    R = abs(float(measurement_uncertainty))
    P = steady_state_uncertainty(R, process_noise)
    if P == 0.0:
        return float("inf") if rate else 0.0
    return float(rate) * R / P
