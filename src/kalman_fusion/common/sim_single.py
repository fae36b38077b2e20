from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np

from .config import SimConfig
from .kalman import FilterState, Update, construct, run_filter, update_fixed, update_float
from .sensors import SensorBank

logger = logging.getLogger(__name__)

MODES = ("float", "fixed")


def numeric_path(cfg: SimConfig, mode: str) -> tuple[Update, Callable]:
    """Return (update, to_obs) for the chosen numeric path.

    ``to_obs`` converts plain Python numbers into the path's representation.
    """
    if mode == "float":
        return update_float, float
    if mode == "fixed":
        return update_fixed, cfg.fixed().from_num
    raise ValueError(f"Unknown mode: {mode}")


def check_fixed(cfg: SimConfig) -> None:
    """Reject tunings the fixed format rounds to a filter that divides by zero."""
    fmt = cfg.fixed()
    if not fmt(cfg.measurement_uncertainty) and not fmt(cfg.process_noise):
        raise ValueError(
            f"{fmt.name} rounds measurement_uncertainty={cfg.measurement_uncertainty!r} "
            f"and process_noise={cfg.process_noise!r} to zero"
        )


def fitted_start(cfg: SimConfig, mode: str = "float", trials: int | None = None) -> int:
    """Start time for a run; fixed-point runs are moved down to fit the format.

    The whole Monte Carlo sweep (trials * trial_offset plus t_steps ticks) must
    stay below the format's max.
    """
    start = int(cfg.start)
    if mode != "fixed":
        return start
    fmt = cfg.fixed()
    span = int(np.ceil(1.1 * cfg.t_steps * float(cfg.step_mean)))
    span += int(cfg.trials if trials is None else trials) * int(cfg.trial_offset) + 1
    top = int(fmt.max) - span
    if top < 0:
        raise ValueError(f"{fmt.name} cannot hold a {span} s clock run")
    if start > top:
        logger.info("%s: start moved from %d to %d to fit the format", fmt.name, start, top)
        return top
    return start


def initial_state(cfg: SimConfig, estimate: float, mode: str = "float") -> FilterState:
    _, to_obs = numeric_path(cfg, mode)
    if mode == "fixed":
        check_fixed(cfg)
    return construct(
        to_obs(estimate),
        to_obs(cfg.uncertainty),
        to_obs(cfg.measurement_uncertainty),
        to_obs(cfg.process_noise),
    )


def track_ramp(
    state: FilterState,
    n: int,
    update: Update = update_float,
    to_obs: Callable = float,
    rate: float = 1.0,
) -> FilterState:
    """Feed observations rate*1, rate*2, ..., rate*n and return the final state."""
    # integer ramps stay integers so fixed-point conversion is exact
    ramp = range(1, int(n) + 1) if rate == 1.0 else (rate * i for i in range(1, int(n) + 1))
    return run_filter(state, (to_obs(z) for z in ramp), update)


def simulate(
    cfg: SimConfig,
    mode: str = "float",
    rng: np.random.Generator | None = None,
    start: int | None = None,
) -> dict:
    """Fuse a bank of drifting clocks through one filter for cfg.t_steps ticks.

    Every tick each sensor's reading is folded in sequentially. The true clock
    is a counter advancing step_mean per tick.

    Returns a dict with:
      - estimate / uncertainty / truth: per-tick traces (float arrays)
      - err: truth - estimate per tick
      - diff: final truth - estimate
      - final_uncertainty: final filter uncertainty
      - state: the final FilterState
    """
    if rng is None:
        rng = np.random.default_rng(int(cfg.seed) & 0xFFFFFFFF)
    if start is None:
        start = fitted_start(cfg, mode)

    update, to_obs = numeric_path(cfg, mode)
    state = initial_state(cfg, start, mode)
    bank = SensorBank(cfg.num_sensors, start, rng, cfg.step_mean, cfg.step_sigma)

    estimate = np.zeros(cfg.t_steps)
    uncertainty = np.zeros(cfg.t_steps)
    truth = np.zeros(cfg.t_steps)

    for k in range(cfg.t_steps):
        for reading in bank.tick():
            state = update(state, to_obs(reading))
        truth[k] = start + (k + 1) * float(cfg.step_mean)
        estimate[k] = float(state.estimate)
        uncertainty[k] = float(state.uncertainty)

    err = truth - estimate
    return dict(
        estimate=estimate,
        uncertainty=uncertainty,
        truth=truth,
        err=err,
        diff=float(err[-1]) if err.size else 0.0,
        final_uncertainty=float(state.uncertainty),
        state=state,
    )


def monte_carlo(cfg: SimConfig, mode: str = "float", seeds: list[int] | None = None) -> dict:
    """Run one simulation per trial, each starting trial_offset seconds later.

    Returns arrays (one entry per trial) of final diff and final uncertainty.
    """
    if seeds is None:
        rng_master = np.random.default_rng(int(cfg.seed) & 0xFFFFFFFF)
        seeds = rng_master.integers(0, 2**31 - 1, size=int(cfg.trials), dtype=np.int64).tolist()

    base = fitted_start(cfg, mode, trials=len(seeds))
    diffs, uncs = [], []
    for trial, s in enumerate(seeds, start=1):
        rng = np.random.default_rng(int(s))
        start = base + trial * int(cfg.trial_offset)
        out = simulate(cfg, mode, rng=rng, start=start)
        diffs.append(out["diff"])
        uncs.append(out["final_uncertainty"])
        logger.debug(
            "%s trial %d: steps=%d diff=%.6g uncertainty=%.6g",
            mode, trial, cfg.t_steps, out["diff"], out["final_uncertainty"],
        )

    return dict(
        diff=np.asarray(diffs, dtype=float),
        uncertainty=np.asarray(uncs, dtype=float),
    )
