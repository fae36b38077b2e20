from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..common.config import SimConfig
from ..common.kalman import FilterState
from ..common.sensors import SystemClock
from ..common.sim_single import initial_state, numeric_path

logger = logging.getLogger(__name__)


def run(
    iterations: int = 100,
    interval: float = 2.0,
    mode: str = "float",
    cfg: SimConfig | None = None,
    clock: SystemClock | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> FilterState:
    """Track the system clock, one update every ``interval`` seconds.

    The wall clock is monotonically increasing, so the estimate should stay
    within a second of it. Returns the final state.
    """
    if cfg is None:
        cfg = SimConfig()
    if clock is None:
        clock = SystemClock()

    update, to_obs = numeric_path(cfg, mode)
    now = clock.read()
    if mode == "fixed":
        fmt = cfg.fixed()
        # leave room for the run itself
        latest = now + int(iterations) * max(int(interval), 1) + 1
        if latest > int(fmt.max):
            raise ValueError(f"{fmt.name} cannot hold unix time {latest}; use U32F32 or wider")
    state = initial_state(cfg, now, mode)

    for _ in range(int(iterations)):
        now = clock.read()
        state = update(state, to_obs(now))
        logger.info("true: %d est: %d unc: %s", now, round(float(state.estimate)), state.uncertainty)
        sleep(clock.seconds_to_next(interval))

    return state
