from __future__ import annotations

from dataclasses import dataclass

from .fixed import FixedFormat


@dataclass
class SimConfig:
    # filter tuning
    uncertainty: float = 1e-3
    measurement_uncertainty: float = 1e-6
    process_noise: float = 1e-6

    # simulated clocks: each tick advances |N(step_mean, step_sigma)| seconds
    num_sensors: int = 8
    t_steps: int = 1000
    step_mean: float = 1.0
    step_sigma: float = 1e-4
    start: int = 1_700_000_000
    trial_offset: int = 100

    # Monte Carlo
    trials: int = 25
    seed: int = 7

    # fixed-point path
    fixed_format: str = "U32F32"
    overflow: str = "raise"

    # figure output
    fig_formats: tuple[str, ...] = ("pdf", "png")

    def fixed(self) -> FixedFormat:
        return FixedFormat.parse(self.fixed_format, overflow=self.overflow)
