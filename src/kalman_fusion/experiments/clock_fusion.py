from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from ..common.config import SimConfig
from ..common.fixed import FixedFormat
from ..common.kalman import (
    construct,
    iter_filter,
    steady_state_lag,
    steady_state_uncertainty,
    update_fixed,
    update_float,
)
from ..common.sim_single import (
    check_fixed,
    fitted_start,
    initial_state,
    monte_carlo,
    numeric_path,
    simulate,
)
from ..common.utils import abs_error, mean_ci95

logger = logging.getLogger(__name__)


def apply_style() -> None:
    plt.rcParams.update({
        "font.family": "serif",
        "font.size": 8,
        "axes.labelsize": 8,
        "legend.fontsize": 7,
        "xtick.labelsize": 7,
        "ytick.labelsize": 7,
        "pdf.fonttype": 42,
        "lines.linewidth": 1.0,
        "grid.linewidth": 0.4,
    })


def savefig(fig, outdir: Path, name: str, formats: tuple[str, ...] = ("pdf", "png")) -> list[Path]:
    """Write ``name.<ext>`` for every format; raster formats at 300 dpi."""
    outdir.mkdir(parents=True, exist_ok=True)
    paths = []
    for ext in formats:
        path = outdir / f"{name}.{ext}"
        fig.savefig(path, dpi=300, bbox_inches="tight")
        paths.append(path)
    logger.debug("wrote %s", ", ".join(p.name for p in paths))
    return paths


def figure_convergence(cfg: SimConfig, outdir: Path, n: int = 40) -> dict:
    """Constant observation: |c - estimate| per update, float and fixed paths."""
    apply_style()

    c = 1.0
    curves: dict[str, np.ndarray] = {}
    for label, dtype in (("float64", np.float64), ("float32", np.float32)):
        s0 = construct(dtype(0.5), dtype(0.1), dtype(1e-4), dtype(1.0))
        est = [float(s.estimate) for s in iter_filter(s0, [dtype(c)] * n, update_float)]
        curves[label] = abs_error(np.full(n, c), est)

    fmt = FixedFormat.parse("I8F24")
    s0 = construct(fmt(0.5), fmt(0.1), fmt(1e-4), fmt(1.0))
    est = [float(s.estimate) for s in iter_filter(s0, [fmt(c)] * n, update_fixed)]
    curves[fmt.name] = abs_error(np.full(n, c), est)

    fig, ax = plt.subplots(figsize=(3.3, 2.4))
    k = np.arange(1, n + 1)
    for label, err in curves.items():
        ax.semilogy(k, np.maximum(err, 1e-18), "o-", markersize=2.5, label=label)
    ax.set_xlabel("update")
    ax.set_ylabel(r"$|c - \hat{x}_k|$")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best", frameon=True, borderpad=0.3)

    fig.tight_layout(pad=0.6)
    savefig(fig, outdir, "fig_convergence", cfg.fig_formats)
    plt.close(fig)
    return {label: float(err[-1]) for label, err in curves.items()}


def figure_ramp(cfg: SimConfig, outdir: Path, n: int = 1000) -> dict:
    """Ramp tracking: lag and uncertainty against their steady-state values.

    The fixed-point run uses cfg.fixed_format and stops at its largest integer.
    """
    apply_style()

    R, Q = 1e-6, 1e-3
    ramp_cfg = SimConfig(**cfg.__dict__)
    ramp_cfg.uncertainty = 1.0
    ramp_cfg.measurement_uncertainty = R
    ramp_cfg.process_noise = Q

    out = {}
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(6.6, 2.4))
    for mode in ("float", "fixed"):
        update, to_obs = numeric_path(ramp_cfg, mode)
        steps = n if mode == "float" else min(n, int(ramp_cfg.fixed().max))
        s0 = initial_state(ramp_cfg, 0, mode)
        states = list(iter_filter(s0, (to_obs(i) for i in range(1, steps + 1)), update))
        k = np.arange(1, steps + 1)
        lag = k - np.array([float(s.estimate) for s in states])
        unc = np.array([float(s.uncertainty) for s in states])
        label = "float" if mode == "float" else ramp_cfg.fixed_format
        ax1.semilogy(k, np.maximum(np.abs(lag), 1e-18), label=label)
        ax2.semilogy(k, unc, label=label)
        out[mode] = dict(lag=float(lag[-1]), uncertainty=float(unc[-1]), steps=steps)

    ax1.axhline(steady_state_lag(R, Q), color="k", linestyle=":", label="steady state")
    ax1.set_xlabel("update")
    ax1.set_ylabel(r"$k - \hat{x}_k$")
    ax1.grid(True, alpha=0.3)
    ax1.legend(loc="best", frameon=True, borderpad=0.3)

    ax2.axhline(steady_state_uncertainty(R, Q), color="k", linestyle=":", label=r"$P^*$")
    ax2.set_xlabel("update")
    ax2.set_ylabel(r"$P_k$")
    ax2.grid(True, alpha=0.3)
    ax2.legend(loc="best", frameon=True, borderpad=0.3)

    fig.tight_layout(pad=0.6)
    savefig(fig, outdir, "fig_ramp_tracking", cfg.fig_formats)
    plt.close(fig)
    return out


def figure_clock_fusion(cfg: SimConfig, outdir: Path) -> dict:
    """Drifting-clock fusion: one trace per path plus final error over trials."""
    apply_style()

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(6.6, 2.4))
    summary = {}
    for mode, marker in (("float", "o"), ("fixed", "D")):
        label = "float" if mode == "float" else cfg.fixed_format
        trace = simulate(cfg, mode)
        ax1.plot(np.arange(1, cfg.t_steps + 1), trace["err"], label=label)

        mc = monte_carlo(cfg, mode)
        m, ci = mean_ci95(mc["diff"])
        summary[mode] = dict(diff_mean=m, diff_ci=ci, uncertainty_mean=mean_ci95(mc["uncertainty"])[0])
        logger.info("%s: diff %.6g +/- %.3g over %d trials", label, m, ci, mc["diff"].size)
        ax2.plot(np.arange(1, mc["diff"].size + 1), mc["diff"], marker + "-", label=label)

    ax1.set_xlabel("tick")
    ax1.set_ylabel("true - estimate [s]")
    ax1.grid(True, alpha=0.3)
    ax1.legend(loc="best", frameon=True, borderpad=0.3)

    ax2.set_xlabel("trial")
    ax2.set_ylabel("final diff [s]")
    ax2.grid(True, alpha=0.3)
    ax2.legend(loc="best", frameon=True, borderpad=0.3)

    fig.tight_layout(pad=0.6)
    savefig(fig, outdir, "fig_clock_fusion", cfg.fig_formats)
    plt.close(fig)
    return summary


def run_all(
    outdir: str = "figs",
    trials: int | None = None,
    t_steps: int | None = None,
    fast: bool = False,
    fixed_format: str | None = None,
    overflow: str | None = None,
    fig_formats: tuple[str, ...] | None = None,
) -> dict:
    outdir = Path(outdir)
    cfg = SimConfig()

    if fast:
        if trials is None:
            trials = 4
        if t_steps is None:
            t_steps = 100
    if trials is not None:
        cfg.trials = int(trials)
    if t_steps is not None:
        cfg.t_steps = int(t_steps)
    if fixed_format is not None:
        cfg.fixed_format = fixed_format
    if overflow is not None:
        cfg.overflow = overflow
    if fig_formats is not None:
        cfg.fig_formats = tuple(fig_formats)
    logger.info("running with trials=%d, t_steps=%d, format=%s", cfg.trials, cfg.t_steps, cfg.fixed_format)
    # fail before any figure if the fixed format cannot run the clock sweep
    check_fixed(cfg)
    fitted_start(cfg, "fixed")

    return dict(
        convergence=figure_convergence(cfg, outdir),
        ramp=figure_ramp(cfg, outdir, n=200 if fast else 1000),
        fusion=figure_clock_fusion(cfg, outdir),
    )
