from __future__ import annotations

import numpy as np


def mean_ci95(values) -> tuple[float, float]:
    """Return (mean, half-width of the normal-approximation 95% interval)."""
    x = np.asarray(values, dtype=float).ravel()
    if x.size == 0:
        return float("nan"), float("nan")
    m = float(np.mean(x))
    if x.size < 2:
        return m, 0.0
    return m, float(1.96 * np.std(x, ddof=1) / np.sqrt(x.size))


def abs_error(truth, estimate) -> np.ndarray:
    return np.abs(np.asarray(truth, dtype=float) - np.asarray(estimate, dtype=float))
