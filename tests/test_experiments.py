from pathlib import Path

import pytest

from kalman_fusion.__main__ import main
from kalman_fusion.common.config import SimConfig
from kalman_fusion.experiments.clock_fusion import figure_ramp, run_all


def test_run_all_writes_figures(tmp_path: Path):
    summary = run_all(str(tmp_path), trials=2, t_steps=15, fast=True)
    for name in ("fig_convergence", "fig_ramp_tracking", "fig_clock_fusion"):
        assert (tmp_path / f"{name}.png").exists()
        assert (tmp_path / f"{name}.pdf").exists()

    assert summary["convergence"]["float64"] < 1e-4
    assert summary["convergence"]["I8F24"] < 1e-4
    assert summary["ramp"]["fixed"]["steps"] == 200
    assert abs(summary["ramp"]["float"]["lag"]) < 2e-3
    assert set(summary["fusion"]) == {"float", "fixed"}
    assert abs(summary["fusion"]["fixed"]["diff_mean"]) < 0.5


def test_cli_fusion(tmp_path: Path):
    main(["--outdir", str(tmp_path), "--fast", "--trials", "2", "--t-steps", "10", "--format", "U32F32"])
    assert (tmp_path / "fig_clock_fusion.png").exists()


def test_cli_rejects_unknown_experiment():
    with pytest.raises(SystemExit):
        main(["--exp", "predict"])


def test_cli_narrow_integer_format(tmp_path: Path):
    main([
        "--outdir", str(tmp_path), "--fast", "--trials", "1", "--t-steps", "5",
        "--format", "U16F48", "--fig-formats", "png",
    ])
    assert (tmp_path / "fig_clock_fusion.png").exists()
    assert not (tmp_path / "fig_clock_fusion.pdf").exists()


def test_cli_rejects_format_without_resolution(tmp_path: Path):
    with pytest.raises(ValueError, match="rounds"):
        main(["--outdir", str(tmp_path), "--fast", "--trials", "1", "--t-steps", "5", "--format", "I16F16"])
    assert not (tmp_path / "fig_convergence.png").exists()


def test_ramp_figure_follows_fixed_format(tmp_path: Path):
    out = figure_ramp(SimConfig(fixed_format="I8F24", fig_formats=("png",)), tmp_path, n=200)
    assert out["fixed"]["steps"] == 127
    assert abs(out["fixed"]["lag"]) < 2e-3
    assert (tmp_path / "fig_ramp_tracking.png").exists()
