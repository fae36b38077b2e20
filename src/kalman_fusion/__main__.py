from __future__ import annotations
import argparse
import logging

from .experiments.clock_fusion import run_all
from .experiments.unix_time import run as run_unix_time
from .common.config import SimConfig
from .common.fixed import OVERFLOW_POLICIES

def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run scalar Kalman fusion experiments.")
    parser.add_argument("--outdir", default="figs", help="Output directory for figures.")
    parser.add_argument("--trials", type=int, default=None, help="Override Monte Carlo trials.")
    parser.add_argument("--t-steps", type=int, default=None, help="Override number of clock ticks per trial.")
    parser.add_argument("--fast", action="store_true", help="Quick run with fewer trials and ticks.")
    parser.add_argument("--format", default=None, help="Fixed-point format, e.g. U32F32 or U16F48 (needs fraction bits for the 1e-6 tunings).")
    parser.add_argument("--overflow", default="raise", choices=list(OVERFLOW_POLICIES), help="Fixed-point overflow policy.")
    parser.add_argument("--mode", default="float", choices=["float", "fixed"], help="Numeric path for unix-time.")
    parser.add_argument("--iterations", type=int, default=100, help="Updates for unix-time.")
    parser.add_argument("--interval", type=float, default=2.0, help="Seconds between unix-time updates.")
    parser.add_argument("--fig-formats", default="pdf,png", help="Comma-separated figure file types.")
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    parser.add_argument(
        "--exp",
        default="fusion",
        choices=["fusion", "unix-time"],
        help="Select which experiment to run.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.exp == "unix-time":
        cfg = SimConfig(overflow=args.overflow)
        if args.format is not None:
            cfg.fixed_format = args.format
        run_unix_time(iterations=args.iterations, interval=args.interval, mode=args.mode, cfg=cfg)
    else:
        run_all(
            args.outdir,
            trials=args.trials,
            t_steps=args.t_steps,
            fast=args.fast,
            fixed_format=args.format,
            overflow=args.overflow,
            fig_formats=tuple(f.strip() for f in args.fig_formats.split(",") if f.strip()),
        )

if __name__ == "__main__":
    main()
