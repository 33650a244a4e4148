"""
Command-line entry point.

Usage:
    python -m simdrive [host] [port] [--timeout 10] [--ticks 50] [--step 0.1]
                       [--throttle 0.5] [--settle 2] [--destroy] [--verbose]
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import (
    BRAKE_SETTLE_S,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    STEP_SECONDS,
    THROTTLE,
    TICKS,
    ScenarioConfig,
)
from .scenario import run_scenario


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simdrive",
        description="Spawn a vehicle on a simulation server and drive it forward")
    parser.add_argument("host", nargs="?", default=DEFAULT_HOST)
    parser.add_argument("port", nargs="?", default=DEFAULT_PORT, type=int)
    parser.add_argument("--timeout", default=DEFAULT_TIMEOUT, type=float,
                        help="seconds to wait for each remote call")
    parser.add_argument("--ticks", default=TICKS, type=int)
    parser.add_argument("--step", default=STEP_SECONDS, type=float,
                        help="seconds between control ticks")
    parser.add_argument("--throttle", default=THROTTLE, type=float)
    parser.add_argument("--settle", default=BRAKE_SETTLE_S, type=float,
                        help="seconds to wait after braking")
    parser.add_argument("--destroy", action="store_true",
                        help="explicitly destroy the vehicle on teardown")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def parse_config(argv: Optional[List[str]] = None) -> ScenarioConfig:
    args = build_parser().parse_args(argv)
    return ScenarioConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        ticks=args.ticks,
        step=args.step,
        throttle=args.throttle,
        brake_settle=args.settle,
        destroy_remote=args.destroy,
        verbose=args.verbose,
    )


def main(argv: Optional[List[str]] = None) -> int:
    try:
        cfg = parse_config(argv)
    except ValueError as e:
        print(f"Error occurred: {e}")
        return 1
    if not cfg.verbose:
        logging.basicConfig(level=logging.WARNING)
    return run_scenario(cfg)
