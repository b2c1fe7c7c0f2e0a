"""Entry point for Watch Sync.

Usage:
    python -m watch_sync run [--config PATH] [--datafile PATH] [--interval-ms N]
                                    Run the simulation described by a fixture
    python -m watch_sync generate OUT [--files N] [--dirs N] ...
                                    Write a random fixture to OUT
"""

from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path

from watch_sync.fixtures import FixtureError, generate_fixture, write_fixture

logger = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watch-sync",
        description="Detect changes under a watchlist and copy changed files with versions.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser("run", help="Run a fixture-driven simulation.")
    run.add_argument("--config", default=None, help="Config JSON path (default: platform config dir).")
    run.add_argument("--datafile", default=None, help="Fixture JSON path (overrides config).")
    run.add_argument(
        "--interval-ms",
        type=_non_negative_int,
        default=None,
        help="Pause between cycles (overrides config).",
    )
    run.add_argument("--no-log-file", action="store_true", help="Log to stderr only.")

    gen = commands.add_parser("generate", help="Write a random fixture.")
    gen.add_argument("output", help="Fixture JSON path to write.")
    gen.add_argument("--files", type=_non_negative_int, default=10_000)
    gen.add_argument("--dirs", type=_non_negative_int, default=100)
    gen.add_argument("--watchlist", type=_non_negative_int, default=500)
    gen.add_argument("--iterations", type=_non_negative_int, default=10)
    gen.add_argument("--update-size", type=_non_negative_int, default=5_000)
    gen.add_argument("--seed", type=int, default=None, help="Random seed for reproducible output.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and dispatch to the chosen command."""
    args = build_parser().parse_args(argv)

    if args.command == "generate":
        logging.basicConfig(level=logging.INFO, format="%(message)s")
        data = generate_fixture(
            num_files=args.files,
            num_dirs=args.dirs,
            watchlist_size=args.watchlist,
            num_iterations=args.iterations,
            update_size=args.update_size,
            rng=random.Random(args.seed),
        )
        write_fixture(data, args.output)
        return 0

    from watch_sync.config import Config
    from watch_sync.runner import run_from_config, setup_logging

    cfg = Config(args.config)
    if args.datafile is not None:
        cfg.datafile = Path(args.datafile).resolve()
    if args.interval_ms is not None:
        cfg.watch_interval_ms = args.interval_ms
    setup_logging(cfg, log_to_file=not args.no_log_file)

    try:
        run_from_config(cfg)
    except FixtureError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
