import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from perceivedload.cli.commands.report import handle as handle_report
from perceivedload.config.resolution import (
    cascade,
    resolve_db_path,
    resolve_log_level,
)
from perceivedload.config.settings import (
    VALID_LOG_LEVELS,
    ConfigContext,
    load_config_context,
    load_config_file,
)
from perceivedload.errors import SeriesError

logger = logging.getLogger("perceivedload.cli")


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="perceived-load",
        description="Log a daily perceived task load and report trailing averages.",
    )
    parser.add_argument(
        "value",
        nargs="?",
        type=float,
        help="new reading to record now (omit to only report)",
    )
    parser.add_argument(
        "--db",
        metavar="FILE",
        help="database file to use (default: $PERCEIVED_LOAD_DB or ~/.config/perceived-load.csv)",
    )
    parser.add_argument(
        "--config",
        "-c",
        metavar="FILE",
        help="explicit perceived-load.yaml (default: search upward from cwd)",
    )
    parser.add_argument(
        "--lookback",
        "-l",
        dest="lookbacks",
        action="append",
        type=_positive_int,
        metavar="DAYS",
        help="trailing window in days; repeat for several (default: 1 5 15)",
    )
    parser.add_argument(
        "--log-level",
        choices=list(VALID_LOG_LEVELS),
        type=str.upper,
        help="set logging level (default: WARNING)",
    )
    return parser


def configure_logging(level: int) -> None:
    handler = RichHandler(
        console=Console(file=sys.stderr),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    # force drops any handlers already on the root logger
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


def _load_context(config_path: Optional[str]) -> ConfigContext:
    if config_path:
        return load_config_file(Path(config_path).expanduser())
    return load_config_context()


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        context = _load_context(args.config)
    except (FileNotFoundError, TypeError, ValueError) as exc:
        configure_logging(logging.ERROR)
        logger.error("%s", exc)
        raise SystemExit(1)
    cfg = context.config

    level = resolve_log_level(args.log_level, cfg.log_level, fallback="WARNING")
    configure_logging(level.value)

    db = resolve_db_path(args.db, context.resolve_db())
    lookbacks = cascade(args.lookbacks, fallback=cfg.lookbacks)
    logger.debug("Using database %s with lookbacks %s", db, lookbacks)

    try:
        handle_report(
            db=db,
            value=args.value,
            lookbacks=lookbacks,
            granularity=cfg.granularity,
        )
    except SeriesError as exc:
        logger.error("%s", exc)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
