"""Entry point for ecs-inventory."""

import argparse
import logging
import signal
import sys
import threading
from typing import Any

from ecs_inventory import __version__
from ecs_inventory.config import AppConfig, LogLevel, load_config, resolve_log_level
from ecs_inventory.utils.errors import ECSInventoryError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: LogLevel, log_file: str = "") -> None:
    """Configure logging for the application."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=level.value,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="ecs-inventory",
        description="Gather the images running in Amazon ECS clusters and report them to Anchore",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Application config file (default: search the usual locations)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v = info, -vv = debug)",
    )

    # Run modes
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=None,
        help="Do not print inventory reports to stdout",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Do not report inventory to Anchore",
    )
    parser.add_argument(
        "-m",
        "--metadata",
        action="store_true",
        default=None,
        help="Include task and service metadata in reports",
    )
    parser.add_argument(
        "-r",
        "--region",
        default=None,
        help="AWS region to inventory (default: from AWS config)",
    )
    parser.add_argument(
        "-p",
        "--polling-interval-seconds",
        type=int,
        default=None,
        help="Seconds between inventory runs; 0 runs once (default: 300)",
    )
    parser.add_argument(
        "--max-concurrent-clusters",
        type=int,
        default=None,
        help="Maximum clusters processed at the same time (default: 10)",
    )

    # Anchore delivery
    parser.add_argument("--anchore-url", default=None, help="Anchore API base URL")
    parser.add_argument("--anchore-user", default=None, help="Anchore username")
    parser.add_argument("--anchore-password", default=None, help="Anchore password")
    parser.add_argument("--anchore-account", default=None, help="Anchore account (default: admin)")

    return parser


def config_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Collect the options given on the command line as config overrides."""
    overrides: dict[str, Any] = {}

    for name in (
        "quiet",
        "dry_run",
        "metadata",
        "region",
        "polling_interval_seconds",
        "max_concurrent_clusters",
    ):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value

    anchore: dict[str, Any] = {}
    for name in ("url", "user", "password", "account"):
        value = getattr(args, f"anchore_{name}")
        if value is not None:
            anchore[name] = value
    if anchore:
        overrides["anchore"] = anchore

    return overrides


def run(config: AppConfig) -> int:
    """Run once or periodically, depending on the polling interval."""
    from ecs_inventory.domains.inventory.coordinator import (
        get_inventory_reports_for_region,
        poll_inventory_reports,
    )

    logger = logging.getLogger(__name__)

    if config.polling_interval_seconds == 0:
        try:
            get_inventory_reports_for_region(config)
        except ECSInventoryError as e:
            logger.error(f"Failed to get inventory reports: {e}")
            return 1
        return 0

    stop = threading.Event()

    def _handle_signal(signum: int, _frame: Any) -> None:
        logger.info(f"Received signal {signum}, stopping")
        stop.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    logger.info(f"Polling for inventory every {config.polling_interval_seconds} seconds")
    poll_inventory_reports(config, stop)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, config_overrides(args))
        level = resolve_log_level(config, args.verbose)
    except ECSInventoryError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(level, config.log.file)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting ecs-inventory v{__version__}")
    logger.debug(f"Application config:\n{config.redacted_yaml()}")

    return run(config)


if __name__ == "__main__":
    sys.exit(main())
