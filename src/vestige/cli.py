"""
Command-line entry point.

    vestige BASE_PATH [--log-dir DIR] [--verbose] ...

BASE_PATH must be an existing directory holding ``config/config.txt``. On
success the report path is printed and the exit code is 0; any error exits
with 1.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .core.controller import VestigeController, RunSettings, RunSummary
from .core.errors import VestigeError, ConfigurationError
from .core.logger import initialize_logging, get_logger
from .utils.config import load_path_roles
from .utils.targets import load_targets, RunClock


class _ArgumentParser(argparse.ArgumentParser):
    """argparse reports usage errors with exit code 1 instead of 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    ap = _ArgumentParser(prog="vestige", description="Archive department pages and their assets.")
    ap.add_argument("base_path", help="Existing base directory containing config/config.txt")
    ap.add_argument("--log-dir", default=None, help="Directory for rotating log files (default: console only)")
    ap.add_argument("--verbose", action="store_true", help="Log debug output to the console")
    ap.add_argument("--batch-size", type=int, default=3, help="Fetches per throttle window (default: 3)")
    ap.add_argument("--delay", type=float, default=1.0, help="Pause after each window in seconds (default: 1.0)")
    ap.add_argument("--timeout", type=float, default=60.0, help="Per-request timeout in seconds (default: 60)")
    ap.add_argument("--lifo", action="store_true", help="Process the target list last line first")
    ap.add_argument("--space-replacement", default=" ",
                    help="Replacement for %%20 in asset file names (default: a space)")
    return ap


def run(base_path: str, settings: Optional[RunSettings] = None, clock: Optional[RunClock] = None) -> RunSummary:
    """
    Load configuration and targets under ``base_path`` and archive them.

    Raises:
        ConfigurationError: If the base path, config file or target list is invalid
    """
    if not os.path.isdir(base_path):
        raise ConfigurationError(f"Invalid base path: {base_path}")

    paths = load_path_roles(base_path)
    targets = load_targets(paths.targets_file)
    controller = VestigeController(paths, settings)
    try:
        return controller.run(targets, clock or RunClock.now())
    finally:
        controller.retriever.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    initialize_logging(args.log_dir, logging.DEBUG if args.verbose else logging.INFO)
    logger = get_logger('cli')

    settings = RunSettings(
        batch_size=args.batch_size,
        batch_delay_secs=args.delay,
        timeout_secs=args.timeout,
        space_replacement=args.space_replacement,
        queue_order="lifo" if args.lifo else "fifo",
    )

    try:
        summary = run(args.base_path, settings)
    except (VestigeError, ValueError) as e:
        print(f"Application error: {e}")
        return 1

    print("Application completed successfully")
    print(f"Report Location: {summary.report_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
