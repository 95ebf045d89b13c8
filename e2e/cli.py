"""
Test-data maintenance commands.

    ui-web-test-data init      create the directory layout and canonical fixtures
    ui-web-test-data cleanup   remove generated test-/user- files
    ui-web-test-data summary   print the test-data summary as JSON
"""

import argparse
import sys
from typing import List, Optional

import structlog

from e2e.config import Settings
from e2e.log import configure_logging
from e2e.test_data import FixtureError, TestDataManager

logger = structlog.get_logger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ui-web-test-data",
        description="Manage the test-data directory used by the UI suite",
    )
    parser.add_argument(
        "--root",
        default=str(settings.TEST_DATA_ROOT),
        help=f"Test-data root directory (default: {settings.TEST_DATA_ROOT})",
    )
    parser.add_argument(
        "--run-id",
        help="Run identifier; with --isolate the data lives under <root>/run-<run-id>",
    )
    parser.add_argument(
        "--isolate",
        action="store_true",
        default=settings.TEST_DATA_ISOLATE_RUNS,
        help="Use a per-run sub-directory of the root",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init", help="Create directories and canonical fixture files")
    subparsers.add_parser("cleanup", help="Delete generated test-/user- files")
    subparsers.add_parser("summary", help="Print a JSON summary of the test data")
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    """
    Entry point for the test-data CLI.

    Returns:
        Exit code (0 on success, 1 if the command failed)
    """
    settings = settings or Settings()
    parser = build_parser(settings)
    args = parser.parse_args(argv)
    if args.isolate and args.run_id is None and args.command != "init":
        parser.error(f"{args.command} with an isolated run needs --run-id (printed by init)")

    if args.verbose:
        settings = settings.model_copy(update={"LOG_LEVEL": "DEBUG"})
    configure_logging(settings)

    manager = TestDataManager(args.root, run_id=args.run_id, isolate_run=args.isolate)

    try:
        if args.command == "init":
            manager.initialize()
            print(f"Test data initialized at {manager.test_data_path}")
            if manager.isolate_run:
                print(f"Run id: {manager.run_id}")
        elif args.command == "cleanup":
            removed = manager.cleanup_test_data()
            print(f"Removed {len(removed)} file(s) from {manager.test_data_path}")
        else:
            print(manager.to_json())
    except FixtureError as e:
        logger.error("test_data_command_failed", command=args.command, error=str(e))
        print(f"\n❌ {args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
