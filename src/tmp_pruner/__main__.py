from __future__ import annotations

import argparse
import configparser
import logging
from pathlib import Path

from tmp_pruner.prunerconfig import PrunerConfig
from tmp_pruner.prunerconfig import write_new_config
from tmp_pruner.prunermodel import InvalidRootError
from tmp_pruner.tmppruner import TmpPruner

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_INVALID = 2

logger = logging.getLogger("tmp_pruner")


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Remove stale files and fully stale directories from a root directory.",
    )
    parser.add_argument(
        "config",
        type=str,
        help="The path to the configuration file.",
    )
    parser.add_argument(
        "--root",
        help="Override the root directory from the configuration file.",
        default=None,
    )
    parser.add_argument(
        "--max-age",
        help="Override the max age from the configuration file, e.g. '2months'.",
        default=None,
    )
    parser.add_argument(
        "--dry-run",
        help="Only report what would be deleted.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--log-file",
        help="Enable logging to a file next to the config file.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--make-config",
        help="Create a default configuration file.",
        default=False,
        action="store_true",
    )
    return parser.parse_args(args)


def add_file_handler_to_logging(config_filepath: str) -> None:
    """Add a file handler to the root logger next to the config file provided."""
    filepath = Path(config_filepath).absolute()
    log_filepath = filepath.parent / f"{filepath.stem}.log"
    file_handler = logging.FileHandler(log_filepath)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.getLogger().addHandler(file_handler)


def main(*, cli_args: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(cli_args)

    if args.make_config:
        write_new_config(args.config)
        return EXIT_OK

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    if args.log_file:
        add_file_handler_to_logging(args.config)

    try:
        config = PrunerConfig(args.config)
        config.override(root_directory=args.root, max_age=args.max_age)
        pruner = TmpPruner(config)
        result = pruner.run_once(dry_run=args.dry_run)

    except InvalidRootError as error:
        logger.error("%s", error)
        return EXIT_INVALID

    except (ValueError, configparser.Error) as error:
        logger.error("Invalid configuration: %s", error)
        return EXIT_INVALID

    return EXIT_OK if result.ok else EXIT_FAILURES


if __name__ == "__main__":
    raise SystemExit(main())
