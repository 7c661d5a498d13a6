"""Main CLI entry point for the i5-validator command-line tool.

Validates XML files against the DTD they declare and optionally writes the
collected findings to a JSON report.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from i5_validator import __version__
from i5_validator.api.runner import BatchRunner
from i5_validator.shared.config import CompressionKind, ConfigError, RunnerConfig
from i5_validator.shared.errors import I5ValidatorError
from i5_validator.shared.logging import configure_logging, get_logger

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="i5-validator",
        description="process and validate XML files against the DTD they declare"
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "input_files",
        nargs="+",
        type=Path,
        metavar="FILE",
        help="input files"
    )
    parser.add_argument(
        "-L", "--log-file",
        type=Path,
        default=None,
        help="report file name (default: i5validation.json)"
    )
    parser.add_argument(
        "-p", "--parallel",
        action="store_true",
        default=None,
        help="use multiple threads"
    )
    parser.add_argument(
        "-c", "--compression",
        choices=[kind.value for kind in CompressionKind],
        default=None,
        help="compression (default: none; overridden from file name!)"
    )
    parser.add_argument(
        "-d", "--dom",
        action="store_true",
        default=None,
        help="use DOM instead of SAX"
    )
    parser.add_argument(
        "-l", "--log-to-json",
        action="store_true",
        default=None,
        help="collect errors and write log file"
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=None,
        help="number of threads for --parallel (default: executor default)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON configuration file"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="verbose output"
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="only log errors"
    )

    return parser


def build_config(args: argparse.Namespace) -> RunnerConfig:
    """Merge the configuration file (if any) with command-line options.

    Raises:
        ConfigError: If the configuration file or an option value is invalid
    """
    config = RunnerConfig.from_file(args.config) if args.config else RunnerConfig()
    return config.override(
        input_files=args.input_files,
        report_path=args.log_file,
        parallel=args.parallel,
        compression=(
            CompressionKind.from_name(args.compression) if args.compression else None
        ),
        use_dom=args.dom,
        keep_record=args.log_to_json,
        max_workers=args.workers,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        configure_logging(logging.DEBUG)
    elif args.quiet:
        configure_logging(logging.ERROR)
    else:
        configure_logging(logging.INFO)
    logger = get_logger(__name__, None, "cli")

    try:
        config = build_config(args)
    except ConfigError as e:
        logger.critical(str(e))
        return EXIT_USAGE

    try:
        BatchRunner(config).run()
    except I5ValidatorError as e:
        logger.critical(f"Validation run aborted: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.critical("Validation interrupted by user")
        return EXIT_INTERRUPTED

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
