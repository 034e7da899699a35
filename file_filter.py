"""CLI entrypoint for file-filter.

This file wires together:

- Config loading and validation
- Configuration summary logging
- The filter run for the configured file type
- Exit codes for success and failure
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from filefilter import __version__
from filefilter.config import FilterConfig, load_config
from filefilter.exceptions import ConfigValidationError, ProcessingError
from filefilter.formats import FileFormat
from filefilter.logging_config import setup_logging
from filefilter.paths import filtered_output_path, rejected_output_path, resolve_input_path
from filefilter.runner import run_filter

DEFAULT_CONFIG = "filter-config.yaml"

logger = logging.getLogger(__name__)


def list_file_formats() -> List[str]:
    """Return every accepted file type tag."""
    return FileFormat.choices()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="file-filter",
        description="Split a CSV, TXT or Excel file into filtered and rejected records",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to the YAML filter configuration (default: {DEFAULT_CONFIG})",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate the configuration file, do not process the input",
    )
    parser.add_argument(
        "--list-formats",
        action="store_true",
        help="List supported file types and exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose (DEBUG level) logging",
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Suppress all output except errors"
    )
    parser.add_argument(
        "--log-format",
        choices=["human", "json", "simple"],
        default=None,
        help="Log format (default: human). Can also set via FILTER_LOG_FORMAT env var",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write JSON logs to this file. Can also set via FILTER_LOG_FILE env var",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"file-filter {__version__}",
        help="Show version and exit",
    )
    return parser


def display_config_summary(config: FilterConfig) -> None:
    logger.info("-" * 60)
    logger.info("Configuration Summary:")
    logger.info(f"  Input File: {resolve_input_path(config)}")
    logger.info(f"  File Type: {config.file_type.value}")
    if config.file_type == FileFormat.TXT:
        logger.info(f"  Delimiter: {config.delimiter!r}")
    logger.info(f"  Encoding: {config.encoding}")
    logger.info(f"  Skip Header Lines: {config.skip_header_lines}")
    expected = config.expected_total_column
    logger.info(f"  Expected Columns: {expected if expected is not None else 'No limit'}")
    logger.info(f"  Validation Rules: {len(config.validations)} rule(s)")
    for rule in config.validations:
        logger.debug(f"    - {rule.describe()}")
    logger.info(f"  Output File: {filtered_output_path(config)}")
    rejected = rejected_output_path(config) if config.output.need_rejected_data else "Disabled"
    logger.info(f"  Rejected Data File: {rejected}")
    logger.info("-" * 60)


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_formats:
        print("Supported file types:")
        for file_format in list_file_formats():
            print(f"  - {file_format}")
        return 0

    # Without -v or -q the level comes from FILTER_LOG_LEVEL, defaulting to INFO
    log_level = logging.DEBUG if args.verbose else logging.ERROR if args.quiet else None
    setup_logging(level=log_level, format_type=args.log_format, log_file=args.log_file, use_colors=True)

    logger.info("=" * 60)
    logger.info("File Filter Application Started")
    logger.info("=" * 60)

    try:
        config = load_config(args.config)
        display_config_summary(config)
        if args.validate_only:
            logger.info(f"Configuration {args.config} is valid")
            return 0
        run_filter(config)
    except (ConfigValidationError, ProcessingError) as exc:
        logger.error("=" * 60)
        logger.error("File Filter Application Failed")
        logger.error("=" * 60)
        logger.error(f"Error: {exc}", exc_info=args.verbose)
        return 1

    logger.info("=" * 60)
    logger.info("File Filter Application Completed Successfully")
    logger.info("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
