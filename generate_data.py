"""CLI entrypoint for report-datagen.

Reads a schema ("ddl") file of concatenated report descriptors and writes
``--order`` synthetic rows per report to the output file.

    python generate_data.py --ddl reports.json --out generated_data.json --order 100
"""

import sys
import argparse
import logging
import time
from typing import List, Optional

from reportgen import __version__
from reportgen.config import (
    DEFAULT_ORDER,
    DEFAULT_OUT_FILE,
    RunOptions,
    load_settings,
)
from reportgen.emitter import write_reports
from reportgen.exceptions import ConfigValidationError, OutputError, SchemaDecodeError, SchemaFileError
from reportgen.generators import default_random_source
from reportgen.logging_config import log_performance, setup_logging
from reportgen.models import ReportDescriptor, sort_reports_by_name
from reportgen.schema_loader import load_reports_from_path

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate synthetic JSON rows for report schemas",
    )
    parser.add_argument("--ddl", default="", help="ddl file (required)")
    parser.add_argument("--out", default=DEFAULT_OUT_FILE, help=f"out file (default: {DEFAULT_OUT_FILE})")
    parser.add_argument(
        "--order",
        default=DEFAULT_ORDER,
        help=f"Number of rows to generate per report (default: {DEFAULT_ORDER})",
    )
    parser.add_argument(
        "--config",
        help="Optional YAML settings file for generator parameters",
    )
    parser.add_argument(
        "--min-occurrence",
        type=int,
        default=None,
        help="Emit the minimum datetime for about 1 in N datetime values (0 disables)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the random source (output is otherwise not reproducible)",
    )
    parser.add_argument(
        "--sort-by-name",
        action="store_true",
        help="Emit reports ordered by name instead of file order",
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
        help="Log format (default: human). Can also set via REPORTGEN_LOG_FORMAT env var",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"report-datagen {__version__}",
        help="Show version and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = (
        logging.DEBUG if args.verbose else logging.ERROR if args.quiet else logging.INFO
    )
    setup_logging(level=log_level, format_type=args.log_format, use_colors=True)

    try:
        settings = load_settings(args.config).with_minimum_occurrence(args.min_occurrence)
        options = RunOptions.validate(
            args.ddl,
            out_file=args.out,
            order=args.order,
            seed=args.seed,
            sort_by_name=args.sort_by_name,
            settings=settings,
        )
    except ConfigValidationError as exc:
        logger.error(f"Error: {exc.message}")
        parser.print_usage(sys.stderr)
        return 1

    return GenerateOrchestrator(options).execute()


class GenerateOrchestrator:
    """Runs one generation: load the schema, then write every report."""

    def __init__(self, options: RunOptions) -> None:
        self.options = options

    def execute(self) -> int:
        reports = self._load_reports()
        if reports is None:
            return 1

        if self.options.sort_by_name:
            reports = sort_reports_by_name(reports)

        started = time.perf_counter()
        rng = default_random_source(self.options.seed)
        try:
            with open(self.options.out_file, "w", encoding="utf-8", newline="\n") as out:
                summary = write_reports(
                    reports, self.options.row_count, out, rng, self.options.settings
                )
        except OSError as exc:
            logger.error(f"Trouble opening output file:{self.options.out_file}. {exc}")
            return 1
        except OutputError as exc:
            logger.error(str(exc))
            return 1

        log_performance(
            logger,
            "generation",
            time.perf_counter() - started,
            reports=summary.reports,
            rows_written=summary.rows_written,
            rows_skipped=summary.rows_skipped,
        )
        return 0

    def _load_reports(self) -> Optional[List[ReportDescriptor]]:
        try:
            return load_reports_from_path(self.options.ddl_file)
        except SchemaFileError as exc:
            logger.error(f"{exc.message}. {exc.details.get('original_error', '')}")
        except SchemaDecodeError as exc:
            logger.error(str(exc))
        return None


if __name__ == "__main__":
    sys.exit(main())
