#!/usr/bin/env python3
"""Standalone staleness auditor for environments without the full engine.

Loads the catalog with the line-oriented subset parser and runs the same
staleness rules as ``patternlint staleness``, using only the standard
library. Prints a Markdown report to stdout.

Exit codes:
    0  No blocking issues
    1  Script error (invalid catalog path, bad threshold, unreadable file)
    2  Blocking issues found (overdue review_by dates)
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Mapping
from datetime import date
from pathlib import Path

from patternlint.catalog import CatalogError, load_catalog
from patternlint.frontmatter_subset import parse_subset
from patternlint.staleness import (
    DEFAULT_MAX_LAST_VERIFIED_DAYS,
    StalenessAuditor,
    render_markdown,
)

EXIT_OK = 0
EXIT_SCRIPT_ERROR = 1
EXIT_BLOCKING = 2

MAX_DAYS_ENV = "MAX_LAST_VERIFIED_DAYS"

EPILOG = f"""\
Environment Variables:
  {MAX_DAYS_ENV}    Days before last_verified is stale (default: {DEFAULT_MAX_LAST_VERIFIED_DAYS})

Exit Codes:
  0    No blocking issues
  1    Script error (invalid path, bad threshold, etc.)
  2    Blocking issues found (overdue review_by dates)

Example:
  patternlint-staleness patterns
  {MAX_DAYS_ENV}=60 patternlint-staleness patterns
"""


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the standalone auditor."""
    parser = argparse.ArgumentParser(
        prog="patternlint-staleness",
        description="Audit pattern records for maintenance issues.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "catalog_root",
        nargs="?",
        default="patterns",
        help="Path to patterns directory (default: patterns)",
    )
    return parser


def _read_threshold(environ: Mapping[str, str]) -> int:
    """Read the last-verified threshold from the environment.

    Raises:
        ValueError: If the value is not a non-negative integer.
    """
    raw = environ.get(MAX_DAYS_ENV, "").strip()
    if not raw:
        return DEFAULT_MAX_LAST_VERIFIED_DAYS
    if not raw.isdigit():
        raise ValueError(f"{MAX_DAYS_ENV} must be a non-negative integer, got {raw!r}")
    return int(raw)


def main(argv: list[str] | None = None, today: date | None = None) -> int:
    """Run the standalone auditor.

    Args:
        argv: Command-line arguments (defaults to ``sys.argv[1:]``).
        today: Reference date (defaults to the local calendar date).

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)

    try:
        max_days = _read_threshold(os.environ)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR

    catalog_path = Path(args.catalog_root)
    if not catalog_path.is_dir():
        print(f"ERROR: catalog root is not a directory: {catalog_path}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR

    try:
        catalog = load_catalog(Path.cwd(), catalog_path.resolve(), parser=parse_subset)
    except CatalogError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR

    report = StalenessAuditor(max_days).audit(catalog, today or date.today())
    sys.stdout.write(render_markdown(report, args.catalog_root))

    return EXIT_BLOCKING if report.blocking else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
