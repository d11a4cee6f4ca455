"""patternlint CLI Tool - Main entry point."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from patternlint import __version__
from patternlint.catalog import Catalog, CatalogError, load_catalog
from patternlint.cli_utils import (
    EXIT_FINDINGS,
    configure_logging,
    error,
    json_option,
    parse_today,
    patterns_option,
    quiet_option,
    resolve_root,
    root_option,
    warning,
    wire_config,
)
from patternlint.config import PatternlintConfig
from patternlint.index_builder import IndexWriteError, build_rows, write_index
from patternlint.rules import RulesError, load_rules, load_sanitization_rules
from patternlint.staleness import StalenessAuditor, render_markdown
from patternlint.validators.base import ValidationIssue, result_from_issues
from patternlint.validators.runner import AggregatedResult, ValidationRunner
from patternlint.validators.sanitization import SanitizationScanner, scan_record

app = typer.Typer(
    name="patternlint",
    help="patternlint - Integrity checks for a catalog of Markdown pattern records.",
    add_completion=False,
)

# Rich consoles for output
console = Console()
err_console = Console(stderr=True)

# Issues shown per run in human output before truncating
MAX_DISPLAYED_ISSUES = 200


# -----------------------------------------------------------------------------
# Output Helpers
# -----------------------------------------------------------------------------


def _output_success(message: str, quiet: bool = False) -> None:
    """Print a success message."""
    if not quiet:
        console.print(f"[green]Success:[/green] {escape(message)}")


def _output_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def _print_issues(issues: list[ValidationIssue], quiet: bool) -> None:
    """Print issues one per line; quiet mode prints errors only."""
    shown = [i for i in issues if i.severity == "error"] if quiet else issues
    for issue in shown[:MAX_DISPLAYED_ISSUES]:
        if issue.severity == "error":
            label = "[red]FAIL[/red]"
        elif issue.severity == "warning":
            label = "[yellow]WARN[/yellow]"
        else:
            label = "[blue]INFO[/blue]"
        location = issue.file or "-"
        if issue.line:
            location = f"{location}:{issue.line}"
        console.print(f"  {label} {escape(location)} \\[{issue.check}] {escape(issue.message)}")

    hidden = len(shown) - MAX_DISPLAYED_ISSUES
    if hidden > 0:
        console.print(f"  ... {hidden} more")


def _print_summary(result: AggregatedResult, records: int, quiet: bool) -> None:
    if quiet:
        return
    console.print("")
    console.print(f"  Patterns: {records}")
    console.print(
        f"  Issues: {result.total_issues} "
        f"({result.errors} errors, {result.warnings} warnings)"
    )


# -----------------------------------------------------------------------------
# Loading Helpers
# -----------------------------------------------------------------------------


def _load(
    root: str | None,
    patterns: str | None,
    max_last_verified_days: int | None = None,
) -> tuple[Path, PatternlintConfig, Catalog]:
    """Resolve root and config, then load the catalog.

    Raises:
        typer.Exit: On invalid configuration or an unreadable catalog.
    """
    root_path = resolve_root(root)
    config = wire_config(
        patterns_dir=patterns,
        max_last_verified_days=max_last_verified_days,
        start_dir=root_path,
    )
    try:
        catalog = load_catalog(root_path, config.patterns_dir)
    except CatalogError as e:
        error(str(e))
    return root_path, config, catalog


# -----------------------------------------------------------------------------
# Version and Main Callbacks
# -----------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"patternlint version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable debug logging on stderr.",
    ),
) -> None:
    """patternlint - Integrity checks for a catalog of Markdown pattern records."""
    configure_logging(verbose)


# -----------------------------------------------------------------------------
# Validate Command
# -----------------------------------------------------------------------------


@app.command()
def validate(
    root: str | None = root_option(),
    patterns: str | None = patterns_option(),
    json_output: bool = json_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Validate every pattern record in the catalog.

    Runs the following checks:
    - Schema: front matter parses, matches the JSON Schema, ids are unique
    - Sanitization: no secrets, internal hostnames or PII
    - Lifecycle: validated records have required sections, length and fields
    - Similarity: likely duplicates (warnings only)

    Exits 1 when any error-severity issue is found.
    """
    root_path, config, catalog = _load(root, patterns)

    try:
        rules = load_rules(root_path, config.schema_path, config.rules_dir)
    except RulesError as e:
        error(str(e))

    result = ValidationRunner(catalog, rules).run_all()

    if json_output:
        payload: dict[str, Any] = {
            "root": str(root_path),
            "patterns": config.patterns_dir,
            "records": len(catalog),
            **result.to_dict(),
        }
        console.print_json(json.dumps(payload))
    else:
        _print_issues(result.all_issues, quiet)
        _print_summary(result, len(catalog), quiet)
        if result.status == "pass":
            _output_success(f"Validated {len(catalog)} patterns", quiet)
        else:
            _output_error(f"Validation failed with {result.errors} errors")

    if result.status == "fail":
        raise typer.Exit(code=EXIT_FINDINGS)


# -----------------------------------------------------------------------------
# Sanitize-Scan Command
# -----------------------------------------------------------------------------


@app.command("sanitize-scan")
def sanitize_scan(
    root: str | None = root_option(),
    patterns: str | None = patterns_option(),
    json_output: bool = json_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Scan every pattern record for secrets, internal hostnames and PII.

    Block rule matches exit 1; warn rule matches are reported only.
    """
    root_path, config, catalog = _load(root, patterns)

    try:
        scanner = SanitizationScanner(load_sanitization_rules(root_path, config.rules_dir))
    except RulesError as e:
        error(str(e))

    issues: list[ValidationIssue] = []
    for record in catalog:
        issues.extend(scan_record(scanner, record))

    result = ValidationRunner.aggregate(
        [result_from_issues("sanitization-scanner", issues, len(catalog))]
    )

    if json_output:
        payload: dict[str, Any] = {
            "root": str(root_path),
            "records": len(catalog),
            "blocked": result.errors,
            "warned": result.warnings,
            "issues": [issue.to_dict() for issue in result.all_issues],
        }
        console.print_json(json.dumps(payload))
    else:
        _print_issues(result.all_issues, quiet)
        _print_summary(result, len(catalog), quiet)
        if result.status == "pass":
            _output_success(f"Scanned {len(catalog)} patterns, nothing blocked", quiet)
        else:
            _output_error(f"Blocked content found in {result.errors} places")

    if result.status == "fail":
        raise typer.Exit(code=EXIT_FINDINGS)


# -----------------------------------------------------------------------------
# Index Command
# -----------------------------------------------------------------------------


@app.command()
def index(
    root: str | None = root_option(),
    patterns: str | None = patterns_option(),
    json_output: bool = json_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Write the catalog index (INDEX.md by default) at the catalog root.

    Records are listed by domain, then id. Output is deterministic.
    """
    root_path, config, catalog = _load(root, patterns)
    rows = build_rows(catalog)
    if not rows and not json_output:
        warning(f"No pattern records found under {config.patterns_dir}")

    try:
        index_path = write_index(rows, config.get_index_path(root_path))
    except IndexWriteError as e:
        error(str(e))

    if json_output:
        console.print_json(
            json.dumps(
                {
                    "index": str(index_path),
                    "count": len(rows),
                    "rows": [row.to_dict() for row in rows],
                }
            )
        )
        return

    if not quiet and rows:
        table = Table(title="Pattern Index")
        table.add_column("Domain", style="cyan")
        table.add_column("ID", style="green")
        table.add_column("Title")
        table.add_column("Type")
        table.add_column("Status")
        for row in rows:
            table.add_row(
                escape(row.domain or "-"),
                escape(row.id or "-"),
                escape(row.title or "-"),
                escape(row.type or "-"),
                escape(row.status or "-"),
            )
        console.print(table)

    _output_success(f"Wrote {config.index_name} ({len(rows)} patterns)", quiet)


# -----------------------------------------------------------------------------
# Staleness Command
# -----------------------------------------------------------------------------


@app.command()
def staleness(
    root: str | None = root_option(),
    patterns: str | None = patterns_option(),
    max_verified_days: int | None = typer.Option(
        None,
        "--max-verified-days",
        "-m",
        help="Days before last_verified is stale (default: 90).",
        envvar="PATTERNLINT_MAX_LAST_VERIFIED_DAYS",
    ),
    today: str | None = typer.Option(
        None,
        "--today",
        help="Reference date as YYYY-MM-DD (default: today).",
    ),
    markdown: bool = typer.Option(
        False,
        "--markdown",
        help="Print the Markdown report instead of JSON.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit 1 when any review is overdue.",
    ),
    quiet: bool = quiet_option(),
) -> None:
    """Report overdue reviews, stale verification and deprecated references.

    Prints a JSON report by default. Overdue reviews only change the exit
    code with --strict.
    """
    reference_date = parse_today(today)
    root_path, config, catalog = _load(root, patterns, max_verified_days)

    report = StalenessAuditor(config.max_last_verified_days).audit(catalog, reference_date)

    if not quiet:
        if markdown:
            label = Path(config.patterns_dir).as_posix()
            console.out(render_markdown(report, label), end="", highlight=False)
        else:
            generated_at = datetime.now(timezone.utc).isoformat()
            console.print_json(json.dumps(report.to_dict(generated_at)))

    if strict and report.blocking:
        raise typer.Exit(code=EXIT_FINDINGS)


if __name__ == "__main__":
    app()
