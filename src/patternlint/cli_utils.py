"""CLI utility functions for patternlint.

Provides helper functions for:
- Config wiring: Extracting Typer CLI options and passing to load_config
- Path resolution: Resolving the catalog root
- Error formatting: Consistent user-friendly error messages with exit codes
- Logging setup: Rich log handler for --verbose
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from patternlint.config import PatternlintConfig, load_config
from patternlint.dates import parse_iso_date

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_FINDINGS = 1  # Hard failures found in the catalog
EXIT_SYSTEM_ERROR = 2  # Script error (unreadable file, bad rule file, bad config)


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def error(msg: str, *, exit_code: int = EXIT_SYSTEM_ERROR) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Args:
        msg: The error message to display.
        exit_code: Exit code to use (default: EXIT_SYSTEM_ERROR=2).

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)
    raise typer.Exit(code=exit_code)


def warning(msg: str) -> None:
    """Print a warning message to stderr."""
    styled_prefix = typer.style("Warning:", fg=typer.colors.YELLOW, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through Rich on stderr.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=verbose,
        markup=False,
    )
    logger = logging.getLogger("patternlint")
    logger.handlers = [handler]
    logger.setLevel(level)


# -----------------------------------------------------------------------------
# Path and Value Resolution
# -----------------------------------------------------------------------------


def resolve_root(root: str | Path | None) -> Path:
    """Resolve the catalog root (defaults to the current directory).

    Raises:
        typer.Exit: If the root is not an existing directory.
    """
    resolved = Path(root).resolve() if root else Path.cwd()
    if not resolved.is_dir():
        error(f"Catalog root is not a directory: {resolved}")
    return resolved


def parse_today(value: str | None) -> date:
    """Parse a ``--today`` override (defaults to the local calendar date).

    Raises:
        typer.Exit: If the value is not an ISO date.
    """
    if value is None:
        return date.today()
    parsed = parse_iso_date(value)
    if parsed is None:
        error(f"Invalid --today date (expected YYYY-MM-DD): {value}")
    return parsed


# -----------------------------------------------------------------------------
# Config Wiring Helper
# -----------------------------------------------------------------------------


def wire_config(
    patterns_dir: str | None = None,
    max_last_verified_days: int | None = None,
    start_dir: Path | None = None,
) -> PatternlintConfig:
    """Wire CLI options to load_config with appropriate overrides.

    Args:
        patterns_dir: Override for the patterns directory.
        max_last_verified_days: Override for the staleness threshold.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved PatternlintConfig instance.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    cli_overrides: dict[str, Any] = {}

    if patterns_dir is not None:
        cli_overrides["patterns_dir"] = patterns_dir
    if max_last_verified_days is not None:
        cli_overrides["max_last_verified_days"] = max_last_verified_days

    try:
        return load_config(cli_overrides=cli_overrides, start_dir=start_dir)
    except ValueError as e:
        error(f"Invalid configuration: {e}", exit_code=EXIT_SYSTEM_ERROR)


# -----------------------------------------------------------------------------
# Typer Option Factory Functions
# -----------------------------------------------------------------------------
# These factory functions create fresh Typer Option instances for each command.
# Typer consumes Option objects when decorating commands, so the same Option
# instance cannot be reused across multiple commands.


def root_option() -> Any:
    """Create a Typer Option for --root / -r."""
    return typer.Option(
        None,
        "--root",
        "-r",
        help="Catalog root directory (default: current directory).",
    )


def patterns_option() -> Any:
    """Create a Typer Option for --patterns / -p."""
    return typer.Option(
        None,
        "--patterns",
        "-p",
        help="Override patterns directory, relative to the root (default: patterns).",
        envvar="PATTERNLINT_PATTERNS_DIR",
    )


def json_option() -> Any:
    """Create a Typer Option for --json."""
    return typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    )


def quiet_option() -> Any:
    """Create a Typer Option for --quiet / -q."""
    return typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output for CI.",
    )
