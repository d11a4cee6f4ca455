"""Configuration management for the patternlint CLI tool.

Handles configuration loading from multiple sources with precedence:
CLI args > environment variables > .patternlintrc > pyproject.toml > defaults
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from patternlint.staleness import DEFAULT_MAX_LAST_VERIFIED_DAYS

logger = logging.getLogger(__name__)

RC_FILE = ".patternlintrc"
ENV_PREFIX = "PATTERNLINT_"


@dataclass
class PatternlintConfig:
    """Configuration for the patternlint CLI tool.

    Paths are relative to the catalog root.

    Attributes:
        patterns_dir: Directory holding pattern records (default: "patterns")
        schema_path: JSON Schema file (default: "schema/pattern.schema.json")
        rules_dir: Directory holding rule files (default: "rules")
        index_name: Generated index file name (default: "INDEX.md")
        max_last_verified_days: Days before last_verified is stale (default: 90)
    """

    patterns_dir: str = "patterns"
    schema_path: str = "schema/pattern.schema.json"
    rules_dir: str = "rules"
    index_name: str = "INDEX.md"
    max_last_verified_days: int = DEFAULT_MAX_LAST_VERIFIED_DAYS

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        for name in ("patterns_dir", "schema_path", "rules_dir", "index_name"):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                raise ValueError(f"{name} must be a non-empty string")

        if not self.schema_path.endswith(".json"):
            raise ValueError("schema_path must end with .json")
        if not self.index_name.endswith(".md"):
            raise ValueError("index_name must end with .md")

        # Env and rc values may arrive as strings
        days = self.max_last_verified_days
        if isinstance(days, str):
            if not days.strip().isdigit():
                raise ValueError("max_last_verified_days must be a non-negative integer")
            days = int(days)
        if not isinstance(days, int) or isinstance(days, bool) or days < 0:
            raise ValueError("max_last_verified_days must be a non-negative integer")
        self.max_last_verified_days = days

    def get_index_path(self, root: Path) -> Path:
        return root / self.index_name


def _get_config_field_names() -> set[str]:
    """Get the set of valid configuration field names.

    Returns:
        Set of field names from PatternlintConfig.
    """
    return {f.name for f in fields(PatternlintConfig)}


def find_config_file(filename: str = RC_FILE, start_dir: Path | None = None) -> Path | None:
    """Find a configuration file by traversing up the directory tree.

    Searches for the specified file starting from start_dir (or current directory)
    and traversing up to the filesystem root.

    Args:
        filename: Name of the config file to find.
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        config_path = current / filename
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _filter_fields(data: dict[str, Any]) -> dict[str, Any]:
    valid_fields = _get_config_field_names()
    return {k: v for k, v in data.items() if k in valid_fields}


def _load_from_rcfile(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from the .patternlintrc file.

    Returns:
        Configuration from .patternlintrc, or empty dict if not found or unreadable.
    """
    config_path = find_config_file(RC_FILE, start_dir)
    if config_path is None:
        return {}

    try:
        return _filter_fields(_load_toml_file(config_path))
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable %s: %s", config_path, e)
        return {}


def _load_from_pyproject(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from pyproject.toml [tool.patternlint] section.

    Returns:
        Configuration from pyproject.toml, or empty dict if not found.
    """
    config_path = find_config_file("pyproject.toml", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable %s: %s", config_path, e)
        return {}

    section = data.get("tool", {}).get("patternlint", {})
    if not isinstance(section, dict):
        return {}
    return _filter_fields(section)


def _load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables.

    Environment variables are prefixed with PATTERNLINT_ and use uppercase
    names, for example PATTERNLINT_PATTERNS_DIR or
    PATTERNLINT_MAX_LAST_VERIFIED_DAYS.
    """
    result: dict[str, Any] = {}
    for name in sorted(_get_config_field_names()):
        value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            result[name] = value
    return result


def _merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge configuration dictionaries; later ones take precedence."""
    result: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if value is not None:
                result[key] = value
    return result


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> PatternlintConfig:
    """Load configuration with full precedence chain.

    Precedence (highest to lowest):
    1. CLI arguments (cli_overrides)
    2. Environment variables (PATTERNLINT_*)
    3. .patternlintrc file
    4. pyproject.toml [tool.patternlint] section
    5. Default values

    Args:
        cli_overrides: Configuration overrides from CLI arguments.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved PatternlintConfig instance.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    pyproject_config = _load_from_pyproject(start_dir)
    rc_config = _load_from_rcfile(start_dir)
    env_config = _load_from_env()
    cli_config = {
        k: v for k, v in _filter_fields(cli_overrides or {}).items() if v is not None
    }

    merged = _merge_configs(pyproject_config, rc_config, env_config, cli_config)

    return PatternlintConfig(**merged)
