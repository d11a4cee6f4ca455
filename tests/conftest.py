"""Pytest configuration and fixtures for patternlint tests."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Set a fixed terminal width to prevent line wrapping issues in CI
# This must be set before any Rich imports
os.environ.setdefault("COLUMNS", "200")
os.environ.setdefault("LINES", "50")
# Disable Rich's terminal detection to ensure consistent output
os.environ.setdefault("TERM", "dumb")


TROUBLESHOOTING_BODY = """
## Context

Workers behind the shared load balancer lose their database connections
after an idle period, and the first request after the gap fails.

## Symptoms

Intermittent "server closed the connection unexpectedly" errors appear in
the application log right after quiet periods.

## Root cause

The load balancer drops idle TCP connections after 350 seconds while the
pool keeps them for 600 seconds, so stale sockets are handed out.

## Fix

Set the pool recycle interval below the load balancer idle timeout and
enable pre-ping so dead connections are replaced before use.

## Verification

Leave the service idle for ten minutes, then send a request and confirm
that no connection error is logged.
"""


def render_pattern(header: dict[str, Any], body: str = TROUBLESHOOTING_BODY) -> str:
    """Render a pattern document with simple YAML front matter."""
    lines = ["---"]
    for key, value in header.items():
        if isinstance(value, list):
            if value:
                lines.append(f"{key}:")
                lines.extend(f"  - {item}" for item in value)
            else:
                lines.append(f"{key}: []")
        elif isinstance(value, bool):
            lines.append(f"{key}: {'true' if value else 'false'}")
        elif value is None:
            lines.append(f"{key}: null")
        else:
            lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n" + body


def base_header(pattern_id: str, **overrides: Any) -> dict[str, Any]:
    """Return a schema-valid validated troubleshooting header."""
    header: dict[str, Any] = {
        "id": pattern_id,
        "title": f"Pattern {pattern_id}",
        "type": "troubleshooting",
        "status": "validated",
        "confidence": "high",
        "domain": pattern_id.split(".")[0],
        "tags": [f"{pattern_id}-tag"],
        "introduced": "2024-01-10",
        "last_verified": "2099-01-01",
        "review_by": "2099-06-01",
        "sanitized": True,
        "maintainers": ["platform-team"],
    }
    header.update(overrides)
    return header


@pytest.fixture
def catalog_root(tmp_path: Path) -> Path:
    """Create an empty catalog root with a patterns directory."""
    (tmp_path / "patterns").mkdir()
    return tmp_path


@pytest.fixture
def write_pattern(catalog_root: Path) -> Callable[..., Path]:
    """Return a helper that writes a pattern file under patterns/."""

    def _write(
        name: str,
        header: dict[str, Any] | None = None,
        body: str | None = None,
        raw: str | None = None,
    ) -> Path:
        path = catalog_root / "patterns" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if raw is None:
            raw = render_pattern(header or {}, TROUBLESHOOTING_BODY if body is None else body)
        path.write_text(raw, encoding="utf-8")
        return path

    return _write
