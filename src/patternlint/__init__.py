"""patternlint - catalog integrity checks for Markdown pattern records."""

from __future__ import annotations

__version__ = "0.4.0"
