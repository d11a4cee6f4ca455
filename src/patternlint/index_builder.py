"""Markdown index generation for a pattern catalog.

The index lists every record, sorted by domain then id, as a Markdown table.
Output carries no timestamp, so regenerating an unchanged catalog produces
a byte-identical file.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from pathlib import Path

from patternlint.catalog import PatternRecord

logger = logging.getLogger(__name__)

INDEX_TITLE = "# Patterns Index"
INDEX_NOTE = "> Auto-generated by `patternlint index`."
COLUMNS = ("Domain", "ID", "Title", "Type", "Status", "Path")


class IndexWriteError(Exception):
    """Raised when the index file cannot be written."""


@dataclass(frozen=True)
class IndexRow:
    """One catalog entry in the index."""

    domain: str | None
    id: str | None
    title: str | None
    type: str | None
    status: str | None
    path: str

    @classmethod
    def from_record(cls, record: PatternRecord) -> IndexRow:
        return cls(
            domain=record.domain,
            id=record.id,
            title=record.title,
            type=record.type,
            status=record.status,
            path=record.rel_path,
        )

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)


def build_rows(records: Iterable[PatternRecord]) -> list[IndexRow]:
    """Build index rows sorted by (domain, id), ties broken by path.

    Missing domains and ids sort as empty strings.
    """
    rows = [IndexRow.from_record(record) for record in records]
    return sorted(rows, key=lambda row: (row.domain or "", row.id or "", row.path))


def _cell(value: str | None) -> str:
    """Format a table cell: escape pipes and flatten newlines."""
    if value is None:
        return ""
    return value.replace("|", "\\|").replace("\n", " ").strip()


def _code_cell(value: str | None) -> str:
    text = _cell(value)
    return f"`{text}`" if text else ""


def render_index(rows: list[IndexRow]) -> str:
    """Render rows as the Markdown index document.

    Returns:
        Markdown text ending with a newline.
    """
    lines = [
        INDEX_TITLE,
        "",
        INDEX_NOTE,
        "",
        "| " + " | ".join(COLUMNS) + " |",
        "|" + "---|" * len(COLUMNS),
    ]
    for row in rows:
        cells = [
            _cell(row.domain),
            _code_cell(row.id),
            _cell(row.title),
            _cell(row.type),
            _cell(row.status),
            _code_cell(row.path),
        ]
        lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines) + "\n"


def write_index(rows: list[IndexRow], index_path: Path) -> Path:
    """Render and write the index file.

    Args:
        rows: Sorted index rows.
        index_path: Destination file.

    Returns:
        The written path.

    Raises:
        IndexWriteError: If the file cannot be written.
    """
    try:
        index_path.write_text(render_index(rows), encoding="utf-8")
    except OSError as e:
        raise IndexWriteError(f"Cannot write index file {index_path}: {e}") from e
    logger.debug("Wrote %d index rows to %s", len(rows), index_path)
    return index_path
