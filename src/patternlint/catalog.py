"""Pattern catalog loading.

A catalog is every ``*.md`` record under the patterns directory of a
catalog root, parsed once per command invocation and never mutated.
The parser is injected so the standalone auditor can load the catalog
with the line-oriented subset parser and no third-party packages.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from patternlint.frontmatter_subset import FrontMatterError, FrontMatterParser

logger = logging.getLogger(__name__)

# Directories never scanned for pattern records
IGNORED_DIRS = frozenset(
    {
        ".git",
        ".venv",
        "venv",
        "node_modules",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
    }
)


class CatalogError(Exception):
    """Raised when the catalog cannot be read from disk."""


def _as_str(value: Any) -> str | None:
    """Coerce a scalar header value to a trimmed string (None if empty)."""
    if value is None or isinstance(value, (list, dict)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value).strip()
    return text or None


def _as_str_list(value: Any) -> list[str]:
    """Coerce a header value to a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, list):
        return [text for text in (_as_str(item) for item in value) if text is not None]
    single = _as_str(value)
    return [single] if single is not None else []


@dataclass(frozen=True)
class PatternRecord:
    """A single pattern document loaded from disk.

    Attributes:
        path: Absolute path to the file.
        rel_path: POSIX path relative to the catalog root, used in reports.
        raw: Full file text (header and body).
        header: Parsed metadata header (empty if absent or unparseable).
        body: Document text after the header.
        parse_error: Front matter diagnostic when the header could not be parsed.
    """

    path: Path
    rel_path: str
    raw: str
    header: dict[str, Any]
    body: str
    parse_error: FrontMatterError | None = None

    @property
    def id(self) -> str | None:
        return _as_str(self.header.get("id"))

    @property
    def title(self) -> str | None:
        return _as_str(self.header.get("title"))

    @property
    def type(self) -> str | None:
        return _as_str(self.header.get("type"))

    @property
    def status(self) -> str | None:
        return _as_str(self.header.get("status"))

    @property
    def domain(self) -> str | None:
        return _as_str(self.header.get("domain"))

    @property
    def tags(self) -> list[str]:
        return _as_str_list(self.header.get("tags"))

    @property
    def related(self) -> list[str]:
        return _as_str_list(self.header.get("related"))

    @property
    def maintainers(self) -> list[str]:
        return _as_str_list(self.header.get("maintainers"))

    @property
    def review_by(self) -> str | None:
        return _as_str(self.header.get("review_by"))

    @property
    def last_verified(self) -> str | None:
        return _as_str(self.header.get("last_verified"))

    @property
    def deprecated_date(self) -> str | None:
        return _as_str(self.header.get("deprecated_date"))

    @property
    def superseded_by(self) -> str | None:
        return _as_str(self.header.get("superseded_by"))

    def has_value(self, field_name: str) -> bool:
        """Check that a header field is present and non-empty.

        Empty strings, empty lists, empty mappings and null all count as
        missing. ``False`` and ``0`` count as present.
        """
        value = self.header.get(field_name)
        if value is None:
            return False
        if isinstance(value, str):
            return bool(value.strip())
        if isinstance(value, (list, dict)):
            return bool(value)
        return True

    @property
    def label(self) -> str:
        """Human-readable identifier: the id when present, else the path."""
        return self.id or self.rel_path


class Catalog:
    """Read-only collection of pattern records under a catalog root.

    Records are ordered by relative path. Lookups by id resolve to the last
    record (in path order) carrying that id; duplicates are exposed through
    :meth:`duplicate_ids` so callers can report them.
    """

    def __init__(self, root: Path, patterns_path: Path, records: list[PatternRecord]) -> None:
        self.root = root
        self.patterns_path = patterns_path
        self.records: tuple[PatternRecord, ...] = tuple(
            sorted(records, key=lambda record: record.rel_path)
        )
        self._by_id: dict[str, PatternRecord] = {}
        self._all_by_id: dict[str, list[PatternRecord]] = {}
        for record in self.records:
            record_id = record.id
            if record_id is None:
                continue
            self._by_id[record_id] = record
            self._all_by_id.setdefault(record_id, []).append(record)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[PatternRecord]:
        return iter(self.records)

    def get(self, record_id: str) -> PatternRecord | None:
        """Look up a record by id."""
        return self._by_id.get(record_id)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._by_id

    def with_ids(self) -> list[PatternRecord]:
        """Return records that carry an id, in path order."""
        return [record for record in self.records if record.id is not None]

    def duplicate_ids(self) -> dict[str, list[PatternRecord]]:
        """Return ids shared by more than one record, mapped to those records."""
        return {
            record_id: records
            for record_id, records in self._all_by_id.items()
            if len(records) > 1
        }


def _should_skip(rel_path: Path) -> bool:
    return bool(set(rel_path.parts) & IGNORED_DIRS)


def find_pattern_files(patterns_path: Path) -> list[Path]:
    """Find all Markdown records below a patterns directory.

    Args:
        patterns_path: Directory to scan recursively.

    Returns:
        Sorted list of ``*.md`` file paths, excluding ignored directories.
    """
    files: list[Path] = []

    for path in patterns_path.rglob("*.md"):
        if not path.is_file():
            continue
        if _should_skip(path.relative_to(patterns_path)):
            continue
        files.append(path)

    return sorted(files)


def _relative_to(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def load_record(path: Path, root: Path, parser: FrontMatterParser) -> PatternRecord:
    """Read and parse a single record.

    A header that fails to parse does not abort the load: the record keeps
    an empty header and carries the diagnostic in ``parse_error``.

    Raises:
        CatalogError: If the file cannot be read or decoded.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"Cannot read pattern file {path}: {e}") from e

    rel_path = _relative_to(path, root)

    try:
        parsed = parser(raw)
    except FrontMatterError as e:
        logger.debug("Unparseable front matter in %s: %s", rel_path, e)
        return PatternRecord(
            path=path, rel_path=rel_path, raw=raw, header={}, body=raw, parse_error=e
        )

    return PatternRecord(
        path=path,
        rel_path=rel_path,
        raw=raw,
        header=parsed.header,
        body=parsed.body,
    )


def load_catalog(
    root: Path,
    patterns_dir: str | Path = "patterns",
    parser: FrontMatterParser | None = None,
) -> Catalog:
    """Load every pattern record under ``root / patterns_dir``.

    Args:
        root: Catalog root; record paths are reported relative to it.
        patterns_dir: Patterns directory, relative to root or absolute.
        parser: Front matter parser. Defaults to the full YAML parser.

    Returns:
        The loaded Catalog. A missing patterns directory yields an empty one.

    Raises:
        CatalogError: If the patterns path is not a directory or a file
            cannot be read.
    """
    if parser is None:
        from patternlint.frontmatter import parse_front_matter

        parser = parse_front_matter

    patterns_path = root / patterns_dir

    if not patterns_path.exists():
        logger.warning("Patterns directory does not exist: %s", patterns_path)
        return Catalog(root, patterns_path, [])

    if not patterns_path.is_dir():
        raise CatalogError(f"Patterns path is not a directory: {patterns_path}")

    records = [load_record(path, root, parser) for path in find_pattern_files(patterns_path)]
    logger.debug("Loaded %d pattern records from %s", len(records), patterns_path)

    return Catalog(root, patterns_path, records)
