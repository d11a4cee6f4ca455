"""Tests for index generation."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from conftest import base_header, render_pattern

from patternlint.catalog import load_catalog
from patternlint.index_builder import (
    IndexWriteError,
    build_rows,
    render_index,
    write_index,
)


class TestBuildRows:
    """Tests for build_rows."""

    def test_sorted_by_domain_then_id(
        self, catalog_root: Path, write_pattern: Callable[..., Path]
    ) -> None:
        """Test rows sort by domain, then id, regardless of path."""
        write_pattern("z.md", base_header("db.b"))
        write_pattern("y.md", base_header("db.a"))
        write_pattern("x.md", base_header("api.z"))

        rows = build_rows(load_catalog(catalog_root))

        assert [row.id for row in rows] == ["api.z", "db.a", "db.b"]
        assert rows[0].path == "patterns/x.md"

    def test_missing_fields_sort_first(
        self, catalog_root: Path, write_pattern: Callable[..., Path]
    ) -> None:
        """Test records without domain or id sort as empty strings."""
        write_pattern("a.md", base_header("db.a"))
        write_pattern("b.md", raw=render_pattern({"title": "Loose note"}))

        rows = build_rows(load_catalog(catalog_root))

        assert rows[0].id is None
        assert rows[0].title == "Loose note"
        assert rows[1].id == "db.a"


class TestRenderIndex:
    """Tests for render_index and write_index."""

    def test_table_layout(self, catalog_root: Path, write_pattern: Callable[..., Path]) -> None:
        """Test the header, separator and row format."""
        write_pattern("a.md", base_header("db.a", title="Pool exhaustion"))

        text = render_index(build_rows(load_catalog(catalog_root)))

        lines = text.splitlines()
        assert lines[0] == "# Patterns Index"
        assert lines[4] == "| Domain | ID | Title | Type | Status | Path |"
        assert lines[5] == "|---|---|---|---|---|---|"
        assert lines[6] == (
            "| db | `db.a` | Pool exhaustion | troubleshooting | validated | `patterns/a.md` |"
        )
        assert text.endswith("\n")

    def test_pipes_escaped(self, catalog_root: Path, write_pattern: Callable[..., Path]) -> None:
        """Test pipe characters in cells do not break the table."""
        write_pattern("a.md", base_header("db.a", title="'Read | write split'"))

        text = render_index(build_rows(load_catalog(catalog_root)))

        assert "Read \\| write split" in text

    def test_idempotent(self, catalog_root: Path, write_pattern: Callable[..., Path]) -> None:
        """Test regenerating an unchanged catalog gives identical bytes."""
        write_pattern("a.md", base_header("db.a"))
        write_pattern("b.md", base_header("web.b"))
        index_path = catalog_root / "INDEX.md"

        write_index(build_rows(load_catalog(catalog_root)), index_path)
        first = index_path.read_bytes()
        write_index(build_rows(load_catalog(catalog_root)), index_path)

        assert index_path.read_bytes() == first

    def test_write_failure(self, tmp_path: Path) -> None:
        """Test an unwritable destination raises IndexWriteError."""
        with pytest.raises(IndexWriteError, match="Cannot write index file"):
            write_index([], tmp_path / "missing-dir" / "INDEX.md")
