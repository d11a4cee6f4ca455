"""Tests for markdown parser utility."""

from __future__ import annotations

from patternlint.validators.markdown_parser import MarkdownParser


class TestExtractAllSections:
    """Tests for MarkdownParser.extract_all_sections method."""

    def test_levels_and_content(self) -> None:
        """Test headings, levels and section content are extracted."""
        content = """# Title

Intro.

## Context

Background.

### Detail

Deeper.

## Fix

Steps.
"""
        sections = MarkdownParser.extract_all_sections(content)

        assert [(s.heading, s.level) for s in sections] == [
            ("Title", 1),
            ("Context", 2),
            ("Detail", 3),
            ("Fix", 2),
        ]
        assert sections[1].content == "Background.\n\n### Detail\n\nDeeper."
        assert sections[3].content == "Steps."

    def test_closing_hashes_and_trailing_space(self) -> None:
        """Test ATX closing hashes and trailing spaces are not part of the heading."""
        sections = MarkdownParser.extract_all_sections("## Root cause ##  \n\ntext\n")
        assert sections[0].heading == "Root cause"

    def test_requires_space_after_hashes(self) -> None:
        """Test '##Heading' without a space is not a heading."""
        assert MarkdownParser.extract_all_sections("##Context\n") == []

    def test_code_blocks_masked(self) -> None:
        """Test headings inside fenced code blocks are ignored."""
        content = "## Steps\n\n```bash\n## not a heading\necho hi\n```\n\n~~~\n# also not\n~~~\n"
        sections = MarkdownParser.extract_all_sections(content)

        assert [s.heading for s in sections] == ["Steps"]
        assert "## not a heading" in sections[0].content


class TestExtractSection:
    """Tests for MarkdownParser.extract_section and has_section."""

    def test_case_insensitive(self) -> None:
        """Test heading comparison ignores case and padding."""
        content = "## Root Cause\n\nBecause.\n"
        assert MarkdownParser.extract_section(content, " root cause ") == "Because."
        assert MarkdownParser.has_section(content, "ROOT CAUSE")

    def test_level_must_match(self) -> None:
        """Test a heading at another level is not found."""
        content = "### Fix\n\nDo it.\n"
        assert MarkdownParser.extract_section(content, "Fix") is None
        assert MarkdownParser.has_section(content, "Fix", level=3)

    def test_empty_section(self) -> None:
        """Test an empty section is present with empty content."""
        content = "## Context\n## Fix\n"
        assert MarkdownParser.extract_section(content, "Context") == ""
        assert MarkdownParser.has_section(content, "Context")


class TestBodyLength:
    """Tests for MarkdownParser.body_length."""

    def test_trims_outer_whitespace(self) -> None:
        """Test outer whitespace is not counted."""
        assert MarkdownParser.body_length("\n\n  abc  \n") == 3
        assert MarkdownParser.body_length("") == 0
