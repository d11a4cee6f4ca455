"""Markdown parsing utility for pattern bodies.

Extracts headings and sections from Markdown using only regex (no external
Markdown libraries). Fenced code blocks are masked before headings are
matched so a ``## Fix`` line inside a code sample does not count as a
section.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass
class MarkdownSection:
    """A parsed markdown section.

    Attributes:
        heading: The heading text (without the # prefix).
        level: The heading level (1 for #, 2 for ##, etc.).
        content: The content under this heading until the next same/higher level heading.
    """

    heading: str
    level: int
    content: str


class MarkdownParser:
    """Parse pattern bodies for structural checks.

    All methods are static and stateless.
    """

    _HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$", re.MULTILINE)
    _FENCE_PATTERN = re.compile(r"^(```|~~~).*?^\1[ \t]*$", re.MULTILINE | re.DOTALL)

    @staticmethod
    def _mask_code_blocks(content: str) -> str:
        """Blank out fenced code blocks, keeping every character offset."""
        return MarkdownParser._FENCE_PATTERN.sub(
            lambda match: re.sub(r"[^\n]", " ", match.group(0)),
            content,
        )

    @staticmethod
    def extract_all_sections(content: str) -> list[MarkdownSection]:
        """Extract all sections with their headings and content.

        Parses all headings in the document and extracts the content
        under each heading until the next heading of the same or higher level.

        Args:
            content: Markdown content to parse.

        Returns:
            List of MarkdownSection objects representing all sections.
        """
        masked = MarkdownParser._mask_code_blocks(content)
        headings = list(MarkdownParser._HEADING_PATTERN.finditer(masked))
        sections: list[MarkdownSection] = []

        for i, match in enumerate(headings):
            level = len(match.group(1))
            start_pos = match.end()

            # Section ends at the next heading of same or higher level (fewer #)
            end_pos = len(masked)
            for j in range(i + 1, len(headings)):
                if len(headings[j].group(1)) <= level:
                    end_pos = headings[j].start()
                    break

            sections.append(
                MarkdownSection(
                    heading=match.group(2).strip(),
                    level=level,
                    content=content[start_pos:end_pos].strip(),
                )
            )

        return sections

    @staticmethod
    def extract_section(content: str, heading: str, level: int = 2) -> str | None:
        """Extract content under a specific heading.

        Heading text is compared case-insensitively after trimming.

        Args:
            content: Markdown content to search.
            heading: Heading text to find (without # prefix).
            level: The heading level to search for (default 2 for ##).

        Returns:
            Content under the heading, or None if heading not found.
        """
        wanted = heading.strip().casefold()
        for section in MarkdownParser.extract_all_sections(content):
            if section.level == level and section.heading.casefold() == wanted:
                return section.content
        return None

    @staticmethod
    def has_section(content: str, heading: str, level: int = 2) -> bool:
        """Check whether a heading exists at the given level."""
        return MarkdownParser.extract_section(content, heading, level) is not None

    @staticmethod
    def body_length(body: str) -> int:
        """Return the character count of a body, ignoring outer whitespace."""
        return len(body.strip())
