"""Line-oriented front matter parser for minimal environments.

Implements the documented subset of the metadata header grammar that every
pattern record relies on:

- the header sits between a first line that is exactly ``---`` and the next
  line that is exactly ``---``;
- ``key: value`` scalars at column 0, with surrounding quotes stripped and
  an unquoted trailing ``# comment`` removed;
- block lists (``key:`` followed by ``- item`` lines) and one-line flow
  lists (``key: [a, b]``).

Nested mappings and multi-line scalars are not interpreted. Only the
standard library is used, so the standalone staleness auditor can run
wherever a Python interpreter exists.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

SENTINEL = "---"

_KEY_PATTERN = re.compile(r"^([A-Za-z0-9_-]+):(?:[ \t]+(.*))?$")
_ITEM_PATTERN = re.compile(r"^[ \t]*-[ \t]+(.*)$")
_NULL_VALUES = frozenset({"", "~", "null", "Null", "NULL"})
_QUOTES = ("'", '"')


class FrontMatterError(ValueError):
    """Raised when a document's metadata header cannot be parsed.

    Attributes:
        line: 1-based line number in the source document, when known.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        self.reason = message
        prefix = f"line {line}: " if line is not None else ""
        super().__init__(f"{prefix}{message}")


@dataclass(frozen=True)
class FrontMatter:
    """A document split into its metadata header and body.

    Attributes:
        header: Parsed header mapping (empty when the document has none).
        body: Everything after the closing sentinel, or the whole document.
        has_header: True if the document opened with a header block.
    """

    header: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    has_header: bool = False


FrontMatterParser = Callable[[str], FrontMatter]


def split_front_matter(text: str) -> tuple[str | None, str]:
    """Split raw document text into header text and body.

    Args:
        text: Raw document text.

    Returns:
        Tuple of (header_text, body). ``header_text`` is None when line 1 is
        not the ``---`` sentinel, in which case the body is the whole text.

    Raises:
        FrontMatterError: If the opening sentinel is never closed.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != SENTINEL:
        return None, text

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == SENTINEL:
            return "".join(lines[1:index]), "".join(lines[index + 1 :])

    raise FrontMatterError("unterminated front matter (no closing '---')", line=1)


def _strip_comment(raw: str) -> str:
    """Drop a trailing ``# comment`` from an unquoted value."""
    text = raw.strip()
    if text.startswith("#"):
        return ""
    if text[:1] in _QUOTES:
        closing = text.find(text[0], 1)
        if closing != -1:
            return text[: closing + 1]
        return text

    match = re.search(r"[ \t]#", text)
    if match:
        text = text[: match.start()]
    return text.strip()


def parse_scalar(raw: str) -> str | None:
    """Parse a single scalar value.

    Args:
        raw: Value text after ``key:`` or ``-``.

    Returns:
        The unquoted, trimmed value, or None for YAML null spellings.
    """
    text = _strip_comment(raw)
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return text[1:-1]
    if text in _NULL_VALUES:
        return None
    return text


def _parse_value(raw: str) -> Any:
    text = _strip_comment(raw)
    if text.startswith("[") and text.endswith("]"):
        inner = text[1:-1].strip()
        if not inner:
            return []
        return [parse_scalar(part) for part in inner.split(",")]
    return parse_scalar(text)


def _collect_block_list(lines: list[str], start: int) -> tuple[list[str | None], int]:
    """Collect ``- item`` lines following a bare ``key:`` line.

    Args:
        lines: Header lines.
        start: Index of the first line after the key.

    Returns:
        Tuple of (items, index of the first line not consumed).
    """
    items: list[str | None] = []
    index = start

    while index < len(lines):
        line = lines[index]
        if not line.strip():
            index += 1
            continue

        item = _ITEM_PATTERN.match(line)
        if item is None:
            # A top-level key or any other content ends the block
            break

        items.append(parse_scalar(item.group(1)))
        index += 1

    return items, index


def parse_subset_header(header_text: str) -> dict[str, Any]:
    """Parse header text using the line-oriented subset grammar.

    Args:
        header_text: Text between the two ``---`` sentinels.

    Returns:
        Mapping of top-level keys to scalars, lists, or None.
    """
    header: dict[str, Any] = {}
    lines = [line.rstrip("\r") for line in header_text.split("\n")]
    index = 0

    while index < len(lines):
        match = _KEY_PATTERN.match(lines[index])
        if match is None:
            index += 1
            continue

        key = match.group(1)
        raw_value = match.group(2) or ""

        if _strip_comment(raw_value):
            header[key] = _parse_value(raw_value)
            index += 1
            continue

        items, index = _collect_block_list(lines, index + 1)
        header[key] = items if items else None

    return header


def parse_subset(text: str) -> FrontMatter:
    """Parse a raw document with the degraded, line-oriented parser.

    Args:
        text: Raw document text.

    Returns:
        FrontMatter with the subset header and body.

    Raises:
        FrontMatterError: If the header is unterminated.
    """
    header_text, body = split_front_matter(text)
    if header_text is None:
        return FrontMatter(header={}, body=body, has_header=False)
    return FrontMatter(header=parse_subset_header(header_text), body=body, has_header=True)
