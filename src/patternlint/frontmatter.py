"""Full front matter parser backed by PyYAML.

The sentinel handling is shared with the line-oriented subset parser in
:mod:`patternlint.frontmatter_subset`; only the header text is handed to
PyYAML. Timestamp scalars are kept as their source text, so both parsers
expose dates identically and an impossible date such as ``2024-02-30``
only makes that field unusable instead of failing the whole header.
"""

from __future__ import annotations

import yaml

from patternlint.frontmatter_subset import (
    FrontMatter,
    FrontMatterError,
    FrontMatterParser,
    parse_subset,
    split_front_matter,
)

__all__ = [
    "FrontMatter",
    "FrontMatterError",
    "FrontMatterParser",
    "parse_front_matter",
    "parse_subset",
]

# The header text starts on the line after the opening sentinel
_HEADER_LINE_OFFSET = 2


class _HeaderLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as plain strings."""


_HeaderLoader.add_constructor(
    "tag:yaml.org,2002:timestamp",
    lambda loader, node: loader.construct_scalar(node),
)


def parse_front_matter(text: str) -> FrontMatter:
    """Parse a raw document with the full YAML parser.

    Args:
        text: Raw document text.

    Returns:
        FrontMatter with the parsed header and body.

    Raises:
        FrontMatterError: If the header is unterminated, is not valid YAML,
            or does not hold a mapping.
    """
    header_text, body = split_front_matter(text)
    if header_text is None:
        return FrontMatter(header={}, body=body, has_header=False)

    try:
        data = yaml.load(header_text, Loader=_HeaderLoader)
    except yaml.MarkedYAMLError as e:
        line = None
        if e.problem_mark is not None:
            line = e.problem_mark.line + _HEADER_LINE_OFFSET
        raise FrontMatterError(f"invalid YAML: {e.problem or e}", line=line) from e
    except yaml.YAMLError as e:
        raise FrontMatterError(f"invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"front matter must be a mapping, got {type(data).__name__}",
            line=_HEADER_LINE_OFFSET,
        )

    return FrontMatter(header=data, body=body, has_header=True)

