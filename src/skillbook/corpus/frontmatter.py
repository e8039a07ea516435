"""Parse YAML frontmatter from Markdown documents.

A document carries frontmatter when its first line is exactly ``---``;
the block runs to the next line that is exactly ``---`` (or ``...``).
Everything after it is the body.

Usage::

    from skillbook.corpus.frontmatter import parse_frontmatter

    data, body, body_line = parse_frontmatter(path.read_text(encoding="utf-8"))
    data["name"]  # -> "redis-patterns"
"""

from __future__ import annotations

from typing import Any

import yaml

from skillbook.core.errors import FrontmatterError

_DELIMITER = "---"
_END_DELIMITERS = frozenset({"---", "..."})


def split_frontmatter(text: str) -> tuple[str, str, int]:
    """Split a document into raw frontmatter and body.

    Args:
        text: Full document text.

    Returns:
        Tuple of (raw YAML, body, 1-based line number where the body starts).

    Raises:
        FrontmatterError: No opening delimiter, or the block is never closed.
    """
    text = text.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)

    if not lines or lines[0].rstrip("\r\n") != _DELIMITER:
        raise FrontmatterError("no frontmatter block (file must start with '---')").with_context(
            line=1
        )

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") in _END_DELIMITERS:
            raw = "".join(lines[1:index])
            body = "".join(lines[index + 1:])
            return raw, body, index + 2

    raise FrontmatterError("unterminated frontmatter block (missing closing '---')").with_context(
        line=1
    )


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str, int]:
    """Parse a document's frontmatter as a YAML mapping.

    Args:
        text: Full document text.

    Returns:
        Tuple of (frontmatter mapping, body, 1-based body start line).
        An empty block yields an empty mapping.

    Raises:
        FrontmatterError: Missing/unterminated block, invalid YAML, or a
            block that is not a mapping.
    """
    raw, body, body_line = split_frontmatter(text)

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        line = 1
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            # +2: the opening delimiter is line 1 and marks are 0-based
            line = mark.line + 2
        problem = getattr(exc, "problem", None) or str(exc)
        raise FrontmatterError(f"frontmatter is not valid YAML: {problem}", cause=exc).with_context(
            line=line
        )

    if data is None:
        return {}, body, body_line
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"frontmatter must be a YAML mapping, got {type(data).__name__}"
        ).with_context(line=2)

    return {str(key): value for key, value in data.items()}, body, body_line


def has_frontmatter(text: str) -> bool:
    """True when ``text`` starts with a frontmatter delimiter."""
    first = text.removeprefix("\ufeff").split("\n", 1)[0]
    return first.rstrip("\r") == _DELIMITER
