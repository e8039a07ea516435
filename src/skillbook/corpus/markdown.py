"""Structural extraction from Markdown text.

Pure-regex scanning of the parts of a document the loader and linter care
about: fenced code blocks, inline links, headings, and the "When to Load
References" section. Line numbers are 1-based and can be offset with
``start_line`` so that callers scanning a body after frontmatter still
report file positions.

Usage::

    from skillbook.corpus.markdown import extract_code_blocks, extract_links

    for block in extract_code_blocks(body, start_line=body_line):
        print(block.line, block.language or "(untagged)")
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from skillbook.corpus.model import CodeBlock, Link, LoadHint

LOAD_REFERENCES_HEADING = "When to Load References"

_FENCE_RE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_HEADING_RE = re.compile(r"^ {0,3}(?P<hashes>#{1,6})(?:[ \t]+(?P<text>.*?))?(?:[ \t]+#+)?[ \t]*$")
_LINK_RE = re.compile(
    r"""
    (?P<bang>!?)
    \[(?P<text>(?:[^\[\]]|\[[^\[\]]*\])*)\]   # text, one level of nested brackets
    \(\s*
    (?P<target><[^>]*>|[^\s()]+(?:\([^\s()]*\)[^\s()]*)*)
    (?:\s+(?:"[^"]*"|'[^']*'))?               # optional title
    \s*\)
    """,
    re.VERBOSE,
)
_INLINE_CODE_RE = re.compile(r"(`+)(?:.+?)\1")
_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(?P<text>.*)$")
_EMPHASIS_RE = re.compile(r"(\*\*|__|\*|`)")


def _scan_lines(text: str) -> Iterator[tuple[int, str, bool]]:
    """Yield ``(index, line, in_code)`` for every line of ``text``.

    Fence lines themselves are reported as ``in_code=True``.
    """
    open_fence: str | None = None
    for index, line in enumerate(text.splitlines()):
        match = _FENCE_RE.match(line)
        if open_fence is None:
            if match and not (match.group("fence")[0] == "`" and "`" in match.group("info")):
                open_fence = match.group("fence")
                yield index, line, True
                continue
            yield index, line, False
        else:
            if (
                match
                and match.group("fence")[0] == open_fence[0]
                and len(match.group("fence")) >= len(open_fence)
                and not match.group("info").strip()
            ):
                open_fence = None
            yield index, line, True


def extract_code_blocks(text: str, start_line: int = 1) -> list[CodeBlock]:
    """Find fenced code blocks.

    Args:
        text: Markdown text.
        start_line: File line number of the first line of ``text``.

    Returns:
        Code blocks in document order. A fence left open at the end of
        ``text`` is returned with ``closed=False``.
    """
    blocks: list[CodeBlock] = []
    lines = text.splitlines()

    open_fence: str | None = None
    info = ""
    opened_at = 0
    content: list[str] = []

    for index, line in enumerate(lines):
        match = _FENCE_RE.match(line)
        if open_fence is None:
            if match is None:
                continue
            fence = match.group("fence")
            # Backtick fences cannot carry backticks in the info string
            if fence[0] == "`" and "`" in match.group("info"):
                continue
            open_fence = fence
            info = match.group("info").strip()
            opened_at = index
            content = []
        elif (
            match
            and match.group("fence")[0] == open_fence[0]
            and len(match.group("fence")) >= len(open_fence)
            and not match.group("info").strip()
        ):
            blocks.append(_make_block(info, content, opened_at + start_line, closed=True))
            open_fence = None
        else:
            content.append(line)

    if open_fence is not None:
        blocks.append(_make_block(info, content, opened_at + start_line, closed=False))

    return blocks


def _make_block(info: str, content: list[str], line: int, *, closed: bool) -> CodeBlock:
    language = info.split()[0] if info else ""
    # ```{python} and ```python{1,3} style attributes
    language = language.strip("{}").split("{", 1)[0]
    return CodeBlock(
        language=language,
        info=info,
        content="\n".join(content),
        line=line,
        closed=closed,
    )


def extract_links(text: str, start_line: int = 1) -> list[Link]:
    """Find inline links and images outside code blocks and code spans."""
    links: list[Link] = []
    for index, line, in_code in _scan_lines(text):
        if in_code:
            continue
        stripped = _INLINE_CODE_RE.sub(lambda m: " " * len(m.group(0)), line)
        for match in _LINK_RE.finditer(stripped):
            target = match.group("target")
            if target.startswith("<") and target.endswith(">"):
                target = target[1:-1]
            links.append(Link(
                text=match.group("text"),
                target=target,
                line=index + start_line,
                image=bool(match.group("bang")),
            ))
    return links


def iter_headings(text: str) -> Iterator[tuple[int, int, str]]:
    """Yield ``(index, level, text)`` for ATX headings outside code blocks."""
    for index, line, in_code in _scan_lines(text):
        if in_code:
            continue
        match = _HEADING_RE.match(line)
        if match:
            yield index, len(match.group("hashes")), (match.group("text") or "").strip()


def first_heading(text: str) -> str | None:
    """Text of the first heading in ``text``."""
    for _, _, heading in iter_headings(text):
        if heading:
            return heading
    return None


def _section_bounds(text: str, heading: str) -> tuple[int, int] | None:
    wanted = heading.strip().lower()
    start: int | None = None
    level = 0
    for index, heading_level, heading_text in iter_headings(text):
        if start is None:
            if heading_text.lower() == wanted:
                start = index + 1
                level = heading_level
        elif heading_level <= level:
            return start, index
    if start is None:
        return None
    return start, len(text.splitlines())


def extract_section(text: str, heading: str) -> str | None:
    """Content under the first heading matching ``heading`` (case-insensitive).

    The section ends at the next heading of the same or higher level.
    """
    bounds = _section_bounds(text, heading)
    if bounds is None:
        return None
    lines = text.splitlines()
    return "\n".join(lines[bounds[0]:bounds[1]]).strip("\n")


def extract_load_hints(text: str, start_line: int = 1) -> list[LoadHint]:
    """Parse the "When to Load References" section into load hints.

    Every list item in the section contributes one hint per relative link
    it contains; the condition is the item text with the link markup
    removed.
    """
    bounds = _section_bounds(text, LOAD_REFERENCES_HEADING)
    if bounds is None:
        return []

    hints: list[LoadHint] = []
    lines = text.splitlines()
    for index in range(bounds[0], bounds[1]):
        item = _LIST_ITEM_RE.match(lines[index])
        if item is None:
            continue
        item_text = item.group("text")
        item_links = [
            link for link in extract_links(item_text)
            if link.is_relative and not link.image
        ]
        if not item_links:
            continue
        condition = _condition_text(item_text)
        for link in item_links:
            hints.append(LoadHint(path=link.path, condition=condition, line=index + start_line))
    return hints


def _condition_text(item_text: str) -> str:
    without_links = _LINK_RE.sub(lambda m: m.group("text"), item_text)
    plain = _EMPHASIS_RE.sub("", without_links)
    plain = re.sub(r"\s+", " ", plain).strip()
    return plain.rstrip(":").strip()


def prose_lines(text: str, start_line: int = 1) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, line)`` for lines outside fenced code blocks."""
    for index, line, in_code in _scan_lines(text):
        if not in_code:
            yield index + start_line, line
