"""Tests for Markdown structural extraction.

Covers:
- Fenced code blocks: languages, attributes, tildes, nesting, unclosed fences
- Inline links and images, skipping code
- Headings and sections
- "When to Load References" load hints
"""

from skillbook.corpus.markdown import (
    extract_code_blocks,
    extract_links,
    extract_load_hints,
    extract_section,
    first_heading,
    iter_headings,
    prose_lines,
)
from skillbook.corpus.model import Link


# ---------------------------------------------------------------------------
# Code blocks
# ---------------------------------------------------------------------------

class TestExtractCodeBlocks:
    def test_tagged_block(self):
        text = "intro\n```python\nprint('hi')\n```\n"
        (block,) = extract_code_blocks(text)
        assert block.language == "python"
        assert block.content == "print('hi')"
        assert block.line == 2
        assert block.closed

    def test_untagged_block(self):
        (block,) = extract_code_blocks("```\nplain\n```\n")
        assert block.language == ""
        assert block.info == ""

    def test_start_line_offset(self):
        (block,) = extract_code_blocks("```sql\nSELECT 1;\n```\n", start_line=10)
        assert block.line == 10

    def test_info_string_words(self):
        (block,) = extract_code_blocks("```python title=\"app.py\"\nx = 1\n```\n")
        assert block.language == "python"
        assert block.info == 'python title="app.py"'

    def test_brace_attributes(self):
        blocks = extract_code_blocks("```{python}\na\n```\n```js{1,3}\nb\n```\n")
        assert [b.language for b in blocks] == ["python", "js"]

    def test_tilde_fence(self):
        (block,) = extract_code_blocks("~~~yaml\nkey: value\n~~~\n")
        assert block.language == "yaml"

    def test_longer_fence_contains_shorter(self):
        text = "````markdown\n```python\nx\n```\n````\n"
        (block,) = extract_code_blocks(text)
        assert block.language == "markdown"
        assert "```python" in block.content

    def test_closing_fence_with_info_does_not_close(self):
        text = "```bash\necho\n```python\n```\n"
        (block,) = extract_code_blocks(text)
        assert block.closed
        assert "```python" in block.content

    def test_mismatched_fence_char_does_not_close(self):
        (block,) = extract_code_blocks("```bash\necho\n~~~\n")
        assert not block.closed

    def test_unclosed_fence(self):
        text = "# T\n\n```python\nx = 1\n"
        (block,) = extract_code_blocks(text, start_line=5)
        assert not block.closed
        assert block.line == 7
        assert block.content == "x = 1"

    def test_multiple_blocks_in_order(self):
        text = "```a\n1\n```\n\ntext\n\n```b\n2\n```\n"
        blocks = extract_code_blocks(text)
        assert [(b.language, b.line) for b in blocks] == [("a", 1), ("b", 7)]

    def test_indented_fence(self):
        (block,) = extract_code_blocks("   ```go\nfmt.Println()\n   ```\n")
        assert block.language == "go"

    def test_inline_backticks_are_not_fences(self):
        assert extract_code_blocks("Use ```inline``` code.\n") == []


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

class TestExtractLinks:
    def test_inline_link(self):
        (link,) = extract_links("See [caching](references/caching.md).")
        assert link.text == "caching"
        assert link.target == "references/caching.md"
        assert link.line == 1
        assert not link.image

    def test_image(self):
        (link,) = extract_links("![diagram](images/flow.png)")
        assert link.image
        assert link.text == "diagram"

    def test_title_is_dropped(self):
        (link,) = extract_links('[a](references/a.md "Title")')
        assert link.target == "references/a.md"

    def test_angle_bracket_target(self):
        (link,) = extract_links("[a](<references/with space.md>)")
        assert link.target == "references/with space.md"

    def test_parentheses_in_target(self):
        (link,) = extract_links("[wiki](https://en.wikipedia.org/wiki/Cache_(computing))")
        assert link.target == "https://en.wikipedia.org/wiki/Cache_(computing)"

    def test_nested_brackets_in_text(self):
        (link,) = extract_links("[the [best] guide](guide.md)")
        assert link.text == "the [best] guide"

    def test_skips_code_blocks(self):
        text = "```md\n[not](a.md)\n```\n[yes](b.md)\n"
        (link,) = extract_links(text)
        assert link.target == "b.md"
        assert link.line == 4

    def test_skips_inline_code(self):
        assert extract_links("Write `[x](y.md)` to link.") == []

    def test_start_line(self):
        (link,) = extract_links("\n\n[a](a.md)", start_line=20)
        assert link.line == 22

    def test_several_per_line(self):
        links = extract_links("[a](a.md) and [b](b.md)")
        assert [l.target for l in links] == ["a.md", "b.md"]


class TestLink:
    def test_relative(self):
        assert Link("a", "references/a.md", 1).is_relative
        assert Link("a", "../other/SKILL.md", 1).is_relative

    def test_not_relative(self):
        for target in ("https://x.io", "http://x.io", "mailto:a@b.c", "#anchor", "/abs/path.md", ""):
            assert not Link("a", target, 1).is_relative, target

    def test_path_strips_fragment_and_query(self):
        assert Link("a", "references/a.md#section", 1).path == "references/a.md"
        assert Link("a", "references/a.md?plain=1", 1).path == "references/a.md"

    def test_path_unquotes(self):
        assert Link("a", "references/with%20space.md", 1).path == "references/with space.md"


# ---------------------------------------------------------------------------
# Headings and sections
# ---------------------------------------------------------------------------

class TestHeadings:
    TEXT = (
        "# Title\n"
        "\n"
        "## Overview\n"
        "Overview text.\n"
        "```bash\n"
        "# not a heading\n"
        "```\n"
        "### Detail\n"
        "Detail text.\n"
        "## Next\n"
        "Next text.\n"
    )

    def test_iter_headings_skips_code(self):
        headings = [(level, text) for _, level, text in iter_headings(self.TEXT)]
        assert headings == [(1, "Title"), (2, "Overview"), (3, "Detail"), (2, "Next")]

    def test_closing_hashes(self):
        assert [t for _, _, t in iter_headings("## Setup ##\n")] == ["Setup"]

    def test_trailing_hash_without_space_is_text(self):
        assert first_heading("# C#\n") == "C#"
        assert first_heading("## F# and C# ##\n") == "F# and C#"

    def test_first_heading(self):
        assert first_heading(self.TEXT) == "Title"
        assert first_heading("no headings") is None

    def test_extract_section_includes_subsections(self):
        section = extract_section(self.TEXT, "overview")
        assert "Overview text." in section
        assert "Detail text." in section
        assert "Next text." not in section

    def test_extract_section_to_end(self):
        assert extract_section(self.TEXT, "Next") == "Next text."

    def test_missing_section(self):
        assert extract_section(self.TEXT, "Missing") is None


# ---------------------------------------------------------------------------
# Load hints
# ---------------------------------------------------------------------------

class TestExtractLoadHints:
    TEXT = (
        "# Skill\n"
        "\n"
        "## When to Load References\n"
        "\n"
        "- **Partitioning**: Load [partitioning](references/partitioning.md) for large tables\n"
        "- Load [indexing](references/indexing.md) and [vacuum](references/vacuum.md#tuning)\n"
        "- See the [docs](https://postgresql.org) for everything else\n"
        "Not a list item [x](references/x.md)\n"
        "\n"
        "## Other\n"
        "\n"
        "- [later](references/later.md)\n"
    )

    def test_hints(self):
        hints = extract_load_hints(self.TEXT)
        assert [h.path for h in hints] == [
            "references/partitioning.md",
            "references/indexing.md",
            "references/vacuum.md",
        ]

    def test_condition_text(self):
        hints = extract_load_hints(self.TEXT)
        assert hints[0].condition == "Partitioning: Load partitioning for large tables"
        assert hints[1].condition == hints[2].condition == "Load indexing and vacuum"

    def test_line_numbers(self):
        hints = extract_load_hints(self.TEXT, start_line=10)
        assert [h.line for h in hints] == [14, 15, 15]

    def test_no_section(self):
        assert extract_load_hints("# Skill\n\n- [a](references/a.md)\n") == []

    def test_numbered_items(self):
        text = "## When to load references\n1. [a](references/a.md): first\n"
        (hint,) = extract_load_hints(text)
        assert hint.path == "references/a.md"
        assert hint.condition == "a: first"


class TestProseLines:
    def test_skips_fenced_lines(self):
        text = "Step 1 here\n```bash\nStep 2 in code\n```\nafter\n"
        assert list(prose_lines(text, start_line=3)) == [(3, "Step 1 here"), (7, "after")]
