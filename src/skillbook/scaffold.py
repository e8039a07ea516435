"""Create new knowledge skills from a template.

Mirrors the corpus's ``make new-skill CATEGORY=... NAME=...`` target: the
category must be a standard one, the name lowercase-hyphenated without the
``x-`` prefix, and the directory must not already exist. The repository
template (``.templates/knowledge-skill/SKILL.md``) is used when present;
otherwise a built-in template with the same placeholders.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from skillbook.core.errors import FrontmatterError, ScaffoldError
from skillbook.core.logging import get_logger
from skillbook.core.settings import SkillbookSettings, load_settings
from skillbook.corpus.frontmatter import split_frontmatter
from skillbook.corpus.loader import REFERENCES_DIRNAME, SKILL_FILENAME
from skillbook.lint.rules import SKILL_NAME_RE

logger = get_logger(__name__)

PLACEHOLDER_DESCRIPTION = "__DESCRIPTION__"

# JSON strings are valid double-quoted YAML scalars
_DESCRIPTION_VALUE_RE = re.compile(
    r"""^(?P<key>[ \t]*[\w.-]+:[ \t]*)(?P<q>["']?)__DESCRIPTION__(?P=q)(?=[ \t]*\r?$)""",
    re.MULTILINE,
)

DEFAULT_TEMPLATE = """\
---
name: __NAME__
description: __DESCRIPTION__
license: MIT
compatibility: Works with any agent that loads SKILL.md files.
allowed-tools: Read Grep Glob
user-invocable: false
metadata:
  author: ""
  version: "1.0.0"
  category: __CATEGORY__
---

# __NAME__

## Overview

## Key Concepts

## When to Load References
"""


def validate_new_skill(category: str, name: str, settings: SkillbookSettings) -> None:
    """Raise ``ScaffoldError`` unless ``category``/``name`` are acceptable."""
    if category not in settings.valid_categories:
        raise ScaffoldError(
            f"CATEGORY must be one of: {', '.join(settings.valid_categories)}"
        ).with_context(category=category)
    if not SKILL_NAME_RE.match(name):
        raise ScaffoldError(
            f"NAME must match {SKILL_NAME_RE.pattern} (lowercase, hyphenated)"
        ).with_context(skill=name)
    if name.startswith("x-"):
        raise ScaffoldError(
            "NAME must NOT start with x- (knowledge skills don't use x- prefix)"
        ).with_context(skill=name)


def render_template(template: str, category: str, name: str, description: str | None = None) -> str:
    """Fill the template placeholders.

    In the frontmatter, a ``key: __DESCRIPTION__`` value (bare or already
    quoted) becomes a double-quoted YAML scalar, so colons, ``#`` and quotes
    in the description survive parsing. Elsewhere it is inserted as is.
    """
    text = template.replace("__NAME__", name).replace("__CATEGORY__", category)
    if not description:
        return text

    try:
        _, _, body_start = split_frontmatter(text)
    except FrontmatterError:
        body_start = 1
    lines = text.splitlines(keepends=True)
    head = "".join(lines[: body_start - 1])
    body = "".join(lines[body_start - 1:])

    quoted = json.dumps(description, ensure_ascii=False)
    head = _DESCRIPTION_VALUE_RE.sub(lambda m: m.group("key") + quoted, head)
    return (head + body).replace(PLACEHOLDER_DESCRIPTION, description)


def create_skill(
    root: Path | str,
    category: str,
    name: str,
    settings: SkillbookSettings | None = None,
    description: str | None = None,
) -> Path:
    """Create ``skills/<category>/<name>/`` with a SKILL.md and references/.

    Returns:
        Path of the new SKILL.md.

    Raises:
        ScaffoldError: Invalid category/name, or the skill already exists.
    """
    root = Path(root)
    settings = settings or load_settings(root)
    validate_new_skill(category, name, settings)

    skill_dir = root / settings.skills_dir / category / name
    if skill_dir.exists():
        raise ScaffoldError(f"{skill_dir} already exists").with_context(path=str(skill_dir))

    template_file = root / settings.template_path
    if template_file.is_file():
        template = template_file.read_text(encoding="utf-8")
        logger.debug("template_loaded", path=str(template_file))
    else:
        template = DEFAULT_TEMPLATE

    (skill_dir / REFERENCES_DIRNAME).mkdir(parents=True)
    skill_file = skill_dir / SKILL_FILENAME
    skill_file.write_text(render_template(template, category, name, description), encoding="utf-8")

    logger.info("skill_created", path=str(skill_file))
    return skill_file
