"""Skill corpus loading.

A corpus is a directory tree of Markdown skills::

    skills/<category>/<skill-name>/SKILL.md
    skills/<category>/<skill-name>/references/*.md

``SKILL.md`` starts with YAML frontmatter (name, description, license,
compatibility, allowed-tools, user-invocable, metadata.*). References are
linked from ``SKILL.md`` and loaded on demand.
"""

from skillbook.corpus.bundle import bundle_corpus, bundle_skill
from skillbook.corpus.frontmatter import parse_frontmatter, split_frontmatter
from skillbook.corpus.loader import SkillLoader
from skillbook.corpus.model import (
    CodeBlock,
    Link,
    LoadHint,
    LoadProblem,
    ReferenceFile,
    Skill,
    SkillCorpus,
    SkillMetadata,
)

__all__ = [
    "SkillLoader",
    "bundle_skill",
    "bundle_corpus",
    "parse_frontmatter",
    "split_frontmatter",
    "CodeBlock",
    "Link",
    "LoadHint",
    "LoadProblem",
    "ReferenceFile",
    "Skill",
    "SkillCorpus",
    "SkillMetadata",
]
