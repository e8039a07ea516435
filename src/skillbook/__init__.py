"""
skillbook -- load, validate and bundle Markdown skill corpora.

A skill corpus is a tree of ``skills/<category>/<skill-name>/SKILL.md``
files with YAML frontmatter and optional ``references/*.md`` deep dives.
skillbook parses the frontmatter, resolves relative reference links,
retrieves and concatenates content on demand, and lints the corpus's
structure.

Example:
    >>> from pathlib import Path
    >>> from skillbook import SkillLoader, lint_corpus
    >>> loader = SkillLoader(Path("."))
    >>> result = lint_corpus(loader.corpus, loader.settings, loader=loader)
    >>> result.passed
    True
"""

from skillbook.core.errors import SkillbookError
from skillbook.core.settings import SkillbookSettings, load_settings
from skillbook.corpus import SkillLoader, bundle_corpus, bundle_skill
from skillbook.lint import lint_corpus
from skillbook.scaffold import create_skill

__version__ = "0.1.0"

__all__ = [
    "SkillbookError",
    "SkillbookSettings",
    "load_settings",
    "SkillLoader",
    "bundle_skill",
    "bundle_corpus",
    "lint_corpus",
    "create_skill",
    "__version__",
]
