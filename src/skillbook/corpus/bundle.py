"""Concatenate skill content into a single retrievable document.

An agent that loads a skill wants one Markdown blob: the overview from
``SKILL.md`` followed by whichever reference files apply. Reference order
follows the order in which ``SKILL.md`` first links them, so the bundle
reads the way the author laid the skill out.

Usage::

    from skillbook.corpus.bundle import bundle_skill

    text = bundle_skill(loader, "data/redis-patterns", references="all")
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from skillbook.core.errors import ReferenceNotFoundError
from skillbook.core.logging import get_logger
from skillbook.corpus.loader import SkillLoader
from skillbook.corpus.model import ReferenceFile, Skill

logger = get_logger(__name__)

ReferenceSelection = Literal["all"] | Iterable[str] | None

SEPARATOR = "\n\n---\n\n"


def source_marker(relative: str) -> str:
    return f"<!-- source: {relative} -->"


def ordered_references(loader: SkillLoader, skill: Skill) -> list[ReferenceFile]:
    """References in first-link order, then the unlinked ones alphabetically."""
    ordered: list[ReferenceFile] = []
    seen: set[str] = set()

    for link in skill.links:
        target = loader.resolve_link(skill, link)
        if target is None:
            continue
        for ref in skill.references:
            if ref.relative not in seen and ref.path.resolve() == target:
                ordered.append(ref)
                seen.add(ref.relative)

    ordered.extend(ref for ref in skill.references if ref.relative not in seen)
    return ordered


def _select_references(
    loader: SkillLoader,
    skill: Skill,
    references: ReferenceSelection,
) -> list[ReferenceFile]:
    if references is None:
        return []
    if references == "all":
        return ordered_references(loader, skill)

    selected: list[ReferenceFile] = []
    for relative in references:
        ref = skill.reference(relative)
        if ref is None:
            raise ReferenceNotFoundError(skill.qualified_name, relative)
        if ref not in selected:
            selected.append(ref)
    return selected


def bundle_skill(
    loader: SkillLoader,
    skill: Skill | str,
    references: ReferenceSelection = "all",
) -> str:
    """Render a skill and its references as one Markdown document.

    Args:
        loader: Loader that owns the corpus.
        skill: Skill object or ``category/name`` / bare name.
        references: ``"all"`` for every reference, an iterable of
            skill-relative paths for a subset, or None for the body only.

    Raises:
        SkillNotFoundError: Unknown skill name.
        ReferenceNotFoundError: An explicitly requested reference does not exist.
    """
    if isinstance(skill, str):
        skill = loader.get_skill(skill)

    header = f"# Skill: {skill.qualified_name}"
    if skill.description:
        header += f"\n\n> {skill.description}"

    parts = [
        f"{header}\n\n{source_marker('SKILL.md')}\n\n{skill.body.strip()}",
    ]
    for ref in _select_references(loader, skill, references):
        content = loader.read_reference(skill, ref.relative)
        parts.append(f"{source_marker(ref.relative)}\n\n{content.strip()}")

    logger.debug("skill_bundled", skill=skill.qualified_name, parts=len(parts))
    return SEPARATOR.join(parts) + "\n"


def bundle_corpus(
    loader: SkillLoader,
    category: str | None = None,
    references: ReferenceSelection = "all",
) -> str:
    """Concatenate every skill (optionally one category) in qualified-name order."""
    if references is not None and references != "all":
        references = list(references)
    skills = sorted(loader.corpus.skills, key=lambda s: s.qualified_name)
    if category is not None:
        skills = [s for s in skills if s.category == category]
    return "\n".join(bundle_skill(loader, s, references) for s in skills)


__all__ = ["bundle_skill", "bundle_corpus", "ordered_references", "source_marker", "SEPARATOR"]
