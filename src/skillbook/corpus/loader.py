"""Skill discovery and on-demand retrieval.

Walks ``<root>/skills/<category>/<skill>/`` directories, parses each
``SKILL.md`` frontmatter for metadata, indexes ``references/*.md`` files,
and reads reference content only when asked for it.

Architecture::

    SkillLoader.discover()
    │
    ├── for category in skills/*            (sorted, skip . and _ dirs)
    │   └── for skill_dir in category/*
    │       ├── SKILL.md missing     → LoadProblem(E001)
    │       ├── bad frontmatter      → LoadProblem(E002)
    │       └── load_skill()         → Skill
    │
    ▼
    SkillCorpus (skills, problems, categories)

Usage::

    loader = SkillLoader(Path("."))
    skill = loader.get_skill("data/postgres-patterns")
    text = loader.read_reference(skill, "references/partitioning.md")
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

from skillbook.core.errors import (
    AmbiguousSkillError,
    FrontmatterError,
    ReferenceNotFoundError,
    SkillNotFoundError,
)
from skillbook.core.logging import get_logger
from skillbook.core.settings import SkillbookSettings, load_settings
from skillbook.corpus.frontmatter import parse_frontmatter
from skillbook.corpus.markdown import (
    extract_code_blocks,
    extract_links,
    extract_load_hints,
    first_heading,
)
from skillbook.corpus.model import (
    Link,
    LoadProblem,
    ReferenceFile,
    Skill,
    SkillCorpus,
    SkillMetadata,
)

logger = get_logger(__name__)

SKILL_FILENAME = "SKILL.md"
REFERENCES_DIRNAME = "references"


def _is_hidden(path: Path) -> bool:
    return path.name.startswith((".", "_"))


def read_text(path: Path) -> str:
    """Read a corpus file as UTF-8."""
    return path.read_text(encoding="utf-8")


class SkillLoader:
    """
    Discovers skills under a corpus root and serves their content.

    Usage:
        loader = SkillLoader(Path("path/to/repo"))
        corpus = loader.corpus          # discovered lazily, then cached
        for entry in loader.list_skills():
            print(entry["category"], entry["name"])
    """

    def __init__(
        self,
        root: Path | str | None = None,
        settings: SkillbookSettings | None = None,
    ):
        if settings is None:
            settings = load_settings(root)
        self.settings = settings
        self.root = Path(root) if root is not None else settings.root
        self._corpus: SkillCorpus | None = None

    @property
    def skills_path(self) -> Path:
        return self.root / self.settings.skills_dir

    # ── Discovery ────────────────────────────────────────────────

    @property
    def corpus(self) -> SkillCorpus:
        if self._corpus is None:
            self._corpus = self.discover()
        return self._corpus

    def refresh(self) -> SkillCorpus:
        """Forget the cached corpus and scan again."""
        self._corpus = None
        return self.corpus

    def discover(self) -> SkillCorpus:
        """Scan every category directory for skills."""
        corpus = SkillCorpus(root=self.root, skills_dir=self.skills_path)

        if not self.skills_path.is_dir():
            logger.warning("skills_dir_missing", path=str(self.skills_path))
            return corpus

        for category_dir in sorted(p for p in self.skills_path.iterdir() if p.is_dir()):
            if _is_hidden(category_dir):
                continue
            corpus.categories.append(category_dir.name)

            for skill_dir in sorted(p for p in category_dir.iterdir() if p.is_dir()):
                if _is_hidden(skill_dir):
                    continue
                self._scan_skill_dir(corpus, category_dir.name, skill_dir)

        logger.info(
            "skills_discovered",
            root=str(self.root),
            skills=len(corpus.skills),
            problems=len(corpus.problems),
        )
        return corpus

    def _scan_skill_dir(self, corpus: SkillCorpus, category: str, skill_dir: Path) -> None:
        skill_file = skill_dir / SKILL_FILENAME
        if not skill_file.is_file():
            corpus.problems.append(LoadProblem(
                path=skill_dir,
                message=f"skill directory has no {SKILL_FILENAME}",
                code="E001",
                category=category,
            ))
            logger.warning("skill_file_missing", path=str(skill_dir))
            return

        try:
            corpus.skills.append(self.load_skill(category, skill_dir))
        except FrontmatterError as exc:
            corpus.problems.append(LoadProblem(
                path=skill_file,
                message=exc.message,
                code="E002",
                line=exc.context.line,
                category=category,
            ))
            logger.warning("skill_load_failed", path=str(skill_file), error=exc.message)
        except (OSError, UnicodeDecodeError) as exc:
            corpus.problems.append(LoadProblem(
                path=skill_file,
                message=f"cannot read file: {exc}",
                code="E002",
                category=category,
            ))
            logger.warning("skill_load_failed", path=str(skill_file), error=str(exc))

    def load_skill(self, category: str, skill_dir: Path) -> Skill:
        """Parse one skill directory.

        Raises:
            FrontmatterError: ``SKILL.md`` frontmatter is missing or invalid.
        """
        skill_file = skill_dir / SKILL_FILENAME
        try:
            data, body, body_line = parse_frontmatter(read_text(skill_file))
        except FrontmatterError as exc:
            raise exc.with_context(path=str(skill_file))

        metadata = SkillMetadata.from_frontmatter(data)
        name = metadata.name if isinstance(metadata.name, str) and metadata.name.strip() else skill_dir.name
        description = metadata.description if isinstance(metadata.description, str) else ""

        return Skill(
            name=name.strip(),
            description=description.strip(),
            category=category,
            directory=skill_dir,
            skill_file=skill_file,
            metadata=metadata,
            body=body,
            body_line=body_line,
            references=self._index_references(skill_dir),
            links=extract_links(body, start_line=body_line),
            code_blocks=extract_code_blocks(body, start_line=body_line),
            load_hints=extract_load_hints(body, start_line=body_line),
        )

    def _index_references(self, skill_dir: Path) -> list[ReferenceFile]:
        ref_dir = skill_dir / REFERENCES_DIRNAME
        if not ref_dir.is_dir():
            return []

        refs: list[ReferenceFile] = []
        for path in sorted(ref_dir.rglob("*.md")):
            if not path.is_file():
                continue
            try:
                title = first_heading(read_text(path))
            except (OSError, UnicodeDecodeError):
                logger.warning("reference_unreadable", path=str(path))
                title = None
            refs.append(ReferenceFile(
                path=path,
                relative=path.relative_to(skill_dir).as_posix(),
                title=title,
            ))
        return refs

    # ── Retrieval ────────────────────────────────────────────────

    def get_skill(self, name: str) -> Skill:
        """Look up a skill by ``category/name`` or bare name.

        Raises:
            SkillNotFoundError: No skill matches.
            AmbiguousSkillError: A bare name matches several categories.
        """
        matches = self.corpus.find(name.strip())
        if not matches:
            raise SkillNotFoundError(name)
        if len(matches) > 1:
            raise AmbiguousSkillError(name, [s.qualified_name for s in matches])
        return matches[0]

    def list_skills(self, category: str | None = None) -> list[dict[str, Any]]:
        """Skill metadata without bodies, ordered by qualified name."""
        skills = sorted(self.corpus.skills, key=lambda s: s.qualified_name)
        return [s.summary() for s in skills if category is None or s.category == category]

    def read_skill(self, skill: Skill | str) -> str:
        """Body of ``SKILL.md`` (frontmatter removed)."""
        if isinstance(skill, str):
            skill = self.get_skill(skill)
        return skill.body

    def read_reference(self, skill: Skill | str, relative: str) -> str:
        """Load a reference file's content.

        Raises:
            ReferenceNotFoundError: ``relative`` is not one of the skill's references.
        """
        if isinstance(skill, str):
            skill = self.get_skill(skill)
        ref = skill.reference(relative)
        if ref is None:
            raise ReferenceNotFoundError(skill.qualified_name, relative)
        logger.debug("reference_loaded", skill=skill.qualified_name, reference=ref.relative)
        return read_text(ref.path)

    def resolve_link(self, skill: Skill, link: Link, source: Path | None = None) -> Path | None:
        """Resolve a relative link to an existing file or directory.

        Args:
            skill: Skill that owns the document.
            link: Link to resolve.
            source: Document containing the link (defaults to ``SKILL.md``).

        Returns:
            The resolved path, or None for non-relative links and missing targets.
        """
        if not link.is_relative or not link.path:
            return None
        base = (source or skill.skill_file).parent
        target = (base / link.path).resolve()
        return target if target.exists() else None

    def iter_documents(
        self, skill: Skill, *, raw: bool = False
    ) -> Iterator[tuple[Path, str, int]]:
        """Yield ``(path, text, start_line)`` for ``SKILL.md`` and each reference.

        ``SKILL.md`` yields its body (frontmatter removed) unless ``raw`` is
        set, in which case it yields the whole file from line 1. References
        always yield their whole text. Unreadable files are logged and skipped.
        """
        if raw:
            try:
                yield skill.skill_file, read_text(skill.skill_file), 1
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("skill_file_unreadable", path=str(skill.skill_file), error=str(exc))
        else:
            yield skill.skill_file, skill.body, skill.body_line
        for ref in skill.references:
            try:
                yield ref.path, read_text(ref.path), 1
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("reference_unreadable", path=str(ref.path), error=str(exc))


__all__ = ["SkillLoader", "SKILL_FILENAME", "REFERENCES_DIRNAME", "read_text"]
