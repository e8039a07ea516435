"""Data models for a loaded skill corpus.

These describe what the loader found on disk. The snippets inside the
documents are never modelled; a code block is only its fence, language
tag and position.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import unquote

# ---------------------------------------------------------------------------
# Markdown fragments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block.

    Attributes:
        language: First word of the info string (``""`` when untagged).
        info: Full info string after the fence.
        content: Text between the fences.
        line: 1-based line of the opening fence.
        closed: False when the fence runs to end of file.
    """

    language: str
    info: str
    content: str
    line: int
    closed: bool = True


@dataclass(frozen=True)
class Link:
    """An inline Markdown link or image.

    Attributes:
        text: Link text (or image alt text).
        target: Raw target as written.
        line: 1-based line number.
        image: True for ``![alt](target)``.
    """

    text: str
    target: str
    line: int
    image: bool = False

    @property
    def is_relative(self) -> bool:
        """True for links that point at a file inside the repository."""
        target = self.target.strip()
        if not target or target.startswith(("#", "/")):
            return False
        if target.lower().startswith("mailto:"):
            return False
        scheme, sep, _ = target.partition(":")
        if sep and scheme.isalpha() and len(scheme) > 1:
            return False
        return True

    @property
    def path(self) -> str:
        """Target with ``#fragment`` and ``?query`` removed, URL-unquoted."""
        target = self.target.strip()
        for marker in ("#", "?"):
            target = target.split(marker, 1)[0]
        return unquote(target)


@dataclass(frozen=True)
class LoadHint:
    """One entry of a "When to Load References" section.

    Attributes:
        path: Relative link target (e.g. ``references/indexing.md``).
        condition: Item text describing when to load it.
        line: 1-based line number of the list item.
    """

    path: str
    condition: str
    line: int


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SkillMetadata:
    """Frontmatter fields of a ``SKILL.md``.

    Values are kept as loaded; the linter decides what is invalid.
    """

    name: Any = ""
    description: Any = ""
    license: str | None = None
    compatibility: str | None = None
    allowed_tools: tuple[str, ...] = ()
    user_invocable: bool | None = None
    author: str | None = None
    version: str | None = None
    category: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = frozenset({
        "name", "description", "license", "compatibility",
        "allowed-tools", "user-invocable", "metadata",
    })

    @classmethod
    def from_frontmatter(cls, data: dict[str, Any]) -> SkillMetadata:
        nested = data.get("metadata")
        if not isinstance(nested, dict):
            nested = {}

        tools = data.get("allowed-tools")
        if isinstance(tools, str):
            allowed_tools = tuple(tools.split())
        elif isinstance(tools, list):
            allowed_tools = tuple(str(t) for t in tools)
        else:
            allowed_tools = ()

        invocable = data.get("user-invocable")

        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            license=_optional_str(data.get("license")),
            compatibility=_optional_str(data.get("compatibility")),
            allowed_tools=allowed_tools,
            user_invocable=invocable if isinstance(invocable, bool) else None,
            author=_optional_str(nested.get("author")),
            version=_optional_str(nested.get("version")),
            category=_optional_str(nested.get("category")),
            raw=dict(data),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "license": self.license,
            "compatibility": self.compatibility,
            "allowed_tools": list(self.allowed_tools),
            "user_invocable": self.user_invocable,
            "author": self.author,
            "version": self.version,
            "category": self.category,
        }


def _optional_str(value: Any) -> str | None:
    # YAML turns `version: 1.0` into a float
    if value is None:
        return None
    return str(value)


# ---------------------------------------------------------------------------
# Corpus
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReferenceFile:
    """A deep-dive document under a skill's ``references/`` directory.

    Attributes:
        path: Absolute path on disk.
        relative: POSIX path relative to the skill directory
            (e.g. ``references/partitioning.md``).
        title: First heading of the file, if any.
    """

    path: Path
    relative: str
    title: str | None = None


@dataclass
class Skill:
    """A parsed skill directory."""

    name: str
    description: str
    category: str
    directory: Path
    skill_file: Path
    metadata: SkillMetadata
    body: str
    body_line: int
    references: list[ReferenceFile] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    code_blocks: list[CodeBlock] = field(default_factory=list)
    load_hints: list[LoadHint] = field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        return f"{self.category}/{self.name}"

    @property
    def directory_name(self) -> str:
        return self.directory.name

    def reference(self, relative: str) -> ReferenceFile | None:
        """Look up a reference by its skill-relative path."""
        wanted = relative.strip().removeprefix("./")
        for ref in self.references:
            if ref.relative == wanted:
                return ref
        # Allow "indexing.md" for "references/indexing.md"
        for ref in self.references:
            if ref.relative == f"references/{wanted}":
                return ref
        return None

    def summary(self) -> dict[str, Any]:
        """Listing entry without the body."""
        return {
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "version": self.metadata.version,
            "references": [ref.relative for ref in self.references],
        }


@dataclass(frozen=True)
class LoadProblem:
    """A skill directory that could not be loaded.

    Attributes:
        path: File or directory at fault.
        message: What went wrong.
        code: Diagnostic code the linter reports it under.
        line: 1-based line, when known.
        category: Category directory the problem belongs to.
    """

    path: Path
    message: str
    code: str
    line: int | None = None
    category: str | None = None


@dataclass
class SkillCorpus:
    """Everything discovered under a corpus root."""

    root: Path
    skills_dir: Path
    categories: list[str] = field(default_factory=list)
    skills: list[Skill] = field(default_factory=list)
    problems: list[LoadProblem] = field(default_factory=list)

    def by_category(self) -> dict[str, list[Skill]]:
        grouped: dict[str, list[Skill]] = {}
        for skill in self.skills:
            grouped.setdefault(skill.category, []).append(skill)
        return grouped

    def find(self, name: str) -> list[Skill]:
        """All skills matching a bare or ``category/name`` identifier."""
        if "/" in name:
            category, _, bare = name.partition("/")
            return [s for s in self.skills if s.category == category and s.name == bare]
        return [s for s in self.skills if s.name == name]

    def names(self) -> list[str]:
        return sorted(s.qualified_name for s in self.skills)

    def relative(self, path: Path) -> str:
        """Render ``path`` relative to the corpus root for reporting."""
        try:
            return path.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return path.as_posix()
