"""
Structured error types for skillbook.

Every failure the tool can raise while reading a skill corpus is a
``SkillbookError``. Each error carries a category for routing, a structured
context (which file, which skill, which line) and an optional chained cause.
The loader and linter catch these at per-file boundaries and turn them into
load problems or diagnostics, so one malformed ``SKILL.md`` never hides the
rest of the corpus.

Manifesto:
    - **Typed hierarchy:** Parse, lookup, scaffold and config failures are
      distinct types
    - **Rich context:** Errors know the file and line they came from
    - **Error chaining:** The original YAML/OS exception is kept as ``cause``

Architecture:
    ::

        SkillbookError  (category, context, cause)
        │
        ├── FrontmatterError         (PARSE)
        ├── SkillNotFoundError       (NOT_FOUND)
        │   └── AmbiguousSkillError
        ├── ReferenceNotFoundError   (NOT_FOUND)
        ├── ScaffoldError            (VALIDATION)
        └── ConfigError              (CONFIG)

Examples:
    >>> err = FrontmatterError("unterminated frontmatter block")
    >>> err.with_context(path="skills/data/caching/SKILL.md", line=1)
    FrontmatterError('unterminated frontmatter block', category=PARSE)
    >>> err.to_dict()["context"]["path"]
    'skills/data/caching/SKILL.md'

Tags:
    error-handling, exception-hierarchy, error-context, skillbook

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    PARSE = "PARSE"              # Frontmatter / YAML syntax
    NOT_FOUND = "NOT_FOUND"      # Unknown skill or reference
    VALIDATION = "VALIDATION"    # Rejected input (scaffold names, categories)
    CONFIG = "CONFIG"            # Settings file or environment
    STORAGE = "STORAGE"          # File system
    INTERNAL = "INTERNAL"        # Bugs, unexpected state


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Attributes:
        path: File the error refers to (relative to the corpus root when known).
        skill: Qualified skill name (``category/name``).
        line: 1-based line number inside ``path``.
        metadata: Additional key-value pairs.
    """

    path: str | None = None
    skill: str | None = None
    line: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("path", "skill", "line"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SkillbookError(Exception):
    """Base exception for all skillbook errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``cause`` is also installed as ``__cause__`` so tracebacks
    show the chain.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SkillbookError:
        """
        Add context to this error (fluent API).

        Usage:
            raise FrontmatterError("bad YAML").with_context(
                path="skills/data/caching/SKILL.md", line=4
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __str__(self) -> str:
        location = self.context.path
        if location and self.context.line is not None:
            location = f"{location}:{self.context.line}"
        return f"{location}: {self.message}" if location else self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# PARSE ERRORS
# =============================================================================


class FrontmatterError(SkillbookError):
    """A Markdown file's YAML frontmatter is missing, unterminated or invalid."""

    default_category = ErrorCategory.PARSE


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class SkillNotFoundError(SkillbookError):
    """No skill with the requested name exists in the corpus."""

    default_category = ErrorCategory.NOT_FOUND

    def __init__(self, name: str, message: str | None = None):
        super().__init__(message or f"Skill not found: {name}")
        self.context.skill = name


class AmbiguousSkillError(SkillNotFoundError):
    """A bare skill name matches skills in more than one category."""

    def __init__(self, name: str, candidates: list[str]):
        super().__init__(
            name,
            f"Skill name '{name}' is ambiguous; use one of: {', '.join(sorted(candidates))}",
        )
        self.candidates = sorted(candidates)


class ReferenceNotFoundError(SkillbookError):
    """A skill has no reference file at the requested relative path."""

    default_category = ErrorCategory.NOT_FOUND

    def __init__(self, skill: str, relative: str):
        super().__init__(f"Reference not found in {skill}: {relative}")
        self.context.skill = skill
        self.context.metadata["reference"] = relative


# =============================================================================
# INPUT / CONFIG ERRORS
# =============================================================================


class ScaffoldError(SkillbookError):
    """A new skill cannot be created with the given category or name."""

    default_category = ErrorCategory.VALIDATION


class ConfigError(SkillbookError):
    """Settings could not be loaded or failed validation."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SkillbookError",
    "FrontmatterError",
    "SkillNotFoundError",
    "AmbiguousSkillError",
    "ReferenceNotFoundError",
    "ScaffoldError",
    "ConfigError",
]
