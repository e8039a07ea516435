"""Corpus Linter: structural validation for skill documentation.

Checks that a skill corpus is loadable and internally consistent: the
frontmatter parses, names are present and unique per category, relative
links resolve, code fences are well formed and tagged. Extensible via a
rule registry so a corpus can add house rules.

Architecture::

    lint_corpus(corpus, settings)
    │
    ├── built-in rules (skillbook.lint.rules)
    ├── custom rules   (register_lint_rule)
    └── extra_rules    (one-shot)
    │
    ▼
    LintResult
    ├── diagnostics: list[LintDiagnostic]   (sorted by path, line, code)
    ├── passed → bool (no errors)
    ├── errors / warnings / infos
    └── summary() → str

Example::

    from skillbook.corpus import SkillLoader
    from skillbook.lint import lint_corpus

    loader = SkillLoader(Path("."))
    result = lint_corpus(loader.corpus, loader.settings, loader=loader)
    for d in result.errors:
        print(d)
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from skillbook.core.logging import get_logger
from skillbook.core.settings import SkillbookSettings

if TYPE_CHECKING:
    from skillbook.corpus.loader import SkillLoader
    from skillbook.corpus.model import Skill, SkillCorpus

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Diagnostic model
# ---------------------------------------------------------------------------

class Severity(str, Enum):
    """Severity level for a lint diagnostic."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class LintDiagnostic:
    """A single lint finding.

    Attributes:
        code: Short identifier (e.g. ``"E005"``).
        severity: ``error``, ``warning``, or ``info``.
        message: Human-readable description.
        path: File or directory, relative to the corpus root.
        line: 1-based line number (if applicable).
        skill: Qualified skill name (if applicable).
        suggestion: Recommended fix (optional).
    """

    code: str
    severity: Severity
    message: str
    path: str | None = None
    line: int | None = None
    skill: str | None = None
    suggestion: str | None = None

    @property
    def location(self) -> str:
        if self.path and self.line is not None:
            return f"{self.path}:{self.line}"
        return self.path or ""

    def __str__(self) -> str:
        prefix = f"[{self.code}] {self.severity.value.upper()}"
        location = f" {self.location}" if self.location else ""
        hint = f" ({self.suggestion})" if self.suggestion else ""
        return f"{prefix}{location}: {self.message}{hint}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "path": self.path,
            "line": self.line,
            "skill": self.skill,
            "suggestion": self.suggestion,
        }


@dataclass
class LintResult:
    """Aggregated result of linting a corpus.

    Attributes:
        root: Corpus root that was linted.
        skills_checked: Number of skills that loaded.
        diagnostics: All findings from all rules.
    """

    root: str
    skills_checked: int = 0
    diagnostics: list[LintDiagnostic] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """True if there are no error-level diagnostics."""
        return not any(d.severity == Severity.ERROR for d in self.diagnostics)

    @property
    def errors(self) -> list[LintDiagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[LintDiagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def infos(self) -> list[LintDiagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.INFO]

    def summary(self) -> str:
        """One-line summary of the lint result."""
        counts = {
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "infos": len(self.infos),
        }
        status = "PASS" if self.passed else "FAIL"
        parts = [f"{status}: {self.root} ({self.skills_checked} skills)"]
        for label, count in counts.items():
            if count:
                parts.append(f"{count} {label}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "passed": self.passed,
            "skills_checked": self.skills_checked,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "info_count": len(self.infos),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def __str__(self) -> str:
        lines = [self.summary()]
        for d in self.diagnostics:
            lines.append(f"  {d}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Rule context
# ---------------------------------------------------------------------------

@dataclass
class LintContext:
    """Everything a rule may inspect.

    Document text is read once per run and shared between rules. Texts are
    whole files (``SKILL.md`` frontmatter included) so line numbers are
    file line numbers.
    """

    corpus: SkillCorpus
    settings: SkillbookSettings
    loader: SkillLoader
    _documents: dict[Path, list[tuple[Path, str, int]]] = field(default_factory=dict, repr=False)

    def documents(self, skill: Skill) -> list[tuple[Path, str, int]]:
        """``(path, text, start_line)`` for ``SKILL.md`` and each reference."""
        if skill.directory not in self._documents:
            self._documents[skill.directory] = list(self.loader.iter_documents(skill, raw=True))
        return self._documents[skill.directory]

    def relative(self, path: Path) -> str:
        return self.corpus.relative(path)


# ---------------------------------------------------------------------------
# Rule registry
# ---------------------------------------------------------------------------

# Type alias for lint rules: takes a LintContext, returns diagnostics
LintRule = Callable[[LintContext], list[LintDiagnostic]]

_RULES: list[tuple[str, LintRule]] = []

_CODE_PREFIX_RE = re.compile(r"^[EWIXewix]\d{0,3}$")


def register_lint_rule(name: str, rule: LintRule) -> None:
    """Register a custom lint rule.

    Parameters
    ----------
    name
        Human-readable rule name (e.g. ``"check_owner_field"``).
    rule
        Callable that takes a ``LintContext`` and returns a list of
        ``LintDiagnostic`` objects.
    """
    _RULES.append((name, rule))
    logger.debug("lint_rule_registered", rule=name)


def list_lint_rules() -> list[str]:
    """Return names of all registered lint rules (built-in + custom)."""
    from skillbook.lint.rules import BUILT_IN_RULES

    return [name for name, _ in BUILT_IN_RULES] + [name for name, _ in _RULES]


def clear_custom_rules() -> None:
    """Remove all custom lint rules (built-in rules are preserved)."""
    _RULES.clear()


def _is_disabled(rule_name: str, disabled: list[str]) -> bool:
    return rule_name in disabled


def _filter_disabled_codes(
    diagnostics: list[LintDiagnostic], disabled: list[str]
) -> list[LintDiagnostic]:
    # "W003" disables one code, "W" every warning
    prefixes = tuple(entry.upper() for entry in disabled if _CODE_PREFIX_RE.match(entry))
    if not prefixes:
        return diagnostics
    return [d for d in diagnostics if not d.code.upper().startswith(prefixes)]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _sort_key(d: LintDiagnostic) -> tuple[str, int, str]:
    return (d.path or "", d.line or 0, d.code)


def lint_corpus(
    corpus: SkillCorpus,
    settings: SkillbookSettings | None = None,
    *,
    loader: SkillLoader | None = None,
    include_infos: bool = True,
    extra_rules: list[LintRule] | None = None,
) -> LintResult:
    """Run all lint rules against a corpus.

    Parameters
    ----------
    corpus
        The discovered corpus.
    settings
        Conventions to enforce. Defaults to the loader's settings.
    loader
        Loader used to read reference files. Built from ``corpus.root``
        when omitted.
    include_infos
        If ``False``, info-level diagnostics are suppressed.
    extra_rules
        One-shot rules to run in addition to built-in and registered rules.

    Returns
    -------
    LintResult
        Aggregated diagnostics from all rules.
    """
    from skillbook.corpus.loader import SkillLoader
    from skillbook.lint.rules import BUILT_IN_RULES

    if loader is None:
        loader = SkillLoader(corpus.root, settings=settings)
    if settings is None:
        settings = loader.settings

    ctx = LintContext(corpus=corpus, settings=settings, loader=loader)
    result = LintResult(root=str(corpus.root), skills_checked=len(corpus.skills))

    all_rules = list(BUILT_IN_RULES) + list(_RULES)
    if extra_rules:
        for i, rule in enumerate(extra_rules):
            all_rules.append((f"extra_rule_{i}", rule))

    for rule_name, rule in all_rules:
        if _is_disabled(rule_name, settings.disabled_rules):
            logger.debug("lint_rule_skipped", rule=rule_name)
            continue
        try:
            result.diagnostics.extend(rule(ctx))
        except Exception:
            logger.warning("lint_rule_failed", rule=rule_name, exc_info=True)
            result.diagnostics.append(
                LintDiagnostic(
                    code="X001",
                    severity=Severity.WARNING,
                    message=f"Lint rule '{rule_name}' raised an exception.",
                )
            )

    result.diagnostics = _filter_disabled_codes(result.diagnostics, settings.disabled_rules)
    if not include_infos:
        result.diagnostics = [d for d in result.diagnostics if d.severity != Severity.INFO]
    result.diagnostics.sort(key=_sort_key)

    logger.info("corpus_linted", root=str(corpus.root), summary=result.summary())
    return result
