"""Structural validation of skill corpora."""

from skillbook.lint.linter import (
    LintContext,
    LintDiagnostic,
    LintResult,
    LintRule,
    Severity,
    clear_custom_rules,
    lint_corpus,
    list_lint_rules,
    register_lint_rule,
)

__all__ = [
    "LintContext",
    "LintDiagnostic",
    "LintResult",
    "LintRule",
    "Severity",
    "clear_custom_rules",
    "lint_corpus",
    "list_lint_rules",
    "register_lint_rule",
]
