"""Tests for the corpus linter framework.

Covers:
- LintDiagnostic creation and string representation
- LintResult aggregation, filtering, summary
- Custom rule registration and execution
- Rule failures, disabled rules and codes, ordering
"""

from __future__ import annotations

import pytest

from skillbook.core.settings import load_settings
from skillbook.corpus.loader import SkillLoader
from skillbook.lint import (
    LintContext,
    LintDiagnostic,
    LintResult,
    Severity,
    clear_custom_rules,
    lint_corpus,
    list_lint_rules,
    register_lint_rule,
)
from skillbook.lint.rules import BUILT_IN_RULES


def _lint(root, **overrides):
    settings = load_settings(root, **overrides)
    loader = SkillLoader(root, settings=settings)
    return lint_corpus(loader.corpus, settings, loader=loader)


# ---------------------------------------------------------------------------
# LintDiagnostic
# ---------------------------------------------------------------------------

class TestLintDiagnostic:
    def test_creation(self):
        d = LintDiagnostic(code="E003", severity=Severity.ERROR, message="No name.")
        assert d.code == "E003"
        assert d.path is None
        assert d.line is None
        assert d.skill is None
        assert d.suggestion is None

    def test_location(self):
        assert LintDiagnostic("E005", Severity.ERROR, "m", path="a.md", line=3).location == "a.md:3"
        assert LintDiagnostic("W001", Severity.WARNING, "m", path="skills/x").location == "skills/x"
        assert LintDiagnostic("E008", Severity.ERROR, "m").location == ""

    def test_str_full(self):
        d = LintDiagnostic(
            code="E005",
            severity=Severity.ERROR,
            message="Broken link.",
            path="skills/data/x/SKILL.md",
            line=12,
            suggestion="Fix it.",
        )
        assert str(d) == "[E005] ERROR skills/data/x/SKILL.md:12: Broken link. (Fix it.)"

    def test_str_minimal(self):
        d = LintDiagnostic(code="I002", severity=Severity.INFO, message="Missing license.")
        assert str(d) == "[I002] INFO: Missing license."

    def test_to_dict(self):
        d = LintDiagnostic("W007", Severity.WARNING, "Orphan.", path="a.md", skill="data/x")
        assert d.to_dict() == {
            "code": "W007",
            "severity": "warning",
            "message": "Orphan.",
            "path": "a.md",
            "line": None,
            "skill": "data/x",
            "suggestion": None,
        }

    def test_frozen(self):
        d = LintDiagnostic(code="E001", severity=Severity.ERROR, message="x")
        with pytest.raises(AttributeError):
            d.code = "E002"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# LintResult
# ---------------------------------------------------------------------------

class TestLintResult:
    def _result(self):
        return LintResult(
            root="repo",
            skills_checked=4,
            diagnostics=[
                LintDiagnostic("E005", Severity.ERROR, "broken"),
                LintDiagnostic("W002", Severity.WARNING, "lang"),
                LintDiagnostic("W007", Severity.WARNING, "orphan"),
                LintDiagnostic("I001", Severity.INFO, "untagged"),
            ],
        )

    def test_empty_passes(self):
        result = LintResult(root="repo")
        assert result.passed
        assert result.summary() == "PASS: repo (0 skills)"

    def test_partitions(self):
        result = self._result()
        assert not result.passed
        assert [d.code for d in result.errors] == ["E005"]
        assert [d.code for d in result.warnings] == ["W002", "W007"]
        assert [d.code for d in result.infos] == ["I001"]

    def test_warnings_only_pass(self):
        result = LintResult(root="repo", diagnostics=[LintDiagnostic("W001", Severity.WARNING, "w")])
        assert result.passed

    def test_summary(self):
        assert self._result().summary() == "FAIL: repo (4 skills) | 1 errors | 2 warnings | 1 infos"

    def test_to_dict(self):
        d = self._result().to_dict()
        assert d["passed"] is False
        assert d["skills_checked"] == 4
        assert (d["error_count"], d["warning_count"], d["info_count"]) == (1, 2, 1)
        assert len(d["diagnostics"]) == 4

    def test_str_lists_diagnostics(self):
        text = str(self._result())
        assert text.splitlines()[0].startswith("FAIL")
        assert "  [E005] ERROR: broken" in text


# ---------------------------------------------------------------------------
# lint_corpus
# ---------------------------------------------------------------------------

class TestLintCorpus:
    def test_clean_corpus(self, corpus_root):
        result = _lint(corpus_root)
        assert result.passed
        assert result.diagnostics == []
        assert result.skills_checked == 3
        assert result.root == str(corpus_root)

    def test_loader_built_when_omitted(self, corpus_root):
        loader = SkillLoader(corpus_root)
        result = lint_corpus(loader.corpus)
        assert result.passed

    def test_include_infos_false(self, corpus_root):
        skill_file = corpus_root / "skills" / "data" / "redis-patterns" / "SKILL.md"
        skill_file.write_text(
            skill_file.read_text(encoding="utf-8") + "\n```\nuntagged\n```\n", encoding="utf-8"
        )
        loader = SkillLoader(corpus_root)
        assert [d.code for d in lint_corpus(loader.corpus).diagnostics] == ["I001"]
        assert lint_corpus(loader.corpus, include_infos=False).diagnostics == []

    def test_disable_rule_by_name(self, corpus_root):
        (corpus_root / ".claude" / "rules.md").unlink()
        assert [d.code for d in _lint(corpus_root).diagnostics] == ["E008"]
        assert _lint(corpus_root, disabled_rules=["check_required_files"]).diagnostics == []

    def test_disable_by_code(self, corpus_root):
        (corpus_root / ".claude" / "rules.md").unlink()
        assert _lint(corpus_root, disabled_rules=["E008"]).diagnostics == []

    def test_disable_by_code_prefix(self, corpus_root):
        (corpus_root / ".claude" / "rules.md").unlink()
        assert [d.code for d in _lint(corpus_root, disabled_rules=["W"]).diagnostics] == ["E008"]
        assert _lint(corpus_root, disabled_rules=["e"]).diagnostics == []

    def test_sorted_by_path_line_code(self, corpus_root):
        def rule(ctx):
            return [
                LintDiagnostic("W900", Severity.WARNING, "b", path="b.md", line=1),
                LintDiagnostic("W901", Severity.WARNING, "a2", path="a.md", line=9),
                LintDiagnostic("E900", Severity.ERROR, "a1", path="a.md", line=9),
                LintDiagnostic("W902", Severity.WARNING, "a0", path="a.md", line=2),
            ]

        loader = SkillLoader(corpus_root)
        result = lint_corpus(loader.corpus, extra_rules=[rule])
        assert [d.code for d in result.diagnostics] == ["W902", "E900", "W901", "W900"]

    def test_rule_exception_becomes_x001(self, corpus_root):
        def broken(ctx):
            raise RuntimeError("boom")

        loader = SkillLoader(corpus_root)
        result = lint_corpus(loader.corpus, extra_rules=[broken])
        (d,) = result.diagnostics
        assert d.code == "X001"
        assert d.severity == Severity.WARNING
        assert "extra_rule_0" in d.message
        assert result.passed


class TestCustomRules:
    def test_list_built_in(self):
        names = list_lint_rules()
        assert names == [name for name, _ in BUILT_IN_RULES]
        assert "check_relative_links" in names

    def test_register_and_run(self, corpus_root):
        def require_author(ctx: LintContext):
            return [
                LintDiagnostic("W100", Severity.WARNING, "no author", skill=s.qualified_name)
                for s in ctx.corpus.skills
                if s.metadata.author != "someone"
            ]

        register_lint_rule("check_author", require_author)
        assert list_lint_rules()[-1] == "check_author"

        result = _lint(corpus_root)
        assert [d.code for d in result.diagnostics] == ["W100"] * 3

    def test_registered_rule_can_be_disabled(self, corpus_root):
        register_lint_rule("check_nothing", lambda ctx: [LintDiagnostic("E100", Severity.ERROR, "x")])
        assert not _lint(corpus_root).passed
        assert _lint(corpus_root, disabled_rules=["check_nothing"]).passed

    def test_clear_custom_rules(self):
        register_lint_rule("temp", lambda ctx: [])
        clear_custom_rules()
        assert "temp" not in list_lint_rules()

    def test_documents_are_cached(self, corpus_root):
        seen = []

        def rule(ctx: LintContext):
            skill = ctx.corpus.find("data/redis-patterns")[0]
            seen.append(ctx.documents(skill))
            seen.append(ctx.documents(skill))
            return []

        loader = SkillLoader(corpus_root)
        lint_corpus(loader.corpus, extra_rules=[rule])
        assert seen[0] is seen[1]
        assert [p.name for p, _, _ in seen[0]] == ["SKILL.md", "caching.md", "streams.md"]
