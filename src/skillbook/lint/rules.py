"""Built-in lint rules for skill corpora.

Codes:

    E001  skill directory without SKILL.md
    E002  SKILL.md frontmatter missing or not a YAML mapping
    E003  frontmatter name missing or empty
    E004  frontmatter description missing or empty
    E005  relative link target does not exist
    E006  duplicate skill name within a category
    E007  forbidden dependency term in skill content
    E008  required repository file missing
    E009  unterminated code fence
    W001  non-standard category directory
    W002  unrecognized code block language
    W003  possible credential in a credential-sensitive category
    W004  execution-step phrasing in SKILL.md
    W005  skill name does not follow naming convention
    W006  skill name differs from its directory name
    W007  reference file not linked from SKILL.md
    W008  metadata.category differs from category directory
    I001  code block without a language tag
    I002  recommended frontmatter field missing
"""

from __future__ import annotations

import re
from pathlib import Path

from skillbook.corpus.markdown import extract_code_blocks, extract_links, prose_lines
from skillbook.corpus.model import Skill
from skillbook.lint.linter import LintContext, LintDiagnostic, LintRule, Severity

SKILL_NAME_RE = re.compile(r"^[a-z][-a-z]*$")

KNOWN_LANGUAGES = frozenset({
    "bash", "c", "cpp", "c++", "csharp", "cs", "console", "css", "csv", "cue",
    "cypher", "diff", "docker", "dockerfile", "dot", "elixir", "env", "erlang",
    "gherkin", "go", "golang", "gql", "graphql", "groovy", "haskell", "hcl",
    "html", "http", "ini", "java", "javascript", "jinja", "jinja2", "js", "json",
    "jsonc", "jsx", "kotlin", "kt", "log", "lua", "makefile", "make", "markdown",
    "md", "mermaid", "mongodb", "mongo", "mysql", "nginx", "ocaml", "output",
    "perl", "php", "plaintext", "plpgsql", "postgres", "postgresql", "powershell",
    "promql", "properties", "proto", "protobuf", "ps1", "psql", "py", "python",
    "r", "rb", "redis", "rego", "ruby", "rust", "rs", "scala", "scss", "sh",
    "shell", "sql", "svelte", "swift", "terraform", "tf", "text", "toml", "ts",
    "tsx", "txt", "typescript", "vue", "xml", "yaml", "yml", "zsh",
})

_CREDENTIAL_RE = re.compile(r"[A-Za-z0-9]{32,}")
_PLACEHOLDER_RE = re.compile(r"placeholder|example|<.*>|\$\{|your-", re.IGNORECASE)
_EXECUTION_STEP_RE = re.compile(r"\bStep [0-9]|\bPhase [0-9]|First,.*Then,")


def _diag(
    ctx: LintContext,
    code: str,
    severity: Severity,
    message: str,
    *,
    path: Path | None = None,
    line: int | None = None,
    skill: Skill | None = None,
    suggestion: str | None = None,
) -> LintDiagnostic:
    return LintDiagnostic(
        code=code,
        severity=severity,
        message=message,
        path=ctx.relative(path) if path is not None else None,
        line=line,
        skill=skill.qualified_name if skill is not None else None,
        suggestion=suggestion,
    )


# ---------------------------------------------------------------------------
# Repository layout
# ---------------------------------------------------------------------------

def check_load_problems(ctx: LintContext) -> list[LintDiagnostic]:
    """E001/E002: skill directories the loader could not load."""
    suggestions = {
        "E001": "Add a SKILL.md with name/description frontmatter.",
        "E002": "Start the file with a '---' delimited YAML mapping.",
    }
    return [
        _diag(
            ctx, problem.code, Severity.ERROR, problem.message,
            path=problem.path, line=problem.line,
            suggestion=suggestions.get(problem.code),
        )
        for problem in ctx.corpus.problems
    ]


def check_required_files(ctx: LintContext) -> list[LintDiagnostic]:
    """E008: repository files every corpus must carry."""
    diagnostics: list[LintDiagnostic] = []
    for relative in ctx.settings.required_files:
        if not (ctx.corpus.root / relative).is_file():
            diagnostics.append(LintDiagnostic(
                code="E008",
                severity=Severity.ERROR,
                message=f"Required file {relative} is missing.",
                path=relative,
            ))
    return diagnostics


def check_categories(ctx: LintContext) -> list[LintDiagnostic]:
    """W001: category directory outside the standard set."""
    valid = set(ctx.settings.valid_categories)
    return [
        _diag(
            ctx, "W001", Severity.WARNING,
            f"'{category}' is not a standard category.",
            path=ctx.corpus.skills_dir / category,
            suggestion=f"Use one of: {', '.join(ctx.settings.valid_categories)}.",
        )
        for category in ctx.corpus.categories
        if category not in valid
    ]


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------

def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def check_name_present(ctx: LintContext) -> list[LintDiagnostic]:
    """E003: frontmatter name missing, empty or not a string."""
    return [
        _diag(
            ctx, "E003", Severity.ERROR,
            "Frontmatter has no non-empty 'name'.",
            path=skill.skill_file, skill=skill,
            suggestion=f"Add 'name: {skill.directory_name}'.",
        )
        for skill in ctx.corpus.skills
        if _is_blank(skill.metadata.name)
    ]


def check_description_present(ctx: LintContext) -> list[LintDiagnostic]:
    """E004: frontmatter description missing, empty or not a string."""
    return [
        _diag(
            ctx, "E004", Severity.ERROR,
            "Frontmatter has no non-empty 'description'.",
            path=skill.skill_file, skill=skill,
            suggestion="Describe what the skill covers and when to use it.",
        )
        for skill in ctx.corpus.skills
        if _is_blank(skill.metadata.description)
    ]


def check_name_format(ctx: LintContext) -> list[LintDiagnostic]:
    """W005: name must be lowercase-hyphenated and must not use the x- prefix."""
    diagnostics: list[LintDiagnostic] = []
    for skill in ctx.corpus.skills:
        if _is_blank(skill.metadata.name):
            continue
        name = skill.metadata.name.strip()
        if not SKILL_NAME_RE.match(name):
            message = f"Skill name '{name}' must match {SKILL_NAME_RE.pattern}."
        elif name.startswith("x-"):
            message = f"Skill name '{name}' must not start with 'x-'."
        else:
            continue
        diagnostics.append(_diag(
            ctx, "W005", Severity.WARNING, message,
            path=skill.skill_file, skill=skill,
            suggestion="Use lowercase words joined by hyphens.",
        ))
    return diagnostics


def check_name_matches_directory(ctx: LintContext) -> list[LintDiagnostic]:
    """W006: frontmatter name differs from the skill directory name."""
    return [
        _diag(
            ctx, "W006", Severity.WARNING,
            f"Skill name '{skill.metadata.name.strip()}' differs from directory "
            f"'{skill.directory_name}'.",
            path=skill.skill_file, skill=skill,
            suggestion="Rename the directory or the 'name' field so they agree.",
        )
        for skill in ctx.corpus.skills
        if not _is_blank(skill.metadata.name)
        and skill.metadata.name.strip() != skill.directory_name
    ]


def check_category_metadata(ctx: LintContext) -> list[LintDiagnostic]:
    """W008: metadata.category disagrees with the category directory."""
    return [
        _diag(
            ctx, "W008", Severity.WARNING,
            f"metadata.category '{skill.metadata.category}' differs from directory "
            f"'{skill.category}'.",
            path=skill.skill_file, skill=skill,
        )
        for skill in ctx.corpus.skills
        if skill.metadata.category is not None and skill.metadata.category != skill.category
    ]


def check_duplicate_names(ctx: LintContext) -> list[LintDiagnostic]:
    """E006: two skills in one category share a name."""
    diagnostics: list[LintDiagnostic] = []
    for category, skills in ctx.corpus.by_category().items():
        first_seen: dict[str, Skill] = {}
        for skill in skills:
            if _is_blank(skill.metadata.name):
                continue
            name = skill.metadata.name.strip()
            if name in first_seen:
                original = first_seen[name]
                diagnostics.append(_diag(
                    ctx, "E006", Severity.ERROR,
                    f"Duplicate skill name '{name}' in category '{category}' "
                    f"(also in {ctx.relative(original.skill_file)}).",
                    path=skill.skill_file, skill=skill,
                    suggestion="Give each skill in a category a unique name.",
                ))
            else:
                first_seen[name] = skill
    return diagnostics


def check_recommended_fields(ctx: LintContext) -> list[LintDiagnostic]:
    """I002: license and metadata.version are recommended."""
    diagnostics: list[LintDiagnostic] = []
    for skill in ctx.corpus.skills:
        missing = []
        if not skill.metadata.license:
            missing.append("license")
        if not skill.metadata.version:
            missing.append("metadata.version")
        if missing:
            diagnostics.append(_diag(
                ctx, "I002", Severity.INFO,
                f"Recommended frontmatter field(s) missing: {', '.join(missing)}.",
                path=skill.skill_file, skill=skill,
            ))
    return diagnostics


# ---------------------------------------------------------------------------
# Links and references
# ---------------------------------------------------------------------------

def check_relative_links(ctx: LintContext) -> list[LintDiagnostic]:
    """E005: relative links must point at files that exist."""
    diagnostics: list[LintDiagnostic] = []
    for skill in ctx.corpus.skills:
        for path, text, start_line in ctx.documents(skill):
            for link in extract_links(text, start_line=start_line):
                if not link.is_relative or not link.path:
                    continue
                if ctx.loader.resolve_link(skill, link, source=path) is None:
                    diagnostics.append(_diag(
                        ctx, "E005", Severity.ERROR,
                        f"Broken link to '{link.target}'.",
                        path=path, line=link.line, skill=skill,
                        suggestion="Fix the path or add the missing file.",
                    ))
    return diagnostics


def check_orphan_references(ctx: LintContext) -> list[LintDiagnostic]:
    """W007: reference files that nothing reachable from SKILL.md links to."""
    diagnostics: list[LintDiagnostic] = []
    for skill in ctx.corpus.skills:
        if not skill.references:
            continue
        documents = {path.resolve(): (path, text, start) for path, text, start in ctx.documents(skill)}
        by_path = {ref.path.resolve(): ref for ref in skill.references}

        reached: set[Path] = set()
        queue = [skill.skill_file.resolve()]
        while queue:
            current = queue.pop(0)
            if current not in documents:
                continue
            source, text, start = documents[current]
            for link in extract_links(text, start_line=start):
                target = ctx.loader.resolve_link(skill, link, source=source)
                if target is not None and target in by_path and target not in reached:
                    reached.add(target)
                    queue.append(target)

        for resolved, ref in by_path.items():
            if resolved not in reached:
                diagnostics.append(_diag(
                    ctx, "W007", Severity.WARNING,
                    f"Reference '{ref.relative}' is not linked from SKILL.md.",
                    path=ref.path, skill=skill,
                    suggestion="Link it under 'When to Load References' or remove it.",
                ))
    return diagnostics


# ---------------------------------------------------------------------------
# Code fences
# ---------------------------------------------------------------------------

def check_code_fences(ctx: LintContext) -> list[LintDiagnostic]:
    """E009/W002/I001: fences must close and carry a recognized language."""
    known = KNOWN_LANGUAGES | {lang.lower() for lang in ctx.settings.extra_languages}
    diagnostics: list[LintDiagnostic] = []
    for skill in ctx.corpus.skills:
        for path, text, start_line in ctx.documents(skill):
            for block in extract_code_blocks(text, start_line=start_line):
                if not block.closed:
                    diagnostics.append(_diag(
                        ctx, "E009", Severity.ERROR,
                        "Code fence is never closed.",
                        path=path, line=block.line, skill=skill,
                        suggestion="Add a closing fence.",
                    ))
                if not block.language:
                    diagnostics.append(_diag(
                        ctx, "I001", Severity.INFO,
                        "Code block has no language tag.",
                        path=path, line=block.line, skill=skill,
                    ))
                elif block.language.lower() not in known:
                    diagnostics.append(_diag(
                        ctx, "W002", Severity.WARNING,
                        f"Unrecognized code block language '{block.language}'.",
                        path=path, line=block.line, skill=skill,
                        suggestion="Use a standard tag or add it to extra_languages.",
                    ))
    return diagnostics


# ---------------------------------------------------------------------------
# Content policy
# ---------------------------------------------------------------------------

def check_forbidden_terms(ctx: LintContext) -> list[LintDiagnostic]:
    """E007: skills must not depend on forbidden projects."""
    terms = [t for t in ctx.settings.forbidden_terms if t]
    if not terms:
        return []
    pattern = re.compile("|".join(re.escape(t) for t in terms))

    diagnostics: list[LintDiagnostic] = []
    for skill in ctx.corpus.skills:
        for path, text, start_line in ctx.documents(skill):
            for offset, line in enumerate(text.splitlines()):
                match = pattern.search(line)
                if match:
                    diagnostics.append(_diag(
                        ctx, "E007", Severity.ERROR,
                        f"Forbidden dependency reference '{match.group(0)}'.",
                        path=path, line=offset + start_line, skill=skill,
                        suggestion="Knowledge skills must stay self-contained.",
                    ))
    return diagnostics


def check_credentials(ctx: LintContext) -> list[LintDiagnostic]:
    """W003: long alphanumeric runs in sensitive categories may be real secrets."""
    sensitive = set(ctx.settings.credential_categories)
    diagnostics: list[LintDiagnostic] = []
    for skill in ctx.corpus.skills:
        if skill.category not in sensitive:
            continue
        for path, text, start_line in ctx.documents(skill):
            for offset, line in enumerate(text.splitlines()):
                if _CREDENTIAL_RE.search(line) and not _PLACEHOLDER_RE.search(line):
                    diagnostics.append(_diag(
                        ctx, "W003", Severity.WARNING,
                        "Possible credential (long alphanumeric string).",
                        path=path, line=offset + start_line, skill=skill,
                        suggestion="Replace with a placeholder such as <your-api-key>.",
                    ))
    return diagnostics


def check_execution_steps(ctx: LintContext) -> list[LintDiagnostic]:
    """W004: SKILL.md should describe knowledge, not step-by-step execution."""
    diagnostics: list[LintDiagnostic] = []
    for skill in ctx.corpus.skills:
        hits = [
            number
            for number, line in prose_lines(skill.body, start_line=skill.body_line)
            if _EXECUTION_STEP_RE.search(line)
            and "references" not in line
            and "examples" not in line
        ]
        if hits:
            diagnostics.append(_diag(
                ctx, "W004", Severity.WARNING,
                f"Possible execution steps ({len(hits)} line(s)).",
                path=skill.skill_file, line=hits[0], skill=skill,
                suggestion="Keep step-by-step procedures in workflow skills.",
            ))
    return diagnostics


# Ordered list of built-in rules
BUILT_IN_RULES: list[tuple[str, LintRule]] = [
    ("check_load_problems", check_load_problems),
    ("check_required_files", check_required_files),
    ("check_categories", check_categories),
    ("check_name_present", check_name_present),
    ("check_description_present", check_description_present),
    ("check_name_format", check_name_format),
    ("check_name_matches_directory", check_name_matches_directory),
    ("check_category_metadata", check_category_metadata),
    ("check_duplicate_names", check_duplicate_names),
    ("check_recommended_fields", check_recommended_fields),
    ("check_relative_links", check_relative_links),
    ("check_orphan_references", check_orphan_references),
    ("check_code_fences", check_code_fences),
    ("check_forbidden_terms", check_forbidden_terms),
    ("check_credentials", check_credentials),
    ("check_execution_steps", check_execution_steps),
]
