"""
CLI: ``skillbook lint`` and ``skillbook rules``: corpus validation.
"""

from __future__ import annotations

import typer
from rich.markup import escape
from rich.table import Table

from skillbook.cli.utils import cli_errors, console, make_loader, print_json
from skillbook.lint import Severity, lint_corpus, list_lint_rules

_SEVERITY_STYLE = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}


def lint_cmd(
    ctx: typer.Context,
    root: str = typer.Option(".", "--root", "-r", help="Corpus repository root."),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON."),
    strict: bool = typer.Option(False, "--strict", help="Exit non-zero on warnings too."),
    no_infos: bool = typer.Option(False, "--no-infos", help="Hide info-level diagnostics."),
    disable: list[str] = typer.Option(
        [],
        "--disable",
        "-d",
        help="Rule name or code prefix to skip (repeatable), e.g. W004 or check_credentials.",
    ),
) -> None:
    """Validate corpus structure: frontmatter, names, links and code fences.

    Example:
        skillbook lint --root path/to/repo
        skillbook lint --json --disable I
    """
    loader = make_loader(ctx, root)
    if disable:
        loader.settings.disabled_rules = [*loader.settings.disabled_rules, *disable]

    with cli_errors():
        result = lint_corpus(
            loader.corpus,
            loader.settings,
            loader=loader,
            include_infos=not no_infos,
        )

    if json_out:
        print_json(result.to_dict())
    else:
        for d in result.diagnostics:
            style = _SEVERITY_STYLE[d.severity]
            location = f" [cyan]{escape(d.location)}[/cyan]" if d.location else ""
            console.print(
                f"[{style}]{d.code}[/{style}]{location}: {escape(d.message)}",
                highlight=False,
                soft_wrap=True,
            )
            if d.suggestion:
                console.print(f"      [dim]{escape(d.suggestion)}[/dim]", highlight=False, soft_wrap=True)
        if result.diagnostics:
            console.print()
        status = "[bold green]PASS[/bold green]" if result.passed else "[bold red]FAIL[/bold red]"
        console.print(
            f"{status} {result.skills_checked} skills | "
            f"{len(result.errors)} errors | {len(result.warnings)} warnings | "
            f"{len(result.infos)} infos",
            highlight=False,
        )

    if not result.passed:
        raise typer.Exit(code=1)
    if strict and result.warnings:
        raise typer.Exit(code=1)


def rules_cmd() -> None:
    """List built-in and registered lint rules."""
    from skillbook.lint import rules

    table = Table(show_lines=False, pad_edge=False)
    table.add_column("rule", style="cyan")
    table.add_column("description")
    for name in list_lint_rules():
        fn = getattr(rules, name, None)
        doc = (fn.__doc__ or "").strip().splitlines()[0] if fn is not None and fn.__doc__ else ""
        table.add_row(name, doc)
    console.print(table)
