"""
CLI: ``skillbook list | show | bundle | new``: browse, retrieve and scaffold skills.
"""

from __future__ import annotations

import typer

from skillbook.cli.utils import (
    cli_errors,
    console,
    err_console,
    make_loader,
    make_settings,
    print_json,
    print_table,
    write_output,
)
from skillbook.corpus.bundle import bundle_corpus, bundle_skill
from skillbook.scaffold import PLACEHOLDER_DESCRIPTION, create_skill


def list_cmd(
    ctx: typer.Context,
    root: str = typer.Option(".", "--root", "-r", help="Corpus repository root."),
    category: str | None = typer.Option(None, "--category", "-c", help="Only this category."),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON."),
) -> None:
    """List skills with their descriptions and reference files."""
    loader = make_loader(ctx, root)
    entries = loader.list_skills(category=category)

    if json_out:
        print_json(entries)
        return

    rows = [
        {
            "skill": f"{e['category']}/{e['name']}",
            "version": e["version"],
            "refs": len(e["references"]),
            "description": e["description"],
        }
        for e in entries
    ]
    print_table(rows, title="Skills")
    if loader.corpus.problems:
        err_console.print(
            f"[yellow]{len(loader.corpus.problems)} skill directories could not be loaded; "
            "run 'skillbook lint' for details.[/yellow]"
        )


def show_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Skill as category/name or bare name."),
    root: str = typer.Option(".", "--root", "-r", help="Corpus repository root."),
    reference: str | None = typer.Option(
        None, "--reference", "-f", help="Print this reference file instead of SKILL.md."
    ),
    hints: bool = typer.Option(False, "--hints", help="Show 'When to Load References' entries."),
) -> None:
    """Print a skill's SKILL.md body, one of its references, or its load hints.

    Example:
        skillbook show data/redis-patterns
        skillbook show redis-patterns --reference references/streams.md
    """
    loader = make_loader(ctx, root)
    with cli_errors():
        skill = loader.get_skill(name)
        if hints:
            rows = [{"reference": h.path, "when": h.condition} for h in skill.load_hints]
            print_table(rows, title=f"{skill.qualified_name}: When to Load References")
            return
        text = loader.read_reference(skill, reference) if reference else skill.body
    typer.echo(text)


def bundle_cmd(
    ctx: typer.Context,
    names: list[str] = typer.Argument(None, help="Skills to bundle (category/name or bare name)."),
    root: str = typer.Option(".", "--root", "-r", help="Corpus repository root."),
    category: str | None = typer.Option(None, "--category", "-c", help="Bundle a whole category."),
    all_skills: bool = typer.Option(False, "--all", help="Bundle every skill."),
    references: str = typer.Option(
        "all", "--references", help="'all', 'none', or a comma-separated list of reference paths."
    ),
    output: str | None = typer.Option(None, "--output", "-o", help="Write to file instead of stdout."),
) -> None:
    """Concatenate skills and their references into one Markdown document.

    Example:
        skillbook bundle data/redis-patterns -o context.md
        skillbook bundle --category security --references none
    """
    if not names and not category and not all_skills:
        err_console.print("[bold red]Error[/bold red]: give skill names, --category or --all")
        raise typer.Exit(code=2)

    if references == "all":
        selection: str | list[str] | None = "all"
    elif references == "none":
        selection = None
    else:
        selection = [r.strip() for r in references.split(",") if r.strip()]

    loader = make_loader(ctx, root)
    with cli_errors():
        if names:
            text = "\n".join(bundle_skill(loader, name, selection) for name in names)
        else:
            text = bundle_corpus(loader, category=category, references=selection)
    write_output(text, output)


def new_cmd(
    ctx: typer.Context,
    category: str = typer.Argument(..., help="Category directory (e.g. security)."),
    name: str = typer.Argument(..., help="Skill name, lowercase-hyphenated (e.g. rbac)."),
    root: str = typer.Option(".", "--root", "-r", help="Corpus repository root."),
    description: str | None = typer.Option(None, "--description", help="Frontmatter description."),
) -> None:
    """Create a new knowledge skill from the repository template.

    Example:
        skillbook new security rbac --description "Role-based access control patterns"
    """
    settings = make_settings(ctx, root)
    with cli_errors():
        path = create_skill(settings.root, category, name, settings=settings, description=description)
    console.print(f"Created {path}", highlight=False, soft_wrap=True)
    if not description:
        console.print(
            f"Next: edit {path} and replace {PLACEHOLDER_DESCRIPTION} with actual description",
            highlight=False,
            soft_wrap=True,
        )
