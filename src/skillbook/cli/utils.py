"""
CLI utility helpers: output formatting and loader construction.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skillbook.core.errors import SkillbookError
from skillbook.core.logging import configure_logging
from skillbook.core.settings import SkillbookSettings, load_settings
from skillbook.corpus.loader import SkillLoader

console = Console()
err_console = Console(stderr=True)


# ── Settings / loader ────────────────────────────────────────────────────


def config_file(ctx: typer.Context) -> str | None:
    """``--config`` value from the root callback, if any."""
    obj = ctx.obj or {}
    return obj.get("config")


def make_settings(ctx: typer.Context, root: str | None = None, **overrides: Any) -> SkillbookSettings:
    """Load settings for ``root`` and apply their logging options.

    ``--log-level`` and ``--json-logs/--console-logs`` still win.
    """
    with cli_errors():
        settings = load_settings(root, config_file(ctx), **overrides)
    obj = ctx.obj or {}
    json_logs = obj.get("json_logs")
    configure_logging(
        level=obj.get("log_level") or settings.log_level,
        json_format=json_logs if json_logs is not None else settings.json_logs,
    )
    return settings


def make_loader(ctx: typer.Context, root: str | None = None, **overrides: Any) -> SkillLoader:
    """Create a ``SkillLoader`` for a command's ``--root``."""
    settings = make_settings(ctx, root, **overrides)
    return SkillLoader(settings.root, settings=settings)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Render ``SkillbookError`` as a red one-liner and exit 1."""
    try:
        yield
    except SkillbookError as exc:
        err_console.print(
            f"[bold red]Error[/bold red] ({exc.category.value}): {escape(str(exc))}",
            soft_wrap=True,
        )
        raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    """Write JSON to stdout without Rich markup processing."""
    typer.echo(json.dumps(payload, indent=2, default=str))


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(_cell(v) for v in row.values()))
    console.print(table)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list | tuple):
        return ", ".join(str(v) for v in value)
    return str(value)


def write_output(text: str, output: str | None) -> None:
    """Write to ``output`` when given, else stdout."""
    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        err_console.print(f"[green]Wrote[/green] {path}")
    else:
        typer.echo(text, nl=False)
