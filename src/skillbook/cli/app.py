"""
Root Typer application for the skillbook CLI.

Commands map onto the corpus repository's maintenance targets:
``lint`` is ``make validate`` and ``new`` is ``make new-skill``.
``list``, ``show`` and ``bundle`` serve content the way a skill loader does.
"""

from __future__ import annotations

import typer
from typer import Typer

from skillbook.cli.lint import lint_cmd, rules_cmd
from skillbook.cli.skills import bundle_cmd, list_cmd, new_cmd, show_cmd
from skillbook.core.logging import configure_logging

app = Typer(
    name="skillbook",
    help="skillbook: load, validate and bundle Markdown skill corpora.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from skillbook import __version__

        typer.echo(f"skillbook {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    config: str | None = typer.Option(
        None, "--config", help="YAML settings file (default: <root>/.skillbook.yaml)."
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING or ERROR (default: the log_level setting)."
    ),
    json_logs: bool | None = typer.Option(  # noqa: UP007
        None,
        "--json-logs/--console-logs",
        help="Log format on stderr (default: JSON unless stderr is a terminal).",
    ),
) -> None:
    """skillbook CLI: lint, list, show, bundle and scaffold skills."""
    # Commands reconfigure once their --root settings are loaded
    configure_logging(level=log_level or "WARNING", json_format=json_logs)
    ctx.obj = {"config": config, "log_level": log_level, "json_logs": json_logs}


# ── Command registration ─────────────────────────────────────────────────

app.command("lint", help="Validate corpus structure.")(lint_cmd)
app.command("rules", help="List lint rules.")(rules_cmd)
app.command("list", help="List skills.")(list_cmd)
app.command("show", help="Print a skill or one of its references.")(show_cmd)
app.command("bundle", help="Concatenate skills for retrieval.")(bundle_cmd)
app.command("new", help="Create a new skill from the template.")(new_cmd)
