"""skillbook command line (Typer + Rich)."""

from skillbook.cli.app import app

__all__ = ["app"]
