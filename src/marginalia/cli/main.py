"""Main Typer application for Marginalia."""

from marginalia.cli import views  # noqa: F401
from marginalia.cli._app import app
from marginalia.cli.commands import check, feed, init, new  # noqa: F401

__all__ = ["app"]
