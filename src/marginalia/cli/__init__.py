"""Marginalia's command-line interface."""

from marginalia.cli.main import app

__all__ = ["app", "main"]


def main() -> None:
    """Entry point for the CLI."""
    app()
