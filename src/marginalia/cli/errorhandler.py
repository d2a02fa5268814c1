"""CLI error handling utilities."""

from collections.abc import Generator
from contextlib import contextmanager

import typer

from marginalia.exceptions import ConfigError, ContentDirectoryError, MarginaliaError
from marginalia.logging_setup import err_console


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Turn Marginalia errors into a red message and exit status 1.

    Args:
        debug: If True, re-raise so the full traceback is shown.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit, typer.Exit):
        raise
    except ConfigError as e:
        if debug:
            raise
        err_console.print(f"[red]Configuration error:[/red] {e}")
        err_console.print("Fix .marginalia.toml or run 'marginalia init' to create a fresh one.")
        raise typer.Exit(1) from e
    except ContentDirectoryError as e:
        if debug:
            raise
        err_console.print(f"[red]Error:[/red] {e}")
        err_console.print("Set paths.content_dir in .marginalia.toml or pass --site-root.")
        raise typer.Exit(1) from e
    except MarginaliaError as e:
        if debug:
            raise
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
