"""CLI application bootstrap utilities."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

from marginalia.config import MarginaliaConfig
from marginalia.logging_setup import configure_logging, console, err_console

app = typer.Typer(
    name="marginalia",
    help="Check, index and publish a markdown blog with YAML front matter",
    add_completion=False,
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CliState:
    site_root: Path
    verbose: bool = False

    def load_config(self) -> MarginaliaConfig:
        return MarginaliaConfig.load(self.site_root)


@app.callback()
def _initialize_cli(
    ctx: typer.Context,
    site_root: Annotated[
        Path,
        typer.Option("--site-root", "-C", help="Blog root directory (holds .marginalia.toml)"),
    ] = Path(),
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Configure logging and remember global options."""
    configure_logging(logging.DEBUG if verbose else None)
    ctx.obj = CliState(site_root=site_root.resolve(), verbose=verbose)


def get_state(ctx: typer.Context) -> CliState:
    if not isinstance(ctx.obj, CliState):
        ctx.obj = CliState(site_root=Path.cwd())
    return ctx.obj


__all__ = ["CliState", "app", "console", "err_console", "get_state", "logger"]
