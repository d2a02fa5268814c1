"""`marginalia init`: write a default configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from marginalia.cli._app import app, console, get_state
from marginalia.cli.errorhandler import handle_cli_errors
from marginalia.config import CONFIG_FILENAME, MarginaliaConfig, save_config


@app.command(name="init")
def init(
    ctx: typer.Context,
    *,
    content_dir: Annotated[str, typer.Option("--content-dir", help="Posts directory, relative to the site root")] = "posts",
    site_url: Annotated[str | None, typer.Option("--site-url", help="Absolute base URL of the blog")] = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing configuration")] = False,
) -> None:
    """Create .marginalia.toml and the posts directory."""
    state = get_state(ctx)
    config_path = state.site_root / CONFIG_FILENAME
    if config_path.exists() and not force:
        console.print(f"[yellow]{config_path} already exists[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)

    with handle_cli_errors(debug=state.verbose):
        config = MarginaliaConfig.load(state.site_root) if config_path.exists() else MarginaliaConfig()
        updates = {"content_dir": Path(content_dir), "site_root": state.site_root}
        config = config.model_copy(update={"paths": config.paths.model_copy(update=updates)})
        if site_url:
            config = config.model_copy(
                update={"site": config.site.model_copy(update={"site_url": site_url.rstrip("/")})}
            )
        written = save_config(config, state.site_root)
        config.paths.abs_content_dir.mkdir(parents=True, exist_ok=True)

    console.print(f"[green]Wrote {written}[/green]")
    console.print(f"Posts directory: {config.paths.abs_content_dir}")
