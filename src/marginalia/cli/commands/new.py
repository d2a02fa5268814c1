"""`marginalia new`: scaffold a draft post."""

from __future__ import annotations

from typing import Annotated

import typer

from marginalia.cli._app import app, console, get_state
from marginalia.cli.errorhandler import handle_cli_errors
from marginalia.publish.scaffold import new_post


@app.command(name="new")
def new(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Post title")],
    *,
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable)")] = None,
    description: Annotated[str, typer.Option("--description", "-d", help="One-line summary")] = "",
    slug: Annotated[str | None, typer.Option("--slug", help="Explicit slug (defaults to the title's)")] = None,
) -> None:
    """Create a new draft post with complete front matter."""
    state = get_state(ctx)
    with handle_cli_errors(debug=state.verbose):
        config = state.load_config()
        path = new_post(
            config.paths.abs_content_dir,
            title,
            tags=tag or [],
            description=description,
            slug=slug,
            config=config,
        )
    console.print(f"[green]Created[/green] {path}")
