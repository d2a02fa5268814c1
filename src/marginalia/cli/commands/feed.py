"""`marginalia feed`: write the Atom feed."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from marginalia.cli._app import app, console, err_console, get_state
from marginalia.cli.errorhandler import handle_cli_errors
from marginalia.content.collection import PostCollection
from marginalia.content.loader import load_posts
from marginalia.publish.atom import write_feed


@app.command(name="feed")
def feed(
    ctx: typer.Context,
    *,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Feed file (defaults to paths.feed_path)")
    ] = None,
) -> None:
    """Write an Atom feed of the published posts."""
    state = get_state(ctx)
    with handle_cli_errors(debug=state.verbose):
        config = state.load_config()
        loaded = load_posts(config.paths.abs_content_dir, config=config)
        collection, _ = PostCollection.build(loaded.posts, posts_prefix=config.site.posts_prefix)
        path = write_feed(output or config.paths.abs_feed_path, collection, config)

    if loaded.failed:
        err_console.print(f"[yellow]{len(loaded.failed)} post(s) skipped; run 'marginalia check'[/yellow]")
    console.print(f"[green]Wrote[/green] {path}")
