"""Read-only commands: list, tags, show, links, duplicates, code."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from marginalia.cli._app import app, console, err_console, get_state
from marginalia.cli.errorhandler import handle_cli_errors
from marginalia.config import MarginaliaConfig
from marginalia.content.collection import PostCollection
from marginalia.content.duplicates import find_duplicates
from marginalia.content.loader import LoadResult, load_posts
from marginalia.markdown.code import language_counts
from marginalia.publish.template_loader import render_tag_page


def _load(ctx: typer.Context) -> tuple[MarginaliaConfig, LoadResult, PostCollection]:
    state = get_state(ctx)
    with handle_cli_errors(debug=state.verbose):
        config = state.load_config()
        loaded = load_posts(config.paths.abs_content_dir, config=config)
        collection, _ = PostCollection.build(loaded.posts, posts_prefix=config.site.posts_prefix)
    if loaded.failed:
        err_console.print(f"[yellow]{len(loaded.failed)} post(s) skipped; run 'marginalia check'[/yellow]")
    return config, loaded, collection


@app.command(name="list")
def list_posts(
    ctx: typer.Context,
    *,
    drafts: Annotated[bool, typer.Option("--drafts", help="Include drafts")] = False,
    tag: Annotated[str | None, typer.Option("--tag", "-t", help="Only posts with this tag")] = None,
) -> None:
    """List posts, newest first."""
    _, _, collection = _load(ctx)
    if tag:
        posts = collection.with_tag(tag, include_drafts=drafts)
    else:
        posts = list(collection) if drafts else collection.published()

    if not posts:
        console.print("[yellow]No posts found[/yellow]")
        return

    table = Table(title=f"Posts ({len(posts)})")
    table.add_column("Date", no_wrap=True)
    table.add_column("Slug", style="cyan")
    table.add_column("Title")
    table.add_column("Tags")
    table.add_column("Min", justify="right")
    for post in posts:
        title = f"{post.title} [dim](draft)[/dim]" if post.draft else post.title
        table.add_row(
            post.date.strftime("%Y-%m-%d"),
            post.slug,
            title,
            ", ".join(post.sorted_tags),
            str(post.reading_minutes),
        )
    console.print(table)


@app.command(name="tags")
def tags(
    ctx: typer.Context,
    *,
    drafts: Annotated[bool, typer.Option("--drafts", help="Count drafts too")] = False,
    page: Annotated[bool, typer.Option("--page", help="Print a markdown tag index page instead")] = False,
) -> None:
    """Show tags and how many posts use them."""
    _, _, collection = _load(ctx)
    if page:
        typer.echo(render_tag_page(collection), nl=False)
        return

    counts = collection.tag_counts(include_drafts=drafts)
    if not counts:
        console.print("[yellow]No tags found[/yellow]")
        return

    table = Table(title=f"Tags ({len(counts)})")
    table.add_column("Tag", style="cyan")
    table.add_column("Posts", justify="right")
    for tag, count in counts.items():
        table.add_row(tag, str(count))
    console.print(table)


@app.command(name="show")
def show(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Slug of the post")],
) -> None:
    """Show one post's metadata and its place in the blog."""
    state = get_state(ctx)
    _, _, collection = _load(ctx)
    with handle_cli_errors(debug=state.verbose):
        post = collection.get(slug)

    console.print(f"[bold]{post.title}[/bold]" + (" [yellow](draft)[/yellow]" if post.draft else ""))
    console.print(f"  slug:        {post.slug}")
    console.print(f"  date:        {post.date.isoformat()}")
    if post.lastmod:
        console.print(f"  lastmod:     {post.lastmod.isoformat()}")
    console.print(f"  tags:        {', '.join(post.sorted_tags) or '-'}")
    console.print(f"  description: {post.description or '-'}")
    console.print(f"  file:        {post.source_path}")
    console.print(f"  words:       {post.word_count} (~{post.reading_minutes} min)")

    languages = language_counts(post.code_samples)
    if languages:
        console.print("  code:        " + ", ".join(f"{lang or 'plain'} x{n}" for lang, n in languages.most_common()))

    older, newer = collection.neighbours(slug)
    if older or newer:
        console.print(f"  older:       {older.slug if older else '-'}")
        console.print(f"  newer:       {newer.slug if newer else '-'}")

    outgoing = collection.outgoing(slug)
    if outgoing:
        console.print("  links to:    " + ", ".join(outgoing))
    backlinks = collection.backlinks(slug)
    if backlinks:
        console.print("  linked from: " + ", ".join(p.slug for p in backlinks))
    related = collection.related(slug)
    if related:
        console.print("  related:     " + ", ".join(p.slug for p in related))


@app.command(name="links")
def links(ctx: typer.Context) -> None:
    """Report broken cross-references and links to drafts."""
    _, _, collection = _load(ctx)
    broken = collection.broken_links()
    to_drafts = collection.draft_links()

    for item in broken:
        console.print(f"[red]broken[/red] {item.source.slug}:{item.link.line} -> {item.link.target}")
    for item in to_drafts:
        console.print(f"[yellow]draft[/yellow]  {item.source.slug}:{item.link.line} -> {item.target.slug}")

    linked = sum(1 for post in collection if collection.outgoing(post.slug))
    console.print(
        f"[dim]{linked} posts with cross-references, {len(broken)} broken, {len(to_drafts)} to drafts[/dim]"
    )
    if broken:
        raise typer.Exit(1)


@app.command(name="duplicates")
def duplicates(ctx: typer.Context) -> None:
    """List posts that share a slug or title, flagging diverging copies."""
    config, loaded, _ = _load(ctx)
    groups = find_duplicates(loaded.posts, threshold=config.audit.similarity_threshold)
    if not groups:
        console.print("[green]No duplicate posts[/green]")
        return

    for group in groups:
        status = "[red]diverging[/red]" if group.diverging else "[green]identical[/green]"
        console.print(f"[bold]{group.kind}[/bold] '{group.key}' {status} (similarity {group.similarity:.2f})")
        for post in group.posts:
            console.print(f"    {post.date:%Y-%m-%d}  {post.source_path}")


@app.command(name="code")
def code(
    ctx: typer.Context,
    *,
    language: Annotated[str | None, typer.Option("--language", "-l", help="Only this language")] = None,
) -> None:
    """Summarize the code samples embedded in posts."""
    _, _, collection = _load(ctx)
    if language:
        wanted = language.lower()
        for post in collection:
            for sample in post.code_samples:
                if sample.language == wanted:
                    console.print(f"[cyan]{post.slug}[/cyan]:{sample.line} ({len(sample.code.splitlines())} lines)")
        return

    counts = language_counts(sample for post in collection for sample in post.code_samples)
    if not counts:
        console.print("[yellow]No code samples found[/yellow]")
        return

    table = Table(title="Code samples")
    table.add_column("Language", style="cyan")
    table.add_column("Samples", justify="right")
    for lang, count in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
        table.add_row(lang or "(none)", str(count))
    console.print(table)
