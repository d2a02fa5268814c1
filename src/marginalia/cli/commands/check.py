"""`marginalia check`: run every content check."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from marginalia.audit import run_audit
from marginalia.cli._app import app, console, get_state
from marginalia.cli.errorhandler import handle_cli_errors
from marginalia.core.contract import Severity

if TYPE_CHECKING:
    from pathlib import Path


def _display_path(path: Path | None, root: Path) -> str:
    if path is None:
        return ""
    return str(path.relative_to(root)) if path.is_relative_to(root) else str(path)


@app.command(name="check")
def check(
    ctx: typer.Context,
    warnings_as_errors: Annotated[
        bool, typer.Option("--strict", help="Exit non-zero on warnings too")
    ] = False,
) -> None:
    """Validate front matter, slugs, duplicates and internal links."""
    state = get_state(ctx)
    with handle_cli_errors(debug=state.verbose):
        config = state.load_config()
        report = run_audit(config)

    if report.issues:
        table = Table(title="Issues", show_lines=False)
        table.add_column("Severity")
        table.add_column("File", overflow="fold")
        table.add_column("Key")
        table.add_column("Message", overflow="fold")
        for issue in sorted(report.issues, key=lambda i: (i.severity != Severity.ERROR, str(i.path or ""))):
            color = "red" if issue.severity == Severity.ERROR else "yellow"
            table.add_row(
                f"[{color}]{issue.severity.value}[/{color}]",
                _display_path(issue.path, state.site_root),
                issue.key or "",
                issue.message,
            )
        console.print(table)

    console.print(
        f"[dim]Summary: {len(report.collection)} posts, "
        f"{len(report.errors)} errors, {len(report.warnings)} warnings[/dim]"
    )

    if report.errors or (warnings_as_errors and report.warnings):
        raise typer.Exit(1)
    console.print("[bold green]All posts pass.[/bold green]")
