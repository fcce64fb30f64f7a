"""Files command - aggregated staged/unstaged view across nested repos."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.table import Table
from rich.text import Text

from nestgit.cli.context import build_context, exit_code_for_error
from nestgit.core.result import Err, Ok
from nestgit.git.aggregate import AggregatedFileStatus, AggregationResult
from nestgit.git.status import FileStatusKind

_STATUS_STYLE: dict[FileStatusKind, tuple[str, str]] = {
    FileStatusKind.MODIFIED: ("M", "yellow"),
    FileStatusKind.ADDED: ("A", "green"),
    FileStatusKind.DELETED: ("D", "red"),
    FileStatusKind.RENAMED: ("R", "magenta"),
    FileStatusKind.UNTRACKED: ("?", "cyan"),
    FileStatusKind.CONFLICTED: ("U", "red bold"),
}


def _render_path(entry: AggregatedFileStatus) -> Text:
    text = Text()
    if entry.old_path:
        text.append(entry.old_path, style="dim")
        text.append(" -> ", style="dim")
    text.append(entry.full_path)
    return text


def _render_lines(entry: AggregatedFileStatus) -> Text:
    text = Text()
    if entry.lines_added:
        text.append(f"+{entry.lines_added}", style="green")
    if entry.lines_added and entry.lines_removed:
        text.append(" ")
    if entry.lines_removed:
        text.append(f"-{entry.lines_removed}", style="red")
    return text


def _build_table(title: str, entries: tuple[AggregatedFileStatus, ...]) -> Table:
    table = Table(title=title, title_justify="left", show_header=False, box=None, padding=(0, 1))
    table.add_column("status", no_wrap=True)
    table.add_column("path")
    table.add_column("lines", justify="right", no_wrap=True)
    for entry in entries:
        label, style = _STATUS_STYLE[entry.status]
        table.add_row(Text(label, style=style), _render_path(entry), _render_lines(entry))
    return table


def _summary_line(view: AggregationResult) -> str:
    if view.is_multi_repo:
        branches = ", ".join(f"{r.name} ({r.branch or 'no branch'})" for r in view.repos)
        return f"{len(view.repos)} repositories: {branches}"
    return f"branch: {view.branch or 'no branch'}"


def files(
    cwd: Path | None = typer.Option(None, "--cwd", help="Directory to query (default: root)"),
    timeout: float | None = typer.Option(None, "--timeout", help="Per-command timeout in seconds"),
    as_json: bool = typer.Option(False, "--json", help="Print the view as JSON"),
) -> None:
    """Staged and unstaged files with line counts, across nested repos."""
    ctx = build_context()

    match ctx.engine.status_files(cwd, timeout):
        case Err(error):
            ctx.err_console.error(error.message)
            raise typer.Exit(code=int(exit_code_for_error(error)))
        case Ok(view):
            pass

    if as_json:
        typer.echo(json.dumps(view.to_dict(), indent=2))
        return

    ctx.console.header(_summary_line(view))
    if view.total_staged:
        ctx.console.render(_build_table(f"Staged ({view.total_staged})", view.staged_files))
    if view.total_unstaged:
        ctx.console.render(_build_table(f"Unstaged ({view.total_unstaged})", view.unstaged_files))
    if not view.total_staged and not view.total_unstaged:
        ctx.console.print("Working tree clean")
