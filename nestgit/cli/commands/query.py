"""Raw query commands: status, numstat, diff.

Output is git's own text, framed with repo sections when the root holds
nested repositories. ``--json`` prints the RPC response shape instead.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from nestgit.cli.context import CLIContext, build_context, exit_code_for
from nestgit.platform.process import CommandResult


def _emit(ctx: CLIContext, result: CommandResult, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        if result.stdout:
            ctx.console.raw(result.stdout.rstrip("\n"))
        for warning in result.stderr.splitlines():
            if warning.strip():
                ctx.err_console.warning(warning)
    else:
        ctx.err_console.error(result.error or "git command failed")
        if result.stderr.strip():
            ctx.err_console.raw(result.stderr.rstrip("\n"))

    if not result.success:
        raise typer.Exit(code=int(exit_code_for(result)))


def status(
    cwd: Path | None = typer.Option(None, "--cwd", help="Directory to query (default: root)"),
    timeout: float | None = typer.Option(None, "--timeout", help="Per-command timeout in seconds"),
    as_json: bool = typer.Option(False, "--json", help="Print the response as JSON"),
) -> None:
    """Porcelain v2 status of the root or its nested repositories."""
    ctx = build_context()
    _emit(ctx, ctx.engine.status(cwd, timeout), as_json)


def numstat(
    staged: bool = typer.Option(False, "--staged", help="Diff the index instead of the worktree"),
    cwd: Path | None = typer.Option(None, "--cwd", help="Directory to query (default: root)"),
    timeout: float | None = typer.Option(None, "--timeout", help="Per-command timeout in seconds"),
    as_json: bool = typer.Option(False, "--json", help="Print the response as JSON"),
) -> None:
    """Per-file insertion/deletion counts."""
    ctx = build_context()
    _emit(ctx, ctx.engine.diff_numstat(cwd, staged=staged, timeout=timeout), as_json)


def diff(
    file_path: str = typer.Argument(..., help="File to diff, relative to the root"),
    staged: bool = typer.Option(False, "--staged", help="Diff the index instead of the worktree"),
    cwd: Path | None = typer.Option(None, "--cwd", help="Directory to query (default: root)"),
    timeout: float | None = typer.Option(None, "--timeout", help="Per-command timeout in seconds"),
    as_json: bool = typer.Option(False, "--json", help="Print the response as JSON"),
) -> None:
    """Unified diff of one file, inside whichever repository owns it."""
    ctx = build_context()
    _emit(ctx, ctx.engine.diff_file(file_path, cwd, staged=staged, timeout=timeout), as_json)
