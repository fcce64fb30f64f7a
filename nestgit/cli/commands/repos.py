"""Repos command - list nested repositories found under the root."""

from __future__ import annotations

from pathlib import Path

import typer

from nestgit.cli.context import build_context, exit_code_for_error
from nestgit.core.result import Err, Ok
from nestgit.output.console import Style


def repos(
    cwd: Path | None = typer.Option(None, "--cwd", help="Directory to scan (default: root)"),
    absolute: bool = typer.Option(False, "--absolute", "-a", help="Print absolute paths"),
) -> None:
    """List nested git repositories (the root itself is never listed)."""
    ctx = build_context()

    match ctx.engine.discover(cwd):
        case Err(error):
            ctx.err_console.error(error.message)
            raise typer.Exit(code=int(exit_code_for_error(error)))
        case Ok(found):
            if not found:
                ctx.console.print("No nested repositories found", Style.DIM)
                return
            for repo in found:
                ctx.console.print(str(repo.absolute_path) if absolute else repo.relative_path)
