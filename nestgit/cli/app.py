from __future__ import annotations

import os
from pathlib import Path

import typer

from nestgit import __version__
from nestgit.cli.commands.files import files
from nestgit.cli.commands.query import diff, numstat, status
from nestgit.cli.commands.repos import repos
from nestgit.cli.context import CONFIG_ENV, ROOT_ENV
from nestgit.core.errors import ErrorCode
from nestgit.output.console import configure_logging


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(status)
app.command()(numstat)
app.command()(diff)
app.command()(files)
app.command()(repos)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True, callback=_print_version
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Trusted root directory (default: $NESTGIT_ROOT or the current directory)",
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to nestgit.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log discovery and fallback decisions."),
) -> None:
    configure_logging(verbose)

    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not resolved.is_dir():
            typer.echo(f"error: --root '{resolved}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        os.environ[ROOT_ENV] = str(resolved)

    if config is not None:
        os.environ[CONFIG_ENV] = str(config.expanduser().resolve())


def main() -> None:
    app()
