from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from nestgit.core.config import CONFIG_FILENAME, EngineConfig, load_config
from nestgit.core.errors import ErrorCode
from nestgit.core.result import Err
from nestgit.git.engine import GitEngine, GitError
from nestgit.git.fallback import NO_NESTED_REPOS_MESSAGE
from nestgit.output.console import ConsoleProtocol, RichConsole
from nestgit.platform.process import CommandErrorKind, CommandResult

ROOT_ENV = "NESTGIT_ROOT"
CONFIG_ENV = "NESTGIT_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    engine: GitEngine
    console: ConsoleProtocol
    err_console: ConsoleProtocol


def resolve_root() -> Path:
    env = os.environ.get(ROOT_ENV)
    if env:
        return Path(env).expanduser().resolve()
    return Path.cwd().resolve()


def _load_engine_config(root: Path) -> EngineConfig:
    explicit = os.environ.get(CONFIG_ENV)
    path = Path(explicit).expanduser() if explicit else root / CONFIG_FILENAME
    if not explicit and not path.is_file():
        return EngineConfig(root=root)

    result = load_config(path, root=root)
    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    return result.value


def build_context() -> CLIContext:
    root = resolve_root()
    if not root.is_dir():
        typer.echo(f"error: root '{root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(
        engine=GitEngine(_load_engine_config(root)),
        console=RichConsole(),
        err_console=RichConsole(stderr=True),
    )


def _failure_code(message: str | None, error_kind: CommandErrorKind | None) -> ErrorCode:
    if error_kind is CommandErrorKind.SPAWN:
        return ErrorCode.ENV_ERROR
    if error_kind is None and message != NO_NESTED_REPOS_MESSAGE:
        return ErrorCode.USER_ERROR
    return ErrorCode.GIT_ERROR


def exit_code_for(result: CommandResult) -> ErrorCode:
    """Map a query response onto a CLI exit code."""
    if result.success:
        return ErrorCode.OK
    return _failure_code(result.error, result.error_kind)


def exit_code_for_error(error: GitError) -> ErrorCode:
    """Map a failed aggregated query onto a CLI exit code."""
    return _failure_code(error.message, error.error_kind)
