"""Subprocess execution that reports failures as data.

``run`` wraps subprocess.run and never raises: a timeout, a missing
executable and a non-zero exit all come back as a failed ``CommandResult``
with whatever stdout/stderr was captured. Callers inspect the captured
text (e.g. to detect "not a git repository") instead of catching.

Usage:
    result = run(["git", "status"], cwd=repo_path, timeout=10.0)
    if not result.success:
        print(result.error, result.stderr)
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

__all__ = [
    "DEFAULT_TIMEOUT",
    "TIMEOUT_MESSAGE",
    "CommandErrorKind",
    "CommandResult",
    "CommandRunner",
    "run",
]

DEFAULT_TIMEOUT = 10.0

TIMEOUT_MESSAGE = "Command timed out"


class CommandErrorKind(StrEnum):
    """Why a command failed."""

    TIMEOUT = "timeout"  # killed after exceeding its timeout
    SPAWN = "spawn"  # executable missing or not runnable
    EXIT = "exit"  # ran and exited non-zero


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a command, or of a query built from several commands.

    Attributes:
        success: True if the command (or at least one fanned-out query) succeeded
        stdout: Captured standard output
        stderr: Captured standard error, or joined warnings for fan-out
        exit_code: Process exit code; -1 for timeout/spawn failures
        error: Short human-readable failure message
        error_kind: Failure classification for process-level failures
    """

    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None
    error: str | None = None
    error_kind: CommandErrorKind | None = None

    @classmethod
    def ok(cls, stdout: str, stderr: str = "") -> CommandResult:
        return cls(success=True, stdout=stdout, stderr=stderr, exit_code=0)

    @classmethod
    def failure(cls, error: str, *, stderr: str = "", exit_code: int | None = None) -> CommandResult:
        """A failure that did not come from a process (validation, targeting)."""
        return cls(success=False, stderr=stderr, exit_code=exit_code, error=error)

    @property
    def timed_out(self) -> bool:
        return self.error_kind is CommandErrorKind.TIMEOUT

    def to_dict(self) -> dict[str, object]:
        """Wire shape for RPC callers; unset fields are omitted."""
        out: dict[str, object] = {"success": self.success}
        if self.success or self.stdout:
            out["stdout"] = self.stdout
        if self.success or self.stderr:
            out["stderr"] = self.stderr
        if self.exit_code is not None:
            out["exitCode"] = self.exit_code
        if self.error is not None:
            out["error"] = self.error
        return out


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _describe(cmd: list[str]) -> str:
    cmd_str = " ".join(cmd[:3])
    if len(cmd) > 3:
        cmd_str += " ..."
    return cmd_str


def run(cmd: list[str], cwd: Path, *, timeout: float | None = DEFAULT_TIMEOUT) -> CommandResult:
    """Execute a command and capture its output.

    Args:
        cmd: Command and arguments to execute
        cwd: Working directory (already validated by the caller)
        timeout: Maximum seconds to wait (None for no limit)

    Returns:
        CommandResult; never raises.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return CommandResult(
            success=False,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            exit_code=-1,
            error=TIMEOUT_MESSAGE,
            error_kind=CommandErrorKind.TIMEOUT,
        )
    except OSError as e:
        return CommandResult(
            success=False,
            stderr=str(e),
            exit_code=-1,
            error=f"{_describe(cmd)} could not be started: {e}",
            error_kind=CommandErrorKind.SPAWN,
        )

    if proc.returncode != 0:
        detail = proc.stderr.strip().splitlines()
        message = f"{_describe(cmd)} failed (exit {proc.returncode})"
        if detail:
            message = f"{message}: {detail[0]}"
        return CommandResult(
            success=False,
            stdout=proc.stdout,
            stderr=proc.stderr,
            exit_code=proc.returncode,
            error=message,
            error_kind=CommandErrorKind.EXIT,
        )

    return CommandResult.ok(proc.stdout, proc.stderr)


class CommandRunner:
    """Runs one executable (git by default) with a default timeout.

    Attributes:
        executable: Program prepended to every argument vector
        default_timeout: Timeout used when a call does not pass one
    """

    def __init__(self, executable: str = "git", default_timeout: float = DEFAULT_TIMEOUT) -> None:
        self.executable = executable
        self.default_timeout = default_timeout

    def run(self, args: list[str], cwd: Path, timeout: float | None = None) -> CommandResult:
        return run(
            [self.executable, *args],
            cwd=cwd,
            timeout=timeout if timeout is not None else self.default_timeout,
        )
