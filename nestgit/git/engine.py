"""Engine facade: the three git queries plus the aggregated status view.

Callers (an RPC dispatcher, the CLI) talk to ``GitEngine``. Every method
validates the working directory, and the file path where one is given,
against the configured root before starting any process, and returns its
failure as data.

Usage:
    engine = GitEngine(EngineConfig(root=Path("/work")))
    response = engine.status()
    match engine.status_files():
        case Ok(view):
            print(view.total_staged, view.total_unstaged)
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nestgit.core.config import EngineConfig
from nestgit.core.result import Err, Ok, Result
from nestgit.git.aggregate import AggregationResult, build_status_files
from nestgit.git.discovery import DiscoveredRepo, RepoDiscoveryService
from nestgit.git.fallback import FallbackOrchestrator
from nestgit.platform.paths import PathValidator, validate_path
from nestgit.platform.process import CommandErrorKind, CommandResult, CommandRunner

__all__ = [
    "GitEngine",
    "GitError",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from an engine query.

    Attributes:
        command: The logical query that failed ("status", "validate", ...)
        message: Short actionable message
        returncode: Process return code, if a process ran
        error_kind: How the process failed; None for validation and targeting errors
    """

    command: str
    message: str
    returncode: int | None = None
    error_kind: CommandErrorKind | None = None


class GitEngine:
    """Status aggregation engine bound to one trusted root.

    Attributes:
        config: Engine configuration (root, timeouts, discovery bounds)
        runner: Runs git
        discovery: Nested repository scanner with its TTL cache
        orchestrator: Direct-then-nested query logic
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        runner: CommandRunner | None = None,
        validator: PathValidator = validate_path,
        discovery: RepoDiscoveryService | None = None,
    ) -> None:
        self.config = config
        self.runner = runner or CommandRunner(config.git_executable, config.command_timeout)
        self.discovery = discovery or RepoDiscoveryService(config.discovery)
        self.orchestrator = FallbackOrchestrator(self.runner, self.discovery, workers=config.fanout_workers)
        self._validate = validator

    @property
    def root(self) -> Path:
        return self.config.root

    def resolve_cwd(self, cwd: str | Path | None) -> Result[Path, GitError]:
        """Validate ``cwd`` (default: root) and return it as an absolute path."""
        candidate = cwd if cwd is not None else self.root
        validation = self._validate(candidate, self.root)
        if not validation.valid:
            return Err(GitError("validate", validation.error or "Invalid working directory"))

        path = Path(candidate)
        if not path.is_absolute():
            path = self.root / path
        return Ok(path.resolve())

    def status(self, cwd: str | Path | None = None, timeout: float | None = None) -> CommandResult:
        """Porcelain v2 status of cwd, or framed status of its nested repos."""
        match self.resolve_cwd(cwd):
            case Err(error):
                return CommandResult.failure(error.message)
            case Ok(path):
                return self.orchestrator.status(path, timeout)

    def diff_numstat(
        self,
        cwd: str | Path | None = None,
        staged: bool = False,
        timeout: float | None = None,
    ) -> CommandResult:
        """Numstat of unstaged (or staged) changes, framed when fanned out."""
        match self.resolve_cwd(cwd):
            case Err(error):
                return CommandResult.failure(error.message)
            case Ok(path):
                return self.orchestrator.diff_numstat(path, staged, timeout)

    def diff_file(
        self,
        file_path: str,
        cwd: str | Path | None = None,
        staged: bool = False,
        timeout: float | None = None,
    ) -> CommandResult:
        """Unified diff of one file, run in whichever repository owns it."""
        resolved = self.resolve_cwd(cwd)
        if isinstance(resolved, Err):
            return CommandResult.failure(resolved.error.message)

        if not file_path:
            return CommandResult.failure("Invalid file path")
        validation = self._validate(file_path, self.root)
        if not validation.valid:
            return CommandResult.failure(validation.error or "Invalid file path")

        return self.orchestrator.diff_file(resolved.value, file_path, staged, timeout)

    def discover(self, cwd: str | Path | None = None) -> Result[list[DiscoveredRepo], GitError]:
        """Nested repositories below cwd (cached)."""
        return self.resolve_cwd(cwd).map(self.discovery.get_or_scan)

    def status_files(
        self,
        cwd: str | Path | None = None,
        timeout: float | None = None,
    ) -> Result[AggregationResult, GitError]:
        """Aggregated staged/unstaged view of cwd or its nested repositories.

        A failed numstat query only loses line counts; a failed status query
        fails the whole view.
        """
        status = self.status(cwd, timeout)
        if not status.success:
            return Err(
                GitError("status", status.error or "git status failed", status.exit_code, status.error_kind)
            )

        unstaged = self.diff_numstat(cwd, staged=False, timeout=timeout)
        staged = self.diff_numstat(cwd, staged=True, timeout=timeout)
        return Ok(
            build_status_files(
                status.stdout,
                unstaged.stdout if unstaged.success else "",
                staged.stdout if staged.success else "",
            )
        )
