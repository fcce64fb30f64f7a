"""Single-repo queries with fan-out to nested repositories.

Each query first runs git directly in the requested directory. Only when
that fails because the directory is not a repository does the orchestrator
escalate: status and numstat run in every discovered nested repository and
the framed outputs are concatenated; a single-file diff runs in the one
nested repository that contains the file.

"Not a repository" is detected by matching git's diagnostic text, since git
has no dedicated exit code for it. A git release that rewords these
messages would silently disable the fallback.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from nestgit.git.discovery import DiscoveredRepo, RepoDiscoveryService
from nestgit.git.framing import wrap_section
from nestgit.platform.process import CommandResult, CommandRunner

__all__ = [
    "NOT_A_REPOSITORY_MARKERS",
    "NO_NESTED_REPOS_MESSAGE",
    "STATUS_ARGS",
    "FallbackOrchestrator",
    "diff_file_args",
    "is_not_a_repository",
    "numstat_args",
]

log = logging.getLogger(__name__)

STATUS_ARGS: tuple[str, ...] = ("status", "--porcelain=v2", "--branch", "--untracked-files=all")

NO_NESTED_REPOS_MESSAGE = "Not a git repository and no nested git repositories were found"

# Lower-case fragments of git diagnostics meaning "cwd is not inside a work tree".
# `git diff` outside a repository falls back to --no-index mode and complains
# about its usage (or about --cached) instead of saying so directly.
NOT_A_REPOSITORY_MARKERS: tuple[str, ...] = (
    "not a git repository",
    "use --no-index to compare two paths outside a working tree",
    "usage: git diff --no-index",
    "unknown option `cached`",
)


def numstat_args(staged: bool) -> list[str]:
    return ["diff", "--cached", "--numstat"] if staged else ["diff", "--numstat"]


def diff_file_args(file_path: str, staged: bool) -> list[str]:
    if staged:
        return ["diff", "--cached", "--no-ext-diff", "--", file_path]
    return ["diff", "--no-ext-diff", "--", file_path]


def is_not_a_repository(result: CommandResult) -> bool:
    """True if a failed result looks like git ran outside any repository."""
    if result.success:
        return False
    details = f"{result.error or ''}\n{result.stderr}".lower()
    return any(marker in details for marker in NOT_A_REPOSITORY_MARKERS)


class FallbackOrchestrator:
    """Runs git queries, escalating to nested repositories when needed.

    Attributes:
        runner: Executes git
        discovery: Finds (and caches) nested repositories
        workers: Fan-out parallelism; 1 runs repositories one after another
    """

    def __init__(self, runner: CommandRunner, discovery: RepoDiscoveryService, *, workers: int = 1) -> None:
        self.runner = runner
        self.discovery = discovery
        self.workers = max(1, workers)

    def status(self, cwd: Path, timeout: float | None = None) -> CommandResult:
        result = self.runner.run(list(STATUS_ARGS), cwd, timeout)
        if result.success or not is_not_a_repository(result):
            return result
        log.debug("status: %s is not a repository, scanning nested repos", cwd)
        return self._fan_out(cwd, list(STATUS_ARGS), timeout, result, unavailable="Nested git status unavailable")

    def diff_numstat(self, cwd: Path, staged: bool = False, timeout: float | None = None) -> CommandResult:
        args = numstat_args(staged)
        result = self.runner.run(args, cwd, timeout)
        if result.success or not is_not_a_repository(result):
            return result
        log.debug("numstat: %s is not a repository, scanning nested repos", cwd)
        return self._fan_out(cwd, args, timeout, result, unavailable="Nested git diff unavailable")

    def diff_file(
        self,
        cwd: Path,
        file_path: str,
        staged: bool = False,
        timeout: float | None = None,
    ) -> CommandResult:
        result = self.runner.run(diff_file_args(file_path, staged), cwd, timeout)
        if result.success or not is_not_a_repository(result):
            return result
        log.debug("diff: %s is not a repository, locating nested repo for %s", cwd, file_path)
        return self._diff_file_nested(cwd, file_path, staged, timeout)

    def _run_each(self, repos: list[DiscoveredRepo], args: list[str], timeout: float | None) -> list[CommandResult]:
        """Run ``args`` in every repo; results line up with ``repos``."""
        if self.workers == 1 or len(repos) < 2:
            return [self.runner.run(args, repo.absolute_path, timeout) for repo in repos]

        # map() yields in submission order, so the sorted repo order is kept.
        with ThreadPoolExecutor(max_workers=min(self.workers, len(repos))) as pool:
            return list(pool.map(lambda repo: self.runner.run(args, repo.absolute_path, timeout), repos))

    def _fan_out(
        self,
        cwd: Path,
        args: list[str],
        timeout: float | None,
        direct: CommandResult,
        *,
        unavailable: str,
    ) -> CommandResult:
        repos = self.discovery.get_or_scan(cwd)
        if not repos:
            return CommandResult.failure(NO_NESTED_REPOS_MESSAGE, stderr=direct.stderr, exit_code=direct.exit_code)

        outputs: list[str] = []
        errors: list[str] = []
        first_failure: CommandResult | None = None
        for repo, result in zip(repos, self._run_each(repos, args, timeout)):
            if not result.success:
                first_failure = first_failure or result
                reason = result.error or result.stderr.strip() or unavailable
                log.debug("fan-out: %s failed in %s: %s", args[0], repo.relative_path, reason)
                errors.append(f"[{repo.relative_path}] {reason}")
                continue
            outputs.append(wrap_section(repo.relative_path, result.stdout))

        if not outputs and first_failure is not None:
            # Exit status and error kind are those of the first failed repo.
            return CommandResult(
                success=False,
                stderr="\n".join(errors),
                exit_code=first_failure.exit_code,
                error=errors[0],
                error_kind=first_failure.error_kind,
            )

        return CommandResult.ok("\n".join(outputs), "\n".join(errors))

    def _diff_file_nested(
        self,
        cwd: Path,
        file_path: str,
        staged: bool,
        timeout: float | None,
    ) -> CommandResult:
        repos = self.discovery.get_or_scan(cwd)
        if not repos:
            return CommandResult.failure(NO_NESTED_REPOS_MESSAGE)

        requested = Path(os.path.normpath(cwd / file_path))
        # Resolve directories only; the last component may be a tracked symlink.
        located = requested.parent.resolve() / requested.name
        matching = [repo for repo in repos if located.is_relative_to(repo.absolute_path.resolve())]
        if not matching:
            return CommandResult.failure(f"File '{file_path}' is not inside a nested git repository")

        target = max(matching, key=lambda repo: len(repo.absolute_path.resolve().parts))
        repo_relative = located.relative_to(target.absolute_path.resolve())
        if not repo_relative.parts:
            return CommandResult.failure(f"Invalid git diff file path '{file_path}'")

        return self.runner.run(diff_file_args(repo_relative.as_posix(), staged), target.absolute_path, timeout)
