"""Merge status and numstat streams into staged/unstaged file lists.

Takes the (possibly framed) outputs of status, unstaged numstat and staged
numstat and produces one repo-attributed view. Paths from named sections are
prefixed with the section's repo name; legacy single-repo output is left
unprefixed and reports its branch directly.

Usage:
    result = build_status_files(status_out, unstaged_out, staged_out)
    for f in result.unstaged_files:
        print(f.full_path, f.status, f.lines_added, f.lines_removed)
"""

from __future__ import annotations

from dataclasses import dataclass

from nestgit.git.framing import RepoSection, sections_by_repo, split_sections
from nestgit.git.numstat import LineStats, build_stats_map, parse_numstat
from nestgit.git.status import ChangeRecord, FileStatusKind, current_branch, file_status_kind, parse_status

__all__ = [
    "AggregatedFileStatus",
    "AggregationResult",
    "RepoBranch",
    "build_status_files",
]

# X values that mean "nothing staged"
_UNSTAGED_INDEX = frozenset({" ", ".", "?"})
# Y values that mean "nothing changed in the worktree"
_CLEAN_WORKTREE = frozenset({" ", "."})

_NO_STATS = LineStats()


@dataclass(frozen=True, slots=True)
class AggregatedFileStatus:
    """One entry of the staged or unstaged list.

    Attributes:
        file_name: Last path segment
        dir_path: Parent directory within the repository ("" at top level)
        full_path: Path from the scan root (repo-prefixed for nested repos)
        repo: Owning repo's relative name; None in legacy mode
        status: Change category for this side
        staged: True for the staged list
        lines_added: Inserted lines (0 for binary or unknown)
        lines_removed: Deleted lines (0 for binary or unknown)
        old_path: Rename/copy source, prefixed like full_path
    """

    file_name: str
    dir_path: str
    full_path: str
    repo: str | None
    status: FileStatusKind
    staged: bool
    lines_added: int = 0
    lines_removed: int = 0
    old_path: str | None = None

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "fileName": self.file_name,
            "filePath": self.dir_path,
            "fullPath": self.full_path,
            "status": str(self.status),
            "isStaged": self.staged,
            "linesAdded": self.lines_added,
            "linesRemoved": self.lines_removed,
        }
        if self.repo is not None:
            out["repo"] = self.repo
        if self.old_path is not None:
            out["oldPath"] = self.old_path
        return out


@dataclass(frozen=True, slots=True)
class RepoBranch:
    name: str
    branch: str | None

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "branch": self.branch}


@dataclass(frozen=True, slots=True)
class AggregationResult:
    """Unified status view.

    ``branch`` is only set for legacy single-repo output; with named
    sections it is None and per-repo branches are in ``repos``.
    """

    staged_files: tuple[AggregatedFileStatus, ...] = ()
    unstaged_files: tuple[AggregatedFileStatus, ...] = ()
    repos: tuple[RepoBranch, ...] = ()
    branch: str | None = None

    @property
    def total_staged(self) -> int:
        return len(self.staged_files)

    @property
    def total_unstaged(self) -> int:
        return len(self.unstaged_files)

    @property
    def is_multi_repo(self) -> bool:
        return bool(self.repos)

    def to_dict(self) -> dict[str, object]:
        return {
            "stagedFiles": [f.to_dict() for f in self.staged_files],
            "unstagedFiles": [f.to_dict() for f in self.unstaged_files],
            "branch": self.branch,
            "repos": [r.to_dict() for r in self.repos],
            "totalStaged": self.total_staged,
            "totalUnstaged": self.total_unstaged,
        }


def _with_repo_prefix(repo: str | None, path: str) -> str:
    if not repo:
        return path
    return f"{repo}/{path}"


def _split_path(path: str) -> tuple[str, str]:
    """Return (file_name, dir_path) for a slash-separated path."""
    dir_path, _, name = path.rpartition("/")
    return (name or path, dir_path)


def _entry(
    section: RepoSection,
    record: ChangeRecord,
    status_char: str,
    stats: dict[str, LineStats],
    *,
    staged: bool,
) -> AggregatedFileStatus:
    file_name, dir_path = _split_path(record.path)
    line_stats = stats.get(record.path, _NO_STATS)
    return AggregatedFileStatus(
        file_name=file_name,
        dir_path=dir_path,
        full_path=_with_repo_prefix(section.repo, record.path),
        repo=section.repo,
        status=file_status_kind(status_char),
        staged=staged,
        lines_added=line_stats.added,
        lines_removed=line_stats.removed,
        old_path=_with_repo_prefix(section.repo, record.orig_path) if record.orig_path else None,
    )


def build_status_files(status_output: str, unstaged_diff_output: str, staged_diff_output: str) -> AggregationResult:
    """Combine status and numstat streams into one view.

    Args:
        status_output: Status stream, framed or legacy
        unstaged_diff_output: ``diff --numstat`` stream, framed or legacy
        staged_diff_output: ``diff --cached --numstat`` stream, framed or legacy

    Returns:
        AggregationResult with files in section order
    """
    staged_files: list[AggregatedFileStatus] = []
    unstaged_files: list[AggregatedFileStatus] = []
    repos: list[RepoBranch] = []

    status_sections = split_sections(status_output)
    unstaged_by_repo = sections_by_repo(split_sections(unstaged_diff_output))
    staged_by_repo = sections_by_repo(split_sections(staged_diff_output))
    multi_repo = any(section.repo is not None for section in status_sections)
    branch_name: str | None = None

    for section in status_sections:
        summary = parse_status(section.body)
        branch = current_branch(summary)
        if section.repo is not None:
            repos.append(RepoBranch(name=section.repo, branch=branch))
        elif not multi_repo:
            branch_name = branch

        staged_stats = build_stats_map(parse_numstat(staged_by_repo.get(section.key, "")))
        unstaged_stats = build_stats_map(parse_numstat(unstaged_by_repo.get(section.key, "")))

        for record in summary.files:
            if record.index not in _UNSTAGED_INDEX:
                staged_files.append(_entry(section, record, record.index, staged_stats, staged=True))
            if record.worktree not in _CLEAN_WORKTREE:
                unstaged_files.append(_entry(section, record, record.worktree, unstaged_stats, staged=False))

        for untracked in summary.not_added:
            if untracked.endswith("/"):
                continue
            file_name, dir_path = _split_path(untracked)
            unstaged_files.append(
                AggregatedFileStatus(
                    file_name=file_name,
                    dir_path=dir_path,
                    full_path=_with_repo_prefix(section.repo, untracked),
                    repo=section.repo,
                    status=FileStatusKind.UNTRACKED,
                    staged=False,
                )
            )

    return AggregationResult(
        staged_files=tuple(staged_files),
        unstaged_files=tuple(unstaged_files),
        repos=tuple(repos),
        branch=None if multi_repo else branch_name,
    )
