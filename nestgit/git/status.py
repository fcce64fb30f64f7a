"""Parser for ``git status --porcelain=v2 --branch`` output.

Recognized lines:

    # branch.oid <commit> | # branch.head <name> | # branch.upstream <ref>
    # branch.ab +<ahead> -<behind>
    1 XY sub mH mI mW hH hI <path>                       ordinary change
    2 XY sub mH mI mW hH hI <X><score> <path>\t<orig>   rename or copy
    u XY sub m1 m2 m3 mW h1 h2 h3 <path>                 unmerged
    ? <path>                                             untracked
    ! <path>                                             ignored

A line that starts with a known prefix but does not match its grammar is
skipped, so truncated output still yields the records that did parse.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum

__all__ = [
    "BranchField",
    "BranchInfo",
    "ChangeKind",
    "ChangeRecord",
    "FileStatusKind",
    "StatusSummary",
    "current_branch",
    "file_status_kind",
    "iter_status_entries",
    "parse_status",
]

_BRANCH_OID = re.compile(r"^# branch\.oid (.+)$")
_BRANCH_HEAD = re.compile(r"^# branch\.head (.+)$")
_BRANCH_UPSTREAM = re.compile(r"^# branch\.upstream (.+)$")
_BRANCH_AB = re.compile(r"^# branch\.ab \+(\d+) -(\d+)$")

_ORDINARY = re.compile(
    r"^1 (?P<x>.)(?P<y>.) .{4} \d{6} \d{6} \d{6} [0-9a-f]+ [0-9a-f]+ (?P<path>.+)$"
)
_RENAME_COPY = re.compile(
    r"^2 (?P<x>.)(?P<y>.) .{4} \d{6} \d{6} \d{6} [0-9a-f]+ [0-9a-f]+ [RC]\d{1,3} (?P<path>.+)\t(?P<orig>.+)$"
)
_UNMERGED = re.compile(
    r"^u (?P<x>.)(?P<y>.) .{4} \d{6} \d{6} \d{6} \d{6} [0-9a-f]+ [0-9a-f]+ [0-9a-f]+ (?P<path>.+)$"
)
_UNTRACKED = re.compile(r"^\? (.+)$")
_IGNORED = re.compile(r"^! (.+)$")

# branch.head values that mean "no current branch"
_NO_BRANCH_HEADS = frozenset({"(detached)", "(initial)"})


class ChangeKind(StrEnum):
    ORDINARY = "ordinary"
    RENAME_COPY = "rename_copy"
    UNMERGED = "unmerged"
    UNTRACKED = "untracked"
    IGNORED = "ignored"


class FileStatusKind(StrEnum):
    """Display category for one side (index or worktree) of a change."""

    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    RENAMED = "renamed"
    UNTRACKED = "untracked"
    CONFLICTED = "conflicted"


_STATUS_KINDS: dict[str, FileStatusKind] = {
    "M": FileStatusKind.MODIFIED,
    "A": FileStatusKind.ADDED,
    "D": FileStatusKind.DELETED,
    "R": FileStatusKind.RENAMED,
    "C": FileStatusKind.RENAMED,
    "?": FileStatusKind.UNTRACKED,
    "U": FileStatusKind.CONFLICTED,
}


def file_status_kind(status_char: str) -> FileStatusKind:
    """Map an XY status character to its category; unknown chars are "modified"."""
    return _STATUS_KINDS.get(status_char, FileStatusKind.MODIFIED)


@dataclass(frozen=True, slots=True)
class ChangeRecord:
    """One change line.

    Attributes:
        kind: Record type
        index: X status character (staged side); "?"/"!" for untracked/ignored
        worktree: Y status character (unstaged side); "?"/"!" for untracked/ignored
        path: Path relative to the repository root
        orig_path: Source path of a rename or copy
    """

    kind: ChangeKind
    index: str
    worktree: str
    path: str
    orig_path: str | None = None


@dataclass(frozen=True, slots=True)
class BranchField:
    """One ``# branch.*`` header value."""

    name: str
    value: str


@dataclass(slots=True)
class BranchInfo:
    oid: str | None = None
    head: str | None = None
    upstream: str | None = None
    ahead: int | None = None
    behind: int | None = None


@dataclass(slots=True)
class StatusSummary:
    """Parsed status body.

    Attributes:
        files: Ordinary, rename/copy and unmerged records
        not_added: Untracked paths
        ignored: Ignored paths
        branch: Branch header values
    """

    files: list[ChangeRecord] = field(default_factory=list)
    not_added: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)
    branch: BranchInfo = field(default_factory=BranchInfo)


def _parse_branch(line: str) -> Iterator[BranchField]:
    for name, pattern in (("oid", _BRANCH_OID), ("head", _BRANCH_HEAD), ("upstream", _BRANCH_UPSTREAM)):
        if line.startswith(f"# branch.{name} "):
            match = pattern.match(line)
            if match:
                yield BranchField(name, match.group(1))
            return

    if line.startswith("# branch.ab "):
        match = _BRANCH_AB.match(line)
        if match:
            yield BranchField("ahead", match.group(1))
            yield BranchField("behind", match.group(2))


def _parse_change(line: str) -> ChangeRecord | None:
    if line.startswith("1 "):
        match = _ORDINARY.match(line)
        if match:
            return ChangeRecord(ChangeKind.ORDINARY, match["x"], match["y"], match["path"])
        return None

    if line.startswith("2 "):
        match = _RENAME_COPY.match(line)
        if match:
            return ChangeRecord(
                ChangeKind.RENAME_COPY, match["x"], match["y"], match["path"], orig_path=match["orig"]
            )
        return None

    if line.startswith("u "):
        match = _UNMERGED.match(line)
        if match:
            return ChangeRecord(ChangeKind.UNMERGED, match["x"], match["y"], match["path"])
        return None

    if line.startswith("? "):
        match = _UNTRACKED.match(line)
        if match:
            return ChangeRecord(ChangeKind.UNTRACKED, "?", "?", match.group(1))
        return None

    if line.startswith("! "):
        match = _IGNORED.match(line)
        if match:
            return ChangeRecord(ChangeKind.IGNORED, "!", "!", match.group(1))
    return None


def iter_status_entries(output: str) -> Iterator[BranchField | ChangeRecord]:
    """Lazily yield branch fields and change records, skipping anything else."""
    for line in output.strip().split("\n"):
        if not line:
            continue
        if line.startswith("# "):
            yield from _parse_branch(line)
            continue
        record = _parse_change(line)
        if record is not None:
            yield record


def parse_status(output: str) -> StatusSummary:
    """Parse one un-framed status body."""
    summary = StatusSummary()
    branch = summary.branch

    for entry in iter_status_entries(output):
        match entry:
            case BranchField(name="oid", value=value):
                branch.oid = value
            case BranchField(name="head", value=value):
                branch.head = value
            case BranchField(name="upstream", value=value):
                branch.upstream = value
            case BranchField(name="ahead", value=value):
                branch.ahead = int(value)
            case BranchField(name="behind", value=value):
                branch.behind = int(value)
            case ChangeRecord(kind=ChangeKind.UNTRACKED, path=path):
                summary.not_added.append(path)
            case ChangeRecord(kind=ChangeKind.IGNORED, path=path):
                summary.ignored.append(path)
            case ChangeRecord():
                summary.files.append(entry)
            case _:
                pass

    return summary


def current_branch(summary: StatusSummary) -> str | None:
    """Branch name, or None when HEAD is detached, unborn or unreported."""
    head = summary.branch.head
    if not head or head in _NO_BRANCH_HEADS:
        return None
    return head
