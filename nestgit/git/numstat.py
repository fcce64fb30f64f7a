"""Parser for ``git diff --numstat`` output.

Each line is ``<insertions>\\t<deletions>\\t<path>``; binary files report
``-`` for both counts. Renames appear either brace-compressed
(``src/{old.txt => new.txt}``) or as a whole-path arrow (``old => new``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "DiffFileStat",
    "DiffSummary",
    "LineStats",
    "NumstatPaths",
    "build_stats_map",
    "normalize_numstat_path",
    "parse_numstat",
]

_NUMSTAT_LINE = re.compile(r"^(\d+|-)\t(\d+|-)\t(.*)$")
_BRACE_RENAME = re.compile(r"\{([^{}]*?)\s*=>\s*([^{}]*?)\}")
_ARROW = re.compile(r"\s*=>\s*")
_SLASHES = re.compile(r"/{2,}")


@dataclass(frozen=True, slots=True)
class DiffFileStat:
    """Counts for one file; binary files always count zero lines."""

    path: str
    insertions: int
    deletions: int
    binary: bool = False

    @property
    def changes(self) -> int:
        return self.insertions + self.deletions


@dataclass(frozen=True, slots=True)
class DiffSummary:
    """Parsed numstat body with running totals.

    Attributes:
        files: Per-file stats in input order
        insertions: Total inserted lines
        deletions: Total deleted lines
        changes: insertions + deletions
        changed: Number of files
    """

    files: tuple[DiffFileStat, ...] = ()
    insertions: int = 0
    deletions: int = 0
    changes: int = 0
    changed: int = 0


@dataclass(frozen=True, slots=True)
class LineStats:
    added: int = 0
    removed: int = 0
    binary: bool = False


@dataclass(frozen=True, slots=True)
class NumstatPaths:
    new_path: str
    old_path: str | None = None


def parse_numstat(output: str) -> DiffSummary:
    """Parse one un-framed numstat body; non-matching lines are skipped."""
    files: list[DiffFileStat] = []
    insertions = 0
    deletions = 0

    for line in output.strip().split("\n"):
        match = _NUMSTAT_LINE.match(line)
        if not match:
            continue
        ins_text, del_text, path = match.groups()
        binary = ins_text == "-" or del_text == "-"
        stat = DiffFileStat(
            path=path,
            insertions=0 if binary else int(ins_text),
            deletions=0 if binary else int(del_text),
            binary=binary,
        )
        files.append(stat)
        insertions += stat.insertions
        deletions += stat.deletions

    return DiffSummary(
        files=tuple(files),
        insertions=insertions,
        deletions=deletions,
        changes=insertions + deletions,
        changed=len(files),
    )


def _collapse(path: str) -> str:
    # "{ => sub}" style renames leave an empty segment behind.
    return _SLASHES.sub("/", path).lstrip("/")


def normalize_numstat_path(raw: str) -> NumstatPaths:
    """Resolve rename notation into distinct old and new paths.

    Examples:
        "src/{old.txt => new.txt}" -> new "src/new.txt", old "src/old.txt"
        "a.txt => b.txt"           -> new "b.txt", old "a.txt"
        "plain.txt"                -> new "plain.txt", no old path
    """
    trimmed = raw.strip()
    if "{" in trimmed and "}" in trimmed and "=>" in trimmed:
        new_path = _BRACE_RENAME.sub(lambda m: m.group(2).strip(), trimmed)
        old_path = _BRACE_RENAME.sub(lambda m: m.group(1).strip(), trimmed)
        return NumstatPaths(new_path=_collapse(new_path), old_path=_collapse(old_path))

    if "=>" in trimmed:
        parts = _ARROW.split(trimmed)
        old_path = parts[0].strip()
        new_path = parts[-1].strip()
        if new_path:
            return NumstatPaths(new_path=new_path, old_path=old_path)

    return NumstatPaths(new_path=trimmed)


def build_stats_map(summary: DiffSummary) -> dict[str, LineStats]:
    """Index stats by raw numstat path and by normalized new/old paths."""
    stats: dict[str, LineStats] = {}
    for file in summary.files:
        paths = normalize_numstat_path(file.path)
        line_stats = LineStats(added=file.insertions, removed=file.deletions, binary=file.binary)
        stats[file.path] = line_stats
        if paths.new_path and paths.new_path != file.path:
            stats[paths.new_path] = line_stats
        if paths.old_path and paths.old_path != file.path and paths.old_path != paths.new_path:
            stats[paths.old_path] = line_stats
    return stats
