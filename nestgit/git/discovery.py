"""Nested repository discovery.

When a directory is not itself a git repository, nestgit looks for
repositories below it with a bounded breadth-first scan:

- the scan root is never reported, only directories at depth >= 1
- a directory holding ``.git`` (dir or file) is recorded and not descended into
- known low-value and hidden directories are pruned
- the scan stops at max depth, max directories visited or max repos found,
  returning what it found so far

Results are cached per root for a short TTL.

Usage:
    service = RepoDiscoveryService(DiscoveryConfig())
    for repo in service.get_or_scan(Path("/work")):
        print(repo.relative_path)
"""

from __future__ import annotations

import logging
import os
import stat
import threading
import time
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from nestgit.core.config import DiscoveryConfig

__all__ = [
    "DiscoveredRepo",
    "DiscoveryCache",
    "DiscoveryCacheEntry",
    "RepoDiscoveryService",
    "discover_nested_repos",
    "has_git_metadata",
    "should_skip_directory",
]

log = logging.getLogger(__name__)

GIT_METADATA_NAME = ".git"


@dataclass(frozen=True, slots=True)
class DiscoveredRepo:
    """A repository found below the scan root.

    Attributes:
        absolute_path: Repository directory
        relative_path: POSIX-style path from the scan root, never empty or escaping it
    """

    absolute_path: Path
    relative_path: str


@dataclass(frozen=True, slots=True)
class DiscoveryCacheEntry:
    repos: tuple[DiscoveredRepo, ...]
    expires_at: float


class DiscoveryCache:
    """TTL cache of scan results keyed by root path string.

    Entries are immutable and replaced wholesale. The cache does not watch
    the filesystem: a repo created within the TTL window is not seen until
    the entry expires.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, DiscoveryCacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, root: Path | str) -> tuple[DiscoveredRepo, ...] | None:
        """Return cached repos for ``root``, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(str(root))
        if entry is None or self._clock() >= entry.expires_at:
            return None
        return entry.repos

    def put(self, root: Path | str, repos: Sequence[DiscoveredRepo]) -> DiscoveryCacheEntry:
        entry = DiscoveryCacheEntry(repos=tuple(repos), expires_at=self._clock() + self.ttl)
        with self._lock:
            self._entries[str(root)] = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def should_skip_directory(name: str, skipped: frozenset[str]) -> bool:
    """True for directories never worth scanning (listed names, hidden dirs)."""
    return name in skipped or name.startswith(".")


def has_git_metadata(path: Path) -> bool:
    """True if ``path`` contains a ``.git`` directory or gitdir file."""
    try:
        st = os.lstat(path / GIT_METADATA_NAME)
    except OSError:
        return False
    return stat.S_ISDIR(st.st_mode) or stat.S_ISREG(st.st_mode)


def _child_directories(path: Path, skipped: frozenset[str]) -> list[Path]:
    try:
        with os.scandir(path) as it:
            names = [
                entry.name
                for entry in it
                if entry.is_dir(follow_symlinks=False) and not should_skip_directory(entry.name, skipped)
            ]
    except OSError as e:
        log.debug("discovery: cannot list %s: %s", path, e)
        return []
    return [path / name for name in sorted(names)]


def discover_nested_repos(root: Path, config: DiscoveryConfig) -> list[DiscoveredRepo]:
    """Scan ``root`` breadth-first for nested repositories.

    Args:
        root: Directory to scan (not reported even if it is a repository)
        config: Scan bounds and pruned directory names

    Returns:
        Repositories sorted by relative path (ordinal comparison)
    """
    queue: deque[tuple[Path, int]] = deque([(root, 0)])
    discovered: list[DiscoveredRepo] = []
    scanned = 0

    while queue:
        if len(discovered) >= config.max_repos:
            log.debug("discovery: repo limit %d reached under %s", config.max_repos, root)
            break
        if scanned >= config.max_directories:
            log.debug("discovery: directory limit %d reached under %s", config.max_directories, root)
            break

        current, depth = queue.popleft()
        scanned += 1

        if depth > 0 and has_git_metadata(current):
            relative = current.relative_to(root).as_posix()
            if relative and relative != "." and not relative.startswith(".."):
                discovered.append(DiscoveredRepo(absolute_path=current, relative_path=relative))
            continue

        if depth >= config.max_depth:
            continue

        for child in _child_directories(current, config.skipped_directories):
            queue.append((child, depth + 1))

    discovered.sort(key=lambda repo: repo.relative_path)
    log.debug("discovery: %d repo(s) under %s after %d dir(s)", len(discovered), root, scanned)
    return discovered


class RepoDiscoveryService:
    """Discovery with a per-root TTL cache.

    Attributes:
        config: Scan bounds
        cache: Cache of previous scans; expired entries are rescanned on access
    """

    def __init__(self, config: DiscoveryConfig, cache: DiscoveryCache | None = None) -> None:
        self.config = config
        self.cache = cache if cache is not None else DiscoveryCache(config.cache_ttl)

    def discover(self, root: Path) -> list[DiscoveredRepo]:
        """Scan ``root`` now, bypassing the cache."""
        return discover_nested_repos(root, self.config)

    def get_or_scan(self, root: Path) -> list[DiscoveredRepo]:
        """Return cached repos for ``root`` or scan and cache them."""
        cached = self.cache.get(root)
        if cached is not None:
            log.debug("discovery: cache hit for %s", root)
            return list(cached)

        repos = self.discover(root)
        self.cache.put(root, repos)
        return repos
