"""Tests for git/discovery.py."""

from __future__ import annotations

from pathlib import Path

from nestgit.core.config import DiscoveryConfig
from nestgit.git.discovery import (
    DiscoveredRepo,
    DiscoveryCache,
    RepoDiscoveryService,
    discover_nested_repos,
    has_git_metadata,
    should_skip_directory,
)


def _make_repo(path: Path, *, gitfile: bool = False) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    if gitfile:
        (path / ".git").write_text("gitdir: /elsewhere/.git/worktrees/x\n")
    else:
        (path / ".git").mkdir()
    return path


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    """Metadata detection and skip rules."""

    def test_has_git_metadata_directory(self, tmp_path: Path) -> None:
        assert has_git_metadata(_make_repo(tmp_path / "a")) is True

    def test_has_git_metadata_file(self, tmp_path: Path) -> None:
        """A .git file (worktree or submodule) counts as a repository."""
        assert has_git_metadata(_make_repo(tmp_path / "wt", gitfile=True)) is True

    def test_no_metadata(self, tmp_path: Path) -> None:
        assert has_git_metadata(tmp_path) is False

    def test_skip_rules(self) -> None:
        """Test pruned names and hidden directories."""
        skipped = frozenset({"node_modules", "dist"})
        assert should_skip_directory("node_modules", skipped) is True
        assert should_skip_directory(".hidden", skipped) is True
        assert should_skip_directory("src", skipped) is False


# =============================================================================
# discover_nested_repos Tests
# =============================================================================


class TestDiscoverNestedRepos:
    """Test the breadth-first scan."""

    def test_finds_repos_sorted(self, tmp_path: Path) -> None:
        """Results are sorted by relative path."""
        _make_repo(tmp_path / "zeta")
        _make_repo(tmp_path / "alpha")
        _make_repo(tmp_path / "group" / "beta")
        (tmp_path / "plain").mkdir()

        repos = discover_nested_repos(tmp_path, DiscoveryConfig())

        assert [r.relative_path for r in repos] == ["alpha", "group/beta", "zeta"]
        assert repos[0] == DiscoveredRepo(absolute_path=tmp_path / "alpha", relative_path="alpha")

    def test_root_is_never_reported(self, tmp_path: Path) -> None:
        """The scan root is never one of its own nested repos."""
        _make_repo(tmp_path)
        _make_repo(tmp_path / "child")

        repos = discover_nested_repos(tmp_path, DiscoveryConfig())

        assert [r.relative_path for r in repos] == ["child"]

    def test_does_not_descend_into_repo(self, tmp_path: Path) -> None:
        """Scanning stops at a repository boundary."""
        _make_repo(tmp_path / "a")
        _make_repo(tmp_path / "a" / "b")

        repos = discover_nested_repos(tmp_path, DiscoveryConfig())

        assert [r.relative_path for r in repos] == ["a"]

    def test_prunes_skipped_and_hidden(self, tmp_path: Path) -> None:
        """Test default pruning of dependency, build and hidden dirs."""
        _make_repo(tmp_path / "node_modules" / "pkg")
        _make_repo(tmp_path / ".hidden" / "repo")
        _make_repo(tmp_path / "build" / "out")
        _make_repo(tmp_path / "src" / "lib")

        repos = discover_nested_repos(tmp_path, DiscoveryConfig())

        assert [r.relative_path for r in repos] == ["src/lib"]

    def test_custom_skip_names(self, tmp_path: Path) -> None:
        _make_repo(tmp_path / "vendor" / "dep")
        config = DiscoveryConfig(skipped_directories=frozenset({"vendor"}))

        assert discover_nested_repos(tmp_path, config) == []

    def test_max_depth(self, tmp_path: Path) -> None:
        """Repos below max_depth are not reached."""
        _make_repo(tmp_path / "d1" / "d2")
        _make_repo(tmp_path / "d1" / "x2" / "d3")

        repos = discover_nested_repos(tmp_path, DiscoveryConfig(max_depth=2))

        assert [r.relative_path for r in repos] == ["d1/d2"]

    def test_default_depth_limit(self, tmp_path: Path) -> None:
        _make_repo(tmp_path / "a" / "b" / "c" / "d")
        _make_repo(tmp_path / "a" / "b" / "c" / "e" / "f")

        repos = discover_nested_repos(tmp_path, DiscoveryConfig())

        assert [r.relative_path for r in repos] == ["a/b/c/d"]

    def test_max_repos(self, tmp_path: Path) -> None:
        """Test the scan stops at max_repos."""
        for i in range(5):
            _make_repo(tmp_path / f"repo{i}")

        repos = discover_nested_repos(tmp_path, DiscoveryConfig(max_repos=2))

        assert len(repos) == 2

    def test_max_directories(self, tmp_path: Path) -> None:
        for i in range(5):
            (tmp_path / f"empty{i}").mkdir()
        _make_repo(tmp_path / "zz-repo")

        # root + 5 empty dirs hit the directory limit before zz-repo is visited
        repos = discover_nested_repos(tmp_path, DiscoveryConfig(max_directories=6))

        assert repos == []

    def test_symlinked_directories_are_not_followed(self, tmp_path: Path) -> None:
        """Test that a symlink to a repo is not reported."""
        target = _make_repo(tmp_path.parent / f"{tmp_path.name}-target")
        (tmp_path / "link").symlink_to(target, target_is_directory=True)

        assert discover_nested_repos(tmp_path, DiscoveryConfig()) == []

    def test_missing_root(self, tmp_path: Path) -> None:
        """A missing root yields no repos instead of raising."""
        assert discover_nested_repos(tmp_path / "missing", DiscoveryConfig()) == []


# =============================================================================
# Cache Tests
# =============================================================================


class TestDiscoveryCache:
    """Test cache expiry with a manual clock."""

    def test_get_missing(self) -> None:
        assert DiscoveryCache(ttl=3.0).get("/nowhere") is None

    def test_put_then_get(self, tmp_path: Path) -> None:
        """Entries are keyed by the string form of the root."""
        clock = ManualClock()
        cache = DiscoveryCache(ttl=3.0, clock=clock)
        repo = DiscoveredRepo(tmp_path / "a", "a")

        entry = cache.put(tmp_path, [repo])

        assert entry.expires_at == 103.0
        assert cache.get(tmp_path) == (repo,)
        assert cache.get(str(tmp_path)) == (repo,)

    def test_expires(self, tmp_path: Path) -> None:
        """Entries expire exactly at the TTL."""
        clock = ManualClock()
        cache = DiscoveryCache(ttl=3.0, clock=clock)
        cache.put(tmp_path, [])

        clock.advance(2.0)
        assert cache.get(tmp_path) == ()
        clock.advance(1.0)
        assert cache.get(tmp_path) is None

    def test_clear(self, tmp_path: Path) -> None:
        cache = DiscoveryCache(ttl=3.0)
        cache.put(tmp_path, [])
        assert len(cache) == 1
        cache.clear()
        assert len(cache) == 0
        assert cache.get(tmp_path) is None


class TestRepoDiscoveryService:
    """Cached discovery."""

    def test_get_or_scan_uses_cache_within_ttl(self, tmp_path: Path) -> None:
        """New repos stay invisible until the entry expires."""
        clock = ManualClock()
        service = RepoDiscoveryService(DiscoveryConfig(), DiscoveryCache(ttl=3.0, clock=clock))
        _make_repo(tmp_path / "a")

        first = service.get_or_scan(tmp_path)
        _make_repo(tmp_path / "b")
        second = service.get_or_scan(tmp_path)

        assert [r.relative_path for r in first] == ["a"]
        assert second == first

    def test_get_or_scan_rescans_after_expiry(self, tmp_path: Path) -> None:
        clock = ManualClock()
        service = RepoDiscoveryService(DiscoveryConfig(), DiscoveryCache(ttl=3.0, clock=clock))
        _make_repo(tmp_path / "a")
        service.get_or_scan(tmp_path)

        _make_repo(tmp_path / "b")
        clock.advance(3.0)

        assert [r.relative_path for r in service.get_or_scan(tmp_path)] == ["a", "b"]

    def test_zero_ttl_always_rescans(self, tmp_path: Path) -> None:
        """Test a TTL of zero disables caching."""
        service = RepoDiscoveryService(DiscoveryConfig(cache_ttl=0.0))
        assert service.get_or_scan(tmp_path) == []
        _make_repo(tmp_path / "new")
        assert [r.relative_path for r in service.get_or_scan(tmp_path)] == ["new"]

    def test_discover_bypasses_cache(self, tmp_path: Path) -> None:
        """discover() always scans."""
        service = RepoDiscoveryService(DiscoveryConfig())
        service.get_or_scan(tmp_path)
        _make_repo(tmp_path / "late")
        assert [r.relative_path for r in service.discover(tmp_path)] == ["late"]
