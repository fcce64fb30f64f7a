"""Git layer: nested repository discovery, fan-out and output parsing.

Usage:
    from nestgit.git import GitEngine

    engine = GitEngine(EngineConfig(root=Path("/work")))
    response = engine.status()          # raw, possibly framed
    view = engine.status_files()        # Result[AggregationResult, GitError]
"""

from nestgit.git.aggregate import (
    AggregatedFileStatus,
    AggregationResult,
    RepoBranch,
    build_status_files,
)
from nestgit.git.discovery import (
    DiscoveredRepo,
    DiscoveryCache,
    RepoDiscoveryService,
    discover_nested_repos,
)
from nestgit.git.engine import GitEngine, GitError
from nestgit.git.fallback import FallbackOrchestrator, is_not_a_repository
from nestgit.git.framing import RepoSection, split_sections, wrap_section
from nestgit.git.numstat import DiffFileStat, DiffSummary, build_stats_map, normalize_numstat_path, parse_numstat
from nestgit.git.status import (
    BranchInfo,
    ChangeKind,
    ChangeRecord,
    FileStatusKind,
    StatusSummary,
    current_branch,
    parse_status,
)

__all__ = [
    # aggregate
    "AggregatedFileStatus",
    "AggregationResult",
    "RepoBranch",
    "build_status_files",
    # discovery
    "DiscoveredRepo",
    "DiscoveryCache",
    "RepoDiscoveryService",
    "discover_nested_repos",
    # engine
    "GitEngine",
    "GitError",
    # fallback
    "FallbackOrchestrator",
    "is_not_a_repository",
    # framing
    "RepoSection",
    "split_sections",
    "wrap_section",
    # numstat
    "DiffFileStat",
    "DiffSummary",
    "build_stats_map",
    "normalize_numstat_path",
    "parse_numstat",
    # status
    "BranchInfo",
    "ChangeKind",
    "ChangeRecord",
    "FileStatusKind",
    "StatusSummary",
    "current_branch",
    "parse_status",
]
