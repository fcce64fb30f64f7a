"""Typed engine configuration.

The engine is configured with an explicit root directory plus limits for
nested repository discovery and git invocations. Values can be loaded from
an optional ``nestgit.toml``:

    [engine]
    git = "git"
    timeout = 10.0
    fanout_workers = 1

    [discovery]
    max_depth = 4
    max_directories = 2000
    max_repos = 64
    cache_ttl = 3.0
    skip = ["vendor"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_COMMAND_TIMEOUT",
    "DEFAULT_SKIPPED_DIRECTORIES",
    "ConfigError",
    "DiscoveryConfig",
    "EngineConfig",
    "load_config",
]

CONFIG_FILENAME = "nestgit.toml"

DEFAULT_COMMAND_TIMEOUT = 10.0

DEFAULT_MAX_DEPTH = 4
DEFAULT_MAX_DIRECTORIES = 2_000
DEFAULT_MAX_REPOS = 64
DEFAULT_CACHE_TTL = 3.0

# Hidden directories are skipped as well, see discovery.should_skip_directory.
DEFAULT_SKIPPED_DIRECTORIES: frozenset[str] = frozenset(
    {
        ".git",
        "node_modules",
        ".idea",
        ".vscode",
        "dist",
        "build",
        "target",
        ".next",
        ".cache",
        ".turbo",
        ".pnpm-store",
        "coverage",
    }
)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or is invalid."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class DiscoveryConfig:
    """Bounds for the nested repository scan."""

    max_depth: int = DEFAULT_MAX_DEPTH
    max_directories: int = DEFAULT_MAX_DIRECTORIES
    max_repos: int = DEFAULT_MAX_REPOS
    cache_ttl: float = DEFAULT_CACHE_TTL
    skipped_directories: frozenset[str] = DEFAULT_SKIPPED_DIRECTORIES


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Main configuration container.

    Attributes:
        root: Trusted root; default cwd and boundary for path validation
        git_executable: Name or path of the git binary
        command_timeout: Default per-invocation timeout in seconds
        fanout_workers: Worker count for multi-repo queries (1 = sequential)
        discovery: Nested repository scan limits
    """

    root: Path
    git_executable: str = "git"
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    fanout_workers: int = 1
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, root: Path) -> EngineConfig:
        """Create config from a parsed TOML mapping.

        Raises:
            ValueError: If a limit or timeout is not positive.
        """
        engine: StrDict = get_table(data, "engine") or {}
        discovery: StrDict = get_table(data, "discovery") or {}

        extra_skip = get_str_list(discovery, "skip") or []
        return cls(
            root=root,
            git_executable=get_str(engine, "git") or "git",
            command_timeout=_positive(get_float(engine, "timeout"), DEFAULT_COMMAND_TIMEOUT, "timeout"),
            fanout_workers=_positive(get_int(engine, "fanout_workers"), 1, "fanout_workers"),
            discovery=DiscoveryConfig(
                max_depth=_positive(get_int(discovery, "max_depth"), DEFAULT_MAX_DEPTH, "max_depth"),
                max_directories=_positive(
                    get_int(discovery, "max_directories"),
                    DEFAULT_MAX_DIRECTORIES,
                    "max_directories",
                ),
                max_repos=_positive(get_int(discovery, "max_repos"), DEFAULT_MAX_REPOS, "max_repos"),
                cache_ttl=_non_negative(get_float(discovery, "cache_ttl"), DEFAULT_CACHE_TTL, "cache_ttl"),
                skipped_directories=DEFAULT_SKIPPED_DIRECTORIES | frozenset(extra_skip),
            ),
        )


N = TypeVar("N", int, float)


def _positive(value: N | None, default: N, key: str) -> N:
    if value is None:
        return default
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


def _non_negative(value: float | None, default: float, key: str) -> float:
    if value is None:
        return default
    if value < 0:
        raise ValueError(f"{key} must not be negative, got {value}")
    return value


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path, *, root: Path) -> Result[EngineConfig, ConfigError]:
    """Load and validate engine configuration from a TOML file.

    Args:
        path: Path to the TOML file
        root: Engine root directory (not read from the file)

    Returns:
        Ok(EngineConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(EngineConfig.from_dict(result.value, root=root))
    except (TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))
