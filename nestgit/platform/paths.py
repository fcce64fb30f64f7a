"""Path validation against a trusted root.

Callers hand user-supplied paths (a working directory, a file to diff) to a
``PathValidator`` before any git process is started. The default validator
accepts a path only if it resolves inside the root.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

__all__ = [
    "PathValidation",
    "PathValidator",
    "is_path_inside",
    "validate_path",
]


@dataclass(frozen=True, slots=True)
class PathValidation:
    """Outcome of a path check."""

    valid: bool
    error: str | None = None


PathValidator: TypeAlias = Callable[[str | Path, Path], PathValidation]


def is_path_inside(target: Path, parent: Path) -> bool:
    """True if ``target`` equals ``parent`` or lies below it (symlinks resolved)."""
    return target.resolve().is_relative_to(parent.resolve())


def validate_path(candidate: str | Path, root: Path) -> PathValidation:
    """Check that ``candidate`` (absolute, or relative to root) stays inside ``root``."""
    text = str(candidate)
    if not text.strip():
        return PathValidation(False, "Path must not be empty")
    if "\x00" in text:
        return PathValidation(False, "Path contains a null byte")

    path = Path(candidate)
    if not path.is_absolute():
        path = root / path

    try:
        inside = is_path_inside(path, root)
    except (OSError, RuntimeError) as e:
        return PathValidation(False, f"Cannot resolve path '{text}': {e}")

    if not inside:
        return PathValidation(False, f"Path '{text}' is outside the working directory")
    return PathValidation(True)
