"""Platform layer: subprocess execution and path validation."""

from .paths import PathValidation, PathValidator, is_path_inside, validate_path
from .process import CommandErrorKind, CommandResult, CommandRunner, run

__all__ = [
    # paths
    "PathValidation",
    "PathValidator",
    "is_path_inside",
    "validate_path",
    # process
    "CommandErrorKind",
    "CommandResult",
    "CommandRunner",
    "run",
]
