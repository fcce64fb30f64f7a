"""Error codes for CLI exit status.

Every command maps its outcome onto one of these codes so that scripts
wrapping ``nestgit`` can tell a bad argument from a missing git binary
or a failed git query.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (invalid path, file outside the root)
    - 2: Environment error (git missing, unreadable config)
    - 3: Git error (command failed, no nested repositories)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    GIT_ERROR = 3

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        """Check if this code indicates success."""
        return self == ErrorCode.OK
