"""Process exit codes.

Every CLI command exits with one of these values so CI jobs can tell a bad
invocation from a rejected upload:
- 0: Success
- 1: User error (bad flags, unreadable notes, invalid tag file)
- 2: Environment error (broken config file)
- 3: Publish error (nothing to promote, version code conflict)
- 4: Network error (the publisher could not be reached)
- 5: I/O error (state file unreadable, malformed or not writable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands. Values are stable."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    PUBLISH_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
