"""Process exit codes for relman commands.

The numeric values are part of the command-line contract and must stay
stable so that CI scripts can branch on them:
- 0: Success
- 1: User error (bad flag combination, re-publish of a published version)
- 2: Configuration error (release config or project manifest unusable)
- 3: Build error (a target failed, the build could not be spawned, publish failed)
- 5: I/O error (ledger not writable, packaging failed)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    BUILD_ERROR = 3
    IO_ERROR = 5
