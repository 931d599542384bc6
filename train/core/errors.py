"""Exit codes for the command line front end.

Run and train reports are translated into one of these codes; the numeric
values are process exit statuses and must stay stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Every task succeeded (or was skipped)
    - 1: User error (bad input, unknown task or project name)
    - 2: Configuration error (unreadable or invalid releaser.toml)
    - 3: Release aborted (hard fault, rollback attempted)
    - 4: Release unstable (post-release step failed, release itself done)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    ABORTED = 3
    UNSTABLE = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
