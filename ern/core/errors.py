"""Error codes for CLI exit status.

Core services never exit the process; the CLI layer maps the error values
they return onto these codes.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (bad descriptor, failed validation check)
    - 2: Environment error (no cauldron configured, missing tools)
    - 3: Operation error (container generation or publication failed)
    - 4: Persist error (cauldron could not be written)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    OPERATION_ERROR = 3
    PERSIST_ERROR = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
