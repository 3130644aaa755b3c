"""Process exit codes shared by every mship command."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Zero on success. Anything the operator must act on exits with one:
    a failed precondition, invalid input, or a build/publish step that could
    not recover.
    """

    OK = 0
    FAILURE = 1
