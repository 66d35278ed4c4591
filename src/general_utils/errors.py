"""Exceptions raised by the process execution wrapper."""

from __future__ import annotations

__all__ = [
    "ExecError",
    "ExecPreconditionError",
]


class ExecError(Exception):
    """A process launched through ``ProcessRunner`` did not succeed.

    Attributes:
        message: Human-readable description of the failure
        exit_code: Exit code that caused the failure
    """

    def __init__(self, message: str, exit_code: int) -> None:
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, exit_code={self.exit_code})"


class ExecPreconditionError(ExecError):
    """The call was rejected before anything was spawned (e.g. blank program)."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message, exit_code)
