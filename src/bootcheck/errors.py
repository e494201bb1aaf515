"""Exceptions raised by bootcheck step actions."""

from __future__ import annotations

from typing import Optional, Sequence

__all__ = [
    "BootcheckError",
    "StepFailedError",
    "CommandError",
    "InstallError",
]


class BootcheckError(Exception):
    """Base error for bootcheck."""


class StepFailedError(BootcheckError):
    """Raised by a step action to report a failed outcome."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class CommandError(StepFailedError):
    """Raised when an external command exits non-zero or cannot be run."""

    def __init__(
        self,
        argv: Sequence[str],
        returncode: int,
        stderr: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        message = reason or f"`{' '.join(self.argv)}` exited with status {returncode}"
        if stderr and stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message, exit_code=returncode if returncode > 0 else 1)


class InstallError(StepFailedError):
    """Raised when the package manager cannot be installed."""
