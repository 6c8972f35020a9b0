"""Error kinds raised by tree operations."""

from __future__ import annotations

import os
from pathlib import Path

__all__ = [
    "IOFailureError",
    "NotFoundError",
    "PermissionDeniedError",
    "TreeOpsError",
    "UnknownIdentityError",
    "translate_os_error",
]


class TreeOpsError(Exception):
    """Base error for tree operations.

    Attributes:
        message: Human readable description of the failure.
        path: Path at which the failure occurred, if any.
    """

    def __init__(self, message: str, path: str | os.PathLike[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path}"


class NotFoundError(TreeOpsError):
    """Path is absent where presence is required."""

    pass


class UnknownIdentityError(TreeOpsError):
    """User or group name cannot be resolved, or an id has no name."""

    pass


class PermissionDeniedError(TreeOpsError):
    """Insufficient privilege for the requested mutation."""

    pass


class IOFailureError(TreeOpsError):
    """Generic read, write or stat failure."""

    pass


def translate_os_error(exc: OSError, path: str | os.PathLike[str]) -> TreeOpsError:
    """Map an OSError onto the matching error kind.

    Args:
        exc: The error raised by the operating system call.
        path: Path the call was made on.

    Returns:
        A TreeOpsError subclass instance. Callers raise it ``from exc``.
    """
    message = exc.strerror or str(exc)
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(message, path)
    if isinstance(exc, PermissionError):
        return PermissionDeniedError(message, path)
    return IOFailureError(message, path)
