"""Shared data types for tree operations."""

from __future__ import annotations

import stat
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from treeops.errors import TreeOpsError

__all__ = [
    "Credential",
    "EntryKind",
    "ErrorPolicy",
    "FileNode",
    "OperationOutcome",
    "SymlinkPolicy",
]


class EntryKind(str, Enum):
    """Kind of a filesystem entry as classified by ``lstat``."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"

    @classmethod
    def from_mode(cls, st_mode: int) -> EntryKind:
        """Classify a raw ``st_mode`` value."""
        if stat.S_ISLNK(st_mode):
            return cls.SYMLINK
        if stat.S_ISDIR(st_mode):
            return cls.DIRECTORY
        if stat.S_ISREG(st_mode):
            return cls.FILE
        return cls.OTHER


class ErrorPolicy(str, Enum):
    """What a tree operation does when a single entry fails."""

    ABORT = "abort"
    CONTINUE = "continue"


class SymlinkPolicy(str, Enum):
    """How copy_tree treats symbolic links found in the source."""

    COPY = "copy"
    FOLLOW = "follow"
    REJECT = "reject"


@dataclass(frozen=True)
class FileNode:
    """An entry visited during a traversal.

    Attributes:
        path: Path of the entry, rooted at the traversal root.
        kind: Entry kind.
        mode: Permission bits only (no file type bits).
        uid: Numeric owner id.
        gid: Numeric group id.
        size: Size in bytes as reported by ``lstat``.
    """

    path: Path
    kind: EntryKind
    mode: int
    uid: int
    gid: int
    size: int = 0

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_symlink(self) -> bool:
        return self.kind is EntryKind.SYMLINK

    def relative_to(self, root: Path) -> Path:
        """Return this node's path relative to a traversal root."""
        return self.path.relative_to(root)


@dataclass(frozen=True)
class Credential:
    """A resolved user and group identity."""

    uid: int
    gid: int
    username: str
    groupname: str

    def __str__(self) -> str:
        return f"{self.username}:{self.groupname}"


@dataclass
class OperationOutcome:
    """Result of a tree-wide operation.

    Attributes:
        operation: Name of the operation (copy, chmod, chown, remove).
        root: Root path the operation was applied to.
        visited: Number of entries processed successfully.
        errors: Errors recorded while running with ErrorPolicy.CONTINUE,
            in the order they were encountered.
    """

    operation: str
    root: Path
    visited: int = 0
    errors: list[TreeOpsError] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.operation:
            raise ValueError("operation cannot be empty")
        if self.visited < 0:
            raise ValueError("visited cannot be negative")

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> TreeOpsError | None:
        return self.errors[0] if self.errors else None

    def record(self, error: TreeOpsError) -> None:
        self.errors.append(error)

    def raise_for_errors(self) -> None:
        """Raise the first recorded error, if any."""
        if self.errors:
            raise self.errors[0]
