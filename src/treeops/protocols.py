"""Protocol definitions for the tree operation service.

Callers depend on the TreeFileSystem protocol rather than on
RealFileSystem, so test doubles can be injected without inheritance.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Protocol, runtime_checkable

from treeops.types import ErrorPolicy, FileNode, OperationOutcome


@runtime_checkable
class TreeFileSystem(Protocol):
    """Protocol for tree-level filesystem manipulation."""

    def copy(
        self, destination: Path, source: Path, *, policy: ErrorPolicy | None = None
    ) -> OperationOutcome:
        """Copy the source subtree to destination.

        Args:
            destination: Root path of the copy.
            source: File or directory to copy.
            policy: Error policy overriding the configured one.

        Returns:
            OperationOutcome for the copy.
        """
        ...

    def chmod(
        self, root: Path, mode: int, *, policy: ErrorPolicy | None = None
    ) -> OperationOutcome:
        """Apply permission bits to every entry under root.

        Args:
            root: Root of the subtree.
            mode: Permission bits.
            policy: Error policy overriding the configured one.

        Returns:
            OperationOutcome for the change.
        """
        ...

    def chown(
        self,
        root: Path,
        username: str,
        groupname: str,
        *,
        policy: ErrorPolicy | None = None,
    ) -> OperationOutcome:
        """Apply owner and group names to every entry under root.

        Args:
            root: Root of the subtree.
            username: New owner name.
            groupname: New group name.
            policy: Error policy overriding the configured one.

        Returns:
            OperationOutcome for the change.
        """
        ...

    def remove(self, root: Path, *, policy: ErrorPolicy | None = None) -> OperationOutcome:
        """Remove root and everything beneath it.

        Args:
            root: Path to remove.
            policy: Error policy overriding the configured one.

        Returns:
            OperationOutcome for the removal.
        """
        ...

    def get_file_credentials(self, path: Path) -> tuple[str, str]:
        """Get the owner and group names of a path.

        Args:
            path: Path to inspect.

        Returns:
            Tuple of (username, groupname).
        """
        ...

    def scan(self, root: Path) -> Iterator[FileNode]:
        """Walk the subtree under root.

        Args:
            root: Root of the subtree.

        Returns:
            Iterator of visited nodes.
        """
        ...
