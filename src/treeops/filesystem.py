"""Filesystem service wrapping the tree operations.

RealFileSystem binds the module-level operations to a TreeOpsConfig so
callers only pass an error policy to override the configured one. It
satisfies the TreeFileSystem protocol structurally.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from treeops.config import TreeOpsConfig
from treeops.copier import copy_tree
from treeops.credentials import get_file_credentials
from treeops.permissions import chmod_tree, chown_tree
from treeops.remover import remove_tree
from treeops.scanner import scan
from treeops.types import ErrorPolicy, FileNode, OperationOutcome


class RealFileSystem:
    """Production filesystem implementation."""

    def __init__(self, config: TreeOpsConfig | None = None) -> None:
        self.config = config or TreeOpsConfig()

    @property
    def policy(self) -> ErrorPolicy:
        return self.config.on_error

    def copy(
        self, destination: Path, source: Path, *, policy: ErrorPolicy | None = None
    ) -> OperationOutcome:
        """Copy a subtree using the configured directory mode and link policy."""
        return copy_tree(
            destination,
            source,
            directory_mode=self.config.directory_mode,
            symlinks=self.config.symlinks,
            policy=policy or self.policy,
            chunk_size=self.config.chunk_size,
        )

    def chmod(
        self, root: Path, mode: int, *, policy: ErrorPolicy | None = None
    ) -> OperationOutcome:
        """Apply permission bits to a subtree."""
        return chmod_tree(root, mode, policy=policy or self.policy)

    def chown(
        self,
        root: Path,
        username: str,
        groupname: str,
        *,
        policy: ErrorPolicy | None = None,
    ) -> OperationOutcome:
        """Apply owner and group names to a subtree."""
        return chown_tree(root, username, groupname, policy=policy or self.policy)

    def remove(self, root: Path, *, policy: ErrorPolicy | None = None) -> OperationOutcome:
        """Remove a subtree."""
        return remove_tree(root, policy=policy or self.policy)

    def get_file_credentials(self, path: Path) -> tuple[str, str]:
        """Get owner and group names of a path."""
        return get_file_credentials(path)

    def scan(self, root: Path) -> Iterator[FileNode]:
        """Walk a subtree, aborting on the first unreadable entry."""
        return scan(root)
