"""Recursive copy of a directory subtree."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from treeops.errors import IOFailureError, TreeOpsError, translate_os_error
from treeops.scanner import ErrorHandler, report_error, scan, stat_node
from treeops.types import ErrorPolicy, FileNode, OperationOutcome, SymlinkPolicy

__all__ = ["DEFAULT_CHUNK_SIZE", "DEFAULT_DIRECTORY_MODE", "copy_tree"]

logger = logging.getLogger(__name__)

# Mode for created directories, before the process umask is applied
DEFAULT_DIRECTORY_MODE = 0o777

DEFAULT_CHUNK_SIZE = 65536


def copy_tree(
    destination: str | os.PathLike[str],
    source: str | os.PathLike[str],
    *,
    directory_mode: int = DEFAULT_DIRECTORY_MODE,
    symlinks: SymlinkPolicy = SymlinkPolicy.COPY,
    policy: ErrorPolicy = ErrorPolicy.ABORT,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> OperationOutcome:
    """Copy a file or directory subtree to a new root.

    Directory topology and regular file contents are duplicated. Modes and
    ownership are not preserved: directories are created with
    ``directory_mode`` and files with the default file mode, both subject
    to the umask. Existing destination directories are merged into and
    existing files are overwritten. Nothing is rolled back on failure.

    Args:
        destination: Root path of the copy.
        source: File or directory to copy.
        directory_mode: Mode used when creating directories.
        symlinks: How symbolic links in the source are handled.
        policy: Whether to stop at the first failing entry.
        chunk_size: Read size used when streaming file contents.

    Returns:
        OperationOutcome for the copy.

    Raises:
        NotFoundError: If source does not exist.
        IOFailureError: If destination lies inside source or is the source file.
        TreeOpsError: On the first failing entry under ErrorPolicy.ABORT.
    """
    copier = _TreeCopier(
        destination=Path(destination),
        source=Path(source),
        directory_mode=directory_mode,
        symlinks=symlinks,
        policy=policy,
        chunk_size=chunk_size,
    )
    return copier.run()


def _is_within(path: Path, root: Path) -> bool:
    path = path.resolve()
    root = root.resolve()
    return path == root or root in path.parents


def _is_same_entry(path: Path, other: Path) -> bool:
    try:
        return os.path.samestat(os.lstat(path), os.lstat(other))
    except FileNotFoundError:
        return False
    except OSError as e:
        raise translate_os_error(e, path) from e


class _TreeCopier:
    """State for a single copy_tree call."""

    def __init__(
        self,
        destination: Path,
        source: Path,
        directory_mode: int,
        symlinks: SymlinkPolicy,
        policy: ErrorPolicy,
        chunk_size: int,
    ) -> None:
        self.destination = destination
        self.source = source
        self.directory_mode = directory_mode
        self.symlinks = symlinks
        self.chunk_size = chunk_size
        self.outcome = OperationOutcome("copy", source)
        self.on_error: ErrorHandler | None = (
            self.outcome.record if policy is ErrorPolicy.CONTINUE else None
        )
        # (st_dev, st_ino) of directories currently being copied through a link
        self._following: set[tuple[int, int]] = set()

    def run(self) -> OperationOutcome:
        root = stat_node(self.source)
        if root.is_dir:
            if _is_within(self.destination, self.source):
                raise IOFailureError(
                    f"Cannot copy {self.source} into itself", self.destination
                )
            self._make_parents(self.destination)
        else:
            if _is_same_entry(self.destination, self.source):
                raise IOFailureError(
                    f"Cannot copy {self.source} onto itself", self.destination
                )
            self._make_parents(self.destination.parent)

        self._copy_subtree(self.source, self.destination)
        logger.debug(
            "Copied %d entries from %s to %s (%d errors)",
            self.outcome.visited,
            self.source,
            self.destination,
            len(self.outcome.errors),
        )
        return self.outcome

    def _make_parents(self, path: Path) -> None:
        try:
            path.mkdir(mode=self.directory_mode, parents=True, exist_ok=True)
        except OSError as e:
            raise translate_os_error(e, path) from e

    def _copy_subtree(self, source: Path, destination: Path) -> None:
        for node in scan(source, on_error=self.on_error):
            target = destination / node.relative_to(source)
            try:
                self._copy_node(node, target)
            except TreeOpsError as e:
                report_error(e, self.on_error)
                continue
            self.outcome.visited += 1

    def _copy_node(self, node: FileNode, target: Path) -> None:
        if node.is_dir:
            self._copy_directory(target)
        elif node.is_file:
            self._copy_file(node.path, target)
        elif node.is_symlink:
            self._copy_symlink(node, target)
        else:
            raise IOFailureError("Cannot copy special file", node.path)

    def _copy_directory(self, target: Path) -> None:
        try:
            target.mkdir(mode=self.directory_mode, exist_ok=True)
        except OSError as e:
            raise translate_os_error(e, target) from e

    def _copy_file(self, source: Path, target: Path) -> None:
        try:
            fsrc = open(source, "rb")
        except OSError as e:
            raise translate_os_error(e, source) from e

        with fsrc:
            try:
                # Never write through an existing link in the destination
                if target.is_symlink():
                    target.unlink()
                if target.exists() and os.path.samefile(source, target):
                    raise IOFailureError("Cannot copy a file onto itself", target)
                with open(target, "wb") as fdst:
                    shutil.copyfileobj(fsrc, fdst, self.chunk_size)
            except OSError as e:
                raise translate_os_error(e, target) from e

    def _copy_symlink(self, node: FileNode, target: Path) -> None:
        if self.symlinks is SymlinkPolicy.REJECT:
            raise IOFailureError("Symbolic links are not allowed", node.path)
        if self.symlinks is SymlinkPolicy.FOLLOW:
            self._follow_symlink(node, target)
            return

        try:
            link = os.readlink(node.path)
        except OSError as e:
            raise translate_os_error(e, node.path) from e
        try:
            if target.is_symlink():
                target.unlink()
            os.symlink(link, target)
        except OSError as e:
            raise translate_os_error(e, target) from e

    def _follow_symlink(self, node: FileNode, target: Path) -> None:
        try:
            resolved = node.path.resolve(strict=True)
            st = resolved.stat()
        except RuntimeError as e:
            raise IOFailureError("Symbolic link loop", node.path) from e
        except OSError as e:
            raise translate_os_error(e, node.path) from e

        linked = stat_node(resolved)
        if linked.is_file:
            self._copy_file(resolved, target)
            return
        if not linked.is_dir:
            raise IOFailureError("Cannot copy special file", resolved)

        key = (st.st_dev, st.st_ino)
        if (
            key in self._following
            or _is_within(self.source, resolved)
            or _is_within(self.destination, resolved)
        ):
            raise IOFailureError("Symbolic link cycle", node.path)
        self._following.add(key)
        try:
            self._copy_subtree(resolved, target)
        finally:
            self._following.discard(key)
