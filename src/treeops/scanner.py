"""Depth-first traversal of a directory subtree."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Iterator
from pathlib import Path

from treeops.errors import TreeOpsError, translate_os_error
from treeops.types import EntryKind, FileNode

__all__ = ["ErrorHandler", "report_error", "scan", "stat_node"]

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[TreeOpsError], None]


def stat_node(path: Path) -> FileNode:
    """Build a FileNode for a single path without following symlinks.

    Args:
        path: Path to stat.

    Returns:
        FileNode describing the entry.

    Raises:
        TreeOpsError: If the path cannot be stat'ed.
    """
    try:
        st = os.lstat(path)
    except OSError as e:
        raise translate_os_error(e, path) from e
    return FileNode(
        path=path,
        kind=EntryKind.from_mode(st.st_mode),
        mode=stat.S_IMODE(st.st_mode),
        uid=st.st_uid,
        gid=st.st_gid,
        size=st.st_size,
    )


def _list_dir(path: Path) -> list[str]:
    try:
        return sorted(os.listdir(path))
    except OSError as e:
        raise translate_os_error(e, path) from e


def scan(
    root: str | os.PathLike[str],
    *,
    on_error: ErrorHandler | None = None,
) -> Iterator[FileNode]:
    """Walk a subtree depth-first, yielding the root and every descendant.

    Directories are yielded before their children, siblings in lexical name
    order. Symbolic links are reported as links and never descended into.
    A directory is listed only after its node has been consumed, so changes
    a consumer makes to the directory are visible to the listing.

    Args:
        root: Root of the subtree.
        on_error: Called with the error when an entry below the root cannot
            be stat'ed or listed; the entry is then skipped. When None the
            error is raised and the traversal stops.

    Yields:
        FileNode for each visited entry.

    Raises:
        NotFoundError: If root does not exist.
        TreeOpsError: On the first entry failure when on_error is None.
    """
    stack: list[FileNode | Path] = [stat_node(Path(root))]

    while stack:
        entry = stack.pop()
        if isinstance(entry, FileNode):
            node = entry
        else:
            try:
                node = stat_node(entry)
            except TreeOpsError as e:
                report_error(e, on_error)
                continue

        yield node
        if not node.is_dir:
            continue

        try:
            names = _list_dir(node.path)
        except TreeOpsError as e:
            report_error(e, on_error)
            continue
        stack.extend(node.path / name for name in reversed(names))


def report_error(
    error: TreeOpsError,
    on_error: ErrorHandler | None,
    cause: BaseException | None = None,
) -> None:
    """Raise an entry error, or hand it to on_error when continuing.

    Args:
        error: The translated error.
        on_error: Handler from the caller; None means abort.
        cause: Original exception to chain when raising.
    """
    if on_error is None:
        if cause is not None:
            raise error from cause
        raise error
    logger.warning("Skipping %s", error)
    on_error(error)
