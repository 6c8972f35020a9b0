"""Recursive permission and ownership changes."""

from __future__ import annotations

import errno
import logging
import os
import stat
from collections.abc import Callable
from pathlib import Path

from treeops.credentials import resolve_credential
from treeops.errors import TreeOpsError, translate_os_error
from treeops.scanner import ErrorHandler, report_error, scan
from treeops.types import Credential, ErrorPolicy, FileNode, OperationOutcome

__all__ = ["chmod_tree", "chown_tree"]

logger = logging.getLogger(__name__)

_UNSUPPORTED_ERRNOS = {errno.ENOTSUP, errno.EOPNOTSUPP}


def chmod_tree(
    root: str | os.PathLike[str],
    mode: int,
    *,
    policy: ErrorPolicy = ErrorPolicy.ABORT,
) -> OperationOutcome:
    """Set the permission bits of every entry in a subtree.

    The same bits are applied to files, directories and the root itself.
    Only the permission portion of ``mode`` is used. Symbolic links are
    changed without following them where the platform allows it and left
    alone otherwise, so a link's target is never modified.

    Args:
        root: Root of the subtree.
        mode: Permission bits to apply, e.g. ``0o755``.
        policy: Whether to stop at the first failing entry.

    Returns:
        OperationOutcome for the change.

    Raises:
        NotFoundError: If root does not exist.
        TreeOpsError: On the first failing entry under ErrorPolicy.ABORT.
    """
    bits = stat.S_IMODE(mode)
    return _apply(Path(root), "chmod", lambda node: _chmod_node(node, bits), policy)


def chown_tree(
    root: str | os.PathLike[str],
    username: str,
    groupname: str,
    *,
    policy: ErrorPolicy = ErrorPolicy.ABORT,
) -> OperationOutcome:
    """Set the owner and group of every entry in a subtree.

    Both names are resolved once, before the filesystem is touched.
    Symbolic links are changed themselves, never their targets.

    Args:
        root: Root of the subtree.
        username: Name of the new owner.
        groupname: Name of the new group.
        policy: Whether to stop at the first failing entry.

    Returns:
        OperationOutcome for the change.

    Raises:
        UnknownIdentityError: If either name cannot be resolved.
        NotFoundError: If root does not exist.
        PermissionDeniedError: If the process may not change ownership.
    """
    credential = resolve_credential(username, groupname)
    logger.debug("Resolved %s to uid=%d gid=%d", credential, credential.uid, credential.gid)
    return _apply(Path(root), "chown", lambda node: _chown_node(node, credential), policy)


def _apply(
    root: Path,
    operation: str,
    change: Callable[[FileNode], None],
    policy: ErrorPolicy,
) -> OperationOutcome:
    outcome = OperationOutcome(operation, root)
    on_error: ErrorHandler | None = outcome.record if policy is ErrorPolicy.CONTINUE else None

    for node in scan(root, on_error=on_error):
        try:
            change(node)
        except TreeOpsError as e:
            report_error(e, on_error)
            continue
        outcome.visited += 1

    logger.debug(
        "%s applied to %d entries under %s (%d errors)",
        operation,
        outcome.visited,
        root,
        len(outcome.errors),
    )
    return outcome


def _chmod_node(node: FileNode, bits: int) -> None:
    if not node.is_symlink:
        try:
            os.chmod(node.path, bits)
        except OSError as e:
            raise translate_os_error(e, node.path) from e
        return

    if os.chmod not in os.supports_follow_symlinks:
        logger.debug("Leaving symlink mode unchanged: %s", node.path)
        return
    try:
        os.chmod(node.path, bits, follow_symlinks=False)
    except NotImplementedError:
        logger.debug("Leaving symlink mode unchanged: %s", node.path)
    except OSError as e:
        if e.errno in _UNSUPPORTED_ERRNOS:
            logger.debug("Leaving symlink mode unchanged: %s", node.path)
            return
        raise translate_os_error(e, node.path) from e


def _chown_node(node: FileNode, credential: Credential) -> None:
    if node.is_symlink and os.chown not in os.supports_follow_symlinks:
        logger.debug("Leaving symlink ownership unchanged: %s", node.path)
        return
    try:
        os.chown(
            node.path, credential.uid, credential.gid, follow_symlinks=not node.is_symlink
        )
    except OSError as e:
        raise translate_os_error(e, node.path) from e
