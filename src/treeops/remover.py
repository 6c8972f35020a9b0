"""Forceful recursive removal of a path."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path

from treeops.errors import translate_os_error
from treeops.scanner import ErrorHandler, report_error
from treeops.types import ErrorPolicy, OperationOutcome

__all__ = ["remove_tree"]

logger = logging.getLogger(__name__)


def remove_tree(
    root: str | os.PathLike[str],
    *,
    policy: ErrorPolicy = ErrorPolicy.ABORT,
) -> OperationOutcome:
    """Delete a path and, if it is a directory, everything beneath it.

    Removing a path that does not exist succeeds. Directories owned by the
    caller are made owner-writable before their entries are deleted, so
    restrictive permission bits do not block removal. Symbolic links are
    unlinked, never followed. Partial deletions are not rolled back.

    Args:
        root: Path to remove.
        policy: Whether to stop at the first entry that cannot be removed.

    Returns:
        OperationOutcome with the number of removed entries.

    Raises:
        PermissionDeniedError: If an entry cannot be removed for lack of
            privilege (under ErrorPolicy.ABORT).
        IOFailureError: For any other removal failure.
    """
    root_path = Path(root)
    outcome = OperationOutcome("remove", root_path)
    on_error: ErrorHandler | None = outcome.record if policy is ErrorPolicy.CONTINUE else None

    try:
        st = os.lstat(root_path)
    except FileNotFoundError:
        logger.debug("Nothing to remove at %s", root_path)
        return outcome
    except OSError as e:
        raise translate_os_error(e, root_path) from e

    _remove(root_path, st, outcome, on_error)
    logger.debug(
        "Removed %d entries under %s (%d errors)",
        outcome.visited,
        root_path,
        len(outcome.errors),
    )
    return outcome


@dataclass
class _Pending:
    """An entry waiting for removal, linked to its parent directory."""

    path: Path
    parent: _Pending | None
    st: os.stat_result | None = None
    expanded: bool = False
    incomplete: bool = False


def _remove(
    root: Path,
    st: os.stat_result,
    outcome: OperationOutcome,
    on_error: ErrorHandler | None,
) -> None:
    """Remove root bottom-up with an explicit stack.

    A directory is removed once its children have been popped. If any entry
    beneath it is left behind, the directory and its ancestors are kept.
    """
    stack = [_Pending(root, parent=None, st=st)]

    while stack:
        entry = stack[-1]
        try:
            if entry.st is None:
                entry.st = os.lstat(entry.path)
            is_dir = stat.S_ISDIR(entry.st.st_mode)
            if is_dir and not entry.expanded:
                _make_writable(entry.path, entry.st)
                with os.scandir(entry.path) as it:
                    children = [_Pending(Path(child.path), parent=entry) for child in it]
                entry.expanded = True
                stack.extend(children)
                continue

            stack.pop()
            if entry.incomplete:
                _mark_incomplete(entry.parent)
                continue
            if is_dir:
                os.rmdir(entry.path)
            else:
                os.unlink(entry.path)
        except FileNotFoundError:
            # Already gone
            _discard(stack, entry)
            continue
        except OSError as e:
            _discard(stack, entry)
            _mark_incomplete(entry.parent)
            report_error(translate_os_error(e, entry.path), on_error, cause=e)
            continue
        outcome.visited += 1


def _discard(stack: list[_Pending], entry: _Pending) -> None:
    if stack and stack[-1] is entry:
        stack.pop()


def _mark_incomplete(parent: _Pending | None) -> None:
    if parent is not None:
        parent.incomplete = True


def _make_writable(path: Path, st: os.stat_result) -> None:
    mode = stat.S_IMODE(st.st_mode)
    if mode & stat.S_IRWXU == stat.S_IRWXU:
        return
    if os.geteuid() not in (0, st.st_uid):
        return
    os.chmod(path, mode | stat.S_IRWXU)
