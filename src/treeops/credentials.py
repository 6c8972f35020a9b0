"""User and group resolution against the host identity database.

All functions are stateless lookups through :mod:`pwd` and :mod:`grp`;
nothing is cached between calls.
"""

from __future__ import annotations

import grp
import os
import pwd

from treeops.errors import UnknownIdentityError, translate_os_error
from treeops.types import Credential

__all__ = [
    "current_credential",
    "get_file_credentials",
    "lookup_gid",
    "lookup_groupname",
    "lookup_uid",
    "lookup_username",
    "resolve_credential",
]


def lookup_uid(username: str) -> int:
    """Resolve a user name to its numeric id.

    Raises:
        UnknownIdentityError: If the user does not exist.
    """
    try:
        return pwd.getpwnam(username).pw_uid
    except KeyError as e:
        raise UnknownIdentityError(f"Unknown user '{username}'") from e


def lookup_gid(groupname: str) -> int:
    """Resolve a group name to its numeric id.

    Raises:
        UnknownIdentityError: If the group does not exist.
    """
    try:
        return grp.getgrnam(groupname).gr_gid
    except KeyError as e:
        raise UnknownIdentityError(f"Unknown group '{groupname}'") from e


def lookup_username(uid: int) -> str:
    """Resolve a numeric user id to its name.

    Raises:
        UnknownIdentityError: If no user has this id.
    """
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError as e:
        raise UnknownIdentityError(f"No user name for uid {uid}") from e


def lookup_groupname(gid: int) -> str:
    """Resolve a numeric group id to its name.

    Raises:
        UnknownIdentityError: If no group has this id.
    """
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError as e:
        raise UnknownIdentityError(f"No group name for gid {gid}") from e


def resolve_credential(username: str, groupname: str) -> Credential:
    """Resolve a user and group name pair to numeric ids.

    Args:
        username: User name to resolve.
        groupname: Group name to resolve.

    Returns:
        Credential with both ids and names.

    Raises:
        UnknownIdentityError: If either name cannot be resolved.
    """
    return Credential(
        uid=lookup_uid(username),
        gid=lookup_gid(groupname),
        username=username,
        groupname=groupname,
    )


def current_credential() -> Credential:
    """Return the effective identity of the running process."""
    uid = os.geteuid()
    gid = os.getegid()
    return Credential(
        uid=uid,
        gid=gid,
        username=lookup_username(uid),
        groupname=lookup_groupname(gid),
    )


def get_file_credentials(path: str | os.PathLike[str]) -> tuple[str, str]:
    """Return the owner and group names of a path.

    Symbolic links are not followed; the link's own ownership is reported.

    Args:
        path: Path to inspect.

    Returns:
        Tuple of (username, groupname).

    Raises:
        NotFoundError: If the path does not exist.
        UnknownIdentityError: If the owner or group id has no name.
    """
    try:
        st = os.lstat(path)
    except OSError as e:
        raise translate_os_error(e, path) from e
    try:
        return lookup_username(st.st_uid), lookup_groupname(st.st_gid)
    except UnknownIdentityError as e:
        raise UnknownIdentityError(e.message, path) from e
