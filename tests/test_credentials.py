"""Tests for user and group resolution."""

from __future__ import annotations

import grp
import os
import pwd
from pathlib import Path

import pytest

from treeops import credentials
from treeops.credentials import (
    current_credential,
    get_file_credentials,
    lookup_gid,
    lookup_groupname,
    lookup_uid,
    lookup_username,
    resolve_credential,
)
from treeops.errors import NotFoundError, UnknownIdentityError


@pytest.fixture
def root_names() -> tuple[str, str]:
    """Names of uid 0 and gid 0 on this host."""
    return pwd.getpwuid(0).pw_name, grp.getgrgid(0).gr_name


class TestForwardLookup:
    """Tests for name to id resolution."""

    def test_lookup_uid(self, root_names: tuple[str, str]) -> None:
        """Test a known user resolves to its id."""
        assert lookup_uid(root_names[0]) == 0

    def test_lookup_gid(self, root_names: tuple[str, str]) -> None:
        """Test a known group resolves to its id."""
        assert lookup_gid(root_names[1]) == 0

    def test_unknown_user(self) -> None:
        """Test an unknown user raises UnknownIdentityError."""
        with pytest.raises(UnknownIdentityError, match="no-such-user-treeops"):
            lookup_uid("no-such-user-treeops")

    def test_unknown_group(self) -> None:
        """Test an unknown group raises UnknownIdentityError."""
        with pytest.raises(UnknownIdentityError, match="no-such-group-treeops"):
            lookup_gid("no-such-group-treeops")

    def test_resolve_credential(self, root_names: tuple[str, str]) -> None:
        """Test both names resolve into one Credential."""
        credential = resolve_credential(*root_names)

        assert credential.uid == 0
        assert credential.gid == 0
        assert str(credential) == f"{root_names[0]}:{root_names[1]}"

    def test_resolve_credential_unknown_group(self, root_names: tuple[str, str]) -> None:
        """Test one unknown name fails the whole resolution."""
        with pytest.raises(UnknownIdentityError):
            resolve_credential(root_names[0], "no-such-group-treeops")


class TestReverseLookup:
    """Tests for id to name resolution."""

    def test_lookup_username(self, root_names: tuple[str, str]) -> None:
        """Test uid 0 maps back to its name."""
        assert lookup_username(0) == root_names[0]

    def test_lookup_groupname(self, root_names: tuple[str, str]) -> None:
        """Test gid 0 maps back to its name."""
        assert lookup_groupname(0) == root_names[1]

    def test_dangling_uid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an id without a passwd entry raises UnknownIdentityError."""

        def missing(uid: int) -> None:
            raise KeyError(uid)

        monkeypatch.setattr(credentials.pwd, "getpwuid", missing)

        with pytest.raises(UnknownIdentityError, match="4242"):
            lookup_username(4242)

    def test_current_credential(self, current_names: tuple[str, str]) -> None:
        """Test the process identity is reported with names."""
        credential = current_credential()

        assert credential.uid == os.geteuid()
        assert credential.gid == os.getegid()
        assert (credential.username, credential.groupname) == current_names


class TestGetFileCredentials:
    """Tests for get_file_credentials."""

    def test_new_file(self, tmp_path: Path, current_names: tuple[str, str]) -> None:
        """Test a new file is owned by the current user and group."""
        path = tmp_path / "file.txt"
        path.write_text("x")

        assert get_file_credentials(path) == current_names

    def test_missing_path(self, tmp_path: Path) -> None:
        """Test a missing path raises NotFoundError."""
        with pytest.raises(NotFoundError):
            get_file_credentials(tmp_path / "missing")

    def test_dangling_owner(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an owner id with no name raises UnknownIdentityError with the path."""
        path = tmp_path / "file.txt"
        path.write_text("x")

        def missing(gid: int) -> None:
            raise KeyError(gid)

        monkeypatch.setattr(credentials.grp, "getgrgid", missing)

        with pytest.raises(UnknownIdentityError) as exc_info:
            get_file_credentials(path)

        assert exc_info.value.path == path
