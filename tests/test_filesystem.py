"""Tests for the filesystem service."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from treeops.config import TreeOpsConfig
from treeops.errors import IOFailureError, NotFoundError
from treeops.filesystem import RealFileSystem
from treeops.protocols import TreeFileSystem
from treeops.types import ErrorPolicy, SymlinkPolicy


class TestRealFileSystem:
    """Tests for RealFileSystem implementation."""

    def test_satisfies_protocol(self) -> None:
        """Test RealFileSystem is a TreeFileSystem."""
        assert isinstance(RealFileSystem(), TreeFileSystem)

    def test_copy(self, tmp_path: Path, sample_tree: Path) -> None:
        """Test copying a directory tree."""
        fs = RealFileSystem()
        dst_dir = tmp_path / "destination"

        outcome = fs.copy(dst_dir, sample_tree)

        assert outcome.success
        assert (dst_dir / "1.test").read_text() == "test1"
        assert (dst_dir / "test1" / "test2a" / "3.test").read_text() == "test3"

    def test_copy_uses_configured_link_policy(self, tmp_path: Path) -> None:
        """Test the configured symlink policy is applied."""
        fs = RealFileSystem(TreeOpsConfig(symlinks=SymlinkPolicy.REJECT))
        src_dir = tmp_path / "source"
        src_dir.mkdir()
        (src_dir / "link").symlink_to("anywhere")

        with pytest.raises(IOFailureError):
            fs.copy(tmp_path / "destination", src_dir)

    def test_chmod(self, sample_tree: Path) -> None:
        """Test applying a mode to a tree."""
        fs = RealFileSystem()

        fs.chmod(sample_tree, 0o700)

        assert stat.S_IMODE((sample_tree / "test1" / "2.test").stat().st_mode) == 0o700

    def test_chown_self(self, sample_tree: Path, current_names: tuple[str, str]) -> None:
        """Test applying the caller's own identity to a tree."""
        fs = RealFileSystem()

        outcome = fs.chown(sample_tree, *current_names)

        assert outcome.success
        assert fs.get_file_credentials(sample_tree / "test3") == current_names

    def test_remove(self, sample_tree: Path) -> None:
        """Test removing a directory tree."""
        fs = RealFileSystem()

        fs.remove(sample_tree)

        assert not sample_tree.exists()

    def test_remove_missing(self, tmp_path: Path) -> None:
        """Test removing a missing path succeeds."""
        fs = RealFileSystem()

        assert fs.remove(tmp_path / "missing").visited == 0

    def test_get_file_credentials_missing(self, tmp_path: Path) -> None:
        """Test credentials of a missing path raise NotFoundError."""
        fs = RealFileSystem()

        with pytest.raises(NotFoundError):
            fs.get_file_credentials(tmp_path / "missing")

    def test_scan(self, sample_tree: Path, sample_entries: set[str]) -> None:
        """Test scanning yields every entry."""
        fs = RealFileSystem()

        visited = {node.relative_to(sample_tree).as_posix() for node in fs.scan(sample_tree)}

        assert visited == sample_entries

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read any file")
    def test_configured_continue_policy(self, tmp_path: Path, sample_tree: Path) -> None:
        """Test the configured error policy is applied."""
        fs = RealFileSystem(TreeOpsConfig(on_error=ErrorPolicy.CONTINUE))
        (sample_tree / "1.test").chmod(0o000)

        outcome = fs.copy(tmp_path / "destination", sample_tree)

        assert len(outcome.errors) == 1
        assert (tmp_path / "destination" / "test1" / "2.test").exists()

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read any file")
    def test_policy_argument_overrides_config(self, tmp_path: Path, sample_tree: Path) -> None:
        """Test a per-call error policy takes precedence over the configured one."""
        fs = RealFileSystem(TreeOpsConfig(on_error=ErrorPolicy.ABORT))
        (sample_tree / "1.test").chmod(0o000)

        outcome = fs.copy(tmp_path / "destination", sample_tree, policy=ErrorPolicy.CONTINUE)

        assert len(outcome.errors) == 1
        assert (tmp_path / "destination" / "test1" / "2.test").exists()
