"""Shared test fixtures."""

from __future__ import annotations

import os
import grp
import pwd
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from treeops.context import AppContext


# ============================================================================
# Tree Fixtures
# ============================================================================

SAMPLE_FILES = {
    "1.test": "test1",
    "test1/2.test": "test2",
    "test1/test2a/3.test": "test3",
}

SAMPLE_ENTRIES = {
    ".",
    "1.test",
    "test1",
    "test1/2.test",
    "test1/test2a",
    "test1/test2a/3.test",
    "test1/test2b",
    "test3",
}


def build_tree(base: Path) -> Path:
    """Create the sample tree under base and return base."""
    (base / "test1" / "test2a").mkdir(parents=True)
    (base / "test1" / "test2b").mkdir(parents=True)
    (base / "test3").mkdir(parents=True)
    for rel, content in SAMPLE_FILES.items():
        (base / rel).write_text(content)
    return base


def relative_entries(root: Path) -> set[str]:
    """Return every path under root, relative to root, including root as '.'."""
    entries = {"."}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            entries.add((Path(dirpath) / name).relative_to(root).as_posix())
    return entries


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create the sample tree in a fresh directory."""
    return build_tree(tmp_path / "source")


@pytest.fixture
def sample_entries() -> set[str]:
    """Relative paths of every entry in the sample tree."""
    return set(SAMPLE_ENTRIES)


@pytest.fixture
def sample_files() -> dict[str, str]:
    """Relative paths and contents of the sample tree's files."""
    return dict(SAMPLE_FILES)


@pytest.fixture
def list_entries():
    """Return a function listing a tree's entries relative to its root."""
    return relative_entries


@pytest.fixture
def current_names() -> tuple[str, str]:
    """User and group names a freshly created file gets."""
    try:
        username = pwd.getpwuid(os.geteuid()).pw_name
        groupname = grp.getgrgid(os.getegid()).gr_name
    except KeyError:
        pytest.skip("effective uid or gid has no name")
    return username, groupname


# ============================================================================
# Mock Context Fixture
# ============================================================================


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock TreeFileSystem.

    The mock records operations without touching real files.
    """
    return MagicMock()


@pytest.fixture
def mock_context(mock_filesystem: MagicMock) -> AppContext:
    """Create an AppContext holding the mock filesystem."""
    return AppContext(filesystem=mock_filesystem)
