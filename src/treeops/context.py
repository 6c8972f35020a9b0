"""Application context for dependency injection.

Separates object creation from object use so CLI commands can be tested
with injected test doubles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from treeops.config import TreeOpsConfig, load_config
from treeops.protocols import TreeFileSystem


def _default_filesystem() -> TreeFileSystem:
    """Create the default filesystem implementation."""
    from treeops.filesystem import RealFileSystem

    return RealFileSystem()


@dataclass
class AppContext:
    """Container for application dependencies."""

    config: TreeOpsConfig = field(default_factory=TreeOpsConfig)
    filesystem: TreeFileSystem = field(default_factory=_default_filesystem)


def create_context(
    config_path: Path | None = None,
    config: TreeOpsConfig | None = None,
) -> AppContext:
    """Factory for application dependencies.

    Args:
        config_path: Override config file location.
        config: Ready-made configuration; takes precedence over config_path.

    Returns:
        Configured AppContext.
    """
    from treeops.filesystem import RealFileSystem

    config = config or load_config(config_path)
    return AppContext(config=config, filesystem=RealFileSystem(config))
