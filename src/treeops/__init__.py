"""Tree-level filesystem operations: copy, chmod, chown and remove."""

__version__ = "0.1.0"

from treeops.copier import copy_tree
from treeops.credentials import get_file_credentials, resolve_credential
from treeops.errors import (
    IOFailureError,
    NotFoundError,
    PermissionDeniedError,
    TreeOpsError,
    UnknownIdentityError,
)
from treeops.permissions import chmod_tree, chown_tree
from treeops.remover import remove_tree
from treeops.scanner import scan
from treeops.types import (
    Credential,
    EntryKind,
    ErrorPolicy,
    FileNode,
    OperationOutcome,
    SymlinkPolicy,
)

__all__ = [
    "__version__",
    "Credential",
    "EntryKind",
    "ErrorPolicy",
    "FileNode",
    "IOFailureError",
    "NotFoundError",
    "OperationOutcome",
    "PermissionDeniedError",
    "SymlinkPolicy",
    "TreeOpsError",
    "UnknownIdentityError",
    "chmod_tree",
    "chown_tree",
    "copy_tree",
    "get_file_credentials",
    "remove_tree",
    "resolve_credential",
    "scan",
]
