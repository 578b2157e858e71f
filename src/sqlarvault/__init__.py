"""sqlarvault - a virtual-directory file archive in a single SQLite file."""

from sqlarvault.core.errors import (
    CorruptEntryError,
    DirectoryAlreadyEmptyError,
    FileAlreadyExistsError,
    FileNotFoundInVaultError,
    InvalidDirectoryPathError,
    SqlarVaultError,
    StorageError,
    VaultClosedError,
)
from sqlarvault.core.paths import compose_key, compose_prefix, sanitize_path
from sqlarvault.core.types import (
    ArchiveEntry,
    CountResult,
    DeleteResult,
    ErrorKind,
    FileListResult,
    RenameResult,
    RetrieveResult,
    SortDirection,
    SortField,
    StoreResult,
)
from sqlarvault.core.vault import Vault

__version__ = "0.1.0"

__all__ = [
    "Vault",
    # Keys
    "compose_key",
    "compose_prefix",
    "sanitize_path",
    # Types
    "ArchiveEntry",
    "CountResult",
    "DeleteResult",
    "ErrorKind",
    "FileListResult",
    "RenameResult",
    "RetrieveResult",
    "SortDirection",
    "SortField",
    "StoreResult",
    # Exceptions
    "SqlarVaultError",
    "FileAlreadyExistsError",
    "FileNotFoundInVaultError",
    "DirectoryAlreadyEmptyError",
    "InvalidDirectoryPathError",
    "VaultClosedError",
    "StorageError",
    "CorruptEntryError",
]
