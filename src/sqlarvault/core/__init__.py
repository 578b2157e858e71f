"""sqlarvault core library - keys, types and the Vault facade."""

from typing import TYPE_CHECKING

from sqlarvault.core.types import (
    ArchiveEntry,
    ErrorKind,
    FileListResult,
    SortDirection,
    SortField,
)

if TYPE_CHECKING:
    from sqlarvault.core.vault import Vault

__all__ = [
    # Core classes
    "Vault",
    # Types
    "ArchiveEntry",
    "ErrorKind",
    "FileListResult",
    "SortDirection",
    "SortField",
]


def __getattr__(name: str):
    if name == "Vault":
        from sqlarvault.core.vault import Vault

        return Vault
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
