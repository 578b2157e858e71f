"""Shared types and data structures for sqlarvault."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field

from sqlarvault.core.errors import (
    DirectoryAlreadyEmptyError,
    FileAlreadyExistsError,
    FileNotFoundInVaultError,
    InvalidDirectoryPathError,
    SqlarVaultError,
)

# Permission bits recorded for every entry
DEFAULT_MODE = 0o644

__all__ = [
    "ArchiveEntry",
    "CountResult",
    "DEFAULT_MODE",
    "DeleteResult",
    "ERROR_EXCEPTIONS",
    "ErrorKind",
    "FileListResult",
    "OperationResult",
    "RenameResult",
    "RetrieveResult",
    "SortDirection",
    "SortField",
    "StoreResult",
]


class ErrorKind(StrEnum):
    """Named failure outcomes of vault operations."""

    FILE_ALREADY_EXISTS = "FileAlreadyExists"
    FILE_NOT_FOUND = "FileNotFound"
    DIRECTORY_ALREADY_EMPTY = "DirectoryAlreadyEmpty"
    INVALID_DIRECTORY_PATH = "InvalidDirectoryPath"


ERROR_EXCEPTIONS: dict[ErrorKind, type[SqlarVaultError]] = {
    ErrorKind.FILE_ALREADY_EXISTS: FileAlreadyExistsError,
    ErrorKind.FILE_NOT_FOUND: FileNotFoundInVaultError,
    ErrorKind.DIRECTORY_ALREADY_EMPTY: DirectoryAlreadyEmptyError,
    ErrorKind.INVALID_DIRECTORY_PATH: InvalidDirectoryPathError,
}


class SortField(StrEnum):
    """Columns a listing may be ordered by."""

    NAME = "name"
    MTIME = "mtime"
    SIZE = "size"

    @classmethod
    def _missing_(cls, value: object) -> SortField | None:
        if isinstance(value, str):
            lower = value.lower()
            for member in cls:
                if member.value == lower:
                    return member
        return None


class SortDirection(StrEnum):
    """Ordering direction for listings."""

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def _missing_(cls, value: object) -> SortDirection | None:
        if isinstance(value, str):
            upper = value.upper()
            for member in cls:
                if member.value == upper:
                    return member
        return None


@dataclass(frozen=True)
class ArchiveEntry:
    """One stored file: metadata plus (optionally) its decompressed content."""

    key: str
    mode: int
    mtime: int
    sz: int
    data: bytes | None = None

    @property
    def file_name(self) -> str:
        """Last segment of the key."""
        return self.key.rsplit("/", 1)[-1]

    @property
    def directory(self) -> list[str]:
        """Directory segments leading to the file."""
        return [part for part in self.key.split("/")[:-1] if part]

    @property
    def modified_at(self) -> datetime:
        """Modification time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.mtime, tz=timezone.utc)


class OperationResult(BaseModel, frozen=True):
    """Outcome of a vault operation: success, or one named error."""

    success: bool = True
    error: ErrorKind | None = None
    message: str | None = None

    @classmethod
    def failure(cls, error: ErrorKind, message: str | None = None) -> Self:
        """Build a failed result carrying ``error``."""
        return cls(success=False, error=error, message=message)

    def raise_for_error(self) -> Self:
        """Raise the exception matching ``error``; return self on success."""
        if self.success or self.error is None:
            return self
        raise ERROR_EXCEPTIONS[self.error](self.message or self.error.value)


class StoreResult(OperationResult, frozen=True):
    """Result of storing a file."""

    file_name: str | None = None
    file_name_with_path: str | None = None


class RetrieveResult(OperationResult, frozen=True):
    """Result of retrieving a file."""

    file: ArchiveEntry | None = None


class RenameResult(OperationResult, frozen=True):
    """Result of renaming or moving a file."""

    old_file_name_with_path: str | None = None
    new_file_name_with_path: str | None = None


class FileListResult(OperationResult, frozen=True):
    """One page of a listing or search."""

    files: list[ArchiveEntry] = Field(default_factory=list)
    total_files: int = 0
    current_page: int = 1


class DeleteResult(OperationResult, frozen=True):
    """Result of a single or bulk deletion."""

    deleted: int = 0


class CountResult(OperationResult, frozen=True):
    """Total number of entries in the archive."""

    total_files: int = 0
