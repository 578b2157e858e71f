"""Exceptions raised by sqlarvault."""


class SqlarVaultError(Exception):
    """Base exception for vault operations."""

    pass


class FileAlreadyExistsError(SqlarVaultError):
    """Raised when a store or rename targets a key that is already present."""

    pass


class FileNotFoundInVaultError(SqlarVaultError):
    """Raised when an operation references a key absent from the archive."""

    pass


class DirectoryAlreadyEmptyError(SqlarVaultError):
    """Raised when a directory deletion matched nothing."""

    pass


class InvalidDirectoryPathError(DirectoryAlreadyEmptyError):
    """Raised when a directory deletion was given an empty path."""

    pass


class VaultClosedError(SqlarVaultError):
    """Raised when a closed vault is used."""

    pass


class StorageError(SqlarVaultError):
    """Unrecoverable fault from the underlying SQLite engine."""

    pass


class CorruptEntryError(StorageError):
    """Raised when stored content cannot be decompressed to its recorded size."""

    pass
