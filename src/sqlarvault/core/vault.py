"""Vault - file archive stored in a single SQLite database.

Files are addressed by a list of directory segments plus a file name. The
Vault turns those into canonical keys, runs each operation as one statement
or one transaction, and reports named failures through result models rather
than exceptions.

Example:
    vault = Vault("~/archive.sqlar")
    await vault.store_file(["root", "images"], "logo.png", png_bytes)
    result = await vault.retrieve_file(["root", "images"], "logo.png")
    assert result.file.data == png_bytes
"""

import logging
import sqlite3
import time
from collections.abc import Sequence
from contextlib import contextmanager
from pathlib import Path
from threading import Lock
from typing import BinaryIO, Generator

from sqlarvault.core.config import DATABASE_PATH, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from sqlarvault.core.errors import StorageError, VaultClosedError
from sqlarvault.core.paths import (
    compose_key,
    compose_prefix,
    compose_search_pattern,
    is_root_scope,
)
from sqlarvault.core.types import (
    DEFAULT_MODE,
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
from sqlarvault.storage.db import connect, transaction
from sqlarvault.storage.repos import ArchiveRepo

logger = logging.getLogger(__name__)

Content = bytes | bytearray | memoryview | BinaryIO


def _read_content(content: Content) -> bytes:
    """Normalize a byte buffer or binary file object to bytes."""
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    read = getattr(content, "read", None)
    if callable(read):
        data = read()
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        raise TypeError(
            f"File object must be opened in binary mode, got {type(data).__name__}"
        )
    raise TypeError(f"Unsupported content type: {type(content).__name__}")


def _resolve_mtime(mtime: int | None) -> int:
    return int(time.time()) if mtime is None else int(mtime)


class Vault:
    """Virtual-directory file archive backed by one SQLite file."""

    def __init__(self, db_path: Path | str | None = None):
        """
        Open or create the archive.

        Args:
            db_path: Path to the archive file (defaults to DATABASE_PATH)
        """
        self.db_path = Path(db_path).expanduser() if db_path else DATABASE_PATH
        self._connection_lock = Lock()
        self._connection: sqlite3.Connection | None = connect(self.db_path)
        logger.info("Vault opened: %s", self.db_path)

    @contextmanager
    def _repo(self, write: bool = False) -> Generator[ArchiveRepo, None, None]:
        """Yield a repository bound to one transaction on the shared connection."""
        with self._connection_lock:
            if self._connection is None:
                raise VaultClosedError(f"Vault is closed: {self.db_path}")
            try:
                with transaction(self._connection, immediate=write) as conn:
                    yield ArchiveRepo(conn)
            except sqlite3.Error as e:
                raise StorageError(f"Storage failure on {self.db_path}: {e}") from e

    def close(self) -> None:
        """Close the archive connection."""
        with self._connection_lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
                logger.debug("Vault closed: %s", self.db_path)

    @property
    def closed(self) -> bool:
        return self._connection is None

    def __enter__(self) -> "Vault":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Vault({self.db_path})"

    # Single-entry operations

    async def store_file(
        self,
        directory: Sequence[str],
        file_name: str,
        content: Content,
        mtime: int | None = None,
    ) -> StoreResult:
        """
        Store a new file. Never overwrites.

        Args:
            directory: Directory segments, e.g. ["root", "images", "profile"]
            file_name: Name of the file, e.g. "profile.jpeg"
            content: Bytes or a binary file object
            mtime: Modification time in unix seconds (defaults to now)

        Returns:
            StoreResult with the canonical key, or FileAlreadyExists
        """
        key = compose_key(directory, file_name)
        data = _read_content(content)

        with self._repo(write=True) as repo:
            try:
                repo.insert(key, DEFAULT_MODE, _resolve_mtime(mtime), data)
            except sqlite3.IntegrityError:
                logger.debug("Store rejected, key exists: %s", key)
                return StoreResult.failure(ErrorKind.FILE_ALREADY_EXISTS, key)

        logger.debug("Stored %s (%d bytes)", key, len(data))
        return StoreResult(file_name=file_name, file_name_with_path=key)

    async def retrieve_file(
        self, directory: Sequence[str], file_name: str
    ) -> RetrieveResult:
        """
        Retrieve a file with its decompressed content.

        Returns:
            RetrieveResult with the entry, or FileNotFound
        """
        key = compose_key(directory, file_name)
        with self._repo() as repo:
            entry = repo.get(key)
        if entry is None:
            return RetrieveResult.failure(ErrorKind.FILE_NOT_FOUND, key)
        return RetrieveResult(file=entry)

    async def update_file(
        self,
        directory: Sequence[str],
        file_name: str,
        content: Content,
        mtime: int | None = None,
    ) -> StoreResult:
        """
        Replace the content of an existing file.

        Returns:
            StoreResult with the key, or FileNotFound
        """
        key = compose_key(directory, file_name)
        data = _read_content(content)

        with self._repo(write=True) as repo:
            updated = repo.update_content(key, _resolve_mtime(mtime), data)
        if not updated:
            return StoreResult.failure(ErrorKind.FILE_NOT_FOUND, key)

        logger.debug("Updated %s (%d bytes)", key, len(data))
        return StoreResult(file_name=file_name, file_name_with_path=key)

    async def rename_file(
        self,
        directory: Sequence[str],
        file_name: str,
        new_file_name: str,
        new_directory: Sequence[str] | None = None,
        mtime: int | None = None,
    ) -> RenameResult:
        """
        Rename a file, optionally moving it to another directory.

        The entry is relocated in place within one write transaction, so it is
        never visible at both keys or at neither.

        Args:
            directory: Current directory segments
            file_name: Current file name
            new_file_name: New file name
            new_directory: Destination directory (defaults to the current one)
            mtime: New modification time (defaults to now)

        Returns:
            RenameResult with both keys, or FileAlreadyExists / FileNotFound
        """
        old_key = compose_key(directory, file_name)
        new_key = compose_key(
            directory if new_directory is None else new_directory, new_file_name
        )

        with self._repo(write=True) as repo:
            if repo.exists(new_key):
                return RenameResult.failure(ErrorKind.FILE_ALREADY_EXISTS, new_key)
            if not repo.relocate(old_key, new_key, _resolve_mtime(mtime)):
                return RenameResult.failure(ErrorKind.FILE_NOT_FOUND, old_key)

        logger.debug("Renamed %s -> %s", old_key, new_key)
        return RenameResult(
            old_file_name_with_path=old_key,
            new_file_name_with_path=new_key,
        )

    async def delete_file(
        self, directory: Sequence[str], file_name: str
    ) -> DeleteResult:
        """
        Delete a single file.

        Returns:
            DeleteResult, or FileNotFound
        """
        key = compose_key(directory, file_name)
        with self._repo(write=True) as repo:
            deleted = repo.delete(key)
        if not deleted:
            return DeleteResult.failure(ErrorKind.FILE_NOT_FOUND, key)

        logger.debug("Deleted %s", key)
        return DeleteResult(deleted=1)

    # Listing and search

    async def list_files(
        self,
        directory: Sequence[str] = (),
        page_size: int | None = None,
        page: int = 1,
        order_by: SortField | str = SortField.NAME,
        order: SortDirection | str = SortDirection.ASC,
    ) -> FileListResult:
        """
        List one page of files below a directory (metadata only).

        Args:
            directory: Directory segments; empty lists the whole archive
            page_size: Entries per page (defaults to DEFAULT_PAGE_SIZE)
            page: 1-based page number; values below 1 mean the first page
            order_by: "name", "mtime" or "size"
            order: "ASC" or "DESC"

        Raises:
            ValueError: If page_size or the ordering is not allowed
        """
        return self._page(
            compose_prefix(directory), None, page_size, page, order_by, order
        )

    async def search_files(
        self,
        query: str,
        directory: Sequence[str] = (),
        page_size: int | None = None,
        page: int = 1,
        order_by: SortField | str = SortField.NAME,
        order: SortDirection | str = SortDirection.ASC,
    ) -> FileListResult:
        """
        Search for files whose key contains ``query``.

        An empty ``directory`` searches the whole archive; otherwise only the
        subtree is considered. Paging and ordering work as in list_files.
        """
        return self._page(
            compose_prefix(directory),
            compose_search_pattern(query),
            page_size,
            page,
            order_by,
            order,
        )

    def _page(
        self,
        prefix: str,
        contains: str | None,
        page_size: int | None,
        page: int,
        order_by: SortField | str,
        order: SortDirection | str,
    ) -> FileListResult:
        size = DEFAULT_PAGE_SIZE if page_size is None else int(page_size)
        if not 1 <= size <= MAX_PAGE_SIZE:
            raise ValueError(
                f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {size}"
            )
        sort_field = SortField(order_by)
        direction = SortDirection(order)
        current_page = max(int(page), 1)
        offset = (current_page - 1) * size

        with self._repo() as repo:
            total = repo.count(prefix, contains)
            files = repo.scan(
                prefix,
                contains,
                order_by=sort_field,
                direction=direction,
                limit=size,
                offset=offset,
            )

        return FileListResult(
            files=files,
            total_files=total,
            current_page=current_page,
        )

    # Bulk operations

    async def delete_directory(self, directory: Sequence[str]) -> DeleteResult:
        """
        Delete every file below a directory.

        Returns:
            DeleteResult with the number of removed files, InvalidDirectoryPath
            for an empty path, or DirectoryAlreadyEmpty if nothing matched
        """
        if is_root_scope(directory):
            return DeleteResult.failure(
                ErrorKind.INVALID_DIRECTORY_PATH,
                "Directory path is empty; use delete_all_files to clear the archive",
            )

        prefix = compose_prefix(directory)
        with self._repo(write=True) as repo:
            deleted = repo.delete_matching(prefix)
        if deleted == 0:
            return DeleteResult.failure(ErrorKind.DIRECTORY_ALREADY_EMPTY, prefix)

        logger.info("Deleted %d files matching %s", deleted, prefix)
        return DeleteResult(deleted=deleted)

    async def delete_all_files(self) -> DeleteResult:
        """Delete every file in the archive. Succeeds even when already empty."""
        with self._repo(write=True) as repo:
            deleted = repo.delete_all()

        logger.info("Deleted all %d files from %s", deleted, self.db_path)
        return DeleteResult(deleted=deleted)

    async def count_files(self) -> CountResult:
        """Count every file in the archive."""
        with self._repo() as repo:
            total = repo.count()
        return CountResult(total_files=total)
