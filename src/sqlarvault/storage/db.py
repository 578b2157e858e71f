"""SQLite connection bootstrap for sqlar archives."""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlarvault.core.config import DATABASE_PATH
from sqlarvault.core.errors import StorageError
from sqlarvault.storage.codec import register_functions

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS sqlar(
    name TEXT PRIMARY KEY,  -- name of the file
    mode INT,               -- access permissions
    mtime INT,              -- last modification time
    sz INT,                 -- original file size
    data BLOB               -- compressed content
);
"""


def database_exists(db_path: Path | str) -> bool:
    """Check whether an archive file is already present on disk."""
    return str(db_path) != MEMORY_DB and Path(db_path).expanduser().is_file()


def connect(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Open (or create) an archive and return a configured connection.

    The connection runs in autocommit mode; callers group statements with
    :func:`transaction`. WAL journaling is enabled, LIKE is made case
    sensitive, the codec functions are registered and the schema is created
    if missing. Safe to call repeatedly on the same path.

    Args:
        db_path: Path to the archive (defaults to DATABASE_PATH)

    Raises:
        StorageError: If the file cannot be opened or initialized
    """
    target = str(db_path) if db_path is not None else str(DATABASE_PATH)
    if target != MEMORY_DB:
        path = Path(target).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        target = str(path)

    try:
        conn = sqlite3.connect(target, check_same_thread=False, isolation_level=None)
    except sqlite3.Error as e:
        raise StorageError(f"Cannot open archive {target}: {e}") from e

    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA case_sensitive_like=ON")
        register_functions(conn)
        conn.executescript(SCHEMA_SQL)
    except sqlite3.Error as e:
        conn.close()
        raise StorageError(f"Cannot initialize archive {target}: {e}") from e

    logger.debug("Opened archive %s", target)
    return conn


def init_db(db_path: Path | str | None = None) -> None:
    """
    Initialize an archive file with the sqlar schema.

    Args:
        db_path: Path to the archive (defaults to DATABASE_PATH)
    """
    conn = connect(db_path)
    try:
        logger.info("Archive ready: %s", db_path or DATABASE_PATH)
    finally:
        conn.close()


@contextmanager
def transaction(
    conn: sqlite3.Connection, immediate: bool = False
) -> Generator[sqlite3.Connection, None, None]:
    """
    Run a block inside one explicit transaction.

    Args:
        conn: Autocommit connection from :func:`connect`
        immediate: Take the write lock up front (BEGIN IMMEDIATE)

    Yields:
        The same connection; committed on success, rolled back on error
    """
    conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
    try:
        yield conn
        conn.commit()
    except BaseException:
        # A failed COMMIT leaves the transaction open
        if conn.in_transaction:
            conn.rollback()
        raise
