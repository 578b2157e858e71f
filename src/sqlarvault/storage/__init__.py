"""Storage layer for sqlarvault - SQLite archive file and repositories."""

from sqlarvault.storage.db import connect, database_exists, init_db, transaction
from sqlarvault.storage.repos import ArchiveRepo

__all__ = [
    "connect",
    "database_exists",
    "init_db",
    "transaction",
    "ArchiveRepo",
]
