"""Repository classes for data access."""

from sqlarvault.storage.repos.archive_repo import ArchiveRepo

__all__ = [
    "ArchiveRepo",
]
