"""Archive repository - pure data access over the sqlar table."""

import sqlite3

from sqlarvault.core.paths import LIKE_ESCAPE, MATCH_ALL
from sqlarvault.core.types import ArchiveEntry, SortDirection, SortField
from sqlarvault.storage.codec import sqlar_uncompress

# Only these fragments ever reach an ORDER BY clause
ORDER_COLUMNS = {
    SortField.NAME: "name",
    SortField.MTIME: "mtime",
    SortField.SIZE: "sz",
}
ORDER_DIRECTIONS = {
    SortDirection.ASC: "ASC",
    SortDirection.DESC: "DESC",
}

_ESCAPE_CLAUSE = f"ESCAPE '{LIKE_ESCAPE}'"


class ArchiveRepo:
    """Repository for archive entry data access."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize archive repository.

        Args:
            conn: SQLite connection from storage.db.connect
        """
        self.conn = conn

    def exists(self, key: str) -> bool:
        """Check whether an entry with this key is present."""
        row = self.conn.execute(
            "SELECT 1 FROM sqlar WHERE name = ?",
            (key,),
        ).fetchone()
        return row is not None

    def insert(self, key: str, mode: int, mtime: int, data: bytes) -> None:
        """Insert a new entry; raises sqlite3.IntegrityError if the key exists."""
        self.conn.execute(
            """
            INSERT INTO sqlar (name, mode, mtime, sz, data)
            VALUES (?, ?, ?, ?, sqlar_compress(?))
            """,
            (key, mode, mtime, len(data), data),
        )

    def get(self, key: str) -> ArchiveEntry | None:
        """Get an entry with its decompressed content."""
        row = self.conn.execute(
            "SELECT name, mode, mtime, sz, data FROM sqlar WHERE name = ?",
            (key,),
        ).fetchone()
        if row:
            return ArchiveEntry(
                key=row["name"],
                mode=row["mode"],
                mtime=row["mtime"],
                sz=row["sz"],
                data=sqlar_uncompress(row["data"], row["sz"]),
            )
        return None

    def update_content(self, key: str, mtime: int, data: bytes) -> bool:
        """Replace the content of an entry. Returns False if it doesn't exist."""
        cursor = self.conn.execute(
            """
            UPDATE sqlar
            SET mtime = ?, sz = ?, data = sqlar_compress(?)
            WHERE name = ?
            """,
            (mtime, len(data), data, key),
        )
        return cursor.rowcount > 0

    def relocate(self, old_key: str, new_key: str, mtime: int) -> bool:
        """Move an entry to a new key in place. Returns False if it doesn't exist."""
        cursor = self.conn.execute(
            "UPDATE sqlar SET name = ?, mtime = ? WHERE name = ?",
            (new_key, mtime, old_key),
        )
        return cursor.rowcount > 0

    def delete(self, key: str) -> bool:
        """Delete a single entry. Returns False if it doesn't exist."""
        cursor = self.conn.execute("DELETE FROM sqlar WHERE name = ?", (key,))
        return cursor.rowcount > 0

    def delete_matching(self, prefix: str) -> int:
        """Delete every entry whose key matches a LIKE prefix pattern."""
        cursor = self.conn.execute(
            f"DELETE FROM sqlar WHERE name LIKE ? {_ESCAPE_CLAUSE}",
            (prefix,),
        )
        return cursor.rowcount

    def delete_all(self) -> int:
        """Delete every entry."""
        cursor = self.conn.execute("DELETE FROM sqlar")
        return cursor.rowcount

    def count(self, prefix: str = MATCH_ALL, contains: str | None = None) -> int:
        """Count entries under a prefix, optionally filtered by a second pattern."""
        where, params = self._where(prefix, contains)
        row = self.conn.execute(
            f"SELECT COUNT(*) FROM sqlar{where}",
            params,
        ).fetchone()
        return row[0] if row else 0

    def scan(
        self,
        prefix: str = MATCH_ALL,
        contains: str | None = None,
        *,
        order_by: SortField = SortField.NAME,
        direction: SortDirection = SortDirection.ASC,
        limit: int,
        offset: int = 0,
    ) -> list[ArchiveEntry]:
        """Get one page of entry metadata (no content), ordered and paginated."""
        column = ORDER_COLUMNS[SortField(order_by)]
        order = ORDER_DIRECTIONS[SortDirection(direction)]
        where, params = self._where(prefix, contains)

        # name is unique, so it makes the ordering total
        order_clause = f"{column} {order}"
        if column != "name":
            order_clause += ", name ASC"

        rows = self.conn.execute(
            f"""
            SELECT name, mode, mtime, sz FROM sqlar{where}
            ORDER BY {order_clause}
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()
        return [
            ArchiveEntry(
                key=row["name"],
                mode=row["mode"],
                mtime=row["mtime"],
                sz=row["sz"],
            )
            for row in rows
        ]

    @staticmethod
    def _where(prefix: str, contains: str | None) -> tuple[str, tuple[str, ...]]:
        clauses: list[str] = []
        params: list[str] = []
        if prefix != MATCH_ALL:
            clauses.append(f"name LIKE ? {_ESCAPE_CLAUSE}")
            params.append(prefix)
        if contains is not None:
            clauses.append(f"name LIKE ? {_ESCAPE_CLAUSE}")
            params.append(contains)
        if not clauses:
            return "", ()
        return " WHERE " + " AND ".join(clauses), tuple(params)
