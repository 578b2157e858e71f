"""Content compression using the SQLite Archive conventions.

Data is zlib-deflated only when that makes it strictly smaller; otherwise the
raw bytes are stored. A blob whose length equals the recorded size is
therefore stored uncompressed. This keeps archives readable by ``sqlite3 -A``.
"""

import sqlite3
import zlib

from sqlarvault.core.errors import CorruptEntryError


def sqlar_compress(raw: bytes | None) -> bytes | None:
    """Compress ``raw`` if that saves space, else return it unchanged."""
    if raw is None:
        return None
    raw = bytes(raw)
    compressed = zlib.compress(raw)
    if len(compressed) < len(raw):
        return compressed
    return raw


def sqlar_uncompress(data: bytes | None, sz: int | None) -> bytes | None:
    """Restore the original bytes of a stored blob.

    Args:
        data: Blob as stored in the ``data`` column
        sz: Original (uncompressed) size recorded in ``sz``

    Raises:
        CorruptEntryError: If the blob does not inflate to ``sz`` bytes
    """
    if data is None or sz is None:
        return data
    data = bytes(data)
    if len(data) == sz:
        return data
    try:
        raw = zlib.decompress(data)
    except zlib.error as e:
        raise CorruptEntryError(f"Cannot decompress entry: {e}") from e
    if len(raw) != sz:
        raise CorruptEntryError(
            f"Decompressed size {len(raw)} does not match recorded size {sz}"
        )
    return raw


def register_functions(conn: sqlite3.Connection) -> None:
    """Expose the codec to SQL as ``sqlar_compress`` / ``sqlar_uncompress``."""
    conn.create_function("sqlar_compress", 1, sqlar_compress, deterministic=True)
    conn.create_function("sqlar_uncompress", 2, sqlar_uncompress, deterministic=True)
