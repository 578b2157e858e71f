"""Mapping between directory segments and archive keys.

Directories are virtual: an entry's key is ``/seg1/seg2/.../file_name`` and a
directory is simply the set of keys sharing a leading prefix. Everything here
is pure and never raises.
"""

import re
from collections.abc import Sequence

# Characters that would introduce extra hierarchy levels inside a segment
_SEPARATOR_RE = re.compile(r"[/\\\s]")

# Escape character used in every LIKE pattern built here
LIKE_ESCAPE = "\\"

MATCH_ALL = "%"


def sanitize_path(segments: Sequence[str]) -> list[str]:
    """Normalize raw directory segments into safe path components.

    Blank segments are dropped; the rest are stripped and every ``/``,
    backslash or whitespace character becomes ``_``. Order is preserved.
    """
    return [
        _SEPARATOR_RE.sub("_", segment.strip())
        for segment in segments
        if segment.strip()
    ]


def compose_key(segments: Sequence[str], file_name: str) -> str:
    """Build the canonical key for ``file_name`` inside ``segments``."""
    joined = "/".join(sanitize_path(segments))
    if not joined:
        return f"/{file_name}"
    return f"/{joined}/{file_name}"


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters so ``value`` matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def compose_prefix(segments: Sequence[str]) -> str:
    """Build the LIKE pattern matching every key below ``segments``.

    An empty scope yields ``%`` (the whole archive). Literal wildcards in the
    segments are escaped, so the pattern must be used with ``ESCAPE '\\'``.
    """
    joined = "/".join(sanitize_path(segments))
    if not joined:
        return MATCH_ALL
    return f"/{escape_like(joined)}/%"


def compose_search_pattern(query: str) -> str:
    """Build the LIKE pattern matching keys that contain ``query``."""
    return f"%{escape_like(query)}%"


def is_root_scope(segments: Sequence[str]) -> bool:
    """True when ``segments`` sanitize to nothing."""
    return not sanitize_path(segments)


def split_key(key: str) -> tuple[list[str], str]:
    """Split a key or slash-separated path into (segments, file_name)."""
    parts = [part for part in key.split("/") if part]
    if not parts:
        return [], ""
    return parts[:-1], parts[-1]
