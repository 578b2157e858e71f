"""Tests for sqlarvault.storage.repos.archive_repo module."""

import os
import sqlite3

import pytest

from sqlarvault.core.paths import compose_prefix, compose_search_pattern
from sqlarvault.core.types import DEFAULT_MODE, SortDirection, SortField
from sqlarvault.storage.db import connect
from sqlarvault.storage.repos import ArchiveRepo


@pytest.fixture
def repo(db_path):
    """ArchiveRepo over a fresh archive connection."""
    conn = connect(db_path)
    yield ArchiveRepo(conn)
    conn.close()


@pytest.fixture
def seeded_repo(repo):
    """Repo with a handful of entries in two directories."""
    repo.insert("/docs/b.txt", DEFAULT_MODE, 300, b"bb")
    repo.insert("/docs/a.txt", DEFAULT_MODE, 100, b"aaaa")
    repo.insert("/docs/c.txt", DEFAULT_MODE, 200, b"c")
    repo.insert("/img/logo.png", DEFAULT_MODE, 50, os.urandom(32))
    return repo


class TestArchiveRepoWrites:
    """Tests for insert/get/update/relocate/delete."""

    def test_insert_and_get(self, repo):
        content = b"hello " * 100
        repo.insert("/a/hello.txt", DEFAULT_MODE, 123, content)

        entry = repo.get("/a/hello.txt")

        assert entry is not None
        assert entry.key == "/a/hello.txt"
        assert entry.mode == 0o644
        assert entry.mtime == 123
        assert entry.sz == len(content)
        assert entry.data == content

    def test_stored_blob_is_compressed(self, repo):
        content = b"z" * 10_000
        repo.insert("/big.txt", DEFAULT_MODE, 1, content)

        row = repo.conn.execute(
            "SELECT length(data) FROM sqlar WHERE name = '/big.txt'"
        ).fetchone()

        assert row[0] < len(content)

    def test_insert_duplicate_raises_integrity_error(self, repo):
        repo.insert("/a.txt", DEFAULT_MODE, 1, b"first")

        with pytest.raises(sqlite3.IntegrityError):
            repo.insert("/a.txt", DEFAULT_MODE, 2, b"second")

        assert repo.get("/a.txt").data == b"first"

    def test_get_missing_returns_none(self, repo):
        assert repo.get("/missing.txt") is None

    def test_exists(self, seeded_repo):
        assert seeded_repo.exists("/docs/a.txt") is True
        assert seeded_repo.exists("/docs/zzz.txt") is False

    def test_update_content(self, seeded_repo):
        assert seeded_repo.update_content("/docs/a.txt", 999, b"new body") is True

        entry = seeded_repo.get("/docs/a.txt")
        assert entry.data == b"new body"
        assert entry.sz == 8
        assert entry.mtime == 999

    def test_update_missing_returns_false(self, repo):
        assert repo.update_content("/nope", 1, b"x") is False

    def test_relocate(self, seeded_repo):
        assert seeded_repo.relocate("/docs/a.txt", "/archive/a.txt", 777) is True

        assert seeded_repo.get("/docs/a.txt") is None
        moved = seeded_repo.get("/archive/a.txt")
        assert moved.data == b"aaaa"
        assert moved.mtime == 777

    def test_relocate_missing_returns_false(self, repo):
        assert repo.relocate("/nope", "/still-nope", 1) is False

    def test_delete(self, seeded_repo):
        assert seeded_repo.delete("/docs/a.txt") is True
        assert seeded_repo.delete("/docs/a.txt") is False

    def test_delete_matching_is_scoped(self, seeded_repo):
        deleted = seeded_repo.delete_matching(compose_prefix(["docs"]))

        assert deleted == 3
        assert seeded_repo.count() == 1

    def test_delete_all(self, seeded_repo):
        assert seeded_repo.delete_all() == 4
        assert seeded_repo.count() == 0


class TestArchiveRepoScan:
    """Tests for count/scan ordering and pagination."""

    def test_count_with_prefix(self, seeded_repo):
        assert seeded_repo.count() == 4
        assert seeded_repo.count(compose_prefix(["docs"])) == 3
        assert seeded_repo.count(compose_prefix(["nothing"])) == 0

    def test_count_with_search(self, seeded_repo):
        assert seeded_repo.count(contains=compose_search_pattern(".txt")) == 3
        assert (
            seeded_repo.count(
                compose_prefix(["img"]), compose_search_pattern(".txt")
            )
            == 0
        )

    @pytest.mark.parametrize(
        "order_by,direction,expected",
        [
            (SortField.NAME, SortDirection.ASC, ["a.txt", "b.txt", "c.txt"]),
            (SortField.NAME, SortDirection.DESC, ["c.txt", "b.txt", "a.txt"]),
            (SortField.MTIME, SortDirection.ASC, ["a.txt", "c.txt", "b.txt"]),
            (SortField.MTIME, SortDirection.DESC, ["b.txt", "c.txt", "a.txt"]),
            (SortField.SIZE, SortDirection.ASC, ["c.txt", "b.txt", "a.txt"]),
            (SortField.SIZE, SortDirection.DESC, ["a.txt", "b.txt", "c.txt"]),
        ],
    )
    def test_scan_ordering(self, seeded_repo, order_by, direction, expected):
        entries = seeded_repo.scan(
            compose_prefix(["docs"]),
            order_by=order_by,
            direction=direction,
            limit=10,
        )

        assert [e.file_name for e in entries] == expected

    def test_scan_returns_metadata_only(self, seeded_repo):
        entries = seeded_repo.scan(limit=10)

        assert len(entries) == 4
        assert all(e.data is None for e in entries)

    def test_scan_limit_and_offset(self, seeded_repo):
        first = seeded_repo.scan(limit=2, offset=0)
        second = seeded_repo.scan(limit=2, offset=2)

        assert [e.key for e in first] == ["/docs/a.txt", "/docs/b.txt"]
        assert [e.key for e in second] == ["/docs/c.txt", "/img/logo.png"]

    def test_scan_ties_broken_by_name(self, repo):
        for name in ("c", "a", "b"):
            repo.insert(f"/same/{name}", DEFAULT_MODE, 10, b"x")

        entries = repo.scan(
            compose_prefix(["same"]),
            order_by=SortField.MTIME,
            direction=SortDirection.DESC,
            limit=10,
        )

        assert [e.file_name for e in entries] == ["a", "b", "c"]

    def test_scan_accepts_plain_strings(self, seeded_repo):
        entries = seeded_repo.scan(order_by="size", direction="DESC", limit=1)

        assert entries[0].key == "/img/logo.png"

    def test_scan_rejects_unknown_column(self, seeded_repo):
        with pytest.raises(ValueError):
            seeded_repo.scan(order_by="name; DROP TABLE sqlar", limit=1)

        assert seeded_repo.count() == 4

    def test_prefix_does_not_match_sibling_with_longer_name(self, repo):
        repo.insert("/a/x", DEFAULT_MODE, 1, b"1")
        repo.insert("/ab/x", DEFAULT_MODE, 1, b"2")

        entries = repo.scan(compose_prefix(["a"]), limit=10)

        assert [e.key for e in entries] == ["/a/x"]

    def test_underscore_in_prefix_is_literal(self, repo):
        repo.insert("/a_b/x", DEFAULT_MODE, 1, b"1")
        repo.insert("/aXb/x", DEFAULT_MODE, 1, b"2")

        assert repo.count(compose_prefix(["a_b"])) == 1
        assert repo.delete_matching(compose_prefix(["a_b"])) == 1
        assert repo.exists("/aXb/x") is True
