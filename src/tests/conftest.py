"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest
import pytest_asyncio

from sqlarvault.core.vault import Vault

LETTERS = "abcdefghijklmnopqrstuvxyz"  # 25 letters, no "w"

HELLO_TEXT = (
    "Hello World!\nLoremIpsum\nNeque porro quisquam est qui dolorem ipsum "
    "quia dolor sit amet, consectetur, adipisci velit..."
)


@pytest.fixture
def db_path(tmp_path):
    """Provide an isolated archive path for one test."""
    return tmp_path / "test.sqlar"


@pytest.fixture
def vault(db_path):
    """Create a Vault on a temporary archive, closed on teardown."""
    v = Vault(db_path)
    yield v
    v.close()


@pytest.fixture
def mock_env(monkeypatch, tmp_path):
    """Set up mock environment variables."""
    env_vars = {
        "SQLARVAULT_DATA_DIR": str(tmp_path / "data"),
        "SQLARVAULT_DB": str(tmp_path / "data" / "env.sqlar"),
        "SQLARVAULT_PAGE_SIZE": "5",
        "SQLARVAULT_LOG_LEVEL": "DEBUG",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def text_files():
    """Twenty-five small text files named a_hello.txt .. z_hello.txt (no w)."""
    return [
        (f"{letter}_hello.txt", f"{letter}: {HELLO_TEXT}".encode())
        for letter in LETTERS
    ]


@pytest_asyncio.fixture
async def populated_vault(vault, text_files):
    """Vault holding the text files under root/text with increasing mtimes."""
    base = 1_700_000_000
    for i, (file_name, content) in enumerate(text_files):
        await vault.store_file(
            ["root", "text"], file_name, content, mtime=base + 2 * i + 1
        )
    return vault
