"""Configuration management for sqlarvault."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# Data directory (XDG-style, defaults to ~/.sqlarvault)
SQLARVAULT_DATA_DIR = Path(
    get_env("SQLARVAULT_DATA_DIR", os.path.expanduser("~/.sqlarvault"))
    or os.path.expanduser("~/.sqlarvault")
)

# Archive path
DATABASE_PATH = Path(
    get_env("SQLARVAULT_DB", str(SQLARVAULT_DATA_DIR / "vault.sqlar"))
    or SQLARVAULT_DATA_DIR / "vault.sqlar"
).expanduser()

# Pagination
DEFAULT_PAGE_SIZE = get_env_int("SQLARVAULT_PAGE_SIZE", 20)
MAX_PAGE_SIZE = get_env_int("SQLARVAULT_MAX_PAGE_SIZE", 1000)

# Logging
LOG_LEVEL = get_env("SQLARVAULT_LOG_LEVEL", "INFO") or "INFO"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure and return logger."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
    )
    return logging.getLogger("sqlarvault")
