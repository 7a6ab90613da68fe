"""Application configuration and constants."""
import os
from pathlib import Path


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_float_env(name: str, default: float) -> float:
    """Parse float from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# Database
DB_DIR = Path(os.environ.get("DB_DIR", Path.cwd() / "data"))
DB_DIR.mkdir(parents=True, exist_ok=True)
DATABASE_URL = os.environ.get(
    "DATABASE_URL", f"sqlite:///{DB_DIR / 'exam_engine.db'}"
)

# Storage retries (transient transport errors only)
STORAGE_RETRY_ATTEMPTS = _parse_int_env("STORAGE_RETRY_ATTEMPTS", 3)
STORAGE_RETRY_WAIT_SECONDS = _parse_float_env("STORAGE_RETRY_WAIT_SECONDS", 0.1)
STORAGE_RETRY_MAX_WAIT_SECONDS = _parse_float_env("STORAGE_RETRY_MAX_WAIT_SECONDS", 2.0)

# Submissions
SUBMISSIONS_LIST_LIMIT = _parse_int_env("SUBMISSIONS_LIST_LIMIT", 200)

# Authentication
SECRET_KEY = os.environ.get(
    "SECRET_KEY",
    "CHANGE_ME_IN_PRODUCTION_USE_openssl_rand_hex_32"
)
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = _parse_int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
SESSION_EXTEND_MINUTES = _parse_int_env("SESSION_EXTEND_MINUTES", 60)
SESSION_CLEANUP_INTERVAL_SECONDS = _parse_int_env(
    "SESSION_CLEANUP_INTERVAL_SECONDS", 24 * 60 * 60
)
