"""Environment-driven settings shared by the API and the ETL CLI."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# Environment variable names
ENV_ALPHA_VANTAGE_API_KEY = "ALPHA_VANTAGE_API_KEY"
ENV_ALPHA_VANTAGE_DAILY_LIMIT = "ALPHA_VANTAGE_DAILY_LIMIT"
ENV_ALPHA_VANTAGE_REQUEST_DELAY = "ALPHA_VANTAGE_REQUEST_DELAY"
ENV_ALPHA_VANTAGE_TIMEOUT = "ALPHA_VANTAGE_TIMEOUT"
ENV_DB_PATH = "FUNDAMENTALS_DB_PATH"

# Defaults
DEFAULT_DB_PATH = Path("data/fundamentals.db")
DEFAULT_DAILY_LIMIT = 25  # Alpha Vantage free tier
DEFAULT_REQUEST_DELAY = 12.0  # ~5 requests/minute
DEFAULT_TIMEOUT = 30.0


def get_alpha_vantage_api_key() -> str:
    """Get Alpha Vantage API key from environment."""
    return os.environ.get(ENV_ALPHA_VANTAGE_API_KEY, "")


def get_db_path() -> Path:
    """Get the SQLite database path from environment."""
    value = os.environ.get(ENV_DB_PATH, "")
    return Path(value) if value else DEFAULT_DB_PATH


def env_int(name: str, default: int) -> int:
    """Read an integer env var, falling back to ``default`` when unset or invalid."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid {name}={value!r}, using default {default}")
        return default


def env_float(name: str, default: float) -> float:
    """Read a float env var, falling back to ``default`` when unset or invalid."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid {name}={value!r}, using default {default}")
        return default


def env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var ("1", "true", "yes", "on" are true)."""
    value = os.environ.get(name, "").strip().lower()
    if not value:
        return default
    return value in ("1", "true", "yes", "on")


def get_daily_limit() -> int:
    return env_int(ENV_ALPHA_VANTAGE_DAILY_LIMIT, DEFAULT_DAILY_LIMIT)


def get_request_delay() -> float:
    return env_float(ENV_ALPHA_VANTAGE_REQUEST_DELAY, DEFAULT_REQUEST_DELAY)


def get_request_timeout() -> float:
    return env_float(ENV_ALPHA_VANTAGE_TIMEOUT, DEFAULT_TIMEOUT)
