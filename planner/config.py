"""Configuration management for the planner service.

Every setting is read from the environment through a small ``get_*`` accessor.
A ``.env`` file in the working directory is loaded on import.

Environment Variables:
    DATABASE_URL: PostgreSQL connection URL (required for production)
    FERNET_KEY: Encryption key for stored Gemini API keys (required)
    IDENTITY_PROVIDER_URL: Base URL of the identity provider (required for auth)
    IDENTITY_PROVIDER_KEY: Public API key sent to the identity provider
    SESSION_COOKIE_NAME: Cookie carrying the access token (default: "sb-access-token")
    DEFAULT_GEMINI_API_KEY: Shared fallback Gemini key (optional)
    SHARED_GEMINI_DAILY_LIMIT: Per-user daily uses of the shared key (default: 5)
    GEMINI_MODEL: Gemini model used for generation (default: "gemini-2.5-flash")
    LOG_LEVEL / LOG_FORMAT: Logging configuration (default: INFO / json)

Usage:
    from planner.config import get_default_gemini_api_key, get_database_url

    shared_key = get_default_gemini_api_key()  # Returns None if not set
    db_url = get_database_url()  # Raises if DATABASE_URL not set
"""

import os
from functools import lru_cache

import structlog
from dotenv import load_dotenv

load_dotenv()

log = structlog.get_logger(__name__)

DEFAULT_SESSION_COOKIE_NAME = "sb-access-token"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_SHARED_GEMINI_DAILY_LIMIT = 5


@lru_cache
def get_database_url() -> str:
    """Return DATABASE_URL with an async driver.

    Plain ``postgresql://`` URLs are rewritten to ``postgresql+asyncpg://``;
    SQLite URLs are expected to name ``aiosqlite`` already.

    Raises:
        ValueError: DATABASE_URL is unset or empty.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise ValueError("DATABASE_URL environment variable is required")

    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return url


def get_database_echo() -> bool:
    """Whether SQLAlchemy should echo SQL statements."""
    return os.getenv("DATABASE_ECHO", "").lower() == "true"


def get_identity_provider_url() -> str | None:
    """Get identity provider base URL (e.g., "https://xyz.supabase.co").

    Returns:
        Base URL without trailing slash, or None if not set.
    """
    url = os.getenv("IDENTITY_PROVIDER_URL")
    return url.rstrip("/") if url else None


def get_identity_provider_key() -> str | None:
    """Get the public API key sent alongside token validation requests."""
    return os.getenv("IDENTITY_PROVIDER_KEY")


def get_session_cookie_name() -> str:
    """Get the name of the cookie carrying the caller's access token."""
    return os.getenv("SESSION_COOKIE_NAME", DEFAULT_SESSION_COOKIE_NAME)


def get_default_gemini_api_key() -> str | None:
    """Get the shared Gemini API key from environment.

    This is the fallback key used when a user has not stored a key of
    their own. Its use is capped per user by get_shared_gemini_daily_limit().

    Returns:
        API key string, or None if not set.
    """
    return os.getenv("DEFAULT_GEMINI_API_KEY") or None


def get_shared_gemini_daily_limit() -> int:
    """Get per-user daily limit for generations billed to the shared key.

    Environment Variable:
        SHARED_GEMINI_DAILY_LIMIT: Non-negative integer (default: 5).
            0 disables the shared key fallback entirely.

    Returns:
        Daily limit, never negative.
    """
    raw = os.getenv("SHARED_GEMINI_DAILY_LIMIT", str(DEFAULT_SHARED_GEMINI_DAILY_LIMIT))
    try:
        return max(0, int(raw))
    except ValueError:
        log.warning(
            "invalid_shared_gemini_daily_limit",
            value=raw,
            using_default=DEFAULT_SHARED_GEMINI_DAILY_LIMIT,
        )
        return DEFAULT_SHARED_GEMINI_DAILY_LIMIT


def get_gemini_model() -> str:
    """Get the Gemini model name used for text generation."""
    return os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)


def get_log_level() -> str:
    """Get log level name (default: INFO)."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_format() -> str:
    """Get log output format: "json" (default) or "console"."""
    return os.getenv("LOG_FORMAT", "json").lower()
