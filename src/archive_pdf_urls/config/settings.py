"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
Every tunable of the command-line tool can be set through an
``ARCHIVE_PDF_URLS_``-prefixed environment variable or a ``.env`` file;
command-line options take precedence.  Never call ``os.getenv`` directly
elsewhere in the codebase.

Usage::

    from archive_pdf_urls.config.settings import get_settings

    settings = get_settings()
    retries = settings.max_request_retries
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from archive_pdf_urls.wayback.config import (
    DEFAULT_ARCHIVE_THRESHOLD_DAYS,
    DEFAULT_BACKOFF_BASE,
    DEFAULT_BACKOFF_JITTER,
    DEFAULT_BACKOFF_MAX,
    DEFAULT_MAX_REQUEST_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
    WB_AVAILABILITY_URL,
    WB_SAVE_URL,
)


class Settings(BaseSettings):
    """Tool-wide configuration backed by environment variables and an optional .env file.

    All fields have defaults, so the tool runs with an empty environment.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARCHIVE_PDF_URLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Wayback Machine client
    # ------------------------------------------------------------------

    max_request_retries: int = Field(default=DEFAULT_MAX_REQUEST_RETRIES, ge=0)
    """Additional attempts after the first for every Wayback Machine request."""

    archive_threshold_days: int = Field(default=DEFAULT_ARCHIVE_THRESHOLD_DAYS, ge=0)
    """Snapshots at most this many days old are not re-captured."""

    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    """User-Agent header sent on every request."""

    archive_endpoint: str = WB_SAVE_URL
    """Save Page Now endpoint.  Override only for testing against a mirror."""

    check_endpoint: str = WB_AVAILABILITY_URL
    """Availability API endpoint."""

    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    """Per-attempt HTTP timeout in seconds."""

    backoff_base: float = Field(default=DEFAULT_BACKOFF_BASE, ge=0)
    """Delay in seconds before the first retry; doubles on every further retry."""

    backoff_max: float = Field(default=DEFAULT_BACKOFF_MAX, ge=0)
    """Upper bound in seconds for a single retry delay."""

    backoff_jitter: float = Field(default=DEFAULT_BACKOFF_JITTER, ge=0)
    """Maximum random seconds added to each retry delay."""

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    concurrency: int = Field(default=1, ge=1)
    """Maximum URLs archived at the same time.  Keep low; the archive throttles by IP."""

    # ------------------------------------------------------------------
    # Application behaviour
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings singleton.

    Uses ``functools.lru_cache`` so that Pydantic Settings reads the environment
    and .env file exactly once per process lifetime.  In tests, call
    ``get_settings.cache_clear()`` after patching environment variables.

    Returns:
        Settings: The validated settings object.
    """
    return Settings()
