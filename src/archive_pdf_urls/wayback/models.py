"""Configuration and result types for the Wayback Machine client.

:class:`ClientConfig` is a frozen Pydantic model validated once at startup.
:class:`Snapshot` and :class:`ArchiveOutcome` are plain frozen dataclasses
returned to the caller and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from archive_pdf_urls.core.exceptions import ArchiveError
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

if TYPE_CHECKING:
    from archive_pdf_urls.config.settings import Settings


# ---------------------------------------------------------------------------
# Client configuration
# ---------------------------------------------------------------------------


class ClientConfig(BaseModel):
    """Immutable configuration for :class:`~archive_pdf_urls.wayback.client.WaybackMachineClient`.

    Attributes:
        max_request_retries: Additional attempts after the first for every
            HTTP call.  ``0`` disables retries.
        archive_threshold_days: A snapshot at most this many days old counts
            as fresh and suppresses a new capture.
        user_agent: User-Agent header sent on every request.
        archive_endpoint: Save Page Now endpoint; the target URL is appended.
        check_endpoint: Availability API endpoint.
        request_timeout: Per-attempt HTTP timeout in seconds.
        backoff_base: Delay before the first retry, in seconds.
        backoff_max: Upper bound for a single retry delay, in seconds.
        backoff_jitter: Maximum uniform random jitter added to each delay.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_request_retries: int = Field(default=DEFAULT_MAX_REQUEST_RETRIES, ge=0)
    archive_threshold_days: int = Field(default=DEFAULT_ARCHIVE_THRESHOLD_DAYS, ge=0)
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    archive_endpoint: str = WB_SAVE_URL
    check_endpoint: str = WB_AVAILABILITY_URL
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    backoff_base: float = Field(default=DEFAULT_BACKOFF_BASE, ge=0)
    backoff_max: float = Field(default=DEFAULT_BACKOFF_MAX, ge=0)
    backoff_jitter: float = Field(default=DEFAULT_BACKOFF_JITTER, ge=0)

    @field_validator("user_agent")
    @classmethod
    def user_agent_not_blank(cls, v: str) -> str:
        """Reject whitespace-only user agents."""
        if not v.strip():
            raise ValueError("user_agent must not be blank")
        return v

    @field_validator("archive_endpoint", "check_endpoint")
    @classmethod
    def endpoint_is_absolute(cls, v: str) -> str:
        """Require an absolute http(s) endpoint URL."""
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"endpoint must be an absolute http(s) URL: {v!r}")
        return v

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: object) -> ClientConfig:
        """Build a config from application settings.

        Args:
            settings: Loaded :class:`~archive_pdf_urls.config.settings.Settings`.
            **overrides: Field values that take precedence over *settings*
                (e.g. command-line options).  ``None`` values are ignored.

        Returns:
            A validated :class:`ClientConfig`.
        """
        values: dict[str, object] = {
            "max_request_retries": settings.max_request_retries,
            "archive_threshold_days": settings.archive_threshold_days,
            "user_agent": settings.user_agent,
            "archive_endpoint": settings.archive_endpoint,
            "check_endpoint": settings.check_endpoint,
            "request_timeout": settings.request_timeout,
            "backoff_base": settings.backoff_base,
            "backoff_max": settings.backoff_max,
            "backoff_jitter": settings.backoff_jitter,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class ArchiveStatus(str, Enum):
    """Outcome category of a single ``archive_url`` call.

    Attributes:
        ALREADY_FRESH: A snapshot within the threshold exists; nothing was
            submitted.
        ARCHIVED: The capture request was accepted.
        EXCLUDED: The host blocks Wayback captures; nothing was sent.
        FAILED: A permanent error occurred or retries were exhausted.
    """

    ALREADY_FRESH = "already_fresh"
    ARCHIVED = "archived"
    EXCLUDED = "excluded"
    FAILED = "failed"


@dataclass(frozen=True)
class Snapshot:
    """The most recent capture of a URL reported by the Availability API.

    Attributes:
        url: Playback URL of the capture.
        timestamp: Capture time (timezone-aware, UTC).
        status: HTTP status recorded at capture time, as a string.
        available: Whether the archive reports the capture as viewable.
    """

    url: str
    timestamp: datetime
    status: str
    available: bool


@dataclass(frozen=True)
class ArchiveOutcome:
    """Result of :meth:`~archive_pdf_urls.wayback.client.WaybackMachineClient.archive_url`.

    Attributes:
        url: The URL as supplied by the caller.
        status: Outcome category.
        snapshot: The fresh snapshot, for ``ALREADY_FRESH``.
        archive_url: Playback URL of the new capture when the service
            reported one, for ``ARCHIVED``.
        error: The failure reason, for ``FAILED`` and ``EXCLUDED``.
    """

    url: str
    status: ArchiveStatus
    snapshot: Snapshot | None = None
    archive_url: str | None = None
    error: ArchiveError | None = None

    @property
    def ok(self) -> bool:
        """``True`` unless the URL failed to archive."""
        return self.status is not ArchiveStatus.FAILED
