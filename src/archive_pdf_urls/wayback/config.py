"""Protocol constants for the Wayback Machine archiving client.

Defines the Save Page Now and Availability API endpoints, the default
client tuning values, and the list of domains that refuse Wayback captures.
Used by :class:`~archive_pdf_urls.wayback.models.ClientConfig` and
:class:`~archive_pdf_urls.wayback.client.WaybackMachineClient`.

Reference: https://archive.org/help/wayback_api.php
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# API constants
# ---------------------------------------------------------------------------

WB_SAVE_URL: str = "https://web.archive.org/save/"
"""Save Page Now endpoint.

The target URL is appended verbatim to the path, e.g.
``https://web.archive.org/save/https://example.com/page``.
"""

WB_AVAILABILITY_URL: str = "https://archive.org/wayback/available"
"""Availability API endpoint.

Called with a single ``url`` query parameter; returns the closest snapshot
under ``archived_snapshots``.
"""

WB_TIMESTAMP_FORMAT: str = "%Y%m%d%H%M%S"
"""Snapshot timestamp format (14 digits, UTC)."""

WB_SNAPSHOT_OK_STATUS: str = "200"
"""Capture status a snapshot must report to count as a usable archive."""

# ---------------------------------------------------------------------------
# Client defaults
# ---------------------------------------------------------------------------

DEFAULT_MAX_REQUEST_RETRIES: int = 5
"""Additional attempts after the first for every HTTP call."""

DEFAULT_ARCHIVE_THRESHOLD_DAYS: int = 30
"""Snapshots newer than this many days are considered fresh."""

DEFAULT_USER_AGENT: str = (
    "Mozilla/5.0 (X11; Fedora; Linux x86_64; rv:40.0) Gecko/20100101 Firefox/40.0"
)
"""User-Agent sent on every request."""

DEFAULT_REQUEST_TIMEOUT: float = 60.0
"""Per-attempt HTTP timeout in seconds.  Save Page Now captures are slow."""

DEFAULT_BACKOFF_BASE: float = 1.0
"""Delay before the first retry, in seconds.  Doubles on every retry."""

DEFAULT_BACKOFF_MAX: float = 60.0
"""Upper bound for any single retry delay, in seconds."""

DEFAULT_BACKOFF_JITTER: float = 1.0
"""Maximum random jitter added to each retry delay, in seconds."""

# ---------------------------------------------------------------------------
# URL filters
# ---------------------------------------------------------------------------

EXCLUDED_DOMAINS: tuple[str, ...] = (
    "archive.org",
    "jstor.org",
    "diw.de",
    "youtube.com",
    "plato.stanford.edu",
)
"""Domains that block Wayback Machine captures.

A URL whose host contains any of these strings is reported as excluded
without sending a request.
"""

ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})
"""URL schemes the Wayback Machine can capture."""
