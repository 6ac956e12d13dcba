"""Wayback Machine archiving client.

Checks the Availability API for a recent snapshot of a URL and, when there is
none, submits the URL to Save Page Now.  Requests are retried with bounded
exponential backoff.  No credentials are required; the archive throttles by
IP, so callers should keep concurrency low.
"""

from __future__ import annotations

from archive_pdf_urls.wayback.client import WaybackMachineClient
from archive_pdf_urls.wayback.models import (
    ArchiveOutcome,
    ArchiveStatus,
    ClientConfig,
    Snapshot,
)
from archive_pdf_urls.wayback.retry import RetryPolicy
from archive_pdf_urls.wayback.urls import ArchivableUrl

__all__ = [
    "ArchivableUrl",
    "ArchiveOutcome",
    "ArchiveStatus",
    "ClientConfig",
    "RetryPolicy",
    "Snapshot",
    "WaybackMachineClient",
]
