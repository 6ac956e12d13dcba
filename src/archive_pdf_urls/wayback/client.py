"""Async Wayback Machine client: freshness check plus Save Page Now submission.

:class:`WaybackMachineClient` owns one :class:`httpx.AsyncClient` and one
:class:`~archive_pdf_urls.wayback.retry.RetryPolicy`.  Both are created in
the constructor and never replaced, so one instance can serve any number of
concurrent :meth:`WaybackMachineClient.archive_url` calls.

Per-URL flow:

1. :meth:`ArchivableUrl.parse` validates the URL; nothing is sent for
   invalid or excluded URLs.
2. :meth:`WaybackMachineClient.check_recent_archive` asks the Availability
   API for the latest snapshot.  A fresh snapshot ends the call.  A failed
   lookup is treated as "no fresh snapshot" (fail-open) and logged.
3. :meth:`WaybackMachineClient.submit_capture` asks Save Page Now for a new
   capture.

Every HTTP call goes through the retry policy; failures that survive it are
returned as an ``ArchiveStatus.FAILED`` outcome rather than raised.
"""

from __future__ import annotations

import asyncio
import email.utils
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urljoin

import httpx

from archive_pdf_urls.core.exceptions import (
    ArchiveError,
    ExcludedUrlError,
    InvalidUrlError,
    RateLimitedError,
    RemoteRejectedError,
    ServerError,
    SnapshotParseError,
    TransportError,
)
from archive_pdf_urls.wayback.config import WB_SNAPSHOT_OK_STATUS, WB_TIMESTAMP_FORMAT
from archive_pdf_urls.wayback.models import (
    ArchiveOutcome,
    ArchiveStatus,
    ClientConfig,
    Snapshot,
)
from archive_pdf_urls.wayback.retry import RetryPolicy
from archive_pdf_urls.wayback.urls import ArchivableUrl

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------


def _retry_after_seconds(headers: httpx.Headers, now: datetime) -> float | None:
    """Return the ``Retry-After`` header as seconds from *now*, or ``None``.

    Both forms are accepted: delay-seconds and an HTTP-date.  A date in the
    past means "retry now".
    """
    value = headers.get("Retry-After")
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - now).total_seconds())


def parse_wb_timestamp(value: str) -> datetime:
    """Parse a 14-digit Wayback timestamp to a timezone-aware UTC datetime.

    Raises:
        ValueError: If *value* is not in ``YYYYMMDDhhmmss`` format.
    """
    return datetime.strptime(value, WB_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def parse_availability(payload: Any, url: str) -> Snapshot | None:
    """Extract the newest snapshot from an Availability API payload.

    The API answers ``{"url": ..., "archived_snapshots": {"closest": {...}}}``
    and uses an empty ``archived_snapshots`` object when nothing is archived.

    Args:
        payload: Decoded JSON body.
        url: The URL that was looked up (for error context).

    Returns:
        The snapshot with the greatest timestamp, or ``None`` if there is none.

    Raises:
        SnapshotParseError: The payload does not have the documented shape.
    """
    if not isinstance(payload, dict):
        raise SnapshotParseError(f"Failed to get archive: unexpected payload for {url}", url=url)

    snapshots = payload.get("archived_snapshots") or {}
    if not isinstance(snapshots, dict):
        raise SnapshotParseError(
            f"Failed to get archive: 'archived_snapshots' is not an object for {url}", url=url
        )

    found: list[Snapshot] = []
    for entry in snapshots.values():
        if not isinstance(entry, dict):
            continue
        try:
            timestamp = parse_wb_timestamp(str(entry["timestamp"]))
        except (KeyError, ValueError) as exc:
            raise SnapshotParseError(
                f"Failed to get archive: bad snapshot timestamp for {url}: {exc}", url=url
            ) from exc
        found.append(
            Snapshot(
                url=str(entry.get("url", "")),
                timestamp=timestamp,
                status=str(entry.get("status", "")),
                available=bool(entry.get("available", False)),
            )
        )

    return max(found, key=lambda s: s.timestamp, default=None)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class WaybackMachineClient:
    """Wayback Machine client for archiving URLs.

    Use as an async context manager so the connection pool is closed::

        async with WaybackMachineClient(ClientConfig()) as client:
            outcome = await client.archive_url("https://example.com/")

    Args:
        config: Client configuration.  Defaults to :class:`ClientConfig()`.
        transport: Optional httpx transport (tests, proxies).
        clock: Returns the current UTC time; used for the freshness window.
        sleep: Awaitable sleep used between retry attempts.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or ClientConfig()
        self._retry = RetryPolicy.from_config(self._config, sleep=sleep)
        self._clock = clock or _utcnow
        self._http = httpx.AsyncClient(
            headers={"User-Agent": self._config.user_agent},
            timeout=httpx.Timeout(self._config.request_timeout),
            follow_redirects=True,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    async def __aenter__(self) -> WaybackMachineClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Single attempt
    # ------------------------------------------------------------------

    async def _get(
        self,
        request_url: str,
        url: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one GET and classify the result.

        Args:
            request_url: Endpoint to call.
            url: The URL being archived (for error context).
            params: Optional query parameters.

        Returns:
            The 2xx response.

        Raises:
            TransportError: No response was received.
            InvalidUrlError: httpx refused to build a request for the URL.
            RateLimitedError: HTTP 429.
            ServerError: HTTP 5xx.
            RemoteRejectedError: Any other non-2xx status.
        """
        try:
            response = await self._http.get(request_url, params=params)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request timed out: {url}", url=url) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"Request failed: {exc}", url=url) from exc
        except httpx.InvalidURL as exc:
            raise InvalidUrlError(url) from exc

        status = response.status_code
        if status == 429:
            raise RateLimitedError(
                url, retry_after=_retry_after_seconds(response.headers, self._clock())
            )
        if status >= 500:
            raise ServerError(status, url)
        if not response.is_success:
            raise RemoteRejectedError(status, url)
        return response

    # ------------------------------------------------------------------
    # Freshness check
    # ------------------------------------------------------------------

    async def latest_snapshot(self, url: str) -> Snapshot | None:
        """Return the newest snapshot of *url*, or ``None`` if it was never archived.

        Raises:
            UrlValidationError: *url* cannot be archived.
            RetriesExhaustedError: Every lookup attempt failed transiently.
            RemoteRejectedError: The Availability API rejected the lookup.
            SnapshotParseError: The response body could not be read.
        """
        target = ArchivableUrl.parse(url)
        response = await self._retry.call(
            lambda: self._get(
                self._config.check_endpoint, target.url, params={"url": target.url}
            ),
            description=f"Availability check for {target.url}",
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise SnapshotParseError(
                f"Failed to get archive: invalid JSON for {target.url}", url=target.url
            ) from exc
        return parse_availability(payload, target.url)

    def is_fresh(self, snapshot: Snapshot) -> bool:
        """Return ``True`` if *snapshot* is usable and inside the threshold window.

        The window is inclusive: a snapshot exactly ``archive_threshold_days``
        old is still fresh.
        """
        if not snapshot.available or snapshot.status != WB_SNAPSHOT_OK_STATUS:
            return False
        age = self._clock() - snapshot.timestamp
        return age <= timedelta(days=self._config.archive_threshold_days)

    async def check_recent_archive(self, url: str) -> Snapshot | None:
        """Return the latest snapshot of *url* if it is fresh, else ``None``.

        Raises the same errors as :meth:`latest_snapshot`.
        """
        snapshot = await self.latest_snapshot(url)
        if snapshot is None or not self.is_fresh(snapshot):
            return None
        return snapshot

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit_capture(self, url: str) -> str | None:
        """Ask Save Page Now to capture *url*.

        Returns:
            The playback URL of the new capture when the service reports it
            in ``Content-Location``, otherwise ``None``.

        Raises:
            UrlValidationError: *url* cannot be archived.
            RetriesExhaustedError: Every attempt failed transiently.
            RemoteRejectedError: The service refused the capture.
        """
        target = ArchivableUrl.parse(url)
        response = await self._retry.call(
            lambda: self._get(f"{self._config.archive_endpoint}{target.url}", target.url),
            description=f"Capture of {target.url}",
        )
        location = response.headers.get("Content-Location")
        if not location:
            return None
        return urljoin(str(response.url), location)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def archive_url(self, url: str) -> ArchiveOutcome:
        """Archive *url* unless a recent snapshot already exists.

        Never raises for per-URL failures; the outcome carries the reason.
        ``asyncio.CancelledError`` still propagates.

        Args:
            url: Absolute http(s) URL.

        Returns:
            The :class:`ArchiveOutcome` for *url*.
        """
        try:
            ArchivableUrl.parse(url)
        except ExcludedUrlError as exc:
            return ArchiveOutcome(url=url, status=ArchiveStatus.EXCLUDED, error=exc)
        except InvalidUrlError as exc:
            return ArchiveOutcome(url=url, status=ArchiveStatus.FAILED, error=exc)

        try:
            snapshot = await self.check_recent_archive(url)
        except ArchiveError as exc:
            # Fail open: a lost lookup must not cost a needed capture.
            logger.warning(
                "Availability check inconclusive for %s, archiving anyway: %s", url, exc
            )
            snapshot = None

        if snapshot is not None:
            logger.debug("Recent archive exists for %s: %s", url, snapshot.url)
            return ArchiveOutcome(url=url, status=ArchiveStatus.ALREADY_FRESH, snapshot=snapshot)

        try:
            archive_url = await self.submit_capture(url)
        except ArchiveError as exc:
            return ArchiveOutcome(url=url, status=ArchiveStatus.FAILED, error=exc)

        return ArchiveOutcome(url=url, status=ArchiveStatus.ARCHIVED, archive_url=archive_url)
