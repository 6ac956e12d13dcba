"""Application-wide exception hierarchy for archive-pdf-urls.

All custom exceptions subclass ``ArchivePdfUrlsError``, enabling
consistent error handling and structured logging across the application.

Hierarchy::

    ArchivePdfUrlsError
    ├── LinkSourceError
    └── ArchiveError                 (url: str | None)
        ├── UrlValidationError
        │   ├── InvalidUrlError
        │   └── ExcludedUrlError
        ├── TransportError           (retriable)
        ├── ServerError              (retriable, status_code: int)
        ├── RateLimitedError         (retriable, retry_after: float | None)
        ├── RemoteRejectedError      (status_code: int)
        ├── SnapshotParseError
        └── RetriesExhaustedError    (attempts: int, last_error: ArchiveError)

Only the three retriable classes are ever retried by
:class:`~archive_pdf_urls.wayback.retry.RetryPolicy`; see
:data:`RETRIABLE_ERRORS`.
"""

from __future__ import annotations


class ArchivePdfUrlsError(Exception):
    """Base class for all archive-pdf-urls exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Link source exceptions
# ---------------------------------------------------------------------------


class LinkSourceError(ArchivePdfUrlsError):
    """Raised when links cannot be read from the input document.

    Args:
        message: Human-readable description of the failure.
        path: Path of the document that could not be read.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


# ---------------------------------------------------------------------------
# Archiving exceptions
# ---------------------------------------------------------------------------


class ArchiveError(ArchivePdfUrlsError):
    """Base class for every failure that can end a single ``archive_url`` call.

    Args:
        message: Human-readable description of the failure.
        url: The URL being archived when the failure happened.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class UrlValidationError(ArchiveError):
    """Raised before any network call when a URL cannot be archived."""


class InvalidUrlError(UrlValidationError):
    """Raised for malformed, non-HTTP(S), local or private-network URLs."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL: {url}", url=url)


class ExcludedUrlError(UrlValidationError):
    """Raised for URLs on domains that block Wayback Machine captures."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Excluded URL: {url}", url=url)


class TransportError(ArchiveError):
    """Raised when the request never produced a response (connection, timeout)."""


class ServerError(ArchiveError):
    """Raised when the archiving service answers with a 5xx status.

    Args:
        status_code: HTTP status returned by the service.
        url: The URL being archived.
    """

    def __init__(self, status_code: int, url: str | None = None) -> None:
        super().__init__(f"Failed ({status_code}): {url}", url=url)
        self.status_code = status_code


class RateLimitedError(ArchiveError):
    """Raised when the archiving service answers with HTTP 429.

    Args:
        url: The URL being archived.
        retry_after: Seconds requested by the ``Retry-After`` header, or
            ``None`` when the header is absent or unparseable.
    """

    def __init__(self, url: str | None = None, retry_after: float | None = None) -> None:
        super().__init__(f"Rate limited (429): {url}", url=url)
        self.retry_after = retry_after


class RemoteRejectedError(ArchiveError):
    """Raised for permanent client-side rejections (4xx other than 429).

    Args:
        status_code: HTTP status returned by the service.
        url: The URL being archived.
    """

    def __init__(self, status_code: int, url: str | None = None) -> None:
        super().__init__(f"Failed ({status_code}): {url}", url=url)
        self.status_code = status_code


class SnapshotParseError(ArchiveError):
    """Raised when the availability API returns a payload that cannot be read."""


class RetriesExhaustedError(ArchiveError):
    """Raised when every attempt of a retried call failed.

    Args:
        attempts: Total number of attempts made (first try included).
        last_error: The error raised by the final attempt.
    """

    def __init__(self, attempts: int, last_error: ArchiveError) -> None:
        super().__init__(
            f"Gave up after {attempts} attempts: {last_error}",
            url=last_error.url,
        )
        self.attempts = attempts
        self.last_error = last_error


RETRIABLE_ERRORS: tuple[type[ArchiveError], ...] = (
    TransportError,
    ServerError,
    RateLimitedError,
)
"""Error classes the retry engine treats as transient."""
