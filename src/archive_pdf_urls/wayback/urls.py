"""Validation of URLs before they are sent to the Wayback Machine."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from urllib.parse import SplitResult, urlsplit

from archive_pdf_urls.core.exceptions import ExcludedUrlError, InvalidUrlError
from archive_pdf_urls.wayback.config import ALLOWED_SCHEMES, EXCLUDED_DOMAINS


def _is_blocked_ip(host: str) -> bool:
    """Return ``True`` if *host* is an IP literal the archive cannot reach.

    Non-IP hosts return ``False``.
    """
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv4Address):
        return ip.is_loopback or ip.is_private or ip.is_multicast or ip.is_unspecified
    return ip.is_loopback or ip.is_multicast


@dataclass(frozen=True)
class ArchivableUrl:
    """A URL that passed validation and may be submitted for archiving.

    Attributes:
        url: The URL exactly as supplied by the caller.
        parts: The parsed components of ``url``.
    """

    url: str
    parts: SplitResult

    @classmethod
    def parse(cls, url: str) -> ArchivableUrl:
        """Parse and validate *url* for archiving.

        Rules are applied in this order:

        1. ASCII control characters (C0 and DEL) are rejected.  ``urlsplit``
           silently drops tabs and newlines, but the raw string is what gets
           sent on the wire.
        2. The URL must parse and carry a host.
        3. Hosts containing ``localhost`` are rejected.
        4. Loopback, private, multicast and unspecified IPv4 hosts, and
           loopback and multicast IPv6 hosts are rejected.
        5. Hosts on :data:`~archive_pdf_urls.wayback.config.EXCLUDED_DOMAINS`
           are excluded.
        6. Only ``http`` and ``https`` schemes are accepted.

        Args:
            url: Absolute URL string.

        Returns:
            The validated :class:`ArchivableUrl`.

        Raises:
            InvalidUrlError: The URL is malformed or points at a host the
                archive cannot reach.
            ExcludedUrlError: The host is known to block captures.
        """
        if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
            raise InvalidUrlError(url)

        try:
            parts = urlsplit(url)
            host = parts.hostname
        except ValueError as exc:
            raise InvalidUrlError(url) from exc

        if not host:
            raise InvalidUrlError(url)

        if "localhost" in host:
            raise InvalidUrlError(url)

        if _is_blocked_ip(host):
            raise InvalidUrlError(url)

        if any(domain in host for domain in EXCLUDED_DOMAINS):
            raise ExcludedUrlError(url)

        if parts.scheme.lower() not in ALLOWED_SCHEMES:
            raise InvalidUrlError(url)

        return cls(url=url, parts=parts)

    def __str__(self) -> str:
        return self.url
