"""Configuration package for archive-pdf-urls.

Re-exports the settings symbols so that callers can write::

    from archive_pdf_urls.config import get_settings
"""

from __future__ import annotations

from archive_pdf_urls.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
