"""archive-pdf-urls: archive every link cited in a PDF in the Wayback Machine."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.4.2"
