"""Link source: URI targets of the link annotations in a PDF.

Uses ``pypdf`` to walk every page's ``/Annots`` array and yield the ``/URI``
of each ``/Link`` annotation whose action is a URI action.  Internal links
(``/Dest`` or ``/GoTo`` actions) carry no URI and are ignored.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from archive_pdf_urls.core.exceptions import LinkSourceError

logger = logging.getLogger(__name__)


def _resolve(obj: Any) -> Any:
    """Dereference an indirect PDF object, passing direct objects through."""
    return obj.get_object() if hasattr(obj, "get_object") else obj


def _link_uri(annotation: Any) -> str | None:
    """Return the URI target of a link annotation, or ``None``."""
    annotation = _resolve(annotation)
    if not hasattr(annotation, "get") or annotation.get("/Subtype") != "/Link":
        return None
    action = _resolve(annotation.get("/A"))
    if not hasattr(action, "get"):
        return None
    uri = _resolve(action.get("/URI"))
    if uri is None:
        return None
    if isinstance(uri, bytes):
        return uri.decode("utf-8", errors="replace")
    return str(uri)


def extract_links(path: str | Path) -> Iterator[str]:
    """Yield the distinct URI targets of all link annotations in *path*.

    Links are yielded lazily in page order; repeats of an already yielded
    URI are skipped.

    Args:
        path: Path of the PDF file.

    Yields:
        URI strings as stored in the document.

    Raises:
        LinkSourceError: The file cannot be opened or parsed.  Raised on the
            first ``next()`` call, since this is a generator.
    """
    try:
        reader = PdfReader(path)
        pages = list(reader.pages)
    except (OSError, PdfReadError) as exc:
        raise LinkSourceError(f"Error loading PDF file: {exc}", path=str(path)) from exc

    seen: set[str] = set()
    for page_number, page in enumerate(pages, start=1):
        annotations = _resolve(page.get("/Annots"))
        if not annotations:
            continue
        for annotation in annotations:
            uri = _link_uri(annotation)
            if uri is None or uri in seen:
                continue
            seen.add(uri)
            logger.debug("Found link on page %d: %s", page_number, uri)
            yield uri


def compile_patterns(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    """Compile exclusion regexes.

    Raises:
        re.error: If any pattern is not a valid regular expression.
    """
    return [re.compile(pattern) for pattern in patterns]


def filter_links(
    links: Iterable[str],
    exclude: Iterable[re.Pattern[str]],
) -> Iterator[str]:
    """Drop links matching any of the *exclude* regexes.

    Matching uses :meth:`re.Pattern.search`, so patterns are unanchored.
    Dropped links are logged as skipped.
    """
    patterns = list(exclude)
    for link in links:
        if any(pattern.search(link) for pattern in patterns):
            logger.info("Skipped: %s", link)
            continue
        yield link
