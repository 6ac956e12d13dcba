"""Unit tests for pdf_links.py.

Covers:
- extract_links() yields URI link targets in page order
- Repeated URIs are yielded once
- Internal (page destination) links are ignored
- Missing and corrupt files raise LinkSourceError
- filter_links() drops URLs matching any exclusion regex (unanchored search)

PDFs are generated on the fly with pypdf; no fixture files are needed.
"""

from __future__ import annotations

import re
from pathlib import Path

import pytest
from pypdf import PdfWriter
from pypdf.annotations import Link

from archive_pdf_urls.core.exceptions import LinkSourceError
from archive_pdf_urls.pdf_links import compile_patterns, extract_links, filter_links


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_pdf(path: Path, pages: list[list[str | int]]) -> Path:
    """Write a PDF with one page per entry of *pages*.

    Each page entry lists its link annotations: a ``str`` becomes a URI link,
    an ``int`` becomes an internal link to that page index.
    """
    writer = PdfWriter()
    for _ in pages:
        writer.add_blank_page(width=612, height=792)
    for page_number, links in enumerate(pages):
        for index, target in enumerate(links):
            rect = (50, 700 - 30 * index, 300, 720 - 30 * index)
            if isinstance(target, int):
                annotation = Link(rect=rect, target_page_index=target)
            else:
                annotation = Link(rect=rect, url=target)
            writer.add_annotation(page_number=page_number, annotation=annotation)
    with path.open("wb") as fh:
        writer.write(fh)
    return path


# ---------------------------------------------------------------------------
# extract_links()
# ---------------------------------------------------------------------------


class TestExtractLinks:
    def test_links_are_yielded_in_page_order(self, tmp_path: Path) -> None:
        pdf = _write_pdf(
            tmp_path / "book.pdf",
            [
                ["https://example.com/a", "https://example.com/b"],
                [],
                ["http://example.org/c"],
            ],
        )

        assert list(extract_links(pdf)) == [
            "https://example.com/a",
            "https://example.com/b",
            "http://example.org/c",
        ]

    def test_duplicates_are_yielded_once(self, tmp_path: Path) -> None:
        pdf = _write_pdf(
            tmp_path / "dupes.pdf",
            [
                ["https://example.com/a", "https://example.com/a"],
                ["https://example.com/b", "https://example.com/a"],
            ],
        )

        assert list(extract_links(pdf)) == ["https://example.com/a", "https://example.com/b"]

    def test_internal_links_are_ignored(self, tmp_path: Path) -> None:
        pdf = _write_pdf(
            tmp_path / "toc.pdf",
            [[1, "https://example.com/a"], [0]],
        )

        assert list(extract_links(pdf)) == ["https://example.com/a"]

    def test_pdf_without_links_yields_nothing(self, tmp_path: Path) -> None:
        pdf = _write_pdf(tmp_path / "plain.pdf", [[], []])

        assert list(extract_links(pdf)) == []

    def test_accepts_str_path(self, tmp_path: Path) -> None:
        pdf = _write_pdf(tmp_path / "str.pdf", [["https://example.com/"]])

        assert list(extract_links(str(pdf))) == ["https://example.com/"]

    def test_missing_file_raises_link_source_error(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing.pdf"

        with pytest.raises(LinkSourceError) as exc_info:
            list(extract_links(missing))

        assert exc_info.value.path == str(missing)
        assert str(exc_info.value).startswith("Error loading PDF file:")

    def test_corrupt_file_raises_link_source_error(self, tmp_path: Path) -> None:
        corrupt = tmp_path / "corrupt.pdf"
        corrupt.write_bytes(b"this is not a pdf document")

        with pytest.raises(LinkSourceError):
            list(extract_links(corrupt))


# ---------------------------------------------------------------------------
# filter_links()
# ---------------------------------------------------------------------------


class TestFilterLinks:
    LINKS = [
        "https://example.com/a",
        "https://doi.org/10.1000/182",
        "https://example.org/b.pdf",
    ]

    def test_no_patterns_keeps_everything(self) -> None:
        assert list(filter_links(self.LINKS, [])) == self.LINKS

    def test_matching_links_are_dropped(self) -> None:
        patterns = compile_patterns([r"doi\.org", r"\.pdf$"])

        assert list(filter_links(self.LINKS, patterns)) == ["https://example.com/a"]

    def test_patterns_are_unanchored(self) -> None:
        patterns = compile_patterns(["example"])

        assert list(filter_links(self.LINKS, patterns)) == ["https://doi.org/10.1000/182"]

    def test_skipped_links_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        patterns = compile_patterns([r"doi\.org"])

        with caplog.at_level("INFO", logger="archive_pdf_urls.pdf_links"):
            list(filter_links(self.LINKS, patterns))

        assert "Skipped: https://doi.org/10.1000/182" in caplog.messages

    def test_invalid_pattern_raises(self) -> None:
        with pytest.raises(re.error):
            compile_patterns(["("])

    def test_filter_is_lazy(self) -> None:
        consumed: list[str] = []

        def source():
            for link in self.LINKS:
                consumed.append(link)
                yield link

        filtered = filter_links(source(), [])
        assert next(filtered) == "https://example.com/a"
        assert consumed == ["https://example.com/a"]
