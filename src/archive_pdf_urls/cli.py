"""Command-line entry point: archive every link in a PDF.

Usage::

    archive-pdf-urls book.pdf [--exclude PATTERN]... [--concurrency N]
                              [--max-retries N] [--threshold-days N]
                              [--user-agent UA] [--log-level LEVEL]

Options not given on the command line fall back to ``ARCHIVE_PDF_URLS_*``
environment variables (see :mod:`archive_pdf_urls.config.settings`).

Exit codes:
    0: Every link was archived, already fresh, skipped or excluded.
    1: At least one link failed, the PDF could not be read, an
        ``--exclude`` pattern is not a valid regular expression, or the
        configuration is invalid.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import re
import sys
from pathlib import Path

from pydantic import ValidationError

from archive_pdf_urls import __version__
from archive_pdf_urls.config.settings import Settings, get_settings
from archive_pdf_urls.core.exceptions import LinkSourceError
from archive_pdf_urls.core.logging_config import configure_logging
from archive_pdf_urls.pdf_links import compile_patterns, extract_links, filter_links
from archive_pdf_urls.runner import archive_links
from archive_pdf_urls.wayback.client import WaybackMachineClient
from archive_pdf_urls.wayback.models import ClientConfig

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="archive-pdf-urls",
        description=(
            "Extract all links from a PDF and archive the URLs in the "
            "Internet Archive's Wayback Machine."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("file", metavar="FILE", type=Path, help="Input PDF file.")
    parser.add_argument(
        "--exclude",
        metavar="PATTERN",
        action="append",
        default=[],
        help="Skip URLs matching this regular expression. Repeatable.",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum URLs archived at the same time.",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help="Additional attempts after the first for each request.",
    )
    parser.add_argument(
        "--threshold-days",
        type=int,
        default=None,
        help="Do not re-archive URLs with a snapshot at most this many days old.",
    )
    parser.add_argument("--user-agent", default=None, help="User-Agent header to send.")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging verbosity.",
    )
    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Archive the links of ``args.file`` and return the process exit code."""
    try:
        patterns = compile_patterns(args.exclude)
    except re.error as exc:
        logger.error("Invalid exclude pattern: %s", exc)
        return 1

    try:
        config = ClientConfig.from_settings(
            settings,
            max_request_retries=args.max_retries,
            archive_threshold_days=args.threshold_days,
            user_agent=args.user_agent,
        )
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    concurrency = args.concurrency if args.concurrency is not None else settings.concurrency
    links = filter_links(extract_links(args.file), patterns)

    async with WaybackMachineClient(config) as client:
        try:
            summary = await archive_links(client, links, concurrency=concurrency)
        except LinkSourceError as exc:
            logger.error("%s", exc)
            return 1
    return summary.exit_code


def main(argv: list[str] | None = None) -> int:
    """Console-script entry point."""
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging(args.log_level or "INFO")
        logger.error("Invalid configuration: %s", exc)
        return 1
    configure_logging(args.log_level or settings.log_level)
    if args.concurrency is not None and args.concurrency < 1:
        logger.error("--concurrency must be at least 1")
        return 1
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
