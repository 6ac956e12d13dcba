"""Driver: feed a link source into the Wayback Machine client.

:func:`archive_links` consumes an iterable of URLs and archives them with at
most ``concurrency`` calls in flight, using an ``asyncio.Semaphore``.  Every
outcome is logged; one failing URL never stops the rest.  The returned
:class:`RunSummary` decides the process exit code.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from archive_pdf_urls.core.exceptions import ArchiveError
from archive_pdf_urls.wayback.client import WaybackMachineClient
from archive_pdf_urls.wayback.models import ArchiveOutcome, ArchiveStatus

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Aggregate result of one run.

    Attributes:
        counts: Number of outcomes per :class:`ArchiveStatus`.
        failures: The ``FAILED`` outcomes, in completion order.
    """

    counts: Counter[ArchiveStatus] = field(default_factory=Counter)
    failures: list[ArchiveOutcome] = field(default_factory=list)

    def record(self, outcome: ArchiveOutcome) -> None:
        self.counts[outcome.status] += 1
        if outcome.status is ArchiveStatus.FAILED:
            self.failures.append(outcome)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def exit_code(self) -> int:
        """``1`` if any URL failed to archive, else ``0``."""
        return 1 if self.failures else 0


def log_outcome(outcome: ArchiveOutcome) -> None:
    """Log one outcome in the tool's ``Archived:`` / ``Skipped:`` format."""
    if outcome.status is ArchiveStatus.ARCHIVED:
        if outcome.archive_url:
            logger.info("Archived: %s – %s", outcome.url, outcome.archive_url)
        else:
            logger.info("Archived: %s", outcome.url)
    elif outcome.status in (ArchiveStatus.ALREADY_FRESH, ArchiveStatus.EXCLUDED):
        logger.info("Skipped: %s", outcome.url)
    else:
        logger.error("%s", outcome.error)


async def _archive_one(client: WaybackMachineClient, url: str) -> ArchiveOutcome:
    """Archive one URL; an unexpected exception becomes a ``FAILED`` outcome."""
    with structlog.contextvars.bound_contextvars(url=url):
        try:
            outcome = await client.archive_url(url)
        except Exception as exc:
            logger.exception("Unexpected error while archiving %s", url)
            return ArchiveOutcome(
                url=url,
                status=ArchiveStatus.FAILED,
                error=ArchiveError(f"Unexpected error while archiving {url}: {exc}", url=url),
            )
        log_outcome(outcome)
    return outcome


async def archive_links(
    client: WaybackMachineClient,
    urls: Iterable[str],
    concurrency: int = 1,
) -> RunSummary:
    """Archive every URL in *urls* and summarise the outcomes.

    The iterable is consumed lazily: a task is only created once a semaphore
    slot is free, so at most ``concurrency`` URLs are pulled ahead of the
    requests actually in flight.

    Args:
        client: Shared Wayback Machine client.
        urls: Candidate URLs, already exclusion-filtered.
        concurrency: Maximum simultaneous ``archive_url`` calls (``>= 1``).

    Returns:
        The :class:`RunSummary` of the run.

    Raises:
        ValueError: If *concurrency* is smaller than 1.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    summary = RunSummary()
    slots = asyncio.Semaphore(concurrency)
    pending: set[asyncio.Task[ArchiveOutcome]] = set()

    def _done(task: asyncio.Task[ArchiveOutcome]) -> None:
        pending.discard(task)
        slots.release()
        if not task.cancelled() and task.exception() is None:
            summary.record(task.result())

    try:
        for url in urls:
            await slots.acquire()
            task = asyncio.create_task(_archive_one(client, url))
            pending.add(task)
            task.add_done_callback(_done)
        if pending:
            await asyncio.gather(*pending)
    finally:
        if pending:
            leftovers = list(pending)
            for task in leftovers:
                task.cancel()
            await asyncio.gather(*leftovers, return_exceptions=True)

    logger.info(
        "Processed %d URLs: %d archived, %d already fresh, %d excluded, %d failed",
        summary.total,
        summary.counts[ArchiveStatus.ARCHIVED],
        summary.counts[ArchiveStatus.ALREADY_FRESH],
        summary.counts[ArchiveStatus.EXCLUDED],
        summary.counts[ArchiveStatus.FAILED],
    )
    return summary
