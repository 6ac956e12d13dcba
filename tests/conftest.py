"""Shared pytest fixtures for archive-pdf-urls tests.

Fixture summary
---------------
config           — ClientConfig pointed at a fake Wayback host, 2 retries,
                   7-day threshold, no backoff delay.
sleeps           — List receiving every retry delay requested by the client.
make_client      — Factory for WaybackMachineClient instances with a fixed clock;
                   every client it builds is closed at teardown.
clean_env        — Removes ARCHIVE_PDF_URLS_* variables and clears the cached
                   settings before and after the test.
restore_logging  — Removes the handler installed by configure_logging() and
                   restores the root level.

No test needs network access: HTTP traffic is mocked with respx.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncGenerator, Callable, Iterator
from typing import Any

import pytest
import pytest_asyncio
import structlog

from archive_pdf_urls.config.settings import get_settings
from archive_pdf_urls.wayback.client import WaybackMachineClient
from archive_pdf_urls.wayback.models import ClientConfig
from tests.factories.wayback import NOW, make_config


@pytest.fixture
def config() -> ClientConfig:
    return make_config()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest_asyncio.fixture
async def make_client(
    config: ClientConfig, sleeps: list[float]
) -> AsyncGenerator[Callable[..., WaybackMachineClient], None]:
    """Yield a factory building clients that record their retry delays in ``sleeps``."""
    clients: list[WaybackMachineClient] = []

    async def _record_sleep(delay: float) -> None:
        sleeps.append(delay)

    def _make(cfg: ClientConfig | None = None, **kwargs: Any) -> WaybackMachineClient:
        kwargs.setdefault("clock", lambda: NOW)
        kwargs.setdefault("sleep", _record_sleep)
        client = WaybackMachineClient(cfg or config, **kwargs)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> Iterator[None]:
    """Isolate a test from ARCHIVE_PDF_URLS_* variables and any local .env file."""
    for key in list(os.environ):
        if key.startswith("ARCHIVE_PDF_URLS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Restore the root logger after a test that calls configure_logging()."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
