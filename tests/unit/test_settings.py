"""Unit tests for config/settings.py."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from archive_pdf_urls.config.settings import Settings, get_settings
from archive_pdf_urls.wayback.config import DEFAULT_USER_AGENT, WB_SAVE_URL

pytestmark = pytest.mark.usefixtures("clean_env")


def test_defaults_without_environment() -> None:
    settings = Settings()

    assert settings.max_request_retries == 5
    assert settings.archive_threshold_days == 30
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.archive_endpoint == WB_SAVE_URL
    assert settings.concurrency == 1
    assert settings.log_level == "INFO"
    assert settings.backoff_base == 1.0
    assert settings.backoff_max == 60.0
    assert settings.backoff_jitter == 1.0


def test_prefixed_environment_variables_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARCHIVE_PDF_URLS_MAX_REQUEST_RETRIES", "2")
    monkeypatch.setenv("ARCHIVE_PDF_URLS_USER_AGENT", "archiver/1.0")
    monkeypatch.setenv("ARCHIVE_PDF_URLS_CONCURRENCY", "4")

    settings = Settings()

    assert settings.max_request_retries == 2
    assert settings.user_agent == "archiver/1.0"
    assert settings.concurrency == 4


def test_backoff_environment_variables_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARCHIVE_PDF_URLS_BACKOFF_BASE", "0.25")
    monkeypatch.setenv("ARCHIVE_PDF_URLS_BACKOFF_MAX", "30")
    monkeypatch.setenv("ARCHIVE_PDF_URLS_BACKOFF_JITTER", "0")

    settings = Settings()

    assert settings.backoff_base == 0.25
    assert settings.backoff_max == 30.0
    assert settings.backoff_jitter == 0.0


def test_unprefixed_variables_are_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAX_REQUEST_RETRIES", "9")

    assert Settings().max_request_retries == 5


def test_dotenv_file_is_read(tmp_path: Path) -> None:
    # clean_env has already changed into tmp_path
    (tmp_path / ".env").write_text(
        "ARCHIVE_PDF_URLS_ARCHIVE_THRESHOLD_DAYS=14\n", encoding="utf-8"
    )

    assert Settings().archive_threshold_days == 14


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("ARCHIVE_PDF_URLS_MAX_REQUEST_RETRIES", "-1"),
        ("ARCHIVE_PDF_URLS_CONCURRENCY", "0"),
        ("ARCHIVE_PDF_URLS_REQUEST_TIMEOUT", "0"),
        ("ARCHIVE_PDF_URLS_ARCHIVE_THRESHOLD_DAYS", "soon"),
        ("ARCHIVE_PDF_URLS_BACKOFF_BASE", "-1"),
    ],
)
def test_invalid_environment_raises(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings()


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    monkeypatch.setenv("ARCHIVE_PDF_URLS_MAX_REQUEST_RETRIES", "1")

    assert get_settings() is first

    get_settings.cache_clear()
    assert get_settings().max_request_retries == 1
