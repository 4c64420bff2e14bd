"""
Tests for environment configuration.
"""

import pytest

from page_capture.config import DEFAULT_SELECTORS, DEFAULT_URL, Settings


def test_defaults(monkeypatch):
    for name in [
        "CAPTURE_DEFAULT_URL", "CAPTURE_TOKEN", "CAPTURE_BROWSER_ENDPOINT",
        "CAPTURE_SELECTORS", "CAPTURE_CACHE_TTL", "CAPTURE_SETTLE_SECONDS",
    ]:
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.default_url == DEFAULT_URL
    assert settings.token is None
    assert settings.browser_endpoint is None
    assert settings.selectors == DEFAULT_SELECTORS
    assert settings.selector_timeout == 8.0
    assert settings.settle_seconds == 1.25
    assert settings.cache_ttl == 300.0
    assert settings.cache_enabled


def test_from_env(monkeypatch):
    monkeypatch.setenv("CAPTURE_DEFAULT_URL", "https://status.test/")
    monkeypatch.setenv("CAPTURE_TOKEN", "abc")
    monkeypatch.setenv("CAPTURE_BROWSER_ENDPOINT", "http://browser:9222")
    monkeypatch.setenv("CAPTURE_SELECTORS", " #card , .panel,,main ")
    monkeypatch.setenv("CAPTURE_CACHE_TTL", "0")

    settings = Settings.from_env()

    assert settings.default_url == "https://status.test/"
    assert settings.token == "abc"
    assert settings.browser_endpoint == "http://browser:9222"
    assert settings.selectors == ("#card", ".panel", "main")
    assert not settings.cache_enabled


def test_bad_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("CAPTURE_SELECTOR_TIMEOUT", "soon")
    monkeypatch.setenv("CAPTURE_CACHE_TTL", "")

    settings = Settings.from_env()

    assert settings.selector_timeout == 8.0
    assert settings.cache_ttl == 300.0


def test_settle_interval_clamped():
    assert Settings(settle_seconds=5).settle_seconds == 1.5
    assert Settings(settle_seconds=0.2).settle_seconds == 1.0
    assert Settings(settle_seconds=0).settle_seconds == 0.0
    assert Settings().with_overrides(settle_seconds=1.1).settle_seconds == 1.1


def test_empty_selectors_rejected():
    with pytest.raises(ValueError):
        Settings(selectors=())
