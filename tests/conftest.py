import pytest

from page_capture.config import Settings


@pytest.fixture
def settings():
    """Settings with no settle delay and short selector waits."""
    return Settings(
        default_url="https://default.test/",
        selectors=("#a", "#b"),
        selector_timeout=0.01,
        settle_seconds=0,
        cache_ttl=300,
    )
