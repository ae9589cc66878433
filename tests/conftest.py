"""Test configuration for Search Refinery."""

import pytest

from search_refinery.config import get_settings
from search_refinery.models.results import SearchResult


@pytest.fixture
def make_result():
    """Factory for search results with sensible defaults."""

    def _make_result(
        title: str = "Example Result",
        url: str = "https://example.com/page",
        snippet: str = "An example snippet",
        **kwargs,
    ) -> SearchResult:
        return SearchResult(title=title, url=url, snippet=snippet, **kwargs)

    return _make_result


@pytest.fixture
def mock_env(monkeypatch):
    """Mock environment variables for testing."""
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("DEDUPLICATION__THRESHOLD", "0.6")
    monkeypatch.setenv("DEDUPLICATION__ENABLE_MERGING", "true")
    monkeypatch.setenv("PIPELINE__MAX_CONCURRENT", "3")

    # Clear lru_cache to ensure it picks up the new env vars
    get_settings.cache_clear()

    yield

    # Clean up
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Keep cached settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
