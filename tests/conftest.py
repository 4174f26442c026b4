"""Pytest configuration and shared fixtures."""

import httpx
import pytest

from config import ScraperConfig
from scrapers import AnichinScraper, MarkupExtractor


@pytest.fixture
def extractor():
    return MarkupExtractor()


@pytest.fixture
def make_scraper():
    """Build an AnichinScraper whose requests go to a mock handler, without delays."""
    def factory(handler, **overrides):
        options = {"request_delay": 0, "retry_delay": 0, "max_retries": 2}
        options.update(overrides)
        return AnichinScraper(ScraperConfig(**options), transport=httpx.MockTransport(handler))
    return factory


@pytest.fixture
def serve():
    """Handler answering every request with the same HTML page and recording the requests."""
    def factory(html, status_code=200):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(status_code, text=html)

        handler.requests = requests
        return handler
    return factory
