"""Pytest configuration and fixtures."""

import asyncio
from collections import Counter

import pytest

from sitegraph.errors import FetchError
from sitegraph.models import CrawlConfig


class FakeTransport:
    """In-memory transport serving canned documents."""

    def __init__(self, pages: dict[str, str], delay: float = 0.0):
        self.pages = pages
        self.delay = delay
        self.calls: Counter = Counter()

    async def fetch(self, url: str) -> str:
        self.calls[url] += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if url not in self.pages:
            raise FetchError(url, "not found")
        return self.pages[url]


def links_page(*hrefs: str) -> str:
    """HTML document whose body links to each href in order."""
    anchors = "\n".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><head><title>t</title></head><body>{anchors}</body></html>"


@pytest.fixture
def sample_html():
    """Sample HTML for testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Test Page</title>
        <base href="/base/">
        <link rel="stylesheet" href="/style.css">
    </head>
    <body>
        <h1>Welcome</h1>
        <p>This is a test page with some content.</p>
        <a href="/page1">Page 1</a>
        <a href="#section">Jump</a>
        <a href="/page2">Page 2</a>
        <a href="/page1">Page 1 again</a>
        <a name="anchor-without-href">No href</a>
        <a href="https://external.com">External</a>
    </body>
    </html>
    """


@pytest.fixture
def sample_url():
    """Sample base URL for testing."""
    return "https://example.com"


@pytest.fixture
def make_config():
    """Factory for fast test configs (no politeness delay)."""

    def _make(seed_url: str = "https://example.test/", **overrides) -> CrawlConfig:
        values = {
            "seed_url": seed_url,
            "politeness_delay": 0,
            "status_interval": 0.05,
            "crawl_timeout": 10,
        }
        values.update(overrides)
        return CrawlConfig(**values)

    return _make


@pytest.fixture
def make_transport():
    """Factory for in-memory transports."""
    return FakeTransport


@pytest.fixture
def page_html():
    """Builds an HTML document linking to the given hrefs."""
    return links_page
