"""
sitegraph - map a website's pages and links.

Crawls a site to a fixed link depth and records its sitemap and sitegraph.
"""

__version__ = "0.1.0"

from sitegraph.crawler import Crawler
from sitegraph.errors import ExtractionError, FetchError, SitegraphError
from sitegraph.fetcher import Fetcher
from sitegraph.filters import FilterChain, PathFilter, ScopeFilter, SubdomainFilter
from sitegraph.models import CrawlConfig, Site, Webpage
from sitegraph.parser import LinkExtractor
from sitegraph.state import CrawlState, VisitState

__all__ = [
    "Crawler",
    "CrawlConfig",
    "CrawlState",
    "ExtractionError",
    "FetchError",
    "Fetcher",
    "FilterChain",
    "LinkExtractor",
    "PathFilter",
    "ScopeFilter",
    "Site",
    "SitegraphError",
    "SubdomainFilter",
    "VisitState",
    "Webpage",
]
