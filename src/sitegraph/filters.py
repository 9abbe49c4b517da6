"""URL filtering utilities."""

from typing import Callable, Optional
from urllib.parse import urlparse
import structlog

from sitegraph.models import CrawlConfig

logger = structlog.get_logger()

FilterFunc = Callable[[str, CrawlConfig], bool]


def _hostname(url: str) -> Optional[str]:
    """Return the lowercased hostname of url, or None if it can't be parsed."""
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


class ScopeFilter:
    """Keep URLs on the seed host or one of its subdomains."""

    def __call__(self, url: str, config: CrawlConfig) -> bool:
        host = _hostname(url)
        if not host:
            return False

        base = config.hostname
        return host == base or host.endswith(f".{base}")


class PathFilter:
    """Reject URLs whose path starts with an excluded prefix."""

    def __call__(self, url: str, config: CrawlConfig) -> bool:
        try:
            path = urlparse(url).path
        except ValueError:
            return False

        return not any(path.startswith(prefix) for prefix in config.excluded_paths)


class SubdomainFilter:
    """Reject URLs whose hostname contains a denylisted subdomain."""

    def __call__(self, url: str, config: CrawlConfig) -> bool:
        host = _hostname(url)
        if not host:
            return False

        return not any(denied in host for denied in config.excluded_subdomains)


class FilterChain:
    """Conjunction of URL filters, evaluated in registration order."""

    def __init__(self, filters: Optional[list[FilterFunc]] = None):
        """
        Initialize filter chain.

        Args:
            filters: Filters to register, in evaluation order
        """
        self.filters: list[FilterFunc] = list(filters or [])

    def add(self, url_filter: FilterFunc) -> "FilterChain":
        """Register a filter and return the chain for chaining calls."""
        self.filters.append(url_filter)
        return self

    def passes(self, url: str, config: CrawlConfig) -> bool:
        """
        Check if URL should be scheduled for fetching.

        Stops at the first failing filter.

        Args:
            url: Candidate URL
            config: Crawler configuration

        Returns:
            True if URL passes every registered filter
        """
        for url_filter in self.filters:
            if not url_filter(url, config):
                logger.debug(
                    "url_filtered",
                    url=url,
                    filter=getattr(url_filter, "__name__", type(url_filter).__name__),
                )
                return False
        return True

    @classmethod
    def default(cls) -> "FilterChain":
        """Chain with the scope, path and subdomain filters."""
        return cls([ScopeFilter(), PathFilter(), SubdomainFilter()])
