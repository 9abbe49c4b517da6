"""Data models for sitegraph."""

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from pydantic import BaseModel, Field, field_validator

DEFAULT_EXCLUDED_PATHS = ["/cdn-cgi", "/legal", "/static", "/blog"]

EDGE_PREFIX = "-> "


class Webpage(BaseModel):
    """A crawled page and its outbound references in extraction order."""

    url: str
    references: list[str] = Field(default_factory=list)
    depth: Optional[int] = None


class Site(BaseModel):
    """Append-only log of crawled pages, in completion order."""

    name: str
    webpages: list[Webpage] = Field(default_factory=list)

    def add_webpage(self, page: Webpage) -> None:
        self.webpages.append(page)

    def urls(self) -> list[str]:
        return [page.url for page in self.webpages]

    def sitemap_lines(self) -> list[str]:
        """One line per crawled page."""
        return self.urls()

    def sitegraph_lines(self) -> list[str]:
        """Each page URL followed by one edge line per reference."""
        lines = []
        for page in self.webpages:
            lines.append(page.url)
            lines.extend(EDGE_PREFIX + reference for reference in page.references)
        return lines

    @classmethod
    def from_sitegraph(cls, path: Path, name: Optional[str] = None) -> "Site":
        """
        Load a site back from a sitegraph file.

        Args:
            path: Path to a sitegraph.txt file
            name: Site name, defaults to the first page URL

        Returns:
            Site instance (page depths are unknown)
        """
        webpages: list[Webpage] = []
        with open(path, "r", encoding="utf-8") as f:
            for raw in f:
                line = raw.rstrip("\n")
                if not line:
                    continue
                if line.startswith(EDGE_PREFIX):
                    if not webpages:
                        raise ValueError(f"Edge before any page in {path}: {line}")
                    webpages[-1].references.append(line[len(EDGE_PREFIX):])
                else:
                    webpages.append(Webpage(url=line))

        if name is None:
            name = webpages[0].url if webpages else str(path)
        return cls(name=name, webpages=webpages)


class CrawlConfig(BaseModel):
    """Configuration for crawler behavior."""

    seed_url: str = Field(description="URL the crawl starts from; its host bounds the crawl")
    max_depth: int = Field(default=2, ge=0, description="Maximum link depth from the seed")
    politeness_delay: float = Field(
        default=2.0, ge=0, description="Seconds between successive fetch dispatches"
    )
    per_host_delay: bool = Field(
        default=True, description="Apply the politeness delay per host instead of globally"
    )
    excluded_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_PATHS),
        description="Path prefixes that are never crawled",
    )
    excluded_subdomains: list[str] = Field(
        default_factory=list, description="Hostnames containing any of these are never crawled"
    )
    max_concurrency: int = Field(default=10, ge=1, le=100, description="Max concurrent fetches")
    queue_size: int = Field(
        default=0, ge=0, description="Dispatch queue bound, 0 for unbounded"
    )
    timeout: float = Field(default=30, gt=0, description="Per-request timeout in seconds")
    crawl_timeout: Optional[float] = Field(
        default=None, gt=0, description="Overall crawl timeout in seconds"
    )
    status_interval: float = Field(
        default=2.0, gt=0, description="Seconds between crawl status log lines"
    )
    collect_pages: bool = Field(default=True, description="Record crawled pages in the site")
    user_agent: str = Field(default="sitegraph/0.1.0", description="User agent string")

    @field_validator("seed_url")
    @classmethod
    def _check_seed_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"seed_url must be an absolute http(s) URL, got {value!r}")
        return value

    @property
    def hostname(self) -> str:
        return urlparse(self.seed_url).hostname or ""
