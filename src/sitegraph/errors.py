"""Exceptions raised by sitegraph."""


class SitegraphError(Exception):
    """Base class for sitegraph errors."""


class FetchError(SitegraphError):
    """Raised when a URL cannot be fetched."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"failed to fetch {url}: {reason}")


class ExtractionError(SitegraphError):
    """Raised when links cannot be extracted from a fetched document."""
