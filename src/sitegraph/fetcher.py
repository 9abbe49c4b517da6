"""HTTP fetcher with async support."""

import asyncio
from typing import Optional, Protocol
import aiohttp
import structlog

from sitegraph.errors import FetchError

logger = structlog.get_logger()


class Transport(Protocol):
    """Anything that can fetch a URL's body as text."""

    async def fetch(self, url: str) -> str: ...


class Fetcher:
    """Async HTTP client wrapper."""

    def __init__(
        self,
        user_agent: str = "sitegraph/0.1.0",
        timeout: float = 30,
    ):
        self.user_agent = user_agent
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Create session on context enter."""
        self._session = aiohttp.ClientSession(
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close session on context exit."""
        if self._session:
            await self._session.close()
            self._session = None

    async def fetch(self, url: str) -> str:
        """
        Fetch a URL and return its body.

        Any HTTP response is returned as-is, whatever its status.

        Args:
            url: The URL to fetch

        Returns:
            Response body as text

        Raises:
            FetchError: On network failure or timeout
        """
        if not self._session:
            raise RuntimeError("Fetcher must be used as async context manager")

        try:
            async with self._session.get(url) as response:
                content = await response.text(errors="replace")
                logger.debug(
                    "fetched_url",
                    url=url,
                    status=response.status,
                    size=len(content),
                )
                return content

        except asyncio.TimeoutError:
            raise FetchError(url, "timeout")

        except (aiohttp.ClientError, ValueError) as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
