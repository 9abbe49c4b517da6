"""Work tracking and dispatch pacing."""

import asyncio
from typing import Optional
from urllib.parse import urlparse
import structlog

logger = structlog.get_logger()


class WorkTracker:
    """
    Counts outstanding units of work and signals when none remain.

    Every URL submitted to the engine adds one unit, released when the URL
    reaches a terminal state. A unit must be added before the unit that
    produced it is released, otherwise the count can reach zero early.
    """

    def __init__(self):
        self._count = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def count(self) -> int:
        return self._count

    def add(self, n: int = 1) -> None:
        self._count += n
        if self._count > 0:
            self._idle.clear()

    def done(self) -> None:
        if self._count <= 0:
            raise RuntimeError("WorkTracker.done() called more times than add()")
        self._count -= 1
        if self._count == 0:
            self._idle.set()

    async def wait(self) -> None:
        """Block until the count reaches zero."""
        await self._idle.wait()


class HostThrottle:
    """Enforces a minimum delay between dispatches to the same host."""

    def __init__(self, delay: float, per_host: bool = True):
        """
        Initialize throttle.

        Args:
            delay: Seconds between successive dispatches
            per_host: Track each host separately, otherwise one global slot
        """
        self.delay = delay
        self.per_host = per_host
        self._last: dict[str, float] = {}

    def _key(self, url: str) -> str:
        if not self.per_host:
            return "*"
        try:
            return urlparse(url).hostname or ""
        except ValueError:
            return ""

    async def wait(self, url: str) -> float:
        """
        Sleep until url's host may be dispatched to again, then record it.

        Returns:
            Seconds slept
        """
        if self.delay <= 0:
            return 0.0

        loop = asyncio.get_running_loop()
        key = self._key(url)
        last: Optional[float] = self._last.get(key)
        slept = 0.0
        if last is not None:
            slept = max(0.0, last + self.delay - loop.time())
            if slept > 0:
                logger.debug("politeness_wait", host=key, seconds=round(slept, 3))
                await asyncio.sleep(slept)

        self._last[key] = loop.time()
        return slept
