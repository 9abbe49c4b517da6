"""Shared crawl state: discovery depth and visit status per URL."""

import threading
from enum import Enum
from typing import Optional


class VisitState(str, Enum):
    """Visit status of a discovered URL."""

    UNVISITED = "unvisited"
    FETCHING = "fetching"
    VISITED = "visited"


class CrawlState:
    """
    Thread-safe URL -> depth and URL -> visit-status store.

    Every method takes the internal lock, so callers never need their own.
    `discover` and `claim` are atomic check-and-set operations; use them
    instead of separate get/set calls when the decision depends on the
    current value.
    """

    def __init__(self):
        self._depth: dict[str, int] = {}
        self._visited: dict[str, VisitState] = {}
        self._lock = threading.Lock()

    def get_depth(self, url: str) -> tuple[Optional[int], bool]:
        with self._lock:
            return self._depth.get(url), url in self._depth

    def set_depth(self, url: str, depth: int) -> None:
        with self._lock:
            self._depth[url] = depth

    def get_visited(self, url: str) -> tuple[Optional[VisitState], bool]:
        with self._lock:
            return self._visited.get(url), url in self._visited

    def set_visited(self, url: str, state: VisitState) -> None:
        with self._lock:
            self._visited[url] = state

    def seed(self, url: str) -> None:
        """Register the crawl's starting URL at depth 0."""
        with self._lock:
            self._depth[url] = 0
            self._visited[url] = VisitState.UNVISITED

    def discover(self, url: str, depth: int) -> bool:
        """
        Record a newly found URL if it has never been seen.

        Depth is set only on first discovery.

        Returns:
            True if the URL was inserted, False if it was already known
        """
        with self._lock:
            if url in self._visited:
                return False
            self._visited[url] = VisitState.UNVISITED
            self._depth.setdefault(url, depth)
            return True

    def can_fetch(self, url: str, max_depth: int) -> bool:
        """Whether a claim on url could currently succeed."""
        with self._lock:
            return self._fetchable(url, max_depth)

    def claim(self, url: str, max_depth: int) -> bool:
        """
        Take ownership of url for fetching.

        Succeeds for at most one caller while the URL is unvisited and within
        max_depth, moving it to FETCHING.
        """
        with self._lock:
            if not self._fetchable(url, max_depth):
                return False
            self._visited[url] = VisitState.FETCHING
            return True

    def complete(self, url: str) -> None:
        """Mark a claimed URL as visited."""
        with self._lock:
            self._visited[url] = VisitState.VISITED

    def release(self, url: str) -> None:
        """Return a claimed URL to unvisited after a failed fetch."""
        with self._lock:
            if self._visited.get(url) is VisitState.FETCHING:
                self._visited[url] = VisitState.UNVISITED

    def visited_count(self) -> int:
        with self._lock:
            return sum(1 for s in self._visited.values() if s is VisitState.VISITED)

    def discovered_count(self) -> int:
        with self._lock:
            return len(self._visited)

    def _fetchable(self, url: str, max_depth: int) -> bool:
        depth = self._depth.get(url)
        if depth is None or depth > max_depth:
            return False
        return self._visited.get(url) is VisitState.UNVISITED
