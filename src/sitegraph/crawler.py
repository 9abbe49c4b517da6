"""Core crawler engine."""

import asyncio
from typing import Optional
from urllib.parse import urljoin
from tqdm.asyncio import tqdm
import structlog

from sitegraph.errors import ExtractionError, FetchError
from sitegraph.fetcher import Fetcher, Transport
from sitegraph.filters import FilterChain
from sitegraph.models import CrawlConfig, Site, Webpage
from sitegraph.parser import Extractor, LinkExtractor
from sitegraph.scheduler import HostThrottle, WorkTracker
from sitegraph.state import CrawlState

logger = structlog.get_logger()


class Crawler:
    """
    Concurrent, depth-bounded site crawler.

    Three loops run for the duration of a crawl: intake (filter newly
    submitted URLs), dispatch (pace and launch fetch workers) and collection
    (record crawled pages). Each submitted URL holds one unit of work in the
    tracker until it is rejected, skipped, fails, or its page is collected;
    the crawl ends when no units remain.

    A Crawler runs a single crawl.
    """

    def __init__(
        self,
        config: CrawlConfig,
        transport: Optional[Transport] = None,
        extractor: Optional[Extractor] = None,
        filter_chain: Optional[FilterChain] = None,
    ):
        """
        Initialize crawler.

        Args:
            config: Crawler configuration
            transport: Fetches documents, an aiohttp Fetcher if None
            extractor: Lists document hrefs, a LinkExtractor if None
            filter_chain: URL filters, FilterChain.default() if None
        """
        self.config = config
        self.extractor = extractor or LinkExtractor()
        self.filter_chain = filter_chain or FilterChain.default()
        self.state = CrawlState()
        self.site = Site(name=config.seed_url)
        self.tracker = WorkTracker()
        self.throttle = HostThrottle(config.politeness_delay, per_host=config.per_host_delay)

        self.urls: asyncio.Queue[str] = asyncio.Queue()
        self.filtered_urls: asyncio.Queue[str] = asyncio.Queue(maxsize=config.queue_size)
        self.webpages: asyncio.Queue[Webpage] = asyncio.Queue()

        self.pages_crawled = 0
        self.fetch_failures = 0
        self.filtered_out = 0

        self._transport = transport
        self._slots = asyncio.Semaphore(config.max_concurrency)
        self._tasks: set[asyncio.Task] = set()
        self._started = False

    async def crawl(self, progress: bool = False) -> Site:
        """
        Crawl the site reachable from the configured seed URL.

        Args:
            progress: Show a progress bar

        Returns:
            Site with every successfully crawled page
        """
        if self._started:
            raise RuntimeError("Crawler instances run a single crawl")
        self._started = True

        logger.info(
            "crawl_started",
            url=self.config.seed_url,
            max_depth=self.config.max_depth,
            max_concurrency=self.config.max_concurrency,
            politeness_delay=self.config.politeness_delay,
        )

        if self._transport is None:
            async with Fetcher(
                user_agent=self.config.user_agent,
                timeout=self.config.timeout,
            ) as fetcher:
                completed = await self._run(fetcher, progress)
        else:
            completed = await self._run(self._transport, progress)

        logger.info(
            "crawl_completed",
            completed=completed,
            pages_crawled=self.pages_crawled,
            urls_discovered=self.state.discovered_count(),
            fetch_failures=self.fetch_failures,
            filtered_out=self.filtered_out,
        )
        return self.site

    def submit(self, url: str) -> None:
        """Queue a discovered URL for filtering."""
        self.tracker.add()
        self.urls.put_nowait(url)

    def is_quiescent(self) -> bool:
        """True when nothing is queued and no work is in flight."""
        return self.urls.empty() and self.filtered_urls.empty() and self.tracker.count == 0

    async def _run(self, transport: Transport, progress: bool) -> bool:
        seed = self.config.seed_url
        self.state.seed(seed)

        with tqdm(desc="Crawling pages", unit="page", disable=not progress) as pbar:
            loops = [
                asyncio.create_task(self._intake_loop()),
                asyncio.create_task(self._dispatch_loop(transport)),
                asyncio.create_task(self._collection_loop(pbar)),
            ]
            self.submit(seed)

            try:
                completed = await self._wait_for_quiescence(loops)
            finally:
                # Quit signal: stop the loops, and abandon workers on timeout.
                for task in loops:
                    task.cancel()
                if not self.is_quiescent():
                    for task in list(self._tasks):
                        task.cancel()
                await asyncio.gather(*loops, *self._tasks, return_exceptions=True)

        return completed

    async def _wait_for_quiescence(self, loops: list[asyncio.Task]) -> bool:
        """
        Wait until the tracker reports no outstanding work.

        Returns:
            True on quiescence, False if the crawl timeout expired first
        """
        loop = asyncio.get_running_loop()
        deadline = None
        if self.config.crawl_timeout is not None:
            deadline = loop.time() + self.config.crawl_timeout

        while True:
            interval = self.config.status_interval
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    logger.warning(
                        "crawl_timeout",
                        timeout=self.config.crawl_timeout,
                        in_flight=self.tracker.count,
                    )
                    return False
                interval = min(interval, remaining)

            try:
                await asyncio.wait_for(self.tracker.wait(), timeout=interval)
                logger.debug("crawl_quiescent")
                return True
            except asyncio.TimeoutError:
                pass

            for task in loops:
                if task.done() and not task.cancelled() and task.exception():
                    raise task.exception()

            logger.debug(
                "crawl_status",
                urls_queue=self.urls.qsize(),
                filtered_queue=self.filtered_urls.qsize(),
                in_flight=self.tracker.count,
            )

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _intake_loop(self):
        while True:
            url = await self.urls.get()
            self._spawn(self._filter(url))

    async def _filter(self, url: str):
        """Run the filter chain on url and forward it to dispatch if it passes."""
        try:
            passed = self.filter_chain.passes(url, self.config)
        except Exception as e:
            logger.error("filter_error", url=url, error=str(e))
            passed = False

        if not passed:
            self.filtered_out += 1
            self.tracker.done()
            return

        # Parks here while the dispatch queue is full.
        await self.filtered_urls.put(url)

    async def _dispatch_loop(self, transport: Transport):
        while True:
            url = await self.filtered_urls.get()

            if not self.state.can_fetch(url, self.config.max_depth):
                self._log_skip(url)
                self.tracker.done()
                continue

            await self.throttle.wait(url)
            await self._slots.acquire()
            self._spawn(self._worker(transport, url))

    async def _worker(self, transport: Transport, url: str):
        """Fetch one URL and hand its page to the collection loop."""
        page = None
        try:
            page = await self._crawl_page(transport, url)
        except Exception as e:
            # Errors stay local to this URL; its unit of work is still released.
            self.state.release(url)
            self.fetch_failures += 1
            logger.error("crawl_error", url=url, error=str(e))
        finally:
            self._slots.release()

        if page is None:
            self.tracker.done()
        else:
            # The collection loop releases this URL's unit of work.
            self.webpages.put_nowait(page)

    async def _crawl_page(self, transport: Transport, url: str) -> Optional[Webpage]:
        if not self.state.claim(url, self.config.max_depth):
            self._log_skip(url)
            return None

        depth, _ = self.state.get_depth(url)

        try:
            document = await transport.fetch(url)
        except FetchError as e:
            self.state.release(url)
            self.fetch_failures += 1
            logger.warning("fetch_error", url=url, error=e.reason)
            return None
        except Exception as e:
            self.state.release(url)
            self.fetch_failures += 1
            logger.error("crawl_error", url=url, error=str(e))
            return None

        try:
            hrefs = self.extractor.extract(document, url)
        except ExtractionError as e:
            logger.warning("extraction_error", url=url, error=str(e))
            hrefs = []
        except Exception as e:
            logger.error("extraction_error", url=url, error=str(e))
            hrefs = []

        page = Webpage(url=url, depth=depth)
        self._expand(page, hrefs)
        self.state.complete(url)

        logger.info(
            "page_crawled",
            url=url,
            depth=depth,
            references=len(page.references),
        )
        return page

    def _expand(self, page: Webpage, hrefs: list[str]) -> None:
        """Resolve hrefs into page references and submit undiscovered ones."""
        for raw_href in hrefs:
            href = raw_href.strip()
            if href.startswith("#"):
                continue

            try:
                link = urljoin(page.url, href)
            except ValueError:
                logger.debug("invalid_href", url=page.url, href=raw_href)
                continue

            page.references.append(link)
            if self.state.discover(link, page.depth + 1):
                self.submit(link)

    async def _collection_loop(self, pbar):
        while True:
            page = await self.webpages.get()
            if self.config.collect_pages:
                self.site.add_webpage(page)
            self.pages_crawled += 1

            logger.debug("page_added", url=page.url, total_pages=self.pages_crawled)
            pbar.update(1)
            pbar.set_postfix({"depth": page.depth, "in_flight": self.tracker.count})
            self.tracker.done()

    def _log_skip(self, url: str) -> None:
        depth, _ = self.state.get_depth(url)
        visited, _ = self.state.get_visited(url)
        logger.debug(
            "fetch_skipped",
            url=url,
            depth=depth,
            visited=visited.value if visited else None,
        )
