"""
Basic crawling example.

Crawls a site two links deep and writes sitemap.txt and sitegraph.txt
into the current directory.
"""

import asyncio
from pathlib import Path

from sitegraph import Crawler, CrawlConfig
from sitegraph.writers import Writer


async def main():
    """Simple crawl example."""
    config = CrawlConfig(
        seed_url="https://example.com/",
        max_depth=2,
        politeness_delay=1,
    )

    site = await Crawler(config).crawl(progress=True)

    print(f"\nCrawled {len(site.webpages)} pages\n")
    for page in site.webpages:
        print(f"{page.url} (depth {page.depth}, {len(page.references)} references)")

    Writer.write_all(site, Path("."))


if __name__ == "__main__":
    asyncio.run(main())
