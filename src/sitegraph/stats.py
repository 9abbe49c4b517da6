"""Statistics and analysis for crawled sites."""

import csv
from pathlib import Path
from typing import Any
from collections import Counter
from urllib.parse import urlparse
import structlog

from sitegraph.models import Site

logger = structlog.get_logger()


def _host(url: str) -> str:
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


class CrawlStats:
    """Analyzes and computes statistics for a crawled site."""

    def __init__(self, site: Site):
        """
        Initialize stats analyzer.

        Args:
            site: Crawled site to analyze
        """
        self.site = site
        self._stats_cache: dict[str, Any] = {}

    @classmethod
    def from_file(cls, file_path: Path) -> "CrawlStats":
        """Load a sitegraph file and create stats."""
        site = Site.from_sitegraph(file_path)
        logger.debug("loaded_sitegraph", path=str(file_path), pages=len(site.webpages))
        return cls(site)

    def compute(self) -> dict[str, Any]:
        """
        Compute all statistics.

        References are internal when their host equals the first page's host
        or is a subdomain of it.

        Returns:
            Dictionary with site stats
        """
        if self._stats_cache:
            return self._stats_cache

        pages = self.site.webpages
        total_pages = len(pages)
        if total_pages == 0:
            return {"total_pages": 0}

        base_host = _host(pages[0].url)
        crawled = set(self.site.urls())

        references = [ref for page in pages for ref in page.references]
        total_references = len(references)
        self_references = sum(
            1 for page in pages for ref in page.references if ref == page.url
        )

        ref_hosts = [_host(ref) for ref in references]
        internal = sum(
            1 for host in ref_hosts if host == base_host or host.endswith(f".{base_host}")
        )
        top_hosts = Counter(host for host in ref_hosts if host).most_common(10)

        # Pages loaded from a sitegraph file carry no depth.
        depths = [page.depth for page in pages if page.depth is not None]
        pages_by_depth = Counter(depths)

        # Crawled pages nothing else links to.
        referenced = set(references)
        orphans = [url for url in crawled if url not in referenced]

        self._stats_cache = {
            "total_pages": total_pages,
            "total_references": total_references,
            "unique_references": len(referenced),
            "avg_references_per_page": round(total_references / total_pages, 2),
            "internal_references": internal,
            "external_references": total_references - internal,
            "self_references": self_references,
            "uncrawled_references": len(referenced - crawled),
            "orphan_pages": len(orphans),
            "max_depth": max(depths) if depths else None,
            "pages_by_depth": dict(pages_by_depth),
            "top_hosts": [{"host": h, "count": c} for h, c in top_hosts],
        }

        return self._stats_cache

    def format_summary(self) -> str:
        """
        Format stats as human-readable summary.

        Returns:
            Formatted string with statistics
        """
        stats = self.compute()

        if stats["total_pages"] == 0:
            return "No pages found."

        lines = [
            "=" * 60,
            "sitegraph Crawl Statistics",
            "=" * 60,
            "",
            f"Site: {self.site.name}",
            f"Total Pages: {stats['total_pages']:,}",
            f"Total References: {stats['total_references']:,}",
            f"Unique References: {stats['unique_references']:,}",
            f"Avg References/Page: {stats['avg_references_per_page']}",
            "",
            "References:",
            f"  Internal: {stats['internal_references']:,}",
            f"  External: {stats['external_references']:,}",
            f"  Self: {stats['self_references']:,}",
            f"  Not Crawled: {stats['uncrawled_references']:,}",
            f"  Orphan Pages: {stats['orphan_pages']:,}",
            "",
            "Top Referenced Hosts:",
        ]

        for item in stats["top_hosts"][:5]:
            lines.append(f"    - {item['host']}: {item['count']} references")

        if stats["pages_by_depth"]:
            lines.extend(["", "Depth Distribution:"])
            for depth in sorted(stats["pages_by_depth"].keys()):
                count = stats["pages_by_depth"][depth]
                bar = "#" * min(50, count)
                lines.append(f"  Depth {depth}: {count:>4} {bar}")

        lines.extend(["", "=" * 60])
        return "\n".join(lines)

    def export_csv(self, output_path: Path):
        """
        Export stats to CSV file.

        Args:
            output_path: Path to output CSV file
        """
        stats = self.compute()

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)

            writer.writerow(["Metric", "Value"])
            writer.writerow(["Total Pages", stats["total_pages"]])
            if stats["total_pages"]:
                writer.writerow(["Total References", stats["total_references"]])
                writer.writerow(["Unique References", stats["unique_references"]])
                writer.writerow(["Avg References per Page", stats["avg_references_per_page"]])
                writer.writerow(["Internal References", stats["internal_references"]])
                writer.writerow(["External References", stats["external_references"]])
                writer.writerow(["Max Depth", stats["max_depth"]])
                writer.writerow([])

                writer.writerow(["Top Hosts", "Count"])
                for item in stats["top_hosts"]:
                    writer.writerow([item["host"], item["count"]])

        logger.info("exported_stats_csv", path=str(output_path))
