"""Output writers for the sitemap and sitegraph files."""

from pathlib import Path
import structlog

from sitegraph.models import Site

logger = structlog.get_logger()

SITEMAP_FILENAME = "sitemap.txt"
SITEGRAPH_FILENAME = "sitegraph.txt"


class Writer:
    """Handles writing a crawled site to plain text files."""

    @staticmethod
    def write_sitemap(site: Site, output_path: Path):
        """
        Write one crawled URL per line, in completion order.

        Args:
            site: Crawled site
            output_path: Output file path, overwritten if it exists

        Raises:
            OSError: If the file can't be created
        """
        with open(output_path, "w", encoding="utf-8") as f:
            for line in site.sitemap_lines():
                f.write(line + "\n")

        logger.info("wrote_sitemap", path=str(output_path), pages=len(site.webpages))

    @staticmethod
    def write_sitegraph(site: Site, output_path: Path):
        """
        Write each crawled URL followed by a `-> reference` line per outbound link.

        Args:
            site: Crawled site
            output_path: Output file path, overwritten if it exists

        Raises:
            OSError: If the file can't be created
        """
        with open(output_path, "w", encoding="utf-8") as f:
            for line in site.sitegraph_lines():
                f.write(line + "\n")

        logger.info("wrote_sitegraph", path=str(output_path), pages=len(site.webpages))

    @classmethod
    def write_all(cls, site: Site, output_dir: Path) -> tuple[Path, Path]:
        """
        Write both files into output_dir, creating it if needed.

        Returns:
            Paths of the sitemap and sitegraph files
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        sitemap_path = output_dir / SITEMAP_FILENAME
        sitegraph_path = output_dir / SITEGRAPH_FILENAME
        cls.write_sitemap(site, sitemap_path)
        cls.write_sitegraph(site, sitegraph_path)
        return sitemap_path, sitegraph_path
