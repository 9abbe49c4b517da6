"""HTML parsing and link extraction."""

from typing import Protocol
from bs4 import BeautifulSoup
import structlog

from sitegraph.errors import ExtractionError

logger = structlog.get_logger()


class Extractor(Protocol):
    """Anything that can list the raw anchor hrefs of a document."""

    def extract(self, document: str, base_url: str) -> list[str]: ...


class LinkExtractor:
    """Extracts anchor hrefs from the body of an HTML document."""

    def extract(self, document: str, base_url: str) -> list[str]:
        """
        Extract raw href values of body anchors, in document order.

        Hrefs are returned unresolved; duplicates are kept.

        Args:
            document: Raw HTML content
            base_url: URL the document was fetched from (used for logging)

        Returns:
            List of href strings

        Raises:
            ExtractionError: If the document can't be parsed
        """
        try:
            soup = BeautifulSoup(document, "lxml")
        except Exception as e:
            raise ExtractionError(f"could not parse {base_url}: {e}") from e

        if soup.body is None:
            logger.debug("document_without_body", url=base_url)
            return []

        hrefs = [anchor["href"] for anchor in soup.body.find_all("a", href=True)]
        logger.debug("links_extracted", url=base_url, count=len(hrefs))
        return hrefs
