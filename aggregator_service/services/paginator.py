from urllib.parse import quote

from aggregator_service.adapters.interfaces.page_source import PageFetcher
from aggregator_service.core.exceptions import UpstreamUnavailable
from aggregator_service.core.logging import get_logger
from aggregator_service.domain.models.page import PaginationResult

logger = get_logger(__name__)


def with_cursor(url: str, cursor: str) -> str:
    """Appends an escaped ``cursor`` query parameter to ``url``."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}cursor={quote(cursor, safe='')}"


class Paginator:
    """Follows continuation cursors on a single listing endpoint until exhausted."""

    def __init__(self, fetcher: PageFetcher, max_pages: int = 1000):
        self.fetcher = fetcher
        self.max_pages = max_pages

    async def fetch_all_pages(self, url: str) -> PaginationResult:
        """
        Collects the records of every page reachable from ``url``.

        Stops at the first page without a cursor. A failed request also stops
        pagination; the records gathered so far are returned with the failure
        recorded in ``fault`` instead of being raised.
        """
        result = PaginationResult()
        cursor = None

        while True:
            page_url = with_cursor(url, cursor) if cursor else url

            try:
                page = await self.fetcher.fetch_page(page_url)
            except UpstreamUnavailable as e:
                logger.warning(
                    f"Pagination of {url} stopped after {result.pages} page(s): {e.detail}"
                )
                result.fault = e
                return result

            result.pages += 1
            result.records.extend(page.items)
            cursor = page.next_cursor

            if not cursor:
                return result

            if result.pages >= self.max_pages:
                logger.warning(f"Pagination of {url} hit the {self.max_pages} page limit")
                return result
