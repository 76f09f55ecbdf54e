from abc import ABC, abstractmethod

from aggregator_service.domain.models.item import ItemId, ItemUpdate
from aggregator_service.domain.models.page import Page


class PageFetcher(ABC):
    """
    Abstract base interface for upstream listing endpoints.

    Implementations fetch exactly one page per call and leave cursor handling
    to the caller.
    """

    @abstractmethod
    async def fetch_page(self, url: str) -> Page:
        """
        Fetches one listing page.

        Args:
            url: Fully built page URL, cursor included

        Returns:
            Page: The page records and continuation cursor. A payload without
                  the list field yields an empty page.

        Raises:
            UpstreamUnavailable: On a non-success status, transport error or
                                 undecodable body.
        """
        pass


class DetailFetcher(ABC):
    """Abstract base interface for the per-item detail endpoint."""

    async def close(self) -> None:
        """Releases network resources held by the fetcher."""
        pass

    @abstractmethod
    async def fetch_details(self, item_id: ItemId) -> ItemUpdate:
        """
        Fetches description and price for one item.

        Returns:
            ItemUpdate: Update carrying every field the endpoint reported

        Raises:
            UpstreamUnavailable: If the detail request fails
        """
        pass
