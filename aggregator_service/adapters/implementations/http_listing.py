import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from aggregator_service.adapters.interfaces.page_source import DetailFetcher, PageFetcher
from aggregator_service.core.exceptions import UpstreamUnavailable
from aggregator_service.core.logging import get_logger
from aggregator_service.domain.models.item import ItemId, ItemUpdate
from aggregator_service.domain.models.page import Page

logger = get_logger(__name__)

ITEMS_FIELD = "data"
CURSOR_FIELD = "nextPageCursor"
DESCRIPTION_FIELD = "Description"
PRICE_FIELD = "PriceInRobux"


class HttpListingClient(PageFetcher, DetailFetcher):
    """
    httpx-backed client for the upstream listing and detail endpoints.

    Every request is bounded by ``timeout``. Failures are raised as
    ``UpstreamUnavailable``; the caller decides whether to degrade.
    """

    def __init__(
        self,
        details_url_template: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the listing client.

        Args:
            details_url_template: Detail URL with an ``{item_id}`` placeholder
            timeout: Per-request timeout in seconds
            http_client: Optional pre-built async client (used by tests)
        """
        self.details_url_template = details_url_template
        self.timeout = timeout
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self.http_client.aclose()

    async def _get_json(self, url: str) -> Any:
        start_time = time.time()
        try:
            response = await self.http_client.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Upstream returned HTTP {e.response.status_code} for {url}")
            raise UpstreamUnavailable(url, status_code=e.response.status_code, original_exception=e)
        except httpx.RequestError as e:
            logger.warning(f"Request error calling {url}: {str(e)}")
            raise UpstreamUnavailable(url, original_exception=e)
        except ValueError as e:
            logger.warning(f"Undecodable body from {url}: {str(e)}")
            raise UpstreamUnavailable(url, detail="Upstream returned an undecodable body", original_exception=e)

        logger.debug(f"Fetched {url} in {(time.time() - start_time) * 1000:.1f}ms")
        return payload

    async def fetch_page(self, url: str) -> Page:
        payload = await self._get_json(url)
        if not isinstance(payload, dict):
            logger.warning(f"Page from {url} is not an object, treating as empty")
            return Page()

        items = payload.get(ITEMS_FIELD)
        if not isinstance(items, list):
            logger.debug(f"Page from {url} has no '{ITEMS_FIELD}' list")
            items = []

        # An empty cursor string ends pagination just like a missing one
        cursor = payload.get(CURSOR_FIELD) or None
        return Page(items=items, next_cursor=str(cursor) if cursor is not None else None)

    async def fetch_details(self, item_id: ItemId) -> ItemUpdate:
        url = self.details_url_template.format(item_id=quote(str(item_id), safe=""))
        payload = await self._get_json(url)

        update = ItemUpdate(id=item_id)
        if not isinstance(payload, dict):
            return update

        details: Dict[str, Any] = payload
        if DESCRIPTION_FIELD in details:
            description = details[DESCRIPTION_FIELD]
            update.description = None if description is None else str(description)
        if PRICE_FIELD in details:
            price = details[PRICE_FIELD]
            if price is None or (isinstance(price, (int, float)) and not isinstance(price, bool)):
                update.price = price
            else:
                logger.warning(f"Ignoring non-numeric price {price!r} for item {item_id}")
        return update
