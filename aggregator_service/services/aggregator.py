import asyncio
from typing import List
from urllib.parse import quote

from aggregator_service.core.logging import get_logger
from aggregator_service.domain.models.item import AggregatedResult, Container, Item, is_valid_id
from aggregator_service.services.paginator import Paginator

logger = get_logger(__name__)


class Aggregator:
    """
    Builds the flattened item collection of a subject.

    Lists the subject's containers, then each container's items, and
    concatenates them in container order. Upstream failures only shorten the
    result; see ``Paginator``.
    """

    def __init__(
        self,
        paginator: Paginator,
        containers_url_template: str,
        items_url_template: str,
        container_concurrency: int = 1
    ):
        """
        Args:
            paginator: Paginator over the upstream listing endpoints
            containers_url_template: URL with a ``{subject}`` placeholder
            items_url_template: URL with a ``{container_id}`` placeholder
            container_concurrency: Containers whose items are fetched at once
        """
        self.paginator = paginator
        self.containers_url_template = containers_url_template
        self.items_url_template = items_url_template
        self.container_concurrency = container_concurrency

    async def fetch_containers(self, subject: str) -> List[Container]:
        url = self.containers_url_template.format(subject=quote(str(subject), safe=""))
        result = await self.paginator.fetch_all_pages(url)
        if not result.complete:
            logger.warning(
                f"Container listing for subject {subject} is partial after "
                f"{result.pages} page(s), continuing with {len(result.records)} records"
            )

        containers = []
        for record in result.records:
            if not isinstance(record, dict) or not is_valid_id(record.get("id")):
                logger.debug(f"Skipping container record without a usable id for subject {subject}")
                continue
            containers.append(Container.from_record(record))
        return containers

    async def fetch_items(self, container: Container, subject: str = "") -> List[Item]:
        url = self.items_url_template.format(container_id=quote(str(container.id), safe=""))
        result = await self.paginator.fetch_all_pages(url)
        if not result.complete:
            logger.warning(
                f"Item listing of container {container.id} (subject {subject}) is partial after "
                f"{result.pages} page(s), continuing with {len(result.records)} records"
            )

        items = []
        for record in result.records:
            if not isinstance(record, dict) or not is_valid_id(record.get("id")):
                logger.debug(f"Skipping item record without a usable id in container {container.id}")
                continue
            items.append(Item.from_record(record, container))
        return items

    async def aggregate(self, subject: str) -> AggregatedResult:
        """Fetches and flattens all items of ``subject``."""
        containers = await self.fetch_containers(subject)

        if not containers:
            logger.info(f"Subject {subject} has no containers")
            return AggregatedResult(subject=subject)

        if self.container_concurrency <= 1:
            per_container = []
            for container in containers:
                per_container.append(await self.fetch_items(container, subject))
        else:
            semaphore = asyncio.Semaphore(self.container_concurrency)

            async def bounded(container: Container) -> List[Item]:
                async with semaphore:
                    return await self.fetch_items(container, subject)

            # gather keeps results in container order whatever finishes first
            per_container = await asyncio.gather(*(bounded(c) for c in containers))

        items = [item for container_items in per_container for item in container_items]

        logger.info(
            f"Aggregated {len(items)} items from {len(containers)} containers for subject {subject}"
        )
        return AggregatedResult(subject=subject, items=items)
