from typing import Dict, Iterable, List

from aggregator_service.core.logging import get_logger
from aggregator_service.domain.models.item import (
    AggregatedResult,
    EnrichmentOutcome,
    Item,
    ItemUpdate,
    id_key,
)

logger = get_logger(__name__)


def index_items(items: Iterable[Item]) -> Dict[str, List[Item]]:
    """Groups items by identity token; duplicate ids share one bucket."""
    index: Dict[str, List[Item]] = {}
    for item in items:
        index.setdefault(id_key(item.id), []).append(item)
    return index


def apply_updates(cached: AggregatedResult, updates: Iterable[ItemUpdate]) -> EnrichmentOutcome:
    """
    Applies partial updates to ``cached`` in place.

    A field is written only when the update carries it; ``0``, ``""`` and
    ``None`` are all written. Updates naming an unknown id are skipped.
    """
    index = index_items(cached.items)
    updated = 0

    for update in updates:
        matches = index.get(id_key(update.id))
        if not matches:
            logger.debug(f"No item {update.id} in collection for {cached.subject}")
            continue

        for item in matches:
            if update.has_description():
                item.description = update.description
            if update.has_price():
                item.price = update.price
        updated += 1

    return EnrichmentOutcome(updated=updated, total=len(cached.items))
