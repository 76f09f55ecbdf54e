"""
Services package for the Aggregator Service.

This package contains the classes that orchestrate application workflows:
pagination over upstream listings, two-level aggregation, enrichment of cached
collections, and the catalog service tying them to the cache.
"""

from aggregator_service.services.aggregator import Aggregator
from aggregator_service.services.catalog_service import CatalogService
from aggregator_service.services.enrichment import apply_updates
from aggregator_service.services.paginator import Paginator

__all__ = ["Aggregator", "CatalogService", "Paginator", "apply_updates"]
