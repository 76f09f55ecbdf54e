"""
Aggregator Service - Aggregation layer for paginated upstream listings.

This package collects a subject's containers and their items from upstream
listing APIs, caches the flattened collection with a TTL, and applies
enrichment (description, price) to cached items.
"""

__version__ = "0.1.0"
