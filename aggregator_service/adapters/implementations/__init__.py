"""Concrete adapter implementations."""

from aggregator_service.adapters.implementations.http_listing import HttpListingClient

__all__ = ["HttpListingClient"]
