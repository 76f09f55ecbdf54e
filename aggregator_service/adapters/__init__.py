"""
Adapters package for the Aggregator Service.

This package contains the contracts for upstream listing endpoints, caching and
persistence, plus the concrete HTTP implementation of the listing endpoints.
"""
