"""
Domain package for the Aggregator Service.

This package contains domain models and request/response schemas. The domain
layer is independent of external systems, containing the pure data structures
of the application.
"""
