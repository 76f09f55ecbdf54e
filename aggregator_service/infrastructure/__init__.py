"""
Infrastructure package for the Aggregator Service.

Provides the result cache and its persistence backends.
"""
