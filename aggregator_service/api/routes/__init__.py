"""HTTP routers for the Aggregator Service."""
