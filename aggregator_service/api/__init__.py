"""HTTP boundary: routers, dependencies and exception handlers."""
