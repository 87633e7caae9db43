"""API v1 endpoints."""

from genrepo.api.v1.endpoints import health, products

__all__ = ["health", "products"]
