"""API v1 main router - aggregates all domain routers."""

from fastapi import APIRouter

from genrepo.api.v1.endpoints import health, products

api_router = APIRouter()

# Include health check endpoint
api_router.include_router(
    health.router,
    tags=["Health"],
)

# Include product catalog endpoints
api_router.include_router(
    products.router,
    prefix="/products",
    tags=["Products"],
)
