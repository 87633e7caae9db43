"""FastAPI main application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from genrepo.api.v1.router import api_router
from genrepo.core.config import settings
from genrepo.core.exceptions import (
    InvalidIncludeError,
    PredicateEvaluationError,
    RepositoryError,
    StoreUnavailableError,
)
from genrepo.core.logging import configure_logging
from genrepo.domains.catalog.seed import seed_catalog
from genrepo.infra.database import close_db, db_manager, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown events."""
    configure_logging()
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)
    logger.info("Environment: %s, debug: %s", settings.ENVIRONMENT, settings.DEBUG)

    await init_db()
    if settings.SEED_CATALOG:
        async with db_manager.transaction() as session:
            await seed_catalog(session)

    yield

    logger.info("Shutting down")
    await close_db()


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    """Map an unreachable store to 503."""
    logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": exc.detail},
    )


async def query_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """Map criteria and include errors to 400."""
    logger.warning("Rejected query on %s %s: %s", request.method, request.url.path, exc)
    content: dict[str, object] = {"detail": str(exc)}
    if isinstance(exc, PredicateEvaluationError):
        content["entity_id"] = exc.entity_id
        content["field"] = exc.field
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Read-only product catalog over a generic repository",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(PredicateEvaluationError, query_error_handler)
    app.add_exception_handler(InvalidIncludeError, query_error_handler)

    # Include API routers
    app.include_router(api_router, prefix="/api/v1")

    # Health check endpoint (for Docker healthcheck)
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for container orchestration."""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "genrepo.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS if not settings.DEBUG else 1,
    )
