"""Health check endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from genrepo.infra.database import db_manager

router = APIRouter()


@router.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint including database connectivity."""
    database_ok = await db_manager.health_check()
    return JSONResponse(
        status_code=status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if database_ok else "degraded",
            "database": "up" if database_ok else "down",
        },
    )
