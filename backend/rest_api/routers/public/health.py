"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its database.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import get_db

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }


@router.get("/health/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """
    Health check that verifies database connectivity.

    Returns 503 Service Unavailable if the database is down.
    """
    try:
        db.execute(text("SELECT 1"))
        database = {"status": "healthy"}
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        database = {"status": "unhealthy", "error": type(e).__name__}

    healthy = database["status"] == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "service": "rest-api",
            "environment": settings.environment,
            "status": "healthy" if healthy else "unhealthy",
            "dependencies": {"database": database},
        },
    )
