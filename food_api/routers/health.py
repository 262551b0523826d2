"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from food_shared.config.settings import settings
from food_shared.infrastructure.db import get_db, ping, store_step
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import AppException

router = APIRouter(prefix="/api", tags=["health"])

HEALTH_CHECK_TIMEOUT_SECONDS = 3.0


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "food-api",
        "environment": settings.environment,
    }


@router.get("/health/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """
    Health check that verifies store connectivity.

    Returns 503 Service Unavailable if the store is unreachable.
    """
    store = {"type": db.get_bind().dialect.name}
    try:
        with store_step(db, "health ping", Deadline.after(HEALTH_CHECK_TIMEOUT_SECONDS)):
            ping(db)
        store["status"] = "healthy"
    except AppException as exc:
        store["status"] = "unhealthy"
        store["error"] = exc.detail

    healthy = store["status"] == "healthy"
    body = {
        "service": "food-api",
        "environment": settings.environment,
        "status": "healthy" if healthy else "unhealthy",
        "dependencies": {"store": store},
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)
