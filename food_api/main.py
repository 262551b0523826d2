"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from food_api import __version__
from food_api.models import Base
from food_api.routers import (
    add_ons_router,
    auth_router,
    branches_router,
    categories_router,
    health_router,
    menus_router,
    orders_router,
    sales_router,
    users_router,
)
from food_shared.config.logging import api_logger as logger, setup_logging
from food_shared.config.settings import settings
from food_shared.infrastructure.correlation import REQUEST_ID_HEADER, RequestIdMiddleware
from food_shared.infrastructure.db import engine
from food_shared.security.rate_limit import limiter, rate_limit_exceeded_handler
from food_shared.utils.exceptions import AppException, app_exception_handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    setup_logging()

    secret_errors = settings.validate_production_secrets()
    if secret_errors:
        for error in secret_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(secret_errors)}. "
                "Server will not start with insecure configuration."
            )
        logger.warning("Running with insecure defaults (acceptable for development only)")

    logger.info("Starting REST API", port=settings.rest_api_port, env=settings.environment)

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down REST API")
    engine.dispose()


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies use the application error shape."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": jsonable_encoder(exc.errors()),
            "code": "INVALID_INPUT",
            "step": None,
            "partial": False,
            "retriable": False,
        },
    )


app = FastAPI(
    title="nano-food REST API",
    description="Restaurant management API: catalog, orders and sales",
    version=__version__,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Structured application errors
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(branches_router)
app.include_router(categories_router)
app.include_router(menus_router)
app.include_router(add_ons_router)
app.include_router(orders_router)
app.include_router(sales_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("food_api.main:app", host="0.0.0.0", port=settings.rest_api_port, reload=settings.debug)
