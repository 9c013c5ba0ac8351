"""
FastAPI application factory.

* Registers routes for orders and admin.
* Maps domain errors onto HTTP status codes.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, orders
from src.config import settings
from src.domain.errors import DriverNotFound, InvalidArgument, InvalidState
from src.infrastructure.locks import LockNotAcquired
from src.infrastructure.order_store import OrderNotFound

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# exception type -> HTTP status
ERROR_STATUS = {
    OrderNotFound: 404,
    DriverNotFound: 404,
    InvalidState: 409,
    LockNotAcquired: 409,
    InvalidArgument: 422,
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info(
            "%s %s rejected (%d): %s",
            request.method,
            request.url.path,
            status_code,
            exc,
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


def create_app() -> FastAPI:
    app = FastAPI(
        title="Taxi Order API",
        description=(
            "Creates taxi orders and drives them through their lifecycle: "
            "driver assignment, ride start and finish, or cancellation."
        ),
        version="1.0.0",
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    for exc_type, status_code in ERROR_STATUS.items():
        app.add_exception_handler(exc_type, _error_handler(status_code))

    # Routers
    app.include_router(orders.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
