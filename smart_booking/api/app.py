"""FastAPI application for Smart Booking Pro."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smart_booking.api.routes.assistant import router as assistant_router
from smart_booking.api.routes.bookings import router as bookings_router
from smart_booking.api.routes.health import ENDPOINTS
from smart_booking.api.routes.health import router as health_router
from smart_booking.api.services import Services
from smart_booking.config import APP_NAME, APP_VERSION
from smart_booking.domain.errors import InvalidRequest, UsageLimitExceeded
from smart_booking.domain.store import StoreError

log = logging.getLogger(__name__)


# "blank" comes from RequiredText in api/models.py.
_ABSENT_ERROR_TYPES = ("missing", "blank")


def _field_name(err: dict) -> str:
    return str(err["loc"][-1]) if err.get("loc") else "body"


def _describe_validation_errors(errors: list[dict]) -> str:
    missing = [_field_name(e) for e in errors if e.get("type") in _ABSENT_ERROR_TYPES]
    invalid = [_field_name(e) for e in errors if e.get("type") not in _ABSENT_ERROR_TYPES]

    parts = []
    if len(missing) == 1:
        parts.append(f"{missing[0]} is required")
    elif missing:
        parts.append(f"Missing required fields: {', '.join(missing)}")
    if len(invalid) == 1:
        parts.append(f"{invalid[0]} is invalid")
    elif invalid:
        parts.append(f"Invalid fields: {', '.join(invalid)}")
    return "; ".join(parts)


def create_app(services: Services) -> FastAPI:
    """Build the app around already-constructed clients.

    The app owns the clients from here on: they are closed when the
    server shuts down (uvicorn turns SIGTERM/SIGINT into a lifespan
    shutdown).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("%s %s ready (env=%s)", APP_NAME, APP_VERSION, services.settings.app_env)
        yield
        log.info("Shutting down, closing clients")
        await services.close()

    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION, lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(services.settings.cors_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        log.info("Validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": _describe_validation_errors(exc.errors()),
                "invalidFields": [_field_name(err) for err in exc.errors()],
            },
        )

    @app.exception_handler(InvalidRequest)
    async def invalid_request_handler(request: Request, exc: InvalidRequest) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(UsageLimitExceeded)
    async def usage_limit_handler(request: Request, exc: UsageLimitExceeded) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": "Daily API limit exceeded. Please upgrade your plan."},
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        log.error("Storage failure on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Storage unavailable"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": "Endpoint not found", "availableEndpoints": list(ENDPOINTS.values())},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "message": "Something went wrong" if services.settings.is_production else str(exc),
            },
        )

    app.include_router(health_router)
    app.include_router(assistant_router)
    app.include_router(bookings_router)
    return app
