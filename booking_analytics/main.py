import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from booking_analytics.api.v1 import api_router, health_router
from booking_analytics.core.config import settings
from booking_analytics.core.logging_config import configure_logging
from booking_analytics.core.sentry import init_sentry
from booking_analytics.core.startup_checks import validate_production_settings
from booking_analytics.db import mongo
from booking_analytics.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from booking_analytics.schemas.error import ErrorResponse
from booking_analytics.services.booking_analytics import MalformedAggregationError
from booking_analytics.services.validation import AnalyticsQueryError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    validate_production_settings()
    await mongo.start(app)
    logger.info("server_started", extra={"port": settings.port})
    try:
        yield
    finally:
        logger.info("server_stopping")
        await mongo.stop(app)


def _error(status_code: int, payload: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.to_content())


def _internal_error(exc: Exception) -> JSONResponse:
    payload = ErrorResponse(error="Internal server error", message=str(exc) or exc.__class__.__name__)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, payload)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            payload = ErrorResponse(
                error="Not found",
                message=f"Route {request.method} {request.url.path} not found",
            )
            return _error(status.HTTP_404_NOT_FOUND, payload)
        return _error(exc.status_code, ErrorResponse(error=str(exc.detail)))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        messages = "; ".join(str(err.get("msg", "")) for err in exc.errors())
        payload = ErrorResponse(error="Invalid request", message=messages or "Invalid request parameters")
        return _error(status.HTTP_400_BAD_REQUEST, payload)

    @app.exception_handler(AnalyticsQueryError)
    async def analytics_query_exception_handler(request: Request, exc: AnalyticsQueryError):
        logger.info("analytics_query_rejected", extra={"path": request.url.path, "error": exc.error})
        return JSONResponse(status_code=exc.status_code, content=exc.payload())

    @app.exception_handler(mongo.EventStoreUnavailableError)
    @app.exception_handler(PyMongoError)
    @app.exception_handler(MalformedAggregationError)
    async def store_exception_handler(request: Request, exc: Exception):
        logger.exception("event_store_query_failed", extra={"path": request.url.path}, exc_info=exc)
        return _internal_error(exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", extra={"path": request.url.path}, exc_info=exc)
        return _internal_error(exc)


def get_application() -> FastAPI:
    configure_logging(settings.log_json)
    init_sentry()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        redirect_slashes=False,
        openapi_tags=[
            {"name": "analytics", "description": "Booking funnel analytics"},
            {"name": "health", "description": "Liveness and readiness probes"},
        ],
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(health_router)
    app.include_router(api_router, prefix="/api")
    register_exception_handlers(app)
    return app


app = get_application()
