import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from booking_analytics.api.v1 import analytics
from booking_analytics.api.v1.analytics import READ_METHODS
from booking_analytics.db.mongo import EventStoreUnavailableError, get_event_store
from booking_analytics.schemas.analytics import HealthResponse, ReadinessResponse
from booking_analytics.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

api_router = APIRouter()
api_router.include_router(analytics.router)

health_router = APIRouter(tags=["health"])


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@health_router.api_route("/health", methods=READ_METHODS, response_model=HealthResponse)
def healthcheck() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=_utc_timestamp())


@health_router.api_route(
    "/health/ready",
    methods=READ_METHODS,
    response_model=ReadinessResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse}},
)
async def readiness(request: Request):
    try:
        await get_event_store(request).ping()
    except (EventStoreUnavailableError, PyMongoError) as exc:
        logger.warning("readiness_check_failed", extra={"error": str(exc)})
        payload = ErrorResponse(error="Service unavailable", message=str(exc))
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload.to_content())
    return ReadinessResponse(status="ready")
