from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from pymongo.asynchronous.collection import AsyncCollection

from booking_analytics.db.mongo import get_event_collection
from booking_analytics.schemas.analytics import BookingAnalyticsResponse, FunnelSummary, ServiceSummary
from booking_analytics.services import booking_analytics as analytics_service
from booking_analytics.services import fixtures
from booking_analytics.services.validation import AnalyticsQuery, validate_range_query

router = APIRouter(tags=["analytics"])

# Read endpoints answer HEAD as well as GET.
READ_METHODS = ["GET", "HEAD"]

StartDate = Annotated[str | None, Query(alias="startDate", description="Range start, YYYY-MM-DD")]
EndDate = Annotated[str | None, Query(alias="endDate", description="Range end, YYYY-MM-DD")]


def range_query(start_date: StartDate = None, end_date: EndDate = None) -> AnalyticsQuery:
    return validate_range_query(start_date, end_date)


def keyed_range_query(
    start_date: StartDate = None,
    end_date: EndDate = None,
    key: Annotated[str | None, Query(description="Funnel flag to count")] = None,
) -> AnalyticsQuery:
    return validate_range_query(start_date, end_date, key, require_key=True)


# Query dependencies are declared before the collection so a bad request is a 400
# even while the event store is unavailable.
RangeQuery = Annotated[AnalyticsQuery, Depends(range_query)]
KeyedRangeQuery = Annotated[AnalyticsQuery, Depends(keyed_range_query)]
EventCollection = Annotated[AsyncCollection, Depends(get_event_collection)]


@router.api_route("/booking-analytics", methods=READ_METHODS, response_model=BookingAnalyticsResponse)
async def booking_analytics(query: KeyedRangeQuery, collection: EventCollection) -> BookingAnalyticsResponse:
    return await analytics_service.daily_distribution(collection, query)


@router.api_route("/booking-analytics/test", methods=READ_METHODS, response_model=BookingAnalyticsResponse)
async def booking_analytics_sample() -> dict[str, Any]:
    return fixtures.BOOKING_ANALYTICS_SAMPLE


@router.api_route("/booking-funnel-summary", methods=READ_METHODS, response_model=FunnelSummary)
async def booking_funnel_summary(query: RangeQuery, collection: EventCollection) -> FunnelSummary:
    return await analytics_service.funnel_summary(collection, query)


@router.api_route("/booking-funnel-summary/test", methods=READ_METHODS, response_model=FunnelSummary)
async def booking_funnel_summary_sample() -> dict[str, Any]:
    return fixtures.FUNNEL_SUMMARY_SAMPLE


@router.api_route("/services-summary", methods=READ_METHODS, response_model=list[ServiceSummary])
async def services_summary(query: RangeQuery, collection: EventCollection) -> list[ServiceSummary]:
    return await analytics_service.services_summary(collection, query)


@router.api_route("/services-summary/test", methods=READ_METHODS, response_model=list[ServiceSummary])
async def services_summary_sample() -> list[dict[str, Any]]:
    return fixtures.SERVICES_SUMMARY_SAMPLE
