from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from bson.decimal128 import Decimal128
from pymongo.asynchronous.collection import AsyncCollection

from booking_analytics.core.config import settings
from booking_analytics.schemas.analytics import (
    BookingAnalyticsResponse,
    DailyCount,
    DateRange,
    FunnelSummary,
    ServiceSummary,
)
from booking_analytics.services import pipelines
from booking_analytics.services.validation import AnalyticsQuery

logger = logging.getLogger(__name__)


class MalformedAggregationError(RuntimeError):
    """The store answered with a result shape the service cannot reshape."""


async def _aggregate(collection: AsyncCollection, pipeline: pipelines.Pipeline) -> list[dict[str, Any]]:
    cursor = await collection.aggregate(pipeline)
    return await cursor.to_list(None)


def _number(value: Any) -> int | float:
    # Exact money fields come back as Decimal128; JSON output stays a plain number.
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    if isinstance(value, Decimal):
        return float(value)
    return value or 0


def _facet_value(data: dict[str, Any], name: str, field: str) -> int | float:
    branch = data.get(name) or []
    if not isinstance(branch, list):
        raise MalformedAggregationError(f"Facet {name!r} is not a list")
    if not branch:
        return 0
    return _number(branch[0].get(field))


def build_distribution(query: AnalyticsQuery, rows: list[dict[str, Any]]) -> BookingAnalyticsResponse:
    distribution = [DailyCount(count=int(row["count"]), date=str(row["_id"])) for row in rows]
    return BookingAnalyticsResponse(
        key=query.key or "",
        date_range=DateRange(start=query.start_date, end=query.end_date),
        total=sum(item.count for item in distribution),
        distribution=distribution,
    )


def build_funnel_summary(rows: list[dict[str, Any]]) -> FunnelSummary:
    data = rows[0] if rows else {}
    values: dict[str, int | float] = {}
    for name in pipelines.funnel_summary_facets():
        field = pipelines.FACET_SUM_FIELD if name.startswith("amount") else pipelines.FACET_COUNT_FIELD
        values[name] = _facet_value(data, name, field)
    return FunnelSummary(**values)


def build_services_summary(rows: list[dict[str, Any]]) -> list[ServiceSummary]:
    return [
        ServiceSummary(
            id=row.get("id"),
            label=row.get("label"),
            count=int(row.get("count") or 0),
            amount_price=_number(row.get("amount_price")),
        )
        for row in rows
    ]


async def daily_distribution(collection: AsyncCollection, query: AnalyticsQuery) -> BookingAnalyticsResponse:
    if query.key is None:
        raise ValueError("daily_distribution requires a funnel key")
    pipeline = pipelines.daily_distribution_pipeline(
        query.start, query.end, query.key, tz=settings.distribution_timezone
    )
    rows = await _aggregate(collection, pipeline)
    try:
        return build_distribution(query, rows)
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedAggregationError(f"Unexpected distribution result: {exc}") from exc


async def funnel_summary(collection: AsyncCollection, query: AnalyticsQuery) -> FunnelSummary:
    rows = await _aggregate(collection, pipelines.funnel_summary_pipeline(query.start, query.end))
    try:
        return build_funnel_summary(rows)
    except (AttributeError, TypeError, ValueError) as exc:
        raise MalformedAggregationError(f"Unexpected funnel summary result: {exc}") from exc


async def services_summary(collection: AsyncCollection, query: AnalyticsQuery) -> list[ServiceSummary]:
    rows = await _aggregate(collection, pipelines.services_summary_pipeline(query.start, query.end))
    try:
        return build_services_summary(rows)
    except (AttributeError, TypeError, ValueError) as exc:
        raise MalformedAggregationError(f"Unexpected services summary result: {exc}") from exc
