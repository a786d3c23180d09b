"""Aggregation pipelines run against the booking event collection."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from booking_analytics.services.validation import FUNNEL_KEYS

Pipeline = list[dict[str, Any]]

FACET_COUNT_FIELD = "count"
FACET_SUM_FIELD = "total"


def _datetime_range(start: datetime, end: datetime) -> dict[str, Any]:
    return {"datetime": {"$gte": start, "$lte": end}}


def _count_branch(flag: str | None = None) -> Pipeline:
    stages: Pipeline = []
    if flag is not None:
        stages.append({"$match": {flag: True}})
    stages.append({"$count": FACET_COUNT_FIELD})
    return stages


def _sum_branch(field: str, *, flag: str | None = None) -> Pipeline:
    stages: Pipeline = []
    if flag is not None:
        stages.append({"$match": {flag: True}})
    stages.append({"$group": {"_id": None, FACET_SUM_FIELD: {"$sum": f"${field}"}}})
    return stages


def daily_distribution_pipeline(start: datetime, end: datetime, key: str, *, tz: str = "UTC") -> Pipeline:
    match = _datetime_range(start, end)
    match[key] = True
    return [
        {"$match": match},
        {
            "$group": {
                "_id": {"$dateToString": {"format": "%Y-%m-%d", "date": "$datetime", "timezone": tz}},
                "count": {"$sum": 1},
            }
        },
        {"$sort": {"_id": 1}},
    ]


def funnel_summary_facets() -> dict[str, Pipeline]:
    facets: dict[str, Pipeline] = {"total": _count_branch()}
    for flag in FUNNEL_KEYS:
        facets[flag] = _count_branch(flag)
    facets["amount"] = _sum_branch("amount", flag="pay")
    facets["amount_rooms"] = _sum_branch("amount_rooms")
    facets["amount_services"] = _sum_branch("amount_services")
    return facets


def funnel_summary_pipeline(start: datetime, end: datetime) -> Pipeline:
    return [
        {"$match": _datetime_range(start, end)},
        {"$facet": funnel_summary_facets()},
    ]


def services_summary_pipeline(start: datetime, end: datetime) -> Pipeline:
    match = _datetime_range(start, end)
    match["services"] = {"$exists": True, "$ne": []}
    return [
        {"$match": match},
        {"$unwind": "$services"},
        {
            "$group": {
                "_id": "$services.id",
                "label": {"$first": "$services.label"},
                "count": {"$sum": 1},
                "amount_price": {"$sum": "$services.price"},
            }
        },
        {"$project": {"_id": 0, "id": "$_id", "label": 1, "count": 1, "amount_price": 1}},
        {"$sort": {"count": -1, "id": 1}},
    ]
