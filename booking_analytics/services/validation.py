from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Final

FUNNEL_KEYS: Final[tuple[str, ...]] = (
    "open_booking_module",
    "select_room",
    "select_rateplan",
    "select_services",
    "registration",
    "booking",
    "pay",
)

DATE_FORMAT_MESSAGE: Final[str] = "Dates must be in ISO 8601 format (YYYY-MM-DD)"
DATE_RANGE_MESSAGE: Final[str] = "startDate must be before or equal to endDate"


class AnalyticsQueryError(ValueError):
    """A client-side problem with the query string; rendered as a 400 body."""

    status_code = 400

    def __init__(self, error: str, **details: Any) -> None:
        super().__init__(error)
        self.error = error
        self.details = details

    def payload(self) -> dict[str, Any]:
        return {"error": self.error, **self.details}


@dataclass(frozen=True)
class AnalyticsQuery:
    start_date: str
    end_date: str
    start: datetime
    end: datetime
    key: str | None = None


def parse_date(value: str) -> datetime | None:
    """Parse an ISO 8601 date or datetime; naive values are taken as UTC."""
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _require_params(params: dict[str, str | None]) -> None:
    if all(params.values()):
        return
    raise AnalyticsQueryError(
        "Missing required parameters",
        required=list(params),
        received={name: value for name, value in params.items() if value is not None},
    )


def _require_funnel_key(key: str) -> None:
    if key in FUNNEL_KEYS:
        return
    raise AnalyticsQueryError("Invalid key parameter", allowed=list(FUNNEL_KEYS), received=key)


def validate_range_query(
    start_date: str | None,
    end_date: str | None,
    key: str | None = None,
    *,
    require_key: bool = False,
) -> AnalyticsQuery:
    """Check query parameters in order and return the first failure or a normalized query."""
    params: dict[str, str | None] = {"startDate": start_date, "endDate": end_date}
    if require_key:
        params["key"] = key
    _require_params(params)

    if require_key:
        _require_funnel_key(key or "")

    start = parse_date(start_date or "")
    end = parse_date(end_date or "")
    if start is None or end is None:
        raise AnalyticsQueryError("Invalid date format", message=DATE_FORMAT_MESSAGE)

    if start > end:
        raise AnalyticsQueryError("Invalid date range", message=DATE_RANGE_MESSAGE)

    return AnalyticsQuery(
        start_date=start_date or "",
        end_date=end_date or "",
        start=start,
        end=end,
        key=key if require_key else None,
    )
