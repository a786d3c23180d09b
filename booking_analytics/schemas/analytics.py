from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Amount = int | float


class DateRange(BaseModel):
    start: str
    end: str


class DailyCount(BaseModel):
    count: int
    date: str


class BookingAnalyticsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str
    date_range: DateRange = Field(alias="dateRange")
    total: int = 0
    distribution: list[DailyCount] = Field(default_factory=list)


class FunnelSummary(BaseModel):
    total: int = 0
    open_booking_module: int = 0
    select_room: int = 0
    select_rateplan: int = 0
    select_services: int = 0
    registration: int = 0
    booking: int = 0
    pay: int = 0
    amount: Amount = 0
    amount_rooms: Amount = 0
    amount_services: Amount = 0


class ServiceSummary(BaseModel):
    id: Any
    label: Any = None
    count: int
    amount_price: Amount = 0


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class ReadinessResponse(BaseModel):
    status: str
