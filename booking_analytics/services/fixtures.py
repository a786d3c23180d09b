"""Static sample payloads served by the /test endpoints for client integration work."""

from __future__ import annotations

from typing import Any

BOOKING_ANALYTICS_SAMPLE: dict[str, Any] = {
    "key": "open_booking_module",
    "dateRange": {
        "start": "2024-01-01",
        "end": "2024-01-07",
    },
    "total": 150,
    "distribution": [
        {"count": 20, "date": "2024-01-01"},
        {"count": 25, "date": "2024-01-02"},
        {"count": 18, "date": "2024-01-03"},
        {"count": 22, "date": "2024-01-04"},
        {"count": 30, "date": "2024-01-05"},
        {"count": 15, "date": "2024-01-06"},
        {"count": 20, "date": "2024-01-07"},
    ],
}

FUNNEL_SUMMARY_SAMPLE: dict[str, Any] = {
    "total": 1000,
    "open_booking_module": 900,
    "select_room": 800,
    "select_rateplan": 700,
    "select_services": 600,
    "registration": 500,
    "booking": 400,
    "pay": 200,
    "amount": 50000,
    "amount_rooms": 35000,
    "amount_services": 15000,
}

SERVICES_SUMMARY_SAMPLE: list[dict[str, Any]] = [
    {
        "id": "1022502793808216065",
        "label": "Stress Control Program (2 visits)",
        "count": 15,
        "amount_price": 120000,
    },
    {
        "id": "1022502793808216066",
        "label": "Massage Therapy Session",
        "count": 10,
        "amount_price": 50000,
    },
    {
        "id": "1022502793808216067",
        "label": "Yoga Class Package",
        "count": 8,
        "amount_price": 32000,
    },
]
