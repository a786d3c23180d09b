from datetime import datetime, timezone

from fastapi.testclient import TestClient
from bson.decimal128 import Decimal128

from booking_analytics.services.validation import FUNNEL_KEYS

from .conftest import FakeCollection

RANGE = {"startDate": "2024-01-01", "endDate": "2024-01-07"}


def test_booking_analytics_returns_distribution_and_total(client: TestClient, fake_collection: FakeCollection) -> None:
    fake_collection.rows = [
        {"_id": "2024-01-01", "count": 4},
        {"_id": "2024-01-03", "count": 7},
        {"_id": "2024-01-06", "count": 1},
    ]

    res = client.get("/api/booking-analytics", params={**RANGE, "key": "select_room"})

    assert res.status_code == 200, res.text
    body = res.json()
    assert list(body) == ["key", "dateRange", "total", "distribution"]
    assert body["key"] == "select_room"
    assert body["dateRange"] == {"start": "2024-01-01", "end": "2024-01-07"}
    assert body["distribution"] == [
        {"count": 4, "date": "2024-01-01"},
        {"count": 7, "date": "2024-01-03"},
        {"count": 1, "date": "2024-01-06"},
    ]
    assert body["total"] == sum(item["count"] for item in body["distribution"]) == 12


def test_booking_analytics_queries_the_requested_flag(client: TestClient, fake_collection: FakeCollection) -> None:
    client.get("/api/booking-analytics", params={**RANGE, "key": "pay"})

    assert len(fake_collection.pipelines) == 1
    match = fake_collection.pipelines[0][0]["$match"]
    assert match == {
        "datetime": {
            "$gte": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "$lte": datetime(2024, 1, 7, tzinfo=timezone.utc),
        },
        "pay": True,
    }


def test_booking_analytics_echoes_raw_date_strings(client: TestClient) -> None:
    params = {"startDate": "2024-01-01T00:00:00Z", "endDate": "2024-01-02", "key": "booking"}
    res = client.get("/api/booking-analytics", params=params)

    assert res.status_code == 200, res.text
    assert res.json()["dateRange"] == {"start": "2024-01-01T00:00:00Z", "end": "2024-01-02"}


def test_booking_analytics_without_matches(client: TestClient) -> None:
    res = client.get("/api/booking-analytics", params={**RANGE, "key": "registration"})

    assert res.status_code == 200
    assert res.json() == {
        "key": "registration",
        "dateRange": {"start": "2024-01-01", "end": "2024-01-07"},
        "total": 0,
        "distribution": [],
    }


def test_booking_analytics_missing_key(client: TestClient, fake_collection: FakeCollection) -> None:
    res = client.get("/api/booking-analytics", params=RANGE)

    assert res.status_code == 400
    assert res.json() == {
        "error": "Missing required parameters",
        "required": ["startDate", "endDate", "key"],
        "received": {"startDate": "2024-01-01", "endDate": "2024-01-07"},
    }
    assert fake_collection.pipelines == []


def test_booking_analytics_invalid_key(client: TestClient) -> None:
    res = client.get("/api/booking-analytics", params={**RANGE, "key": "checkout"})

    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Invalid key parameter"
    assert body["allowed"] == list(FUNNEL_KEYS)
    assert body["received"] == "checkout"


def test_booking_analytics_rejects_inverted_range(client: TestClient) -> None:
    params = {"startDate": "2024-02-01", "endDate": "2024-01-01", "key": "pay"}
    res = client.get("/api/booking-analytics", params=params)

    assert res.status_code == 400
    assert res.json()["error"] == "Invalid date range"


def test_booking_analytics_rejects_bad_dates(client: TestClient) -> None:
    params = {"startDate": "yesterday", "endDate": "2024-01-01", "key": "pay"}
    res = client.get("/api/booking-analytics", params=params)

    assert res.status_code == 400
    assert res.json() == {
        "error": "Invalid date format",
        "message": "Dates must be in ISO 8601 format (YYYY-MM-DD)",
    }


def test_repeated_requests_are_byte_identical(client: TestClient, fake_collection: FakeCollection) -> None:
    fake_collection.rows = [{"_id": "2024-01-02", "count": 3}, {"_id": "2024-01-05", "count": 9}]
    params = {**RANGE, "key": "select_rateplan"}

    first = client.get("/api/booking-analytics", params=params)
    second = client.get("/api/booking-analytics", params=params)

    assert first.status_code == second.status_code == 200
    assert first.content == second.content


def test_funnel_summary_reshapes_facets(client: TestClient, fake_collection: FakeCollection) -> None:
    fake_collection.rows = [
        {
            "total": [{"count": 120}],
            "open_booking_module": [{"count": 100}],
            "select_room": [{"count": 80}],
            "select_rateplan": [{"count": 60}],
            "select_services": [{"count": 40}],
            "registration": [{"count": 30}],
            "booking": [{"count": 20}],
            "pay": [{"count": 10}],
            "amount": [{"_id": None, "total": 1250.5}],
            "amount_rooms": [{"_id": None, "total": 900}],
            "amount_services": [{"_id": None, "total": 350.5}],
        }
    ]

    res = client.get("/api/booking-funnel-summary", params=RANGE)

    assert res.status_code == 200, res.text
    assert res.json() == {
        "total": 120,
        "open_booking_module": 100,
        "select_room": 80,
        "select_rateplan": 60,
        "select_services": 40,
        "registration": 30,
        "booking": 20,
        "pay": 10,
        "amount": 1250.5,
        "amount_rooms": 900,
        "amount_services": 350.5,
    }
    assert "$facet" in fake_collection.pipelines[0][1]


def test_funnel_summary_defaults_every_field_to_zero(client: TestClient, fake_collection: FakeCollection) -> None:
    fake_collection.rows = [{name: [] for name in ["total", *FUNNEL_KEYS, "amount", "amount_rooms", "amount_services"]}]

    res = client.get("/api/booking-funnel-summary", params=RANGE)

    assert res.status_code == 200
    body = res.json()
    assert len(body) == 11
    assert all(value == 0 for value in body.values())


def test_funnel_summary_handles_empty_result_and_null_sums(client: TestClient, fake_collection: FakeCollection) -> None:
    res = client.get("/api/booking-funnel-summary", params=RANGE)
    assert res.status_code == 200
    assert set(res.json().values()) == {0}

    fake_collection.rows = [{"total": [{"count": 2}], "amount_rooms": [{"_id": None, "total": None}]}]
    res = client.get("/api/booking-funnel-summary", params=RANGE)
    body = res.json()
    assert body["total"] == 2
    assert body["amount_rooms"] == 0
    assert body["pay"] == 0


def test_funnel_summary_ignores_key_and_requires_dates(client: TestClient) -> None:
    res = client.get("/api/booking-funnel-summary", params={"startDate": "2024-01-01", "key": "nope"})

    assert res.status_code == 400
    assert res.json() == {
        "error": "Missing required parameters",
        "required": ["startDate", "endDate"],
        "received": {"startDate": "2024-01-01"},
    }


def test_services_summary_keeps_store_order(client: TestClient, fake_collection: FakeCollection) -> None:
    fake_collection.rows = [
        {"id": "A", "label": "Late checkout", "count": 15, "amount_price": 1500},
        {"id": "B", "label": "Breakfast", "count": 10, "amount_price": 250.5},
    ]

    res = client.get("/api/services-summary", params=RANGE)

    assert res.status_code == 200, res.text
    body = res.json()
    assert [item["id"] for item in body] == ["A", "B"]
    assert body[0] == {"id": "A", "label": "Late checkout", "count": 15, "amount_price": 1500}
    assert fake_collection.pipelines[0][1] == {"$unwind": "$services"}


def test_services_summary_empty(client: TestClient) -> None:
    res = client.get("/api/services-summary", params=RANGE)

    assert res.status_code == 200
    assert res.json() == []


def test_services_summary_validates_range(client: TestClient) -> None:
    res = client.get("/api/services-summary", params={"startDate": "2024-03-01", "endDate": "2024-01-01"})

    assert res.status_code == 400
    assert res.json()["message"] == "startDate must be before or equal to endDate"


def test_funnel_summary_converts_decimal128_sums(client: TestClient, fake_collection: FakeCollection) -> None:
    fake_collection.rows = [
        {
            "total": [{"count": 3}],
            "pay": [{"count": 1}],
            "amount": [{"_id": None, "total": Decimal128("199.90")}],
            "amount_rooms": [{"_id": None, "total": Decimal128("150.00")}],
            "amount_services": [{"_id": None, "total": Decimal128("49.90")}],
        }
    ]

    res = client.get("/api/booking-funnel-summary", params=RANGE)

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["amount"] == 199.9
    assert body["amount_rooms"] == 150.0
    assert body["amount_services"] == 49.9
    assert body["pay"] == 1


def test_services_summary_converts_decimal128_prices(client: TestClient, fake_collection: FakeCollection) -> None:
    fake_collection.rows = [
        {"id": 7, "label": 2024, "count": 2, "amount_price": Decimal128("50.00")},
        {"id": 8, "label": None, "count": 1, "amount_price": Decimal128("12.50")},
    ]

    res = client.get("/api/services-summary", params=RANGE)

    assert res.status_code == 200, res.text
    assert res.json() == [
        {"id": 7, "label": 2024, "count": 2, "amount_price": 50.0},
        {"id": 8, "label": None, "count": 1, "amount_price": 12.5},
    ]
