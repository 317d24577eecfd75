"""
Read API tests with FastAPI TestClient over a temporary SQLite store.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from burn_tracker.api_server.formatting import format_amount
from burn_tracker.api_server.server import create_app
from burn_tracker.core.exceptions import StorageError
from burn_tracker.database.models import BurnEvent
from fakes import OWNER


def _event(signature: str, timestamp: str, amount: str = "1234500000000") -> BurnEvent:
    return BurnEvent(
        signature=signature,
        timestamp=timestamp,
        from_address=OWNER,
        amount=amount,
        token="XNET",
        scrape_time="2024-05-10T00:00:00.000Z",
    )


@pytest.fixture
def client(store, settings):
    return TestClient(create_app(store=store, settings=settings))


@pytest.fixture
def seeded(store):
    for i, ts in enumerate(
        [
            "2024-05-01T08:00:00.000Z",
            "2024-05-02T09:30:00.000Z",
            "2024-05-03T23:59:59.999Z",
            "2024-05-04T00:00:00.000Z",
        ]
    ):
        store.insert_burn_event(_event(f"sig{i}", ts))
    return store


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_latest_empty_is_404(client):
    r = client.get("/latest")
    assert r.status_code == 404
    assert r.json() == {"error": "No burn events found"}


def test_latest_returns_newest_with_formatted_amount(client, seeded):
    r = client.get("/latest")
    assert r.status_code == 200
    body = r.json()
    assert body["signature"] == "sig3"
    assert body["amount"] == "1234500000000"
    assert body["amountFormatted"] == "1,234.5"
    assert body["action"] == "Burn"
    assert body["from_address"] == OWNER
    assert body["token"] == "XNET"


def test_all_paginates_newest_first(client, seeded):
    r = client.get("/all", params={"page": 2, "limit": 3})
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 4
    assert body["page"] == 2
    assert body["limit"] == 3
    assert body["totalPages"] == 2
    assert body["count"] == 1
    assert [e["signature"] for e in body["data"]] == ["sig0"]


def test_all_defaults(client, seeded):
    body = client.get("/all").json()
    assert body["page"] == 1
    assert body["limit"] == 50
    assert [e["signature"] for e in body["data"]] == ["sig3", "sig2", "sig1", "sig0"]


@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 1001}, {"limit": "abc"}])
def test_invalid_limit_is_400(client, params):
    r = client.get("/all", params=params)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid limit parameter. Must be between 1 and 1000."}


@pytest.mark.parametrize("page", [0, -1, "x"])
def test_invalid_page_is_400(client, page):
    r = client.get("/all", params={"page": page})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid page parameter. Must be >= 1."}


def test_history_end_date_is_inclusive(client, seeded):
    r = client.get("/history", params={"start": "2024-05-02", "end": "2024-05-03"})
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 2
    assert [e["signature"] for e in body["data"]] == ["sig2", "sig1"]


def test_history_limit(client, seeded):
    body = client.get("/history", params={"limit": 1}).json()
    assert body["count"] == 1
    assert body["data"][0]["signature"] == "sig3"


def test_history_bad_date_is_400(client):
    r = client.get("/history", params={"start": "05/02/2024"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid start date format. Use YYYY-MM-DD."}


def test_storage_error_is_500(client, store):
    with patch.object(store, "latest_burn_event", side_effect=StorageError("gone")):
        r = client.get("/latest")
    assert r.status_code == 500
    assert r.json() == {"error": "Database error"}


@pytest.mark.parametrize(
    "amount,decimals,expected",
    [
        ("1000000000", 9, "1"),
        ("1500000000", 9, "1.5"),
        ("18446744073709551615", 9, "18,446,744,073.709551615"),
        ("0", 9, "0"),
        (None, 9, "0"),
        ("12345", 0, "12,345"),
        ("not-a-number", 9, "not-a-number"),
    ],
)
def test_format_amount(amount, decimals, expected):
    assert format_amount(amount, decimals) == expected


def test_history_end_at_last_representable_day(client, seeded):
    r = client.get("/history", params={"start": "2024-05-03", "end": "9999-12-31"})
    assert r.status_code == 200
    assert [e["signature"] for e in r.json()["data"]] == ["sig3", "sig2"]
