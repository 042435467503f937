"""
Tests for the HTTP ingress, with the aggregator replaced by a stub.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from price_aggregator.api.dependencies import get_price_aggregator
from price_aggregator.core.exceptions import ValidationException
from price_aggregator.domain.models import Address, AvailabilityStatus, LocationRecord, PriceRecord
from price_aggregator.main import app
from price_aggregator.services.price_service import PriceAggregator


@pytest.fixture
def aggregator():
    stub = MagicMock(spec=PriceAggregator)
    stub.query = AsyncMock(return_value=[
        PriceRecord(
            vendor="kroger",
            item_name="Ribeye Steak",
            unit_label="lb",
            regular_price=Decimal("12.99"),
            promo_price=Decimal("9.99"),
            availability=AvailabilityStatus.IN_STOCK,
        )
    ])
    stub.get_locations = AsyncMock(return_value=[
        LocationRecord(
            vendor="kroger",
            location_id="62000115",
            name="King Soopers",
            address=Address(line1="3275 Airport Rd", zip_code="80910"),
            distance_miles=1.4,
        )
    ])
    stub.describe_vendors.return_value = [
        {"vendor": "kroger", "name": "Kroger", "configured": True,
         "capabilities": ["locations", "search_by_term"], "failure_policy": "propagate"},
        {"vendor": "walmart", "name": "Walmart", "configured": False,
         "capabilities": ["search_by_identifier_mapping"], "failure_policy": "degrade"},
    ]
    return stub


@pytest.fixture
def client(aggregator):
    app.dependency_overrides[get_price_aggregator] = lambda: aggregator
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:

    def test_root_health(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"
        assert isinstance(response.json()["timestamp"], int)

    def test_detailed_health_reports_unconfigured_vendor(self, client):
        body = client.get("/api/health/detailed").json()

        assert body["status"] == "DEGRADED"
        assert [v["vendor"] for v in body["vendors"]] == ["kroger", "walmart"]

    def test_correlation_id_is_echoed(self, client):
        response = client.get("/", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"


class TestPrices:

    def test_prices_response_shape(self, client, aggregator):
        response = client.get("/api/prices", params={"item": "ribeye", "zip": "80911"})

        assert response.status_code == 200
        assert response.json() == {
            "item": "ribeye",
            "zip": "80911",
            "prices": [{
                "vendor": "kroger",
                "itemName": "Ribeye Steak",
                "unitLabel": "lb",
                "regularPrice": 12.99,
                "promoPrice": 9.99,
                "unitPrice": None,
                "currency": "USD",
                "availability": "in_stock",
            }],
        }
        aggregator.query.assert_awaited_once_with("ribeye", "80911")

    def test_zip_is_optional(self, client):
        assert client.get("/api/prices", params={"item": "ribeye"}).json()["zip"] is None

    @pytest.mark.parametrize("zip_code, echoed", [("   ", None), (" 80911 ", "80911")])
    def test_zip_is_echoed_trimmed(self, client, zip_code, echoed):
        response = client.get("/api/prices", params={"item": "ribeye", "zip": zip_code})
        assert response.json()["zip"] == echoed

    def test_missing_item_is_400(self, client, aggregator):
        aggregator.query.side_effect = ValidationException(detail="Missing item query parameter", field="item")

        response = client.get("/api/prices")

        assert response.status_code == 400
        assert response.json() == {"error": "Missing item query parameter", "details": "'item' is required"}


class TestLocations:

    def test_locations_response_shape(self, client):
        body = client.get("/api/locations", params={"zip": "80911"}).json()

        assert body["zip"] == "80911"
        assert body["locations"][0]["locationId"] == "62000115"
        assert body["locations"][0]["distanceMiles"] == 1.4
        assert body["locations"][0]["address"]["zipCode"] == "80910"

    def test_missing_zip_is_400(self, client, aggregator):
        aggregator.get_locations.side_effect = ValidationException(detail="Missing zip query parameter", field="zip")

        response = client.get("/api/locations")

        assert response.status_code == 400
        assert response.json()["error"] == "Missing zip query parameter"
