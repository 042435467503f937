"""
Tests for the mapping-only Walmart adaptor.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import httpx
import pytest

from price_aggregator.adapters.implementations.walmart import WalmartAdaptor, WalmartNormalizer
from price_aggregator.adapters.interfaces.vendor_adapter import FailurePolicy
from price_aggregator.domain.models import AvailabilityStatus, OfferMapping
from price_aggregator.infrastructure.auth.credentials import VendorCredentialStore
from price_aggregator.infrastructure.auth.oauth import TokenManager

TOKEN_PATH = "/identity/oauth/v1/token"
PRICE_PATH = "/product/items/price-availability/"

PRICE_RESPONSE = {
    "items": [
        {
            "itemName": "Beef Choice Ribeye Steak",
            "unitOfMeasure": "LB",
            "currentPrice": {
                "currentValue": {"currencyAmount": 11.47},
                "unitValue": {"currencyAmount": 12.74},
                "currencyCode": "USD",
            },
            "availabilityStatus": "IN_STOCK",
        },
        {"unitOfMeasure": "EACH", "availabilityStatus": "Limited Stock"},
    ]
}


@pytest.fixture
def mapping():
    return OfferMapping({"Ribeye": ["wm-101", "wm-102"]})


@pytest.fixture
def walmart(token_manager, http_client, vendor_api, mapping):
    vendor_api.add(TOKEN_PATH, body={"accessToken": "wm-token", "expiresIn": 900})
    return WalmartAdaptor(token_manager, http_client, offer_mapping=mapping)


class TestWalmartNormalizer:
    """Normalization of the price-availability body."""

    def test_full_item(self):
        record = WalmartNormalizer().normalize_prices(PRICE_RESPONSE, "ribeye")[0]

        assert record.vendor == "walmart"
        assert record.item_name == "Beef Choice Ribeye Steak"
        assert record.unit_label == "LB"
        assert record.regular_price == Decimal("11.47")
        assert record.unit_price == Decimal("12.74")
        assert record.promo_price is None
        assert record.availability == AvailabilityStatus.IN_STOCK

    def test_missing_fields_fall_back(self):
        record = WalmartNormalizer().normalize_prices(PRICE_RESPONSE, "ribeye")[1]

        assert record.item_name == "ribeye"
        assert record.regular_price is None
        assert record.unit_price is None
        assert record.currency == "USD"
        assert record.availability == AvailabilityStatus.LIMITED

    def test_reported_zero_price_is_kept(self):
        body = {"items": [{"itemName": "Sample", "currentPrice": {"currentValue": {"currencyAmount": 0}}}]}

        record = WalmartNormalizer().normalize_prices(body, "sample")[0]

        assert record.regular_price == Decimal("0")

    def test_unknown_status(self):
        body = {"items": [{"itemName": "x", "availabilityStatus": "BACKORDERED"}]}
        assert WalmartNormalizer().normalize_prices(body, "x")[0].availability == AvailabilityStatus.UNKNOWN


class TestWalmartSearch:
    """WalmartAdaptor.search() behaviour."""

    def test_declares_degrade_policy(self, walmart):
        assert walmart.get_capabilities().failure_policy is FailurePolicy.DEGRADE

    @pytest.mark.asyncio
    async def test_unmapped_item_makes_no_network_call(self, credential_store, clock, mapping):
        http_client = AsyncMock(spec=httpx.AsyncClient)
        token_manager = TokenManager(credential_store, http_client, clock=clock)
        walmart = WalmartAdaptor(token_manager, http_client, offer_mapping=mapping)

        assert await walmart.search("wagyu", "80911") == []
        http_client.post.assert_not_called()
        http_client.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_mapped_item_posts_offer_ids(self, walmart, vendor_api):
        vendor_api.add(PRICE_PATH, body=PRICE_RESPONSE)

        records = await walmart.search("  RIBEYE ", "80911")

        request = vendor_api.calls_to(PRICE_PATH)[0]
        assert request.method == "POST"
        assert vendor_api.json_body(request) == {"offerIds": ["wm-101", "wm-102"], "zipCode": "80911"}
        assert request.headers["Authorization"] == "Bearer wm-token"
        assert request.headers["WM_CONSUMER.ID"] == "wm-consumer"
        assert len(records) == 2

    @pytest.mark.asyncio
    async def test_zip_is_optional(self, walmart, vendor_api):
        vendor_api.add(PRICE_PATH, body={"items": []})

        assert await walmart.search("ribeye") == []
        assert vendor_api.json_body(vendor_api.calls_to(PRICE_PATH)[0]) == {"offerIds": ["wm-101", "wm-102"]}

    @pytest.mark.asyncio
    async def test_price_endpoint_failure_degrades_to_empty(self, walmart, vendor_api):
        vendor_api.add(PRICE_PATH, status_code=500, body={"error": "boom"})
        assert await walmart.search("ribeye", "80911") == []

    @pytest.mark.asyncio
    async def test_transport_failure_degrades_to_empty(self, walmart, vendor_api):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        vendor_api.add_handler(PRICE_PATH, refuse)
        assert await walmart.search("ribeye", "80911") == []

    @pytest.mark.asyncio
    async def test_rejected_token_degrades_to_empty(self, token_manager, http_client, vendor_api, mapping):
        vendor_api.add(TOKEN_PATH, status_code=401, body={"error": "invalid_client"})
        walmart = WalmartAdaptor(token_manager, http_client, offer_mapping=mapping)

        assert await walmart.search("ribeye") == []
        assert vendor_api.calls_to(PRICE_PATH) == []

    @pytest.mark.asyncio
    async def test_missing_credentials_degrade_to_empty(self, http_client, clock, vendor_api, mapping):
        token_manager = TokenManager(VendorCredentialStore(), http_client, clock=clock)
        walmart = WalmartAdaptor(token_manager, http_client, offer_mapping=mapping)

        assert await walmart.search("ribeye") == []
        assert vendor_api.requests == []
