"""
Walmart price/availability adaptor.

Walmart has no free-text search here: item names are translated to offer
ids through a static mapping, and items without a mapping are skipped
without touching the network. Walmart is best-effort, so its failures
degrade to an empty result inside the adaptor.
"""

from typing import Any, Dict, List, Optional

import httpx

from price_aggregator.adapters.interfaces.normalizer import ResponseNormalizer
from price_aggregator.adapters.interfaces.vendor_adapter import (
    CapabilityType,
    FailurePolicy,
    VendorAdaptor,
    VendorCapabilities,
)
from price_aggregator.core.logging import get_logger
from price_aggregator.domain.models import (
    AvailabilityStatus,
    OfferMapping,
    PriceRecord,
    to_money,
)
from price_aggregator.infrastructure.auth.oauth import TokenAuthStyle, TokenGrant, TokenManager

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://developer.api.walmart.com/api-proxy/service"
CONSUMER_ID_HEADER = "WM_CONSUMER.ID"

AVAILABILITY_STATUSES = {
    "IN_STOCK": AvailabilityStatus.IN_STOCK,
    "AVAILABLE": AvailabilityStatus.IN_STOCK,
    "LIMITED_STOCK": AvailabilityStatus.LIMITED,
    "LIMITED": AvailabilityStatus.LIMITED,
    "OUT_OF_STOCK": AvailabilityStatus.OUT_OF_STOCK,
    "NOT_AVAILABLE": AvailabilityStatus.OUT_OF_STOCK,
}


class WalmartNormalizer(ResponseNormalizer):
    """Normalizes the Walmart price-availability `items` response."""

    vendor = "walmart"

    def normalize_prices(self, raw_data: Any, query: str) -> List[PriceRecord]:
        return [self._normalize_item(item, query) for item in self.extract_list(raw_data, "items")]

    def _normalize_item(self, item: Dict[str, Any], query: str) -> PriceRecord:
        status = self.text_or_none(item.get("availabilityStatus"))
        availability = None
        if status:
            key = status.upper().replace(" ", "_")
            availability = AVAILABILITY_STATUSES.get(key, AvailabilityStatus.UNKNOWN)

        return PriceRecord(
            vendor=self.vendor,
            item_name=self.text_or_none(item.get("itemName")) or query,
            unit_label=self.text_or_none(item.get("unitOfMeasure")),
            regular_price=to_money(self.dig(item, "currentPrice", "currentValue", "currencyAmount")),
            unit_price=to_money(self.dig(item, "currentPrice", "unitValue", "currencyAmount")),
            currency=self.text_or_none(self.dig(item, "currentPrice", "currencyCode")) or "USD",
            availability=availability,
        )


class WalmartAdaptor(VendorAdaptor):
    """Adaptor for the Walmart Pricing and Availability API."""

    VENDOR_ID = "walmart"
    VENDOR_NAME = "Walmart"
    CAPABILITIES = VendorCapabilities(
        capabilities=frozenset({CapabilityType.SEARCH_BY_MAPPING}),
        failure_policy=FailurePolicy.DEGRADE,
    )

    def __init__(
        self,
        token_manager: TokenManager,
        http_client: httpx.AsyncClient,
        offer_mapping: Optional[OfferMapping] = None,
        limit: int = 10,
        base_url: str = DEFAULT_BASE_URL
    ):
        self.base_url = base_url.rstrip("/")
        self.offer_mapping = offer_mapping or OfferMapping()
        self.normalizer = WalmartNormalizer()
        super().__init__(token_manager, http_client, limit=limit)

    def token_grant(self) -> TokenGrant:
        return TokenGrant(
            token_url=f"{self.base_url}/identity/oauth/v1/token",
            auth_style=TokenAuthStyle.BODY,
            identity_header=CONSUMER_ID_HEADER,
            extra_headers={"cache-control": "no-cache"},
            token_fields=("accessToken", "access_token"),
            lifetime_fields=("expiresIn", "expires_in"),
        )

    async def search(self, item_name: str, zip_code: Optional[str] = None) -> List[PriceRecord]:
        """
        Look up Walmart prices for a mapped item.

        Never raises for vendor-side faults or unmapped items; both yield [].
        """
        return await self.search_prices(item_name, zip_code)

    async def _search_prices(self, item: str, zip_code: Optional[str]) -> List[PriceRecord]:
        offer_ids = self.offer_mapping.lookup(item or "")
        if not offer_ids:
            logger.debug(f"No Walmart offer ids mapped for '{item}', skipping")
            return []

        data = await self.fetch_price_availability(offer_ids, zip_code)
        return self.normalizer.normalize_prices(data, item)[:self.limit]

    async def fetch_price_availability(self, offer_ids: List[str], zip_code: Optional[str] = None) -> Any:
        """Calls the batch price-availability endpoint and returns the raw body."""
        credentials = self.token_manager.credential_store.get(self.VENDOR_ID)
        headers = {"Content-Type": "application/json"}
        if credentials and credentials.client_id:
            headers[CONSUMER_ID_HEADER] = credentials.client_id

        body: Dict[str, Any] = {"offerIds": list(offer_ids)}
        if zip_code:
            body["zipCode"] = zip_code

        return await self._request(
            "POST",
            f"{self.base_url}/affil/catalog-api/v2/product/items/price-availability/",
            json=body,
            headers=headers,
        )
