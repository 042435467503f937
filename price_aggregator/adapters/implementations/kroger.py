"""
Kroger catalog adaptor.

Kroger exposes free-text product search and a store locator. Prices are
only returned when a store location id is supplied, so the adaptor uses a
configured default store or resolves the nearest store from the ZIP code.
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
from price_aggregator.core.exceptions import ValidationException, VendorError
from price_aggregator.core.logging import get_logger
from price_aggregator.domain.models import (
    Address,
    AvailabilityStatus,
    LocationRecord,
    PriceRecord,
    to_money,
)
from price_aggregator.infrastructure.auth.oauth import TokenAuthStyle, TokenGrant, TokenManager

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.kroger.com/v1"

STOCK_LEVELS = {
    "HIGH": AvailabilityStatus.IN_STOCK,
    "LOW": AvailabilityStatus.LIMITED,
    "TEMPORARILY_OUT_OF_STOCK": AvailabilityStatus.OUT_OF_STOCK,
}


class KrogerNormalizer(ResponseNormalizer):
    """Normalizes Kroger `products` and `locations` responses."""

    vendor = "kroger"

    def normalize_prices(self, raw_data: Any, query: str) -> List[PriceRecord]:
        return [self._normalize_product(product) for product in self.extract_list(raw_data, "data")]

    def _normalize_product(self, product: Dict[str, Any]) -> PriceRecord:
        items = product.get("items")
        item = items[0] if isinstance(items, list) and items and isinstance(items[0], dict) else {}
        price_info = item.get("price") if isinstance(item.get("price"), dict) else {}

        name = (
            self.text_or_none(product.get("description"))
            or self.text_or_none(self.dig(product, "productDescription", "description"))
            or ""
        )
        stock_level = self.text_or_none(self.dig(item, "inventory", "stockLevel"))

        return PriceRecord(
            vendor=self.vendor,
            item_name=name,
            unit_label=self.text_or_none(item.get("size")),
            regular_price=to_money(price_info.get("regular"), zero_is_missing=True),
            promo_price=to_money(price_info.get("promo"), zero_is_missing=True),
            currency=self.text_or_none(price_info.get("currency")) or "USD",
            availability=STOCK_LEVELS.get(stock_level.upper(), AvailabilityStatus.UNKNOWN) if stock_level else None,
        )

    def normalize_locations(self, raw_data: Any) -> List[LocationRecord]:
        return [self._normalize_location(entry) for entry in self.extract_list(raw_data, "data")]

    def _normalize_location(self, entry: Dict[str, Any]) -> LocationRecord:
        address = entry.get("address") if isinstance(entry.get("address"), dict) else {}
        location_id = self.text_or_none(entry.get("locationId"))
        if location_id is None:
            logger.warning("Kroger location without locationId", extra={"vendor": self.vendor})
        return LocationRecord(
            vendor=self.vendor,
            location_id=location_id or "",
            name=self.text_or_none(entry.get("name")) or "",
            address=Address(
                line1=self.text_or_none(address.get("addressLine1")),
                city=self.text_or_none(address.get("city")),
                state=self.text_or_none(address.get("state")),
                zip_code=self.text_or_none(address.get("zipCode")),
                county=self.text_or_none(address.get("county")),
            ),
            distance_miles=_to_distance(entry.get("distance")),
        )


def _to_distance(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class KrogerAdaptor(VendorAdaptor):
    """Adaptor for the Kroger Products and Locations APIs."""

    VENDOR_ID = "kroger"
    VENDOR_NAME = "Kroger"
    CAPABILITIES = VendorCapabilities(
        capabilities=frozenset({CapabilityType.SEARCH_BY_TERM, CapabilityType.LOCATIONS}),
        failure_policy=FailurePolicy.PROPAGATE,
    )

    def __init__(
        self,
        token_manager: TokenManager,
        http_client: httpx.AsyncClient,
        limit: int = 10,
        base_url: str = DEFAULT_BASE_URL,
        default_location_id: Optional[str] = None,
        resolve_location_from_zip: bool = True,
        auth_style: TokenAuthStyle = TokenAuthStyle.BODY
    ):
        self.base_url = base_url.rstrip("/")
        self.auth_style = TokenAuthStyle(auth_style)
        self.default_location_id = default_location_id or None
        self.resolve_location_from_zip = resolve_location_from_zip
        self.normalizer = KrogerNormalizer()
        super().__init__(token_manager, http_client, limit=limit)

    def token_grant(self) -> TokenGrant:
        return TokenGrant(
            token_url=f"{self.base_url}/connect/oauth2/token",
            auth_style=self.auth_style,
            token_fields=("access_token",),
            lifetime_fields=("expires_in",),
        )

    async def search(self, term: str, location_id: Optional[str] = None, limit: Optional[int] = None) -> List[PriceRecord]:
        """
        Search Kroger's product catalog.

        Args:
            term: The search term (e.g. "ribeye steak")
            location_id: Store identifier; without it Kroger may omit prices
            limit: Maximum number of products, defaults to the adaptor limit

        Returns:
            Normalized price records, one per matching product

        Raises:
            ValidationException: If term is empty
            VendorRequestError: If the catalog call fails
        """
        if not term or not term.strip():
            raise ValidationException(detail="search term is required", field="term")

        limit = limit or self.limit
        params: Dict[str, Any] = {"filter.term": term.strip(), "filter.limit": limit}
        if location_id:
            params["filter.locationId"] = location_id

        data = await self._request("GET", f"{self.base_url}/products", params=params)
        records = self.normalizer.normalize_prices(data, term)[:limit]
        logger.debug(f"Kroger returned {len(records)} products for '{term}'")
        return records

    async def get_locations(self, zip_code: str, limit: Optional[int] = None) -> List[LocationRecord]:
        """
        Find Kroger stores near a ZIP code, in the order Kroger returns them.

        Raises:
            ValidationException: If zip_code is empty
            VendorRequestError: If the locations call fails
        """
        if not zip_code or not zip_code.strip():
            raise ValidationException(detail="zip code is required", field="zip")

        params = {"filter.zipCode": zip_code.strip(), "filter.limit": limit or self.limit}
        data = await self._request("GET", f"{self.base_url}/locations", params=params)
        return self.normalizer.normalize_locations(data)

    async def resolve_location_id(self, zip_code: Optional[str]) -> Optional[str]:
        """
        Picks the store to price at: the configured default, else the
        nearest store to the ZIP code. A failed lookup yields None so the
        product search still runs without a location.
        """
        if self.default_location_id:
            return self.default_location_id
        if not zip_code or not self.resolve_location_from_zip:
            return None
        try:
            locations = await self.get_locations(zip_code, limit=1)
        except VendorError as e:
            logger.warning(
                f"Could not resolve Kroger store for {zip_code}, searching without location: {e.detail}",
                extra={"vendor": self.VENDOR_ID}
            )
            return None
        return next((l.location_id for l in locations if l.location_id), None)

    async def _search_prices(self, item: str, zip_code: Optional[str]) -> List[PriceRecord]:
        location_id = await self.resolve_location_id(zip_code)
        return await self.search(item, location_id, self.limit)

    async def _find_locations(self, zip_code: str) -> List[LocationRecord]:
        return await self.get_locations(zip_code)
