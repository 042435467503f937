from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

import httpx

from price_aggregator.core.exceptions import VendorError, VendorRequestError
from price_aggregator.core.logging import get_logger
from price_aggregator.domain.models import LocationRecord, PriceRecord
from price_aggregator.infrastructure.auth.oauth import TokenGrant, TokenManager

logger = get_logger(__name__)


class CapabilityType(str, Enum):
    """Enum defining the capabilities a vendor adaptor might support."""
    SEARCH_BY_TERM = "search_by_term"
    SEARCH_BY_MAPPING = "search_by_identifier_mapping"
    LOCATIONS = "locations"


class FailurePolicy(str, Enum):
    """What an adaptor does with its own vendor-side errors."""
    PROPAGATE = "propagate"
    DEGRADE = "degrade"


@dataclass(frozen=True)
class VendorCapabilities:
    """Declares what a vendor supports and how its failures are handled."""
    capabilities: FrozenSet[CapabilityType]
    failure_policy: FailurePolicy = FailurePolicy.PROPAGATE

    def supports(self, capability: CapabilityType) -> bool:
        return capability in self.capabilities

    def can_search(self) -> bool:
        return self.supports(CapabilityType.SEARCH_BY_TERM) or self.supports(CapabilityType.SEARCH_BY_MAPPING)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capabilities": sorted(c.value for c in self.capabilities),
            "failure_policy": self.failure_policy.value,
        }


class VendorAdaptor(ABC):
    """
    Abstract base for grocery vendor adaptors.

    An adaptor translates a generic `(item, zip)` request into the vendor's
    HTTP calls and normalizes the response into PriceRecord/LocationRecord.
    Subclasses declare VENDOR_ID and CAPABILITIES and implement the
    capability-specific hooks.
    """

    VENDOR_ID: str = ""
    VENDOR_NAME: str = ""
    CAPABILITIES: VendorCapabilities = VendorCapabilities(capabilities=frozenset())

    def __init__(self, token_manager: TokenManager, http_client: httpx.AsyncClient, limit: int = 10):
        self.token_manager = token_manager
        self.http_client = http_client
        self.limit = limit
        token_manager.register_grant(self.VENDOR_ID, self.token_grant())

    # ── Contract ────────────────────────────────────────────────

    @abstractmethod
    def token_grant(self) -> TokenGrant:
        """Describes this vendor's client-credentials exchange."""

    @abstractmethod
    async def _search_prices(self, item: str, zip_code: Optional[str]) -> List[PriceRecord]:
        """Vendor-specific price lookup for the aggregator's `(item, zip)` input."""

    async def _find_locations(self, zip_code: str) -> List[LocationRecord]:
        raise NotImplementedError(f"{self.VENDOR_ID} does not support locations")

    def get_capabilities(self) -> VendorCapabilities:
        return self.CAPABILITIES

    def is_configured(self) -> bool:
        return self.token_manager.credential_store.is_configured(self.VENDOR_ID)

    # ── Public API used by the aggregator ───────────────────────

    async def search_prices(self, item: str, zip_code: Optional[str]) -> List[PriceRecord]:
        """
        Look up prices for an item near a ZIP code.

        Vendor-side errors propagate or degrade to an empty list
        according to the adaptor's failure policy.
        """
        return await self._apply_failure_policy(self._search_prices(item, zip_code), "price search")

    async def find_locations(self, zip_code: str) -> List[LocationRecord]:
        return await self._apply_failure_policy(self._find_locations(zip_code), "location lookup")

    async def _apply_failure_policy(self, call, operation: str) -> list:
        try:
            return await call
        except VendorError as e:
            if self.CAPABILITIES.failure_policy is FailurePolicy.DEGRADE:
                logger.warning(
                    f"Error calling {self.VENDOR_NAME} API during {operation}: {e.detail}",
                    extra={"vendor": self.VENDOR_ID}
                )
                return []
            raise

    # ── Helpers ─────────────────────────────────────────────────

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        """
        Issues an authenticated vendor call and returns its JSON body.

        Raises:
            AuthConfigError, AuthRequestError: From token acquisition
            VendorRequestError: If the call fails or returns non-JSON
        """
        token = await self.token_manager.get_token(self.VENDOR_ID)
        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {token}"
        headers.setdefault("Accept", "application/json")

        try:
            response = await self.http_client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise VendorRequestError(
                self.VENDOR_ID,
                detail=f"{self.VENDOR_NAME} API returned {e.response.status_code}",
                context={"url": url, "status_code": e.response.status_code},
                original_exception=e
            )
        except httpx.RequestError as e:
            raise VendorRequestError(
                self.VENDOR_ID,
                detail=f"Failed to connect to {self.VENDOR_NAME} API",
                context={"url": url},
                original_exception=e
            )
        except ValueError as e:
            raise VendorRequestError(
                self.VENDOR_ID,
                detail=f"{self.VENDOR_NAME} API returned invalid JSON",
                context={"url": url},
                original_exception=e
            )
