import logging
from typing import Any, Dict, List, Optional

import httpx

from price_aggregator.adapters.interfaces.vendor_adapter import VendorAdaptor
from price_aggregator.adapters.registry import AdaptorRegistry, default_registry
from price_aggregator.core.config import Settings
from price_aggregator.core.exceptions import AdaptorConfigError, AdaptorNotFoundError
from price_aggregator.domain.models import OfferMapping
from price_aggregator.infrastructure.auth.oauth import TokenManager

logger = logging.getLogger(__name__)


def vendor_configs_from_settings(settings: Settings) -> Dict[str, Dict[str, Any]]:
    """
    Builds each vendor's adaptor keyword arguments from settings.

    Credentials are not part of these configs; adaptors reach them through
    the token manager's credential store.
    """
    return {
        "kroger": {
            "base_url": settings.KROGER_BASE_URL,
            "limit": settings.KROGER_RESULT_LIMIT,
            "default_location_id": settings.KROGER_LOCATION_ID,
            "resolve_location_from_zip": settings.KROGER_RESOLVE_LOCATION_FROM_ZIP,
            "auth_style": settings.KROGER_TOKEN_AUTH,
        },
        "walmart": {
            "base_url": settings.WALMART_BASE_URL,
            "limit": settings.WALMART_RESULT_LIMIT,
            "offer_mapping": OfferMapping.from_json(settings.WALMART_OFFER_ID_MAP),
        },
    }


class AdaptorFactory:
    """
    Factory for creating vendor adaptor instances.
    Uses a registry to instantiate the appropriate adaptor for a vendor id.
    """

    def __init__(
        self,
        token_manager: TokenManager,
        http_client: httpx.AsyncClient,
        registry: Optional[AdaptorRegistry] = None
    ):
        """
        Initialize the adaptor factory.

        Args:
            token_manager: Shared token manager handed to every adaptor
            http_client: Shared HTTP client handed to every adaptor
            registry: Registry of available adaptors, the built-ins if omitted
        """
        self.token_manager = token_manager
        self.http_client = http_client
        self.registry = registry or default_registry()

    def create_adaptor(self, vendor_id: str, config: Optional[Dict[str, Any]] = None) -> VendorAdaptor:
        """
        Create an adaptor instance for the given vendor.

        Args:
            vendor_id: Vendor to create an adaptor for (e.g., 'kroger')
            config: Adaptor keyword arguments

        Returns:
            An instance of the vendor's adaptor

        Raises:
            AdaptorNotFoundError: If the vendor is not registered
            AdaptorConfigError: If the configuration is invalid
        """
        adaptor_class = self.registry.get(vendor_id)
        if not adaptor_class:
            logger.error(f"Vendor '{vendor_id}' not found in registry")
            raise AdaptorNotFoundError(f"Vendor '{vendor_id}' not found in registry")

        try:
            adaptor = adaptor_class(
                token_manager=self.token_manager,
                http_client=self.http_client,
                **(config or {})
            )
        except (TypeError, ValueError) as e:
            logger.error(f"Invalid configuration for {vendor_id} adaptor: {str(e)}")
            raise AdaptorConfigError(f"Failed to create {vendor_id} adaptor: {str(e)}")

        logger.info(f"Created {vendor_id} adaptor")
        return adaptor

    def create_configured_adaptors(self, settings: Settings) -> List[VendorAdaptor]:
        """
        Create adaptors for every enabled vendor, in configured order.

        Vendors without credentials are still created: their token requests
        fail per call and are isolated like any other vendor fault.
        """
        configs = vendor_configs_from_settings(settings)
        adaptors = []
        for vendor_id in settings.ENABLED_VENDORS:
            vendor_id = vendor_id.strip().lower()
            adaptor = self.create_adaptor(vendor_id, configs.get(vendor_id))
            if not adaptor.is_configured():
                logger.warning(f"Vendor {vendor_id} has no credentials configured")
            adaptors.append(adaptor)
        return adaptors

    def get_adaptor_types(self) -> List[str]:
        return self.registry.list()
