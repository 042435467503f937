import logging
from typing import Dict, Type, List, Optional

from price_aggregator.adapters.interfaces.vendor_adapter import VendorAdaptor

logger = logging.getLogger(__name__)


class AdaptorRegistry:
    """
    Registry of available vendor adaptor implementations.
    Maps vendor id strings to their implementing classes.
    """

    def __init__(self):
        self._adaptors: Dict[str, Type[VendorAdaptor]] = {}

    def register(self, vendor_id: str, adaptor_class: Type[VendorAdaptor]) -> None:
        """
        Register an adaptor implementation.

        Args:
            vendor_id: Vendor identifier, e.g. "kroger"
            adaptor_class: Class to instantiate for this vendor

        Raises:
            ValueError: If the vendor_id is invalid or already registered
        """
        if not vendor_id or not isinstance(vendor_id, str):
            raise ValueError("Vendor id must be a non-empty string")

        if not isinstance(adaptor_class, type) or not issubclass(adaptor_class, VendorAdaptor):
            raise ValueError("Adaptor class must be a subclass of VendorAdaptor")

        if vendor_id in self._adaptors:
            raise ValueError(f"Vendor '{vendor_id}' is already registered")

        self._adaptors[vendor_id] = adaptor_class
        logger.debug(f"Registered adaptor for vendor: {vendor_id}")

    def get(self, vendor_id: str) -> Optional[Type[VendorAdaptor]]:
        return self._adaptors.get(vendor_id)

    def list(self) -> List[str]:
        return list(self._adaptors.keys())

    def is_registered(self, vendor_id: str) -> bool:
        return vendor_id in self._adaptors

    def clear(self) -> None:
        """
        Clear all registered adaptors.
        Primarily used for testing purposes.
        """
        self._adaptors.clear()


def default_registry() -> AdaptorRegistry:
    """Registry holding every built-in vendor adaptor."""
    from price_aggregator.adapters.implementations import KrogerAdaptor, WalmartAdaptor

    registry = AdaptorRegistry()
    registry.register(KrogerAdaptor.VENDOR_ID, KrogerAdaptor)
    registry.register(WalmartAdaptor.VENDOR_ID, WalmartAdaptor)
    return registry
