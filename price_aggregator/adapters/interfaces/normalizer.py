from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from price_aggregator.domain.models import LocationRecord, PriceRecord


class ResponseNormalizer(ABC):
    """
    Abstract base for vendor response normalizers.

    One normalizer exists per vendor response shape; each turns the raw
    JSON body into the shared records. Normalizers never raise on missing
    optional fields: absent values become None.
    """

    vendor: str = ""

    @abstractmethod
    def normalize_prices(self, raw_data: Any, query: str) -> List[PriceRecord]:
        """
        Normalizes a price response.

        Args:
            raw_data: Decoded JSON body from the vendor
            query: The item name that was searched, for name fallback

        Returns:
            List of price records, possibly empty
        """

    def normalize_locations(self, raw_data: Any) -> List[LocationRecord]:
        raise NotImplementedError(f"{type(self).__name__} does not normalize locations")

    @staticmethod
    def extract_list(raw_data: Any, key: str) -> List[Dict[str, Any]]:
        """Returns the list under `key`, dropping anything that isn't an object."""
        if not isinstance(raw_data, dict):
            return []
        entries = raw_data.get(key)
        if not isinstance(entries, list):
            return []
        return [entry for entry in entries if isinstance(entry, dict)]

    @staticmethod
    def dig(data: Any, *path: str) -> Optional[Any]:
        """Follows nested keys, returning None at the first missing level."""
        for key in path:
            if not isinstance(data, dict):
                return None
            data = data.get(key)
        return data

    @staticmethod
    def text_or_none(value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None
