from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from price_aggregator.core.config import Settings


@dataclass(frozen=True)
class VendorCredentials:
    """Client-credentials identity for one vendor."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    scope: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.client_id and self.client_secret)


class VendorCredentialStore:
    """Read-only lookup of per-vendor secrets."""

    def __init__(self, credentials: Optional[Mapping[str, VendorCredentials]] = None):
        self._credentials: Mapping[str, VendorCredentials] = MappingProxyType(dict(credentials or {}))

    @classmethod
    def from_settings(cls, settings: Settings) -> "VendorCredentialStore":
        """
        Builds the store from process configuration.

        Args:
            settings: Application settings

        Returns:
            A store holding every vendor's credentials, possibly incomplete
        """
        return cls({
            "kroger": VendorCredentials(
                client_id=settings.KROGER_CLIENT_ID,
                client_secret=settings.KROGER_CLIENT_SECRET,
                scope=settings.KROGER_SCOPE or None,
            ),
            "walmart": VendorCredentials(
                client_id=settings.WALMART_CONSUMER_ID,
                client_secret=settings.WALMART_CLIENT_SECRET,
            ),
        })

    def get(self, vendor: str) -> Optional[VendorCredentials]:
        return self._credentials.get(vendor)

    def is_configured(self, vendor: str) -> bool:
        credentials = self.get(vendor)
        return credentials is not None and credentials.is_complete()

    def vendors(self) -> List[str]:
        return list(self._credentials.keys())

    def as_dict(self) -> Dict[str, bool]:
        """Configured flag per vendor, without exposing secrets."""
        return {vendor: self.is_configured(vendor) for vendor in self._credentials}
