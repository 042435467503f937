from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional


class AvailabilityStatus(str, Enum):
    """Normalized stock status shared by all vendors."""
    IN_STOCK = "in_stock"
    LIMITED = "limited"
    OUT_OF_STOCK = "out_of_stock"
    UNKNOWN = "unknown"


def to_money(value: Any, zero_is_missing: bool = False) -> Optional[Decimal]:
    """
    Converts a vendor price field to Decimal.

    Missing and unparseable values yield None. Vendors that use 0 to mean
    "no price" pass zero_is_missing so it yields None as well.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or (zero_is_missing and amount == 0):
        return None
    return amount


def _money_to_json(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass(frozen=True)
class PriceRecord:
    """Domain model for one vendor's price for one item."""

    vendor: str
    item_name: str
    currency: str = "USD"
    unit_label: Optional[str] = None
    regular_price: Optional[Decimal] = None
    promo_price: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    availability: Optional[AvailabilityStatus] = None

    def current_price(self) -> Optional[Decimal]:
        """Gets the price a shopper would pay right now."""
        return self.promo_price or self.regular_price

    def to_dict(self) -> Dict[str, Any]:
        """Formats the record for a JSON response."""
        return {
            "vendor": self.vendor,
            "itemName": self.item_name,
            "unitLabel": self.unit_label,
            "regularPrice": _money_to_json(self.regular_price),
            "promoPrice": _money_to_json(self.promo_price),
            "unitPrice": _money_to_json(self.unit_price),
            "currency": self.currency,
            "availability": self.availability.value if self.availability else None,
        }


@dataclass(frozen=True)
class Address:
    """Postal address of a store."""

    line1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    county: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line1": self.line1,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "county": self.county,
        }


@dataclass(frozen=True)
class LocationRecord:
    """Domain model for a vendor store location."""

    vendor: str
    location_id: str
    name: str
    address: Address
    distance_miles: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vendor": self.vendor,
            "locationId": self.location_id,
            "name": self.name,
            "address": self.address.to_dict(),
            "distanceMiles": self.distance_miles,
        }
