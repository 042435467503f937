"""
Domain models for the price aggregator.

Price and location records are the normalized output every vendor adapter
produces; they are created per request and never cached.
"""

from price_aggregator.domain.models.offer_mapping import OfferMapping, normalize_item_name
from price_aggregator.domain.models.price import (
    Address,
    AvailabilityStatus,
    LocationRecord,
    PriceRecord,
    to_money,
)

__all__ = [
    "Address",
    "AvailabilityStatus",
    "LocationRecord",
    "OfferMapping",
    "PriceRecord",
    "normalize_item_name",
    "to_money",
]
