"""
Services package for the price aggregator.

Services orchestrate vendor adaptors into the operations the API exposes.
"""

from price_aggregator.services.price_service import PriceAggregator

__all__ = ["PriceAggregator"]
