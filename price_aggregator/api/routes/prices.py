from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from price_aggregator.api.dependencies import get_price_aggregator
from price_aggregator.services.price_service import PriceAggregator

prices_router = APIRouter()


@prices_router.get("/prices", summary="Get prices for an item near a ZIP code")
async def get_prices(
    item: Optional[str] = Query(None, description="Item to price, e.g. 'ribeye'"),
    zip: Optional[str] = Query(None, description="ZIP code to price near"),
    aggregator: PriceAggregator = Depends(get_price_aggregator)
) -> Dict[str, Any]:
    """Gets the merged price list from every vendor."""
    prices = await aggregator.query(item, zip)
    return {
        "item": item,
        "zip": zip.strip() if zip and zip.strip() else None,
        "prices": [record.to_dict() for record in prices],
    }


@prices_router.get("/locations", summary="Get stores near a ZIP code")
async def get_locations(
    zip: Optional[str] = Query(None, description="ZIP code to search near"),
    aggregator: PriceAggregator = Depends(get_price_aggregator)
) -> Dict[str, Any]:
    """Gets store locations from every locations-capable vendor."""
    locations = await aggregator.get_locations(zip)
    return {
        "zip": zip,
        "locations": [location.to_dict() for location in locations],
    }
