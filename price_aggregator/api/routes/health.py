import time
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from price_aggregator.api.dependencies import get_price_aggregator
from price_aggregator.core.logging import get_logger
from price_aggregator.services.price_service import PriceAggregator

health_router = APIRouter()
logger = get_logger(__name__)


class HealthStatus(BaseModel):
    """Basic health status response model."""
    status: str
    timestamp: int


class VendorStatus(BaseModel):
    """Configuration status of a single vendor."""
    vendor: str
    name: str
    configured: bool
    capabilities: List[str]
    failure_policy: str


class DetailedHealthStatus(HealthStatus):
    """Detailed health status with per-vendor information."""
    vendors: List[VendorStatus]


async def get_health() -> HealthStatus:
    """
    Basic health check endpoint.

    Returns:
        HealthStatus: "OK" and the current time in milliseconds
    """
    return HealthStatus(status="OK", timestamp=int(time.time() * 1000))


@health_router.get(
    "/detailed",
    response_model=DetailedHealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
    description="Returns health status including each vendor's configuration."
)
async def get_detailed_health(
    aggregator: PriceAggregator = Depends(get_price_aggregator),
) -> DetailedHealthStatus:
    """
    Detailed health check; reports whether each vendor has credentials.

    No vendor calls are made, so this stays cheap enough for probes.
    """
    vendors: List[Dict[str, Any]] = aggregator.describe_vendors()
    overall = "OK" if all(v["configured"] for v in vendors) else "DEGRADED"
    return DetailedHealthStatus(
        status=overall,
        timestamp=int(time.time() * 1000),
        vendors=[VendorStatus(**v) for v in vendors]
    )
