from typing import Optional

import httpx
from fastapi import Request

from price_aggregator.adapters.factory import AdaptorFactory
from price_aggregator.core.config import Settings
from price_aggregator.core.logging import get_logger
from price_aggregator.infrastructure.auth.credentials import VendorCredentialStore
from price_aggregator.infrastructure.auth.oauth import TokenManager, TokenStore
from price_aggregator.services.price_service import PriceAggregator

logger = get_logger(__name__)


def build_price_aggregator(
    settings: Settings,
    http_client: httpx.AsyncClient,
    token_store: Optional[TokenStore] = None
) -> PriceAggregator:
    """
    Wires the credential store, token manager and vendor adaptors together.

    Args:
        settings: Application settings
        http_client: Shared HTTP client for token and vendor calls
        token_store: Token cache shared for the life of the process

    Returns:
        PriceAggregator over the enabled vendors, in configured order
    """
    credential_store = VendorCredentialStore.from_settings(settings)
    token_manager = TokenManager(
        credential_store=credential_store,
        http_client=http_client,
        token_store=token_store,
        safety_margin_seconds=settings.TOKEN_SAFETY_MARGIN_SECONDS
    )
    factory = AdaptorFactory(token_manager=token_manager, http_client=http_client)
    adaptors = factory.create_configured_adaptors(settings)
    logger.info(f"Configured vendors: {', '.join(a.VENDOR_ID for a in adaptors) or 'none'}")
    return PriceAggregator(adaptors, vendor_timeout=settings.VENDOR_TIMEOUT_SECONDS)


async def get_price_aggregator(request: Request) -> PriceAggregator:
    """
    Dependency providing the process-wide aggregator.

    Returns:
        The aggregator built at application startup
    """
    return request.app.state.price_aggregator
