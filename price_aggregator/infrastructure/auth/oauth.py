import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

import httpx
from pydantic import BaseModel

from price_aggregator.core.exceptions import AuthConfigError, AuthRequestError
from price_aggregator.core.logging import get_logger
from price_aggregator.infrastructure.auth.credentials import VendorCredentialStore

logger = get_logger(__name__)

DEFAULT_TOKEN_LIFETIME = 1800


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenAuthStyle(str, Enum):
    """How client credentials travel in the token request."""
    BODY = "body"
    BASIC = "basic"


@dataclass(frozen=True)
class TokenGrant:
    """
    Describes one vendor's client-credentials exchange.

    Vendors disagree on where credentials go and on what the token and its
    lifetime are called in the response, so each adapter declares its own.
    """
    token_url: str
    auth_style: TokenAuthStyle = TokenAuthStyle.BODY
    identity_header: Optional[str] = None
    extra_headers: Dict[str, str] = field(default_factory=dict)
    token_fields: Tuple[str, ...] = ("access_token",)
    lifetime_fields: Tuple[str, ...] = ("expires_in",)
    default_lifetime: int = DEFAULT_TOKEN_LIFETIME


class VendorToken(BaseModel):
    """Model representing a cached vendor access token."""
    vendor: str
    access_token: str
    expires_at: datetime

    def is_usable(self, now: datetime, safety_margin: timedelta) -> bool:
        """Check the token is not within `safety_margin` of expiring."""
        return now < self.expires_at - safety_margin


class TokenStore:
    """In-memory token cache keyed by vendor id."""

    def __init__(self):
        self._tokens: Dict[str, VendorToken] = {}

    def get(self, vendor: str) -> Optional[VendorToken]:
        return self._tokens.get(vendor)

    def set(self, token: VendorToken) -> None:
        self._tokens[token.vendor] = token

    def discard(self, vendor: str) -> None:
        self._tokens.pop(vendor, None)

    def clear(self) -> None:
        self._tokens.clear()


class TokenManager:
    """Acquires and caches OAuth2 client-credentials tokens per vendor."""

    def __init__(
        self,
        credential_store: VendorCredentialStore,
        http_client: httpx.AsyncClient,
        token_store: Optional[TokenStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
        safety_margin_seconds: int = 60
    ):
        """
        Initialize the token manager.

        Args:
            credential_store: Read-only source of vendor credentials
            http_client: HTTP client used for token exchanges
            token_store: Token cache; a fresh in-memory store if omitted
            clock: Returns the current aware datetime; injectable for tests
            safety_margin_seconds: Tokens this close to expiry are renewed
        """
        self.credential_store = credential_store
        self.http_client = http_client
        self.token_store = token_store if token_store is not None else TokenStore()
        self.clock = clock or utcnow
        self.safety_margin = timedelta(seconds=safety_margin_seconds)

        self._grants: Dict[str, TokenGrant] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def register_grant(self, vendor: str, grant: TokenGrant) -> None:
        self._grants[vendor] = grant

    def _cached(self, vendor: str) -> Optional[str]:
        token = self.token_store.get(vendor)
        if token and token.is_usable(self.clock(), self.safety_margin):
            return token.access_token
        return None

    async def get_token(self, vendor: str) -> str:
        """
        Obtain an access token for a vendor.

        Args:
            vendor: Vendor id

        Returns:
            Bearer token, valid for at least the safety margin

        Raises:
            AuthConfigError: If credentials or the token grant are missing
            AuthRequestError: If the vendor rejects the exchange
        """
        access_token = self._cached(vendor)
        if access_token:
            logger.debug(f"Using cached token for {vendor}")
            return access_token

        lock = self._locks.setdefault(vendor, asyncio.Lock())
        async with lock:
            # Another caller may have refreshed it while we waited
            access_token = self._cached(vendor)
            if access_token:
                return access_token

            token = await self._fetch_token(vendor)
            self.token_store.set(token)
            return token.access_token

    async def _fetch_token(self, vendor: str) -> VendorToken:
        credentials = self.credential_store.get(vendor)
        if credentials is None or not credentials.is_complete():
            raise AuthConfigError(vendor)

        grant = self._grants.get(vendor)
        if grant is None:
            raise AuthConfigError(vendor, detail=f"No token grant registered for vendor '{vendor}'")

        data = {"grant_type": "client_credentials"}
        if credentials.scope:
            data["scope"] = credentials.scope

        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        headers.update(grant.extra_headers)
        if grant.identity_header:
            headers[grant.identity_header] = credentials.client_id

        auth = None
        if grant.auth_style == TokenAuthStyle.BASIC:
            auth = httpx.BasicAuth(credentials.client_id, credentials.client_secret)
        else:
            data["client_id"] = credentials.client_id
            data["client_secret"] = credentials.client_secret

        try:
            response = await self.http_client.post(
                grant.token_url,
                data=data,
                headers=headers,
                auth=auth
            )
            response.raise_for_status()
            token_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error during token acquisition for {vendor}: {str(e)}")
            raise AuthRequestError(vendor, original_exception=e)
        except httpx.RequestError as e:
            logger.error(f"Request error during token acquisition for {vendor}: {str(e)}")
            raise AuthRequestError(
                vendor,
                detail=f"Failed to connect to token endpoint for vendor '{vendor}'",
                original_exception=e
            )
        except ValueError as e:
            raise AuthRequestError(
                vendor,
                detail=f"Token endpoint for vendor '{vendor}' returned invalid JSON",
                original_exception=e
            )

        token = self._parse_token(vendor, grant, token_data)
        logger.info(f"Successfully obtained OAuth token for {vendor}")
        return token

    def _parse_token(self, vendor: str, grant: TokenGrant, token_data: Any) -> VendorToken:
        if not isinstance(token_data, dict):
            raise AuthRequestError(vendor, detail=f"Unexpected token response from vendor '{vendor}'")

        access_token = _first_present(token_data, grant.token_fields)
        if not access_token:
            raise AuthRequestError(vendor, detail=f"Token response from vendor '{vendor}' has no access token")

        lifetime = _first_present(token_data, grant.lifetime_fields)
        try:
            expires_in = int(lifetime) if lifetime is not None else grant.default_lifetime
        except (TypeError, ValueError):
            expires_in = grant.default_lifetime

        return VendorToken(
            vendor=vendor,
            access_token=str(access_token),
            expires_at=self.clock() + timedelta(seconds=expires_in)
        )


def _first_present(data: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None
