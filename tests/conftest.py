"""
Shared fixtures: vendor APIs are simulated with httpx.MockTransport.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List

import httpx
import pytest

from price_aggregator.infrastructure.auth.credentials import VendorCredentials, VendorCredentialStore
from price_aggregator.infrastructure.auth.oauth import TokenManager, TokenStore


class FakeClock:
    """Settable clock for token expiry tests."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


class FakeVendorAPI:
    """
    Routes requests by URL path suffix to canned responses and records them.

    Unrouted requests fail the test through a 599 response.
    """

    def __init__(self):
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path_suffix: str, status_code: int = 200, body=None) -> None:
        self.routes[path_suffix] = lambda request: httpx.Response(status_code, json=body)

    def add_handler(self, path_suffix: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[path_suffix] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, handler in self.routes.items():
            if request.url.path.endswith(suffix):
                return handler(request)
        return httpx.Response(599, json={"error": f"unrouted {request.url}"})

    def calls_to(self, path_suffix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path_suffix)]

    @staticmethod
    def json_body(request: httpx.Request):
        return json.loads(request.content.decode())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def vendor_api():
    return FakeVendorAPI()


@pytest.fixture
def http_client(vendor_api):
    return httpx.AsyncClient(transport=httpx.MockTransport(vendor_api))


@pytest.fixture
def credential_store():
    return VendorCredentialStore({
        "kroger": VendorCredentials(client_id="kroger-id", client_secret="kroger-secret", scope="product.compact"),
        "walmart": VendorCredentials(client_id="wm-consumer", client_secret="wm-secret"),
    })


@pytest.fixture
def token_manager(credential_store, http_client, clock):
    return TokenManager(
        credential_store=credential_store,
        http_client=http_client,
        token_store=TokenStore(),
        clock=clock,
        safety_margin_seconds=60
    )
