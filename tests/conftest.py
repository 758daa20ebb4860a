import json
import os
import time
import pytest
import httpx
from urllib.parse import parse_qsl
from httpx import ASGITransport, AsyncClient
from typing import Any, Dict, List, Optional

# Redirects back to the test host must pass the allowlist
os.environ["SITE_URL"] = "http://testserver"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from app.main import app
from app.config import StripeConfig
from app.core.hooks import CheckoutHooks
from app.db.repositories.pending_sessions import PendingSessionStore
from app.api.dependencies import (
    get_hooks,
    get_pending_session_store,
    get_stripe_client,
    get_stripe_config,
)
from app.services.stripe_service import StripeClient

BASE_URL = "http://testserver"


class MemoryPendingSessionStore(PendingSessionStore):
    """In-memory stand-in for the MongoDB store, with real expiry"""

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.ttls: Dict[str, int] = {}

    async def put(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        self.data[key] = (json.loads(json.dumps(value)), time.monotonic() + ttl)
        self.ttls[key] = ttl

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        item = self.data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if time.monotonic() >= expires_at:
            return None
        return value


class StripeStub:
    """
    Simulated Stripe API: records every request and answers with a canned response.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Any = {"id": "cs_123", "url": "https://checkout.stripe.com/x"}
        self.error: Optional[Exception] = None

    def respond(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.body = body

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last_form(self) -> Dict[str, str]:
        return dict(parse_qsl(self.requests[-1].content.decode()))


@pytest.fixture
def test_config() -> StripeConfig:
    return StripeConfig(
        test_mode=True,
        publishable_key="pk_test_123",
        secret_key="sk_test_123",
    )


@pytest.fixture
def store() -> MemoryPendingSessionStore:
    return MemoryPendingSessionStore()


@pytest.fixture
def stripe_stub() -> StripeStub:
    return StripeStub()


@pytest.fixture
def checkout_hooks() -> CheckoutHooks:
    return CheckoutHooks()


@pytest.fixture
def stripe_client(test_config, stripe_stub) -> StripeClient:
    return StripeClient(test_config, transport=stripe_stub.transport)


@pytest.fixture(autouse=True)
def override_dependencies(test_config, store, stripe_client, checkout_hooks):
    """Keep MongoDB and the real Stripe API out of the tests"""
    app.dependency_overrides[get_stripe_config] = lambda: test_config
    app.dependency_overrides[get_pending_session_store] = lambda: store
    app.dependency_overrides[get_stripe_client] = lambda: stripe_client
    app.dependency_overrides[get_hooks] = lambda: checkout_hooks
    yield
    app.dependency_overrides = {}


@pytest.fixture
async def client():
    """
    Async client bound to the app. The lifespan (MongoDB connection) is not run.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac
