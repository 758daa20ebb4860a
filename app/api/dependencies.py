from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from ..config import StripeConfig, stripe_config
from ..core.hooks import CheckoutHooks, hooks
from ..core.security import decode_access_token
from ..db.database import get_database
from ..db.repositories.pending_sessions import PendingSessionRepository, PendingSessionStore
from ..models.checkout import CheckoutUser
from ..services.button_service import ButtonRenderer
from ..services.checkout_service import CheckoutService
from ..services.result_service import ResultService
from ..services.stripe_service import StripeClient

security = HTTPBearer(
    scheme_name="JWT Authentication",
    description="Enter JWT token",
    auto_error=False
)

ACCESS_TOKEN_COOKIE = "access_token"

# Optional dependency - doesn't throw exceptions if not authenticated
async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[CheckoutUser]:
    """
    Dependency for endpoints open to guests and logged-in users alike.
    Returns the user if a valid token is sent (header or cookie), None otherwise
    """
    token = credentials.credentials if credentials else request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        return None

    return decode_access_token(token)

def get_stripe_config() -> StripeConfig:
    return stripe_config

def get_hooks() -> CheckoutHooks:
    return hooks

async def get_pending_session_store(database = Depends(get_database)) -> PendingSessionStore:
    return PendingSessionRepository(database)

def get_stripe_client(config: StripeConfig = Depends(get_stripe_config)) -> StripeClient:
    return StripeClient(config)

def get_checkout_service(
    config: StripeConfig = Depends(get_stripe_config),
    stripe_client: StripeClient = Depends(get_stripe_client),
    store: PendingSessionStore = Depends(get_pending_session_store),
    checkout_hooks: CheckoutHooks = Depends(get_hooks)
) -> CheckoutService:
    return CheckoutService(config, stripe_client, store, checkout_hooks)

def get_result_service(
    store: PendingSessionStore = Depends(get_pending_session_store),
    checkout_hooks: CheckoutHooks = Depends(get_hooks)
) -> ResultService:
    return ResultService(store, checkout_hooks)

def get_button_renderer(config: StripeConfig = Depends(get_stripe_config)) -> ButtonRenderer:
    return ButtonRenderer(config.publishable_key)
