import os
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file
load_dotenv()

class Settings(BaseSettings):
    # API Settings
    DEBUG: bool = Field(default=False)
    PROJECT_NAME: str = Field(default="KAGG Stripe Payments")
    SITE_URL: str = Field(default="http://localhost:8000")

    # MongoDB Settings
    MONGODB_URI: str = Field(default="mongodb://localhost:27017")
    MONGODB_DB_NAME: str = Field(default="kagg_stripe")
    MONGODB_TLS: bool = Field(default=False)

    # Security Settings
    SECRET_KEY: str = Field(default="secret_key")
    ALGORITHM: str = Field(default="HS256")
    NONCE_LIFETIME_SECONDS: int = Field(default=86400)

    # Stripe Settings
    STRIPE_API_BASE: str = Field(default="https://api.stripe.com/v1")
    STRIPE_TIMEOUT_SECONDS: float = Field(default=30.0)
    STRIPE_CHECKOUT_HOST: str = Field(default="checkout.stripe.com")
    STRIPE_TEST_PUBLISHABLE_KEY: str = Field(default="")
    STRIPE_TEST_SECRET_KEY: str = Field(default="")
    STRIPE_LIVE_PUBLISHABLE_KEY: str = Field(default="")
    STRIPE_LIVE_SECRET_KEY: str = Field(default="")

    # Checkout Settings
    ALLOWED_REDIRECT_HOSTS: List[str] = Field(default_factory=list)
    PENDING_SESSION_TTL_SECONDS: int = Field(default=86400)
    REQUIRE_SUBSCRIPTION_PRICE: bool = Field(default=False)

    class Config:
        env_file = ".env"
        case_sensitive = True


class StripeConfig(BaseModel):
    """
    Credentials and endpoints of the active Stripe mode.

    Built once at startup and passed to every service that talks to Stripe.
    """
    test_mode: bool
    publishable_key: str = ""
    secret_key: str = ""
    api_base: str = "https://api.stripe.com/v1"
    timeout: float = 30.0
    checkout_host: str = "checkout.stripe.com"
    pending_session_ttl: int = 86400
    require_subscription_price: bool = False

    @classmethod
    def from_settings(cls, settings: Settings, secret_key_override: Optional[str] = None) -> "StripeConfig":
        host = urlparse(settings.SITE_URL).hostname or ""
        test_mode = is_test_host(host)

        if test_mode:
            publishable_key = settings.STRIPE_TEST_PUBLISHABLE_KEY
            secret_key = settings.STRIPE_TEST_SECRET_KEY
        else:
            publishable_key = settings.STRIPE_LIVE_PUBLISHABLE_KEY
            secret_key = settings.STRIPE_LIVE_SECRET_KEY

        if secret_key_override is not None:
            secret_key = secret_key_override

        return cls(
            test_mode=test_mode,
            publishable_key=publishable_key,
            secret_key=secret_key,
            api_base=settings.STRIPE_API_BASE,
            timeout=settings.STRIPE_TIMEOUT_SECONDS,
            checkout_host=settings.STRIPE_CHECKOUT_HOST,
            pending_session_ttl=settings.PENDING_SESSION_TTL_SECONDS,
            require_subscription_price=settings.REQUIRE_SUBSCRIPTION_PRICE,
        )

    @property
    def mode_label(self) -> str:
        return "test" if self.test_mode else "live"


def is_test_host(host: str) -> bool:
    """A `.test` host (local development) selects Stripe test mode."""
    return host.lower().rstrip(".").endswith(".test")


settings = Settings()

stripe_config = StripeConfig.from_settings(
    settings,
    secret_key_override=os.getenv("KAGG_STRIPE_SECRET_KEY"),
)
