from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from enum import Enum

CHECKOUT_ACTION = "kagg_create_checkout"
STATUS_PARAM = "kagg_stripe_status"
PENDING_SESSION_PREFIX = "pending_session_"
ANONYMOUS_USER_ID = "0"


class CheckoutMode(str, Enum):
    PAYMENT = "payment"
    SUBSCRIPTION = "subscription"


class StatusOutcome(str, Enum):
    SUCCESS = "success"
    CANCELED = "canceled"
    ERROR = "error"
    UNKNOWN = "unknown"


# Logged-in visitor, if any
class CheckoutUser(BaseModel):
    id: str
    email: Optional[str] = None


# Shortcode attributes of the checkout button
class ButtonAttributes(BaseModel):
    mode: str = CheckoutMode.PAYMENT.value
    price: str = ""
    amount: int = 0
    currency: str = "usd"
    description: str = "Custom Payment"
    label: str = "Pay Now"
    custom_amount: bool = False


class CheckoutRequest(BaseModel):
    mode: str = CheckoutMode.PAYMENT.value
    price_id: str = ""
    amount_cents: int = 0
    currency: str = "usd"
    description: str = "Custom Payment"
    customer_email: Optional[str] = None


# Incoming form submission as seen by the orchestrator
class CheckoutSubmission(BaseModel):
    method: str
    form: Dict[str, str] = Field(default_factory=dict)
    current_url: str
    user: Optional[CheckoutUser] = None


class ProviderSession(BaseModel):
    id: Optional[str] = None
    url: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> "ProviderSession":
        session_id = payload.get("id")
        url = payload.get("url")
        return cls(
            id=str(session_id) if session_id else None,
            url=str(url) if url else None,
            raw=payload,
        )


class PendingSessionRecord(BaseModel):
    request_body: Dict[str, Any]
    session: ProviderSession
    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def key_for(session_id: str) -> str:
        return f"{PENDING_SESSION_PREFIX}{session_id}"


class CheckoutResult(BaseModel):
    record: Optional[PendingSessionRecord] = None
    status: StatusOutcome
    message: str
