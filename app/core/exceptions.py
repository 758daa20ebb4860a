"""
Checkout error types.

Every error here is recovered at the orchestrator or reporter boundary and
turned into a redirect or a notice message for the visitor.
"""

from enum import Enum
from typing import Any, Dict, Optional


class CheckoutError(Exception):
    """Base class for checkout failures"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProviderErrorKind(str, Enum):
    NO_CREDENTIAL = "no_credential"
    TRANSPORT = "transport"
    API_ERROR = "api_error"


class ProviderError(CheckoutError):
    """Stripe could not create the requested object"""

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        status: Optional[int] = None,
        raw_body: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status = status
        self.raw_body = raw_body

    def __repr__(self) -> str:
        return f"ProviderError(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"


class CheckoutValidationError(CheckoutError):
    """A submitted field failed validation (bad nonce, mode or amount)"""

    def __init__(self, field: str, reason: str):
        super().__init__(reason)
        self.field = field
        self.reason = reason


class SessionMismatchError(CheckoutError):
    """The returning session id does not match a pending session record"""

    def __init__(self, session_id: str, message: str = "Wrong payment id."):
        super().__init__(message)
        self.session_id = session_id
