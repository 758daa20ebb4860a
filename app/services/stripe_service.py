import logging
from typing import Dict, Any, Optional

import httpx

from ..config import StripeConfig
from ..core.exceptions import ProviderError, ProviderErrorKind
from ..core.http_client import post_form
from ..models.checkout import ProviderSession

logger = logging.getLogger(__name__)

CHECKOUT_SESSIONS_ENDPOINT = "checkout/sessions"


class StripeClient:
    """
    Thin wrapper over the Stripe REST API.

    One attempt per call: failures are raised as ProviderError and never retried.
    """

    def __init__(self, config: StripeConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    def endpoint_url(self, endpoint: str) -> str:
        return f"{self.config.api_base.rstrip('/')}/{endpoint.lstrip('/')}"

    async def request(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST `body` to a Stripe endpoint and return the decoded JSON object.
        """
        if not self.config.secret_key:
            raise ProviderError(
                ProviderErrorKind.NO_CREDENTIAL,
                f"Stripe {self.config.mode_label} secret key is not defined."
            )

        url = self.endpoint_url(endpoint)
        headers = {"Authorization": f"Bearer {self.config.secret_key}"}

        try:
            response = await post_form(
                url,
                body,
                headers=headers,
                timeout=self.config.timeout,
                transport=self.transport
            )
        except httpx.TransportError as e:
            logger.error(f"Stripe request to {endpoint} failed: {e!r}")
            raise ProviderError(ProviderErrorKind.TRANSPORT, str(e) or e.__class__.__name__)

        payload = self._decode(response)

        if response.status_code < 200 or response.status_code >= 300 or not payload:
            error = payload.get("error") if isinstance(payload.get("error"), dict) else {}
            message = error.get("message") or "Stripe API error"
            logger.warning(f"Stripe API error on {endpoint}: ({response.status_code}) {message}")
            raise ProviderError(
                ProviderErrorKind.API_ERROR,
                message,
                status=response.status_code,
                raw_body=payload
            )

        return payload

    async def create_checkout_session(self, body: Dict[str, Any]) -> ProviderSession:
        """
        Create a Stripe Checkout session
        """
        payload = await self.request(CHECKOUT_SESSIONS_ENDPOINT, body)
        session = ProviderSession.from_response(payload)
        logger.info(f"Stripe checkout session created: {session.id}")
        return session

    @staticmethod
    def _decode(response: httpx.Response) -> Dict[str, Any]:
        # Unparseable or non-object bodies count as empty
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}
