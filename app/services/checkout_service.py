import logging
from typing import Dict, Any, Optional

from fastapi.responses import RedirectResponse

from ..config import StripeConfig
from ..core.exceptions import CheckoutValidationError, ProviderError
from ..core.hooks import CheckoutHooks
from ..core.redirects import add_query_args, remove_query_args, safe_redirect, site_relative
from ..core.security import user_id_of, verify_nonce
from ..db.repositories.pending_sessions import PendingSessionStore
from ..models.checkout import (
    CHECKOUT_ACTION,
    STATUS_PARAM,
    CheckoutMode,
    CheckoutRequest,
    CheckoutSubmission,
    PendingSessionRecord,
    StatusOutcome,
)
from ..utils.sanitize import (
    DEFAULT_CURRENCY,
    DEFAULT_DESCRIPTION,
    DEFAULT_MODE,
    filter_input,
    sanitize_currency,
    sanitize_int,
)
from .stripe_service import StripeClient

logger = logging.getLogger(__name__)

NONCE_FIELD = "_wpnonce"
SESSION_ID_PLACEHOLDER = "session_id={CHECKOUT_SESSION_ID}"
RESULT_PARAMS = (STATUS_PARAM, "msg", "session_id")

INVALID_NONCE = "Invalid nonce."
INVALID_MODE = 'Payment mode must be "payment" or "subscription".'
INVALID_AMOUNT = "Amount must be >= 1 cent."
MISSING_PRICE = "Price ID is required for subscription mode."
UNEXPECTED_RESPONSE = "Unexpected Stripe response"


class CheckoutService:
    """
    Handles the checkout form submission.

    Validates the submission, asks Stripe for a hosted checkout session,
    remembers the pending session and sends the visitor to Stripe. Every
    failure ends in a redirect back to the originating page with
    `kagg_stripe_status=error` and a readable `msg`.
    """

    def __init__(
        self,
        config: StripeConfig,
        stripe_client: StripeClient,
        store: PendingSessionStore,
        hooks: CheckoutHooks
    ):
        self.config = config
        self.stripe_client = stripe_client
        self.store = store
        self.hooks = hooks

    @staticmethod
    def is_checkout_submission(submission: CheckoutSubmission) -> bool:
        return (
            submission.method.upper() == "POST"
            and filter_input(submission.form, "action") == CHECKOUT_ACTION
        )

    async def handle_submission(self, submission: CheckoutSubmission) -> Optional[RedirectResponse]:
        """
        Run the checkout flow for a form POST.

        Returns None for requests that are not checkout submissions, so the
        caller can carry on as if nothing happened.
        """
        if not self.is_checkout_submission(submission):
            return None

        page_url = remove_query_args(submission.current_url, RESULT_PARAMS)

        try:
            checkout_request = self.build_checkout_request(submission)
            body = self.build_session_body(checkout_request, submission, page_url)
            session = await self.stripe_client.create_checkout_session(body)
        except CheckoutValidationError as e:
            logger.warning(f"Checkout rejected ({e.field}): {e.reason}")
            return self.error_redirect(page_url, e.reason)
        except ProviderError as e:
            status = e.status or 500
            logger.error(f"Checkout session failed [{e.kind.value}]: ({status}) {e.message}")
            return self.error_redirect(page_url, f"Stripe error: ({status}) {e.message}")

        if not session.url or not session.id:
            logger.error(f"Stripe response without session url: {session.raw}")
            return self.error_redirect(page_url, UNEXPECTED_RESPONSE)

        record = PendingSessionRecord(request_body=body, session=session)
        await self.store.save_record(record, self.config.pending_session_ttl)

        logger.info(f"Redirecting to Stripe checkout for session {session.id}")
        return safe_redirect(
            session.url,
            extra_hosts=(self.config.checkout_host,),
            fallback=self.error_url(page_url, UNEXPECTED_RESPONSE)
        )

    def build_checkout_request(self, submission: CheckoutSubmission) -> CheckoutRequest:
        """Validate the submitted fields one by one"""
        form = submission.form
        user_id = user_id_of(submission.user)

        if not verify_nonce(form.get(NONCE_FIELD), CHECKOUT_ACTION, user_id):
            raise CheckoutValidationError(NONCE_FIELD, INVALID_NONCE)

        mode = filter_input(form, "mode", DEFAULT_MODE)
        if mode not in (CheckoutMode.PAYMENT.value, CheckoutMode.SUBSCRIPTION.value):
            raise CheckoutValidationError("mode", INVALID_MODE)

        amount_cents = sanitize_int(form.get("amount"))
        if mode == CheckoutMode.PAYMENT.value and amount_cents < 1:
            raise CheckoutValidationError("amount", INVALID_AMOUNT)

        price_id = filter_input(form, "price")
        if mode == CheckoutMode.SUBSCRIPTION.value and not price_id and self.config.require_subscription_price:
            raise CheckoutValidationError("price", MISSING_PRICE)

        return CheckoutRequest(
            mode=mode,
            price_id=price_id,
            amount_cents=amount_cents,
            currency=sanitize_currency(form.get("currency"), DEFAULT_CURRENCY),
            description=filter_input(form, "description", DEFAULT_DESCRIPTION) or DEFAULT_DESCRIPTION,
            customer_email=submission.user.email if submission.user else None
        )

    def build_session_body(
        self,
        checkout_request: CheckoutRequest,
        submission: CheckoutSubmission,
        page_url: str
    ) -> Dict[str, Any]:
        if checkout_request.mode == CheckoutMode.SUBSCRIPTION.value:
            line_item = {
                "price": checkout_request.price_id,
                "quantity": 1,
            }
        else:
            line_item = {
                "price_data": {
                    "currency": checkout_request.currency,
                    "unit_amount": checkout_request.amount_cents,
                    "product_data": {"name": checkout_request.description},
                },
                "quantity": 1,
            }

        body = {
            "payment_method_types": ["card"],
            "mode": checkout_request.mode,
            "line_items": [line_item],
            "success_url": self.return_url(page_url, StatusOutcome.SUCCESS),
            "cancel_url": self.return_url(page_url, StatusOutcome.CANCELED),
        }

        if checkout_request.customer_email:
            body["customer_email"] = checkout_request.customer_email

        metadata = {"user_id": user_id_of(submission.user)}
        body["metadata"] = self.hooks.apply_metadata_filters(metadata, checkout_request)

        return body

    @staticmethod
    def return_url(page_url: str, outcome: StatusOutcome) -> str:
        return add_query_args(page_url, {STATUS_PARAM: outcome.value}, raw_suffix=SESSION_ID_PLACEHOLDER)

    @staticmethod
    def error_url(page_url: str, message: str) -> str:
        return add_query_args(site_relative(page_url), {STATUS_PARAM: StatusOutcome.ERROR.value, "msg": message})

    def error_redirect(self, page_url: str, message: str) -> RedirectResponse:
        return safe_redirect(self.error_url(page_url, message))
