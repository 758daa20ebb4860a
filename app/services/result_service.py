import logging
from typing import Mapping, Optional

from ..core.exceptions import SessionMismatchError
from ..core.hooks import CheckoutHooks
from ..db.repositories.pending_sessions import PendingSessionStore
from ..models.checkout import STATUS_PARAM, CheckoutResult, StatusOutcome
from ..utils.sanitize import filter_input, sanitize_message
from ..utils.templates import render_template

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    StatusOutcome.SUCCESS.value: "Payment succeeded.",
    StatusOutcome.CANCELED.value: "Payment canceled.",
}
UNKNOWN_MESSAGE = "Unknown error."


class ResultService:
    """
    Reports the outcome of a checkout when the visitor comes back from Stripe.
    """

    def __init__(self, store: PendingSessionStore, hooks: CheckoutHooks):
        self.store = store
        self.hooks = hooks

    async def resolve(self, query_params: Mapping[str, str]) -> Optional[CheckoutResult]:
        """
        Work out (record, status, message) from the return query string.

        None when the request carries no `kagg_stripe_status` at all.
        """
        if STATUS_PARAM not in query_params:
            return None

        raw_status = filter_input(query_params, STATUS_PARAM)
        # Query params arrive decoded already
        message = sanitize_message(query_params.get("msg"))
        session_id = filter_input(query_params, "session_id")

        record = await self.store.get_record(session_id)

        if raw_status == StatusOutcome.ERROR.value:
            status = StatusOutcome.ERROR
        else:
            status = StatusOutcome(raw_status) if raw_status in STATUS_MESSAGES else StatusOutcome.UNKNOWN
            message = STATUS_MESSAGES.get(raw_status, UNKNOWN_MESSAGE)

            try:
                self.check_session(record, session_id)
            except SessionMismatchError as e:
                logger.warning(f"Checkout return with unmatched session id {e.session_id!r} (status {raw_status!r})")
                status = StatusOutcome.ERROR
                message = e.message

        return CheckoutResult(record=record, status=status, message=message)

    @staticmethod
    def check_session(record, session_id: str) -> None:
        if record is None or not session_id or record.session.id != session_id:
            raise SessionMismatchError(session_id)

    async def render_notice(self, query_params: Mapping[str, str]) -> Optional[str]:
        """
        Notice markup for a returning visitor, or None if there is nothing to report
        """
        result = await self.resolve(query_params)
        if result is None:
            return None

        self.hooks.notify_result(result.record, result.status, result.message)

        return render_template("notice.html", {
            "status": result.status.value,
            "message": result.message,
        })
