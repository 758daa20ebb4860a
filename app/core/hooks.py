"""
Extension points for code outside the checkout flow.

Metadata filters may add keys to the metadata sent to Stripe. Result
listeners receive the resolved (record, status, message) of a returning
visitor, e.g. to fulfil an order, before the notice is rendered.
"""

from typing import Callable, Dict, List, Optional

from ..models.checkout import CheckoutRequest, PendingSessionRecord, StatusOutcome

MetadataFilter = Callable[[Dict[str, str], CheckoutRequest], Dict[str, str]]
ResultListener = Callable[[Optional[PendingSessionRecord], StatusOutcome, str], None]


class CheckoutHooks:
    def __init__(self):
        self.metadata_filters: List[MetadataFilter] = []
        self.result_listeners: List[ResultListener] = []

    def add_metadata_filter(self, func: MetadataFilter) -> MetadataFilter:
        self.metadata_filters.append(func)
        return func

    def add_result_listener(self, func: ResultListener) -> ResultListener:
        self.result_listeners.append(func)
        return func

    def apply_metadata_filters(self, metadata: Dict[str, str], request: CheckoutRequest) -> Dict[str, str]:
        for func in self.metadata_filters:
            metadata = {str(k): str(v) for k, v in func(dict(metadata), request).items()}
        return metadata

    def notify_result(
        self,
        record: Optional[PendingSessionRecord],
        status: StatusOutcome,
        message: str,
    ) -> None:
        for func in self.result_listeners:
            func(record, status, message)

    def clear(self) -> None:
        self.metadata_filters.clear()
        self.result_listeners.clear()


hooks = CheckoutHooks()
