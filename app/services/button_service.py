from typing import Any, Mapping, Optional

from ..models.checkout import CHECKOUT_ACTION, ButtonAttributes
from ..utils.sanitize import (
    DEFAULT_CURRENCY,
    DEFAULT_DESCRIPTION,
    DEFAULT_MODE,
    filter_input,
    sanitize_bool,
    sanitize_currency,
    sanitize_int,
)
from ..utils.templates import render_template

DEFAULT_LABEL = "Pay Now"


def parse_button_attributes(raw: Optional[Mapping[str, Any]]) -> ButtonAttributes:
    """Shortcode-style attributes with their defaults, each field sanitized on its own"""
    raw = raw or {}
    return ButtonAttributes(
        mode=filter_input(raw, "mode", DEFAULT_MODE) or DEFAULT_MODE,
        price=filter_input(raw, "price"),
        amount=sanitize_int(raw.get("amount", 0)),
        currency=sanitize_currency(raw.get("currency"), DEFAULT_CURRENCY),
        description=filter_input(raw, "description", DEFAULT_DESCRIPTION),
        label=filter_input(raw, "label", DEFAULT_LABEL),
        custom_amount=sanitize_bool(raw.get("custom_amount", False)),
    )


class ButtonRenderer:
    """Renders the checkout button form. No network or storage access."""

    def __init__(self, publishable_key: str = ""):
        self.publishable_key = publishable_key

    def render(self, attrs: ButtonAttributes, nonce: str, action_url: str = "") -> str:
        return render_template("button.html", {
            "action_url": action_url,
            "action": CHECKOUT_ACTION,
            "nonce": nonce,
            "publishable_key": self.publishable_key,
            "mode": attrs.mode,
            "price": attrs.price,
            "currency": attrs.currency,
            "description": attrs.description,
            "amount": attrs.amount,
            "custom_amount": attrs.custom_amount,
            "label": attrs.label,
        })
