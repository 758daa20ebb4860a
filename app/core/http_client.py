"""
HTTP Client utility functions
Provides async HTTP client handling for outbound API calls
"""

import httpx
from typing import Optional, Dict, Any, List, Tuple
from contextlib import asynccontextmanager


@asynccontextmanager
async def get_http_client(
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """
    Context manager for httpx AsyncClient that properly manages the client lifecycle.

    Usage:
        async with get_http_client() as client:
            response = await client.get("https://example.com")

    Args:
        timeout: Request timeout in seconds
        transport: Optional transport, e.g. httpx.MockTransport in tests

    Yields:
        httpx.AsyncClient: The HTTP client
    """
    client = httpx.AsyncClient(timeout=timeout, transport=transport)
    try:
        yield client
    finally:
        await client.aclose()


def flatten_form_fields(data: Dict[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """
    Flatten nested dicts and lists into bracketed form field names.

    {"line_items": [{"price": "price_1", "quantity": 1}]} becomes
    [("line_items[0][price]", "price_1"), ("line_items[0][quantity]", "1")]
    """
    fields: List[Tuple[str, str]] = []

    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        fields.extend(_flatten_value(name, value))

    return fields


def _flatten_value(name: str, value: Any) -> List[Tuple[str, str]]:
    if value is None:
        return []
    if isinstance(value, dict):
        return flatten_form_fields(value, name)
    if isinstance(value, (list, tuple)):
        fields: List[Tuple[str, str]] = []
        for index, item in enumerate(value):
            fields.extend(_flatten_value(f"{name}[{index}]", item))
        return fields
    if isinstance(value, bool):
        return [(name, "true" if value else "false")]
    return [(name, str(value))]


async def post_form(
    url: str,
    data: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.Response:
    """
    POST nested data as an application/x-www-form-urlencoded body.

    The response is returned whatever its status code; classifying it is up
    to the caller.

    Raises:
        httpx.TransportError: DNS, connection or timeout failure
    """
    async with get_http_client(timeout, transport) as client:
        return await client.post(
            url,
            data=dict(flatten_form_fields(data)),
            headers=headers,
        )
