"""Pytest configuration and fixtures for gateway client tests.

This file provides:
- make_config: Configuration with sandbox key credentials unless overridden
- make_http_response: mock httpx responses for patched clients
- Constants for the three credential modes
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

from braintree_gateway.configuration import Configuration

SANDBOX_URL = "https://api.sandbox.braintreegateway.com:443"

ACCESS_TOKEN = "access_token$sandbox$integration_merchant_id$a1b2c3"
CLIENT_ID = "client_id$sandbox$integration_client_id"
CLIENT_SECRET = "client_secret$sandbox$integration_client_secret"


def make_config(**overrides: Any) -> Configuration:
    """Create a Configuration for tests.

    Defaults to sandbox with merchant API keys. Pass access_token or
    client_id/client_secret (with public_key=None) to switch modes.
    """
    values: dict[str, Any] = {
        "environment": "sandbox",
        "merchant_id": "integration_merchant_id",
        "public_key": "integration_public_key",
        "private_key": "integration_private_key",
    }
    values.update(overrides)
    return Configuration(**{k: v for k, v in values.items() if v is not None})


def make_http_response(status_code: int = 200, text: str = "") -> MagicMock:
    """Create a mock httpx response with the given status and body text."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response
