"""Xero OAuth 1.0a client library.

An async Python client that signs Xero API calls and manages the token
lifecycle for private, public and partner applications.

Example:
    from xero_oauth import XeroAuthorizationRequiredError, XeroClient, XeroConfig

    config = XeroConfig(
        consumer_key="your_key",
        consumer_secret="your_secret",
        application_type="public",
        callback_url="https://example.com/xero/callback",
    )

    async with XeroClient(config) as client:
        try:
            await client.get("/Organisation")
        except XeroAuthorizationRequiredError as e:
            print(f"Visit: {e.authorization_url}")
            saved = client.get_auth_data()

    # After the user approved access and the callback got a verifier
    async with XeroClient(config, auth_data=saved) as client:
        client.set_verifier(verifier)
        invoices = await client.get("/Invoices", {"where": 'Status=="AUTHORISED"'})
"""

from xero_oauth.client import XeroClient
from xero_oauth.config import ApplicationType, XeroConfig
from xero_oauth.exceptions import (
    XeroAPIError,
    XeroAuthError,
    XeroAuthorizationRequiredError,
    XeroConfigError,
    XeroError,
    XeroPrivateKeyInvalidError,
    XeroPrivateKeyNotFoundError,
    XeroRateLimitError,
    XeroUnknownSignatureMethodError,
    XeroUnsupportedMethodError,
)
from xero_oauth.models.auth import AuthData, RequestToken
from xero_oauth.request import XeroRequestHandler

__version__ = "0.1.0"

__all__ = [
    # Main client
    "XeroClient",
    "XeroConfig",
    "XeroRequestHandler",
    "ApplicationType",
    # Models
    "AuthData",
    "RequestToken",
    # Exceptions
    "XeroAPIError",
    "XeroAuthError",
    "XeroAuthorizationRequiredError",
    "XeroConfigError",
    "XeroError",
    "XeroPrivateKeyInvalidError",
    "XeroPrivateKeyNotFoundError",
    "XeroRateLimitError",
    "XeroUnknownSignatureMethodError",
    "XeroUnsupportedMethodError",
]
