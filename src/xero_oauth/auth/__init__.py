"""OAuth authentication for the Xero API."""

from xero_oauth.auth.oauth import XeroAuth
from xero_oauth.auth.signer import SignatureSigner
from xero_oauth.auth.tokens import FetchMode, TokenState, required_fetch

__all__ = ["FetchMode", "SignatureSigner", "TokenState", "XeroAuth", "required_fetch"]
