"""Pydantic models for Xero OAuth exchanges."""

from xero_oauth.models.auth import AuthData, RequestToken, TokenResponse

__all__ = [
    "AuthData",
    "RequestToken",
    "TokenResponse",
]
