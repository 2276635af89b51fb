"""OAuth token models."""

from __future__ import annotations

from datetime import datetime
from urllib.parse import parse_qs

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TokenResponse(BaseModel):
    """Token endpoint response (URL-encoded form body, not JSON)."""

    oauth_token: str = Field(default="", description="Token value")
    oauth_token_secret: str = Field(default="", description="Token secret")
    oauth_expires_in: int | None = Field(default=None, description="Token lifetime in seconds")
    oauth_session_handle: str | None = Field(
        default=None, description="Renewal handle (partner apps)"
    )
    oauth_authorization_expires_in: int | None = Field(
        default=None, description="Seconds the session handle may be used to renew"
    )

    @classmethod
    def from_form(cls, body: str) -> TokenResponse:
        """Parse a form-encoded token response, ignoring unknown fields."""
        data = {k: v[0] for k, v in parse_qs(body).items()}
        return cls.model_validate({k: v for k, v in data.items() if k in cls.model_fields})


class RequestToken(BaseModel):
    """OAuth request token (first step of OAuth flow)."""

    token: str = Field(description="Request token value")
    token_secret: str = Field(description="Request token secret")
    authorization_url: str = Field(description="URL to redirect user for authorization")


class AuthData(BaseModel):
    """Immutable snapshot of a handler's token state.

    The only way to carry auth state between calls, e.g. across the OAuth
    redirect round-trip of a public app. Feed it back to a new handler to
    resume where the previous one stopped.
    """

    model_config = ConfigDict(frozen=True)

    token: str = ""
    token_secret: str = ""
    expires_at: datetime | None = None
    verifier: str = ""
    verified: bool = False
    session_handle: str | None = None
    authorization_expires_at: datetime | None = None

    @model_validator(mode="after")
    def _verified_requires_token(self) -> AuthData:
        if self.verified and not (self.token and self.token_secret):
            msg = "verified auth data requires a token and token secret"
            raise ValueError(msg)
        return self
