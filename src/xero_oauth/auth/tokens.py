"""Token state and refresh decisions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from xero_oauth.models.auth import AuthData

if TYPE_CHECKING:
    from xero_oauth.models.auth import TokenResponse

logger = logging.getLogger(__name__)


class FetchMode(StrEnum):
    """Which token exchange must run before a call can proceed."""

    REQUEST_TOKEN = "RequestToken"
    ACCESS_TOKEN = "AccessToken"
    RENEW_ACCESS_TOKEN = "RenewAccessToken"

    @property
    def path(self) -> str:
        """OAuth endpoint path for this exchange (renewal reuses AccessToken)."""
        if self is FetchMode.RENEW_ACCESS_TOKEN:
            return FetchMode.ACCESS_TOKEN.value
        return self.value


@dataclass
class TokenState:
    """Mutable token state owned by exactly one request handler.

    Attributes:
        token: Current token, empty before the first exchange.
        token_secret: Secret paired with ``token``.
        verifier: Proof code from the authorization callback.
        verified: True only once an access token exchange has succeeded.
        expires_at: When ``token`` stops working; None means never.
        session_handle: Renewal handle (partner apps only).
        authorization_expires_at: Until when ``session_handle`` may renew.
    """

    token: str = ""
    token_secret: str = ""
    verifier: str = ""
    verified: bool = False
    expires_at: datetime | None = None
    session_handle: str | None = None
    authorization_expires_at: datetime | None = None

    def __post_init__(self) -> None:
        self._check()

    def _check(self) -> None:
        if self.verified and not (self.token and self.token_secret):
            msg = "verified token state requires a token and token secret"
            raise ValueError(msg)

    @classmethod
    def from_auth_data(cls, data: AuthData) -> TokenState:
        """Restore state from a snapshot taken by a previous handler."""
        return cls(
            token=data.token,
            token_secret=data.token_secret,
            verifier=data.verifier,
            verified=data.verified,
            expires_at=data.expires_at,
            session_handle=data.session_handle,
            authorization_expires_at=data.authorization_expires_at,
        )

    def snapshot(self) -> AuthData:
        """Get an immutable copy of the current state."""
        return AuthData(
            token=self.token,
            token_secret=self.token_secret,
            expires_at=self.expires_at,
            verifier=self.verifier,
            verified=self.verified,
            session_handle=self.session_handle,
            authorization_expires_at=self.authorization_expires_at,
        )

    def is_expired(self, now: datetime) -> bool:
        """Check if the token has an expiry that has passed."""
        return self.expires_at is not None and self.expires_at <= now

    def is_authorization_expired(self, now: datetime) -> bool:
        """Check if the session handle's renewal window has passed."""
        return (
            self.authorization_expires_at is not None and self.authorization_expires_at <= now
        )

    def reset(self) -> None:
        """Drop the current token before starting a new authorization."""
        self.token = ""
        self.token_secret = ""
        self.verified = False
        self.expires_at = None

    def apply_request_token(self, response: TokenResponse) -> None:
        """Store an unverified request token.

        Any verifier belongs to the previous token and is dropped.
        """
        self.token = response.oauth_token
        self.token_secret = response.oauth_token_secret
        self.verifier = ""
        self.verified = False
        self.expires_at = None
        logger.info("Received request token, awaiting user authorization")

    def apply_access_token(
        self,
        response: TokenResponse,
        now: datetime,
        *,
        keep_session_handle: bool = False,
    ) -> None:
        """Store a verified access token and its expiry information."""
        self.token = response.oauth_token
        self.token_secret = response.oauth_token_secret
        self.verified = True
        self._check()

        # Absent lifetimes clear stale deadlines so they cannot re-trigger an exchange
        self.expires_at = None
        self.authorization_expires_at = None
        if response.oauth_expires_in is not None:
            self.expires_at = now + timedelta(seconds=response.oauth_expires_in)
        if response.oauth_authorization_expires_in is not None:
            self.authorization_expires_at = now + timedelta(
                seconds=response.oauth_authorization_expires_in
            )
        if keep_session_handle and response.oauth_session_handle:
            self.session_handle = response.oauth_session_handle

        logger.info("Received access token (expires at %s)", self.expires_at or "never")


def required_fetch(
    state: TokenState,
    now: datetime,
    *,
    renewable: bool = False,
    three_legged: bool = True,
) -> FetchMode | None:
    """Decide which token exchange, if any, must precede the next call.

    Evaluated in order:
    1. No token: fetch a request token.
    2. Token expired: fetch a request token (the user must authorize again),
       unless ``renewable`` and a session handle is held, in which case the
       access token is renewed.
    3. Token not verified: exchange it for an access token.
    4. Session handle's authorization window passed: renew the access token.
    5. Otherwise no exchange is needed.

    Two-legged (private) apps never exchange tokens. Pure: never mutates
    ``state``.
    """
    if not three_legged:
        return None

    if not state.token:
        return FetchMode.REQUEST_TOKEN

    if state.is_expired(now):
        if renewable and state.session_handle:
            return FetchMode.RENEW_ACCESS_TOKEN
        return FetchMode.REQUEST_TOKEN

    if not state.verified:
        return FetchMode.ACCESS_TOKEN

    if renewable and state.session_handle and state.is_authorization_expired(now):
        return FetchMode.RENEW_ACCESS_TOKEN

    return None
