"""OAuth 1.0a authentication for the Xero API."""

from __future__ import annotations

import logging
import secrets
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, quote, urlencode

import httpx
from pydantic import ValidationError

from xero_oauth.auth.signer import ParamValue, SignatureSigner
from xero_oauth.auth.tokens import FetchMode, TokenState
from xero_oauth.exceptions import XeroAPIError, XeroAuthError
from xero_oauth.models.auth import AuthData, RequestToken, TokenResponse

if TYPE_CHECKING:
    from collections.abc import Mapping

    from xero_oauth.config import XeroConfig

logger = logging.getLogger(__name__)

OAUTH_VERSION = "1.0"


def parse_oauth_problem(body: str) -> str | None:
    """Extract ``oauth_problem`` from a form-encoded OAuth error body."""
    try:
        data = parse_qs(body)
    except ValueError:
        return None
    problem = data.get("oauth_problem", [None])[0]
    return problem or None


class XeroAuth:
    """OAuth 1.0a authentication handler for the Xero API.

    Implements the three token exchanges:
    1. Get request token
    2. User authorization (manual step, outside this class)
    3. Exchange verifier for access token
    4. Access token renewal with a session handle (partner apps)

    Private apps skip all of them: the consumer key itself is the token.
    """

    def __init__(
        self,
        config: XeroConfig,
        state: TokenState | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.signer = SignatureSigner(
            config.signature_method,
            consumer_secret=config.consumer_secret,
            private_key=config.private_key,
        )
        self._http_client = http_client

        if state is None:
            state = TokenState()
        if not config.profile.three_legged and not state.token:
            # Consumer pair acts as the token; no exchange ever runs, so never verified
            state = TokenState(
                token=config.consumer_key,
                token_secret=config.consumer_secret,
            )
        self.state = state

    def set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        """Set the shared HTTP client for connection pooling."""
        self._http_client = http_client

    @property
    def is_authorized(self) -> bool:
        """Check if we hold a usable access token."""
        if not self.config.profile.three_legged:
            return True
        return self.state.verified and not self.state.is_expired(self.now())

    @staticmethod
    def now() -> datetime:
        """Current time used for all expiry arithmetic."""
        return datetime.now(UTC)

    def set_verifier(self, verifier: str) -> None:
        """Store the verifier returned to the callback URL."""
        self.state.verifier = verifier

    def get_auth_data(self) -> AuthData:
        """Get a snapshot of the current token state."""
        return self.state.snapshot()

    def authorization_url(self, token: str) -> str:
        """Build the URL the user must visit to authorize ``token``."""
        return f"{self.config.oauth_base_url}/Authorize?{urlencode({'oauth_token': token})}"

    async def get_request_token(self, *, timeout: float | None = None) -> RequestToken:
        """Step 1: Get a request token to start OAuth flow.

        Any previous token is dropped. Returns a RequestToken with the
        authorization URL that the user must visit to authorize the
        application.
        """
        self.state.reset()
        response = await self.fetch_token(FetchMode.REQUEST_TOKEN, timeout=timeout)
        self.state.apply_request_token(response)

        return RequestToken(
            token=response.oauth_token,
            token_secret=response.oauth_token_secret,
            authorization_url=self.authorization_url(response.oauth_token),
        )

    async def get_access_token(
        self,
        verifier: str | None = None,
        *,
        timeout: float | None = None,
    ) -> AuthData:
        """Step 2: Exchange the authorized request token for an access token.

        Args:
            verifier: The verification code returned after authorization.
                Falls back to the verifier already held, if any.
            timeout: Optional request timeout in seconds

        Returns:
            Snapshot of the updated token state
        """
        if not self.state.token:
            raise XeroAuthError(
                "No request token available. Call get_request_token first.",
                stage=FetchMode.ACCESS_TOKEN,
            )
        if verifier is not None:
            self.state.verifier = verifier

        response = await self.fetch_token(FetchMode.ACCESS_TOKEN, timeout=timeout)
        self.state.apply_access_token(
            response,
            self.now(),
            keep_session_handle=self.config.profile.renewable,
        )
        return self.state.snapshot()

    async def renew_access_token(self, *, timeout: float | None = None) -> AuthData:
        """Renew the access token with the session handle (partner apps only).

        Renewal needs no user interaction and yields a new token pair and a
        new session handle.
        """
        if not self.config.profile.renewable:
            raise XeroAuthError(
                f"{self.config.application_type} applications cannot renew access tokens",
                stage=FetchMode.RENEW_ACCESS_TOKEN,
            )
        if not self.state.token or not self.state.session_handle:
            raise XeroAuthError(
                "No session handle to renew with",
                stage=FetchMode.RENEW_ACCESS_TOKEN,
            )

        response = await self.fetch_token(FetchMode.RENEW_ACCESS_TOKEN, timeout=timeout)
        self.state.apply_access_token(response, self.now(), keep_session_handle=True)
        return self.state.snapshot()

    async def fetch_token(
        self,
        mode: FetchMode,
        *,
        timeout: float | None = None,
    ) -> TokenResponse:
        """Run one signed token exchange and parse the form-encoded reply.

        Does not touch token state; callers apply the response.
        """
        url = f"{self.config.oauth_base_url}/{mode.path}"

        oauth_params = self.build_oauth_params()
        if mode is not FetchMode.REQUEST_TOKEN:
            oauth_params["oauth_token"] = self.state.token
        if mode is FetchMode.ACCESS_TOKEN and self.state.verifier:
            oauth_params["oauth_verifier"] = self.state.verifier
        if mode is FetchMode.RENEW_ACCESS_TOKEN and self.state.session_handle:
            oauth_params["oauth_session_handle"] = self.state.session_handle

        token_secret = "" if mode is FetchMode.REQUEST_TOKEN else self.state.token_secret
        oauth_params["oauth_signature"] = self.signer.sign(
            "GET", url, oauth_params, token_secret=token_secret
        )

        headers = {"Authorization": self.authorization_header(oauth_params)}

        logger.debug("Token exchange: %s %s", mode, url)
        response = await self._get(url, headers, timeout=timeout)

        if not response.is_success:
            raise XeroAPIError(
                f"{response.status_code}: {mode} request failed - {response.text}",
                status_code=response.status_code,
                error_code=parse_oauth_problem(response.text),
            )

        try:
            token = TokenResponse.from_form(response.text)
        except ValidationError as e:
            raise XeroAuthError(f"Invalid {mode} response", stage=mode) from e
        if not token.oauth_token or not token.oauth_token_secret:
            raise XeroAuthError(f"Invalid {mode} response", stage=mode)

        return token

    def sign_request(
        self,
        method: str,
        url: str,
        params: Mapping[str, ParamValue] | None = None,
    ) -> dict[str, str]:
        """Generate OAuth headers for an API request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            url: Full request URL
            params: Query parameters that take part in the signature

        Returns:
            Headers dict with Authorization header
        """
        oauth_params = self.build_oauth_params()
        oauth_params["oauth_token"] = self.state.token

        # Combine OAuth params with request params for signature
        all_params: dict[str, ParamValue] = {**oauth_params}
        if params:
            all_params.update(params)

        oauth_params["oauth_signature"] = self.signer.sign(
            method,
            url,
            all_params,
            token_secret=self.state.token_secret,
        )

        return {"Authorization": self.authorization_header(oauth_params)}

    def build_oauth_params(self) -> dict[str, str]:
        """Build base OAuth parameters; timestamp and nonce are fresh per call."""
        return {
            "oauth_consumer_key": self.config.consumer_key,
            "oauth_signature_method": self.config.signature_method,
            "oauth_timestamp": str(int(time.time())),
            "oauth_nonce": secrets.token_hex(16),
            "oauth_callback": self.config.callback_url,
            "oauth_version": OAUTH_VERSION,
        }

    @staticmethod
    def authorization_header(oauth_params: Mapping[str, str]) -> str:
        """Build OAuth Authorization header."""
        auth_parts = [f'{k}="{quote(v, safe="")}"' for k, v in sorted(oauth_params.items())]
        return "OAuth " + ", ".join(auth_parts)

    async def _get(
        self,
        url: str,
        headers: dict[str, str],
        *,
        timeout: float | None,
    ) -> httpx.Response:
        """Issue a GET through the shared pool, or a one-off client without one."""
        timeout = timeout if timeout is not None else self.config.timeout
        try:
            if self._http_client is not None:
                return await self._http_client.get(url, headers=headers, timeout=timeout)

            async with httpx.AsyncClient(timeout=timeout) as client:
                return await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise XeroAPIError(f"Token request failed: {e}") from e
