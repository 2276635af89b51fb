"""Request handler: token refresh, signing and transport for one API call."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlsplit

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from xero_oauth.auth import FetchMode, TokenState, XeroAuth, required_fetch
from xero_oauth.auth.oauth import parse_oauth_problem
from xero_oauth.exceptions import (
    XeroAPIError,
    XeroAuthorizationRequiredError,
    XeroRateLimitError,
    XeroUnsupportedMethodError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from xero_oauth.auth.signer import ParamValue
    from xero_oauth.config import XeroConfig
    from xero_oauth.models.auth import AuthData

logger = logging.getLogger(__name__)

VERBS = ("GET", "POST", "PUT", "DELETE")


def _wait_for_rate_limit(retry_state: RetryCallState) -> float:
    """Custom wait strategy that respects Retry-After header.

    If the exception has a retry_after value, use it.
    Otherwise, fall back to exponential backoff.
    """
    exception = retry_state.outcome.exception() if retry_state.outcome else None

    if isinstance(exception, XeroRateLimitError) and exception.retry_after:
        wait_time = float(exception.retry_after)
        logger.info("Rate limited, waiting %s seconds (from Retry-After header)", wait_time)
        return wait_time

    # Exponential backoff: 2, 4, 8, 16... capped at 60 seconds
    exp_wait = wait_exponential(multiplier=1, min=2, max=60)
    wait_time = exp_wait(retry_state)
    logger.info("Rate limited, waiting %.1f seconds (exponential backoff)", wait_time)
    return wait_time


def _query_params(params: Mapping[str, Any] | None) -> dict[str, ParamValue]:
    """Stringify query values, dropping None and keeping lists multi-valued."""
    if not params:
        return {}
    query: dict[str, ParamValue] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, list | tuple):
            query[key] = [str(v) for v in value]
        else:
            query[key] = str(value)
    return query


def _path_query_params(query: str) -> dict[str, ParamValue]:
    """Parse a query string carried on the path, repeated names becoming lists."""
    parsed: dict[str, ParamValue] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        existing = parsed.get(key)
        if existing is None:
            parsed[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            parsed[key] = [existing, value]
    return parsed


class XeroRequestHandler:
    """Runs authenticated calls against the Xero API.

    Before each call the handler decides whether a token exchange must run
    first, performs it, signs the call and sends it. One call runs at a time
    per handler; concurrent callers queue on an internal lock because the
    refresh decision and its result share the handler's token state.
    """

    def __init__(
        self,
        config: XeroConfig,
        *,
        auth_data: AuthData | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        state = TokenState.from_auth_data(auth_data) if auth_data is not None else None
        self.auth = XeroAuth(config, state, http_client)
        self._http_client = http_client
        self._lock = asyncio.Lock()

    def set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        """Set the shared HTTP client for connection pooling."""
        self._http_client = http_client
        self.auth.set_http_client(http_client)

    def get_auth_data(self) -> AuthData:
        """Get a snapshot of the current token state."""
        return self.auth.get_auth_data()

    def set_verifier(self, verifier: str) -> None:
        """Store the verifier returned to the callback URL."""
        self.auth.set_verifier(verifier)

    async def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make an authenticated API request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path relative to the endpoint (e.g., "/Invoices")
            params: Query parameters for GET, JSON body for other verbs
            timeout: Per-call timeout in seconds, for the token exchange and
                the call itself (defaults to the configured timeout)

        Returns:
            Decoded JSON response

        Raises:
            XeroUnsupportedMethodError: On a verb outside GET/POST/PUT/DELETE
            XeroAuthorizationRequiredError: After fetching a new request token
            XeroAPIError: On transport or API error
        """
        method = method.upper()
        if method not in VERBS:
            raise XeroUnsupportedMethodError(method)

        async with self._lock:
            await self._refresh_token(timeout=timeout)
            return await self._send_with_retry(method, path, params, timeout=timeout)

    async def _refresh_token(self, *, timeout: float | None) -> None:
        """Run the token exchange the current state calls for, if any."""
        profile = self.config.profile
        mode = required_fetch(
            self.auth.state,
            self.auth.now(),
            renewable=profile.renewable,
            three_legged=profile.three_legged,
        )
        if mode is None:
            return

        logger.info("Token exchange required: %s", mode)

        if mode is FetchMode.REQUEST_TOKEN:
            request_token = await self.auth.get_request_token(timeout=timeout)
            raise XeroAuthorizationRequiredError(
                request_token.token,
                authorization_url=request_token.authorization_url,
            )

        if mode is FetchMode.ACCESS_TOKEN:
            await self.auth.get_access_token(timeout=timeout)
        else:
            await self.auth.renew_access_token(timeout=timeout)

    async def _send_with_retry(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None,
        *,
        timeout: float | None,
    ) -> Any:
        """Send the call, retrying rate-limited attempts up to ``config.retries`` times."""
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(XeroRateLimitError),
            wait=_wait_for_rate_limit,
            stop=stop_after_attempt(self.config.retries + 1),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                result = await self._send(method, path, params, timeout=timeout)
        return result

    async def _send(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None,
        *,
        timeout: float | None,
    ) -> Any:
        """Sign and send one call."""
        parts = urlsplit(path)
        url = f"{self.config.api_base_url}/{parts.path.lstrip('/')}"

        # Query parameters are signed; JSON bodies are not
        query_params = _path_query_params(parts.query)
        json_body: dict[str, Any] | None = None
        if method == "GET":
            query_params.update(_query_params(params))
        elif params:
            json_body = dict(params)

        headers = self.auth.sign_request(method, url, query_params)
        headers["Accept"] = "application/json"

        if json_body is not None:
            headers["Content-Type"] = "application/json"

        logger.debug("Request: %s %s", method, url)
        logger.debug("Params: %s", query_params)

        timeout = timeout if timeout is not None else self.config.timeout
        try:
            if self._http_client is not None:
                # Use shared connection pool
                response = await self._http_client.request(
                    method,
                    url,
                    params=query_params or None,
                    json=json_body,
                    headers=headers,
                    timeout=timeout,
                )
            else:
                # Fallback: create per-request client (no pooling)
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.request(
                        method,
                        url,
                        params=query_params or None,
                        json=json_body,
                        headers=headers,
                    )
        except httpx.HTTPError as e:
            raise XeroAPIError(f"Request failed: {e}") from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        """Handle API response, raising appropriate errors."""
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise XeroRateLimitError(
                "Rate limit exceeded",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                error_code=parse_oauth_problem(response.text),
            )

        if response.status_code >= 400:
            try:
                error_body = response.json()
            except ValueError:
                error_body = None

            error_msg = f"{response.status_code}: {response.reason_phrase}"
            if isinstance(error_body, dict) and error_body.keys() & {"title", "detail"}:
                # Folded into "status: title - detail" by XeroAPIError
                error_msg = json.dumps(error_body)
            elif isinstance(error_body, dict) and error_body.get("Message"):
                error_msg = f"{error_msg} - {error_body['Message']}"
            elif response.text:
                error_msg = f"{error_msg} - {response.text}"

            raise XeroAPIError(
                error_msg,
                status_code=response.status_code,
                error_code=parse_oauth_problem(response.text),
                response_body=error_body if isinstance(error_body, dict) else None,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise XeroAPIError(
                f"{response.status_code}: invalid JSON response",
                status_code=response.status_code,
            ) from e
