"""Main Xero OAuth client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from xero_oauth.config import XeroConfig
from xero_oauth.request import XeroRequestHandler

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from xero_oauth.auth import XeroAuth
    from xero_oauth.models.auth import AuthData


class XeroClient:
    """Xero API client.

    Signs every call with OAuth 1.0a and runs whatever token exchange the
    current token state requires first.

    Usage (context manager - recommended for connection pooling):
        async with XeroClient(config) as client:
            invoices = await client.get("/Invoices")

    Usage (public app, first run):
        async with XeroClient(config) as client:
            try:
                await client.get("/Organisation")
            except XeroAuthorizationRequiredError as e:
                redirect_user_to(e.authorization_url)
                saved = client.get_auth_data()

    Usage (public app, after the callback):
        async with XeroClient(config, auth_data=saved) as client:
            client.set_verifier(verifier)
            organisation = await client.get("/Organisation")

    Usage (external HTTP client - shared across integrations):
        http_client = httpx.AsyncClient(timeout=30.0)
        client = XeroClient(config, http_client=http_client)
        # Client uses shared pool, doesn't close it
    """

    def __init__(
        self,
        config: XeroConfig,
        *,
        auth_data: AuthData | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Xero application configuration
            auth_data: Optional token state saved from a previous client
            http_client: Optional httpx.AsyncClient for connection pooling.
                        If provided, the client will use this pool and NOT close it.
                        If not provided, use open()/close() or context manager to
                        enable pooling, or each request creates its own connection.
        """
        self.config = config
        self.handler = XeroRequestHandler(config, auth_data=auth_data, http_client=http_client)

        # HTTP client management
        self._http_client = http_client
        self._owns_http_client = http_client is None  # We manage lifecycle if not provided

    def _set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        """Update HTTP client on the request handler."""
        self._http_client = http_client
        self.handler.set_http_client(http_client)

    async def open(self) -> None:
        """Open connection pool for HTTP requests.

        Creates a shared httpx.AsyncClient for connection pooling.
        Only needed if not using context manager or external http_client.
        """
        if self._http_client is None and self._owns_http_client:
            http_client = httpx.AsyncClient(timeout=self.config.timeout)
            self._set_http_client(http_client)

    async def close(self) -> None:
        """Close connection pool.

        Only closes the pool if this client owns it (not external).
        """
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._set_http_client(None)

    async def __aenter__(self) -> XeroClient:
        """Async context manager entry - opens connection pool."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - closes connection pool."""
        await self.close()

    @classmethod
    def from_env(cls, *, auth_data: AuthData | None = None) -> XeroClient:
        """Create client from environment variables.

        Expects:
        - XERO_APPLICATION_TYPE
        - XERO_CONSUMER_KEY
        - XERO_CONSUMER_SECRET and/or XERO_PRIVATE_KEY
        """
        config = XeroConfig.from_env()
        return cls(config, auth_data=auth_data)

    @property
    def auth(self) -> XeroAuth:
        """OAuth handler, for driving the token exchanges explicitly."""
        return self.handler.auth

    @property
    def is_authorized(self) -> bool:
        """Check if the client holds a usable access token."""
        return self.handler.auth.is_authorized

    def get_auth_data(self) -> AuthData:
        """Get a snapshot of the token state, e.g. to keep across a redirect."""
        return self.handler.get_auth_data()

    def set_verifier(self, verifier: str) -> None:
        """Store the verifier the authorization callback received."""
        self.handler.set_verifier(verifier)

    async def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make an authenticated API request."""
        return await self.handler.request(method, path, params, timeout=timeout)

    async def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a GET request."""
        return await self.request("GET", path, params, timeout=timeout)

    async def post(
        self,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a POST request."""
        return await self.request("POST", path, body, timeout=timeout)

    async def put(
        self,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a PUT request."""
        return await self.request("PUT", path, body, timeout=timeout)

    async def delete(
        self,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a DELETE request."""
        return await self.request("DELETE", path, body, timeout=timeout)
