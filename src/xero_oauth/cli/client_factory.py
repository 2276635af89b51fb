"""Client factory for CLI commands."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from xero_oauth.client import XeroClient

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from xero_oauth.cli.config import CLIConfig
    from xero_oauth.models.auth import AuthData


@asynccontextmanager
async def get_client(
    config: CLIConfig,
    auth_data: AuthData | None = None,
) -> AsyncGenerator[XeroClient]:
    """Create and configure a XeroClient for CLI use.

    This context manager:
    1. Loads the application config (--config file, env vars, default file)
    2. Restores any token state passed on the command line
    3. Manages connection pooling lifecycle

    Usage:
        async with get_client(cli_config) as client:
            result = await client.get("/Organisation")
    """
    client = XeroClient(config.load_config(), auth_data=auth_data)

    async with client:
        yield client
