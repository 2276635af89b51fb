"""Async command support for Typer."""

import asyncio
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, TypeVar

import typer

from xero_oauth.cli.formatters import console, print_error, print_info
from xero_oauth.exceptions import XeroAuthorizationRequiredError, XeroError

T = TypeVar("T")


def _report_authorization_required(e: XeroAuthorizationRequiredError) -> None:
    """Tell the user where to authorize the freshly issued request token."""
    print_info("A new request token was issued and must be authorized.")
    if e.authorization_url:
        console.print(f"[link]{e.authorization_url}[/link]")
    print_info("Re-run with --token, --token-secret, --unverified and --verifier once approved.")


def async_command(f: Callable[..., Coroutine[Any, Any, T]]) -> Callable[..., T]:
    """Decorator to run async Typer commands.

    Turns library errors into a message and exit code 1.

    Usage:
        @app.command()
        @async_command
        async def my_command(ctx: typer.Context):
            async with get_client(ctx.obj) as client:
                result = await client.get("/Organisation")
                ...
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        async def run_with_error_handling() -> T:
            try:
                return await f(*args, **kwargs)
            except XeroAuthorizationRequiredError as e:
                _report_authorization_required(e)
                raise typer.Exit(1) from None
            except XeroError as e:
                print_error(e.message)
                raise typer.Exit(1) from None
            except FileNotFoundError as e:
                print_error(str(e))
                print_info("Set XERO_APPLICATION_TYPE and XERO_CONSUMER_KEY environment variables")
                print_info("Or create a config file at ~/.config/xero-oauth/config.json")
                raise typer.Exit(1) from None

        return asyncio.run(run_with_error_handling())

    return wrapper
