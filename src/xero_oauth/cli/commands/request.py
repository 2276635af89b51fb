"""Signed API call command."""

from typing import Any

import typer

from xero_oauth.cli.async_runner import async_command
from xero_oauth.cli.client_factory import get_client
from xero_oauth.cli.config import CLIConfig, OutputFormat
from xero_oauth.cli.formatters import format_auth_data, format_response, print_error, print_info
from xero_oauth.models.auth import AuthData


def _parse_params(values: list[str]) -> dict[str, Any]:
    """Turn repeated ``key=value`` options into a mapping; repeats become lists."""
    params: dict[str, Any] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            print_error(f"Invalid parameter {item!r}, expected key=value.")
            raise typer.Exit(1)
        if key in params:
            existing = params[key]
            params[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


@async_command
async def request(
    ctx: typer.Context,
    method: str = typer.Argument(..., help="HTTP method: GET, POST, PUT or DELETE."),
    path: str = typer.Argument(..., help="API path, e.g. /Organisation."),
    param: list[str] = typer.Option(
        [],
        "--param",
        "-p",
        help="Request parameter as key=value (repeatable).",
    ),
    token: str = typer.Option("", "--token", envvar="XERO_TOKEN", help="Current OAuth token."),
    token_secret: str = typer.Option(
        "", "--token-secret", envvar="XERO_TOKEN_SECRET", help="Current OAuth token secret."
    ),
    verified: bool = typer.Option(
        True,
        "--verified/--unverified",
        help="Whether --token is an access token or a not yet exchanged request token.",
    ),
    verifier: str = typer.Option("", "--verifier", help="Verifier from the authorization callback."),
    session_handle: str | None = typer.Option(
        None, "--session-handle", envvar="XERO_SESSION_HANDLE", help="Partner session handle."
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--output",
        "-o",
        help="Output format for the token state, when it changes.",
    ),
) -> None:
    """Make one signed API call and print the JSON response."""
    config: CLIConfig = ctx.obj
    params = _parse_params(param)

    auth_data = None
    if token:
        auth_data = AuthData(
            token=token,
            token_secret=token_secret,
            verified=verified and bool(token_secret),
            verifier=verifier,
            session_handle=session_handle,
        )

    async with get_client(config, auth_data) as client:
        result = await client.request(method, path, params)
        after = client.get_auth_data()

    format_response(result)

    if auth_data is not None and after.token != auth_data.token:
        print_info("Token state changed; use these values for the next call:")
        format_auth_data(after, output)
