"""Authentication commands."""

import webbrowser

import typer

from xero_oauth.cli.async_runner import async_command
from xero_oauth.cli.client_factory import get_client
from xero_oauth.cli.config import CLIConfig, OutputFormat
from xero_oauth.cli.formatters import console, format_auth_data, print_info, print_success

app = typer.Typer(no_args_is_help=True)


@app.command("login")
@async_command
async def login(
    ctx: typer.Context,
    no_browser: bool = typer.Option(
        False,
        "--no-browser",
        help="Don't open browser automatically.",
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--output",
        "-o",
        help="Output format.",
    ),
) -> None:
    """Authorize a public or partner application.

    This command runs the three-legged flow:
    1. Fetches a request token
    2. Opens browser for Xero login
    3. Prompts for the verification code
    4. Exchanges it for an access token and prints the token state
    """
    config: CLIConfig = ctx.obj

    async with get_client(config) as client:
        if not client.config.profile.three_legged:
            print_info("Private applications are pre-authorized; no login needed.")
            return

        # Step 1: Get request token
        print_info(f"Starting OAuth flow for {client.config.application_type} application...")
        request_token = await client.auth.get_request_token()

        # Step 2: Open browser or show URL
        if no_browser:
            console.print("\nOpen this URL in your browser:")
            console.print(f"[link]{request_token.authorization_url}[/link]")
        else:
            print_info("Opening browser for authorization...")
            webbrowser.open(request_token.authorization_url)
            console.print("\n[dim]If browser didn't open, visit:[/dim]")
            console.print(f"[link]{request_token.authorization_url}[/link]")

        # Step 3: Get verifier from user
        console.print()
        verifier = typer.prompt("Enter the verification code from Xero")

        # Step 4: Exchange for access token
        print_info("Exchanging verification code for access token...")
        auth_data = await client.auth.get_access_token(verifier.strip())

    print_success("Authorized successfully!")
    format_auth_data(auth_data, output)


@app.command("url")
@async_command
async def authorization_url(
    ctx: typer.Context,
    output: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--output",
        "-o",
        help="Output format.",
    ),
) -> None:
    """Fetch a request token and print its authorization URL.

    For web callbacks: keep the printed token pair, and finish with
    'xero-oauth request' once the callback has the verifier.
    """
    config: CLIConfig = ctx.obj

    async with get_client(config) as client:
        request_token = await client.auth.get_request_token()
        auth_data = client.get_auth_data()

    console.print(f"[link]{request_token.authorization_url}[/link]")
    format_auth_data(auth_data, output)
