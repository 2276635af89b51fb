"""Main Typer application."""

import logging
from pathlib import Path

import typer
from rich.logging import RichHandler

from xero_oauth.cli.config import CLIConfig
from xero_oauth.cli.formatters import error_console

# Create main app
app = typer.Typer(
    name="xero-oauth",
    help="Xero OAuth 1.0a command-line interface.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="JSON config file (default: env vars, then ~/.config/xero-oauth/config.json).",
        envvar="XERO_OAUTH_CONFIG",
    ),
) -> None:
    """Xero OAuth 1.0a command-line interface.

    Drives the request-token / access-token flow and makes signed calls.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=error_console)],
        )

    ctx.obj = CLIConfig(verbose=verbose, config_path=config_path)
