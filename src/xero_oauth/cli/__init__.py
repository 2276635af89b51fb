"""Xero OAuth CLI - Command-line interface for the Xero OAuth client."""

from xero_oauth.cli.app import app

# Import command modules to register them with the app
from xero_oauth.cli.commands import auth, request

# Register sub-apps and top-level commands
app.add_typer(auth.app, name="auth", help="Authorization commands.")
app.command("request", help="Make one signed API call.")(request.request)


def main() -> None:
    """Entry point for the CLI."""
    app()


__all__ = ["app", "main"]
