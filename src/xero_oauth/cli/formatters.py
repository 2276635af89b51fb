"""Output formatters for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from xero_oauth.cli.config import OutputFormat
from xero_oauth.models.auth import AuthData

console = Console()
error_console = Console(stderr=True)


def format_auth_data(data: AuthData, output_format: OutputFormat) -> None:
    """Print a token state snapshot."""
    dumped = data.model_dump(mode="json")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(dumped))
        return

    table = Table(title="Auth data", show_header=True, header_style="bold")
    table.add_column("Field")
    table.add_column("Value")
    for key, value in dumped.items():
        table.add_row(_snake_to_title(key), "" if value is None else str(value))
    console.print(table)


def format_response(data: Any) -> None:
    """Print a decoded API response as JSON."""
    console.print_json(json.dumps(data, default=str))


def _snake_to_title(s: str) -> str:
    """Convert snake_case to Title Case for table headers."""
    return " ".join(word.capitalize() for word in s.split("_"))


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]i[/blue] {message}")
