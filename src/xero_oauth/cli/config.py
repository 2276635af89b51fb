"""CLI configuration passed through the Typer context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from xero_oauth.config import XeroConfig


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


@dataclass
class CLIConfig:
    """Configuration passed through Typer context.

    Attributes:
        verbose: Enable debug logging.
        config_path: Explicit JSON config file. When None, environment
            variables are tried first, then ~/.config/xero-oauth/config.json.
    """

    verbose: bool = False
    config_path: Path | None = None

    def load_config(self) -> XeroConfig:
        """Load the Xero application config.

        An explicit ``--config`` file wins; otherwise environment variables
        take precedence over the default config file.
        """
        if self.config_path is not None:
            return XeroConfig.from_file(self.config_path)
        return XeroConfig.load()
