"""Configuration management for the Xero OAuth client."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from xero_oauth.exceptions import XeroConfigError, XeroUnknownSignatureMethodError

DEFAULT_ENDPOINT = "https://api.xero.com/api.xro/2.0"
DEFAULT_CALLBACK_URL = "oob"  # Out-of-band for desktop apps
DEFAULT_TIMEOUT = 30.0

HMAC_SHA1 = "HMAC-SHA1"
RSA_SHA1 = "RSA-SHA1"
SIGNATURE_METHODS = (HMAC_SHA1, RSA_SHA1)


def _get_config_dir() -> Path:
    """Get XDG-compliant config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "xero-oauth"
    return Path.home() / ".config" / "xero-oauth"


class ApplicationType(StrEnum):
    """Xero application types.

    Private apps use two-legged OAuth against a single organisation and their
    tokens never expire. Public apps use the three-legged flow and get access
    tokens that expire after 30 minutes. Partner apps are public apps whose
    access tokens can be renewed with a session handle, without asking the
    user again.
    """

    PRIVATE = "private"
    PUBLIC = "public"
    PARTNER = "partner"


@dataclass(frozen=True, slots=True)
class ApplicationProfile:
    """Token policy for one application type."""

    default_sign_with: str
    expires: bool
    renewable: bool
    three_legged: bool


PROFILES: dict[ApplicationType, ApplicationProfile] = {
    ApplicationType.PRIVATE: ApplicationProfile(
        default_sign_with=RSA_SHA1, expires=False, renewable=False, three_legged=False
    ),
    ApplicationType.PUBLIC: ApplicationProfile(
        default_sign_with=HMAC_SHA1, expires=True, renewable=False, three_legged=True
    ),
    ApplicationType.PARTNER: ApplicationProfile(
        default_sign_with=RSA_SHA1, expires=True, renewable=True, three_legged=True
    ),
}


@dataclass(frozen=True, slots=True)
class XeroConfig:
    """Xero application credentials and endpoints.

    Immutable for the lifetime of a handler. ``sign_with`` defaults to the
    application type's signing method and ``oauth_endpoint`` to ``/oauth`` on
    the API host.
    """

    consumer_key: str
    consumer_secret: str = ""
    application_type: ApplicationType = ApplicationType.PUBLIC
    sign_with: str | None = None
    private_key: Path | None = None
    callback_url: str = DEFAULT_CALLBACK_URL
    endpoint: str = DEFAULT_ENDPOINT
    oauth_endpoint: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    retries: int = 0

    def __post_init__(self) -> None:
        if not self.consumer_key:
            raise XeroConfigError(XeroConfigError.MISSING_KEY)

        # Frozen dataclass: fill derived defaults through object.__setattr__
        object.__setattr__(self, "application_type", ApplicationType(self.application_type))
        if self.sign_with is None:
            object.__setattr__(self, "sign_with", self.profile.default_sign_with)
        if self.sign_with not in SIGNATURE_METHODS:
            raise XeroUnknownSignatureMethodError(str(self.sign_with))
        if self.private_key is not None:
            object.__setattr__(self, "private_key", Path(self.private_key))
        if self.oauth_endpoint is None:
            parts = urlsplit(self.endpoint)
            object.__setattr__(self, "oauth_endpoint", f"{parts.scheme}://{parts.netloc}/oauth")

    @property
    def profile(self) -> ApplicationProfile:
        """Get the token policy for this application type."""
        return PROFILES[self.application_type]

    @property
    def signature_method(self) -> str:
        """Get the resolved signing method."""
        return self.sign_with or self.profile.default_sign_with

    @property
    def oauth_base_url(self) -> str:
        """Get OAuth base URL."""
        return (self.oauth_endpoint or "").rstrip("/")

    @property
    def api_base_url(self) -> str:
        """Get API base URL."""
        return self.endpoint.rstrip("/")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> XeroConfig:
        """Create config from a plain mapping.

        Expected keys: ``application_type`` and ``key`` (required), plus
        ``secret``, ``sign_with``, ``private_key``, ``callback_url``,
        ``endpoint``, ``oauth_endpoint``, ``timeout`` and ``retries``.
        """
        application_type = data.get("application_type")
        if not application_type:
            raise XeroConfigError(XeroConfigError.MISSING_APPLICATION_TYPE)
        try:
            application_type = ApplicationType(application_type)
        except ValueError:
            raise XeroConfigError(
                XeroConfigError.UNKNOWN_APPLICATION_TYPE, str(application_type)
            ) from None

        if not data.get("key"):
            raise XeroConfigError(XeroConfigError.MISSING_KEY)

        private_key = data.get("private_key")
        return cls(
            consumer_key=str(data["key"]),
            consumer_secret=str(data.get("secret") or ""),
            application_type=application_type,
            sign_with=data.get("sign_with") or None,
            private_key=Path(private_key) if private_key else None,
            callback_url=data.get("callback_url") or DEFAULT_CALLBACK_URL,
            endpoint=data.get("endpoint") or DEFAULT_ENDPOINT,
            oauth_endpoint=data.get("oauth_endpoint") or None,
            timeout=float(data.get("timeout") or DEFAULT_TIMEOUT),
            retries=int(data.get("retries") or 0),
        )

    @classmethod
    def from_env(cls) -> XeroConfig:
        """Create config from environment variables.

        Expected env vars:
        - XERO_APPLICATION_TYPE
        - XERO_CONSUMER_KEY
        - XERO_CONSUMER_SECRET (public/partner apps)
        - XERO_PRIVATE_KEY (RSA-SHA1 signing)

        Optional: XERO_SIGN_WITH, XERO_CALLBACK_URL, XERO_ENDPOINT,
        XERO_OAUTH_ENDPOINT.
        """
        return cls.from_mapping(
            {
                "application_type": os.environ.get("XERO_APPLICATION_TYPE"),
                "key": os.environ.get("XERO_CONSUMER_KEY"),
                "secret": os.environ.get("XERO_CONSUMER_SECRET"),
                "sign_with": os.environ.get("XERO_SIGN_WITH"),
                "private_key": os.environ.get("XERO_PRIVATE_KEY"),
                "callback_url": os.environ.get("XERO_CALLBACK_URL"),
                "endpoint": os.environ.get("XERO_ENDPOINT"),
                "oauth_endpoint": os.environ.get("XERO_OAUTH_ENDPOINT"),
            }
        )

    @classmethod
    def from_file(cls, path: Path | None = None) -> XeroConfig:
        """Load config from JSON file.

        Default path: ~/.config/xero-oauth/config.json

        Expected format:
        {
            "application_type": "public",
            "key": "...",
            "secret": "..."
        }
        """
        if path is None:
            path = _get_config_dir() / "config.json"

        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = json.load(f)

        return cls.from_mapping(data)

    @classmethod
    def load(cls, path: Path | None = None) -> XeroConfig:
        """Load config from environment or file (env takes precedence)."""
        try:
            return cls.from_env()
        except XeroConfigError:
            return cls.from_file(path)
