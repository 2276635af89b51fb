"""Typed exceptions for the Xero OAuth client."""

import json
from typing import Any

CONFIG_ERROR_MESSAGES: dict[int, str] = {
    11000: "Undefined config exception",
    11001: "Missing key",
    11002: "Missing application type",
    11003: "Unknown application type",
    11004: "Unknown signature method",
    11005: "Private key not found",
    11006: "Private key invalid",
}

AUTH_ERROR_MESSAGES: dict[int, str] = {
    11200: "User must authorize oauth_token before it can be used",
}


class XeroError(Exception):
    """Base exception for all Xero client errors."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class XeroConfigError(XeroError):
    """Invalid or incomplete configuration. Never retried."""

    UNDEFINED = 11000
    MISSING_KEY = 11001
    MISSING_APPLICATION_TYPE = 11002
    UNKNOWN_APPLICATION_TYPE = 11003
    UNKNOWN_SIGNATURE_METHOD = 11004
    PRIVATE_KEY_NOT_FOUND = 11005
    PRIVATE_KEY_INVALID = 11006

    def __init__(self, code: int = UNDEFINED, extra: str = "") -> None:
        self.extra = extra
        parts = ["Config error", extra, CONFIG_ERROR_MESSAGES[code]]
        super().__init__(" ".join(p for p in parts if p), code=code)


class XeroUnknownSignatureMethodError(XeroConfigError):
    """Signing method other than HMAC-SHA1 or RSA-SHA1."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(self.UNKNOWN_SIGNATURE_METHOD, method)


class XeroPrivateKeyNotFoundError(XeroConfigError):
    """Private key path does not exist or cannot be read."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(self.PRIVATE_KEY_NOT_FOUND, path)


class XeroPrivateKeyInvalidError(XeroConfigError):
    """Private key file is not a usable RSA private key."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(self.PRIVATE_KEY_INVALID, path)


class XeroAuthError(XeroError):
    """Token exchange failed or returned an unusable response."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        self.stage = stage  # e.g., "RequestToken", "AccessToken", "RenewAccessToken"
        super().__init__(message)


class XeroAuthorizationRequiredError(XeroAuthError):
    """A fresh request token must be authorized by the user.

    Raised right after a successful RequestToken exchange. The caller should
    send the user to ``authorization_url`` and retry with the verifier the
    callback receives.
    """

    OAUTH_TOKEN_AUTHORIZATION_EXPECTED = 11200

    def __init__(self, token: str, *, authorization_url: str | None = None) -> None:
        self.token = token
        self.authorization_url = authorization_url
        message = (
            f"Auth error {token} "
            f"{AUTH_ERROR_MESSAGES[self.OAUTH_TOKEN_AUTHORIZATION_EXPECTED]}"
        )
        super().__init__(message, stage="RequestToken")
        self.code = self.OAUTH_TOKEN_AUTHORIZATION_EXPECTED


def format_error_message(message: str) -> str:
    """Fold a JSON error document into a single readable line.

    Bodies shaped like ``{"status": ..., "title": ..., "detail": ..., "errors": [...]}``
    become ``"status: title - detail - errors: [...]"``. Anything else is
    returned unchanged.
    """
    if not message.startswith(('{"', '["')):
        return message

    try:
        body = json.loads(message)
    except ValueError:
        return message

    if not isinstance(body, dict):
        return message

    formatted = f"{body.get('status', '')}: {body.get('title', '')} - {body.get('detail', '')}"
    if body.get("errors"):
        formatted += f" - errors: {json.dumps(body['errors'])}"
    return formatted


class XeroAPIError(XeroError):
    """API request error with status code and response details."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_code: str | None = None,
        response_body: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code  # oauth_problem value when Xero sends one
        self.response_body = response_body
        super().__init__(format_error_message(message), code=status_code)


class XeroUnsupportedMethodError(XeroAPIError):
    """HTTP verb outside GET/POST/PUT/DELETE."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__("405 Bad HTTP Verb", status_code=405)


class XeroRateLimitError(XeroAPIError):
    """Rate limit exceeded - includes retry information."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 429,
        retry_after: int | None = None,
        error_code: str | None = None,
    ) -> None:
        self.retry_after = retry_after  # seconds until retry is allowed
        super().__init__(message, status_code=status_code, error_code=error_code)
