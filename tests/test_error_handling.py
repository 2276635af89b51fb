"""Tests for error handling and exception classes."""

import pytest

from xero_oauth.exceptions import (
    XeroAPIError,
    XeroAuthError,
    XeroAuthorizationRequiredError,
    XeroConfigError,
    XeroError,
    XeroPrivateKeyInvalidError,
    XeroPrivateKeyNotFoundError,
    XeroRateLimitError,
    XeroUnknownSignatureMethodError,
    XeroUnsupportedMethodError,
    format_error_message,
)


class TestExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_xero_error_is_base(self) -> None:
        """All exceptions should inherit from XeroError."""
        assert issubclass(XeroAPIError, XeroError)
        assert issubclass(XeroAuthError, XeroError)
        assert issubclass(XeroConfigError, XeroError)
        assert issubclass(XeroRateLimitError, XeroError)

    def test_config_error_family(self) -> None:
        """Signing and key problems should be config errors."""
        assert issubclass(XeroUnknownSignatureMethodError, XeroConfigError)
        assert issubclass(XeroPrivateKeyNotFoundError, XeroConfigError)
        assert issubclass(XeroPrivateKeyInvalidError, XeroConfigError)

    def test_api_error_family(self) -> None:
        """Rate limits and bad verbs should be API errors."""
        assert issubclass(XeroRateLimitError, XeroAPIError)
        assert issubclass(XeroUnsupportedMethodError, XeroAPIError)

    def test_authorization_required_is_auth_error(self) -> None:
        assert issubclass(XeroAuthorizationRequiredError, XeroAuthError)


class TestXeroError:
    """Tests for base XeroError."""

    def test_stores_message(self) -> None:
        """Should store the error message."""
        error = XeroError("Something went wrong")

        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"
        assert error.code is None


class TestXeroConfigError:
    """Tests for config error codes and messages."""

    def test_default_code(self) -> None:
        error = XeroConfigError()

        assert error.code == 11000
        assert error.message == "Config error Undefined config exception"

    @pytest.mark.parametrize(
        ("error", "code", "message"),
        [
            (
                XeroUnknownSignatureMethodError("MD5"),
                11004,
                "Config error MD5 Unknown signature method",
            ),
            (
                XeroPrivateKeyNotFoundError("/keys/missing.pem"),
                11005,
                "Config error /keys/missing.pem Private key not found",
            ),
            (
                XeroPrivateKeyInvalidError("/keys/bad.pem"),
                11006,
                "Config error /keys/bad.pem Private key invalid",
            ),
        ],
    )
    def test_subclass_messages(self, error: XeroConfigError, code: int, message: str) -> None:
        """Each config error should carry its code and name the offending value."""
        assert error.code == code
        assert error.message == message

    def test_missing_key(self) -> None:
        error = XeroConfigError(XeroConfigError.MISSING_KEY)

        assert error.code == 11001
        assert error.message == "Config error Missing key"


class TestXeroAuthorizationRequiredError:
    """Tests for the authorization-required signal."""

    def test_carries_token_and_url(self) -> None:
        """Should name the token and keep the authorization URL."""
        error = XeroAuthorizationRequiredError(
            "TOKEN", authorization_url="https://api.xero.com/oauth/Authorize?oauth_token=TOKEN"
        )

        assert error.code == 11200
        assert error.token == "TOKEN"
        assert error.stage == "RequestToken"
        assert error.message == (
            "Auth error TOKEN User must authorize oauth_token before it can be used"
        )
        assert error.authorization_url.endswith("oauth_token=TOKEN")


class TestXeroAPIError:
    """Tests for XeroAPIError."""

    def test_stores_status_code(self) -> None:
        """Should store the HTTP status code as the code."""
        error = XeroAPIError("Not found", status_code=404)

        assert error.status_code == 404
        assert error.code == 404
        assert error.message == "Not found"

    def test_stores_error_code(self) -> None:
        """Should store the oauth_problem value."""
        error = XeroAPIError("Rejected", status_code=401, error_code="token_rejected")

        assert error.error_code == "token_rejected"

    def test_folds_json_message(self) -> None:
        """A JSON problem document should be folded into one line."""
        error = XeroAPIError(
            '{"status": 400, "title": "Bad", "detail": "Nope", "errors": [{"field": "Date"}]}',
            status_code=400,
        )

        assert error.message == '400: Bad - Nope - errors: [{"field": "Date"}]'

    def test_unsupported_method(self) -> None:
        error = XeroUnsupportedMethodError("PATCH")

        assert error.method == "PATCH"
        assert error.status_code == 405
        assert error.message == "405 Bad HTTP Verb"


class TestXeroRateLimitError:
    """Tests for XeroRateLimitError."""

    def test_defaults_to_429(self) -> None:
        error = XeroRateLimitError("Rate limit exceeded")

        assert error.status_code == 429
        assert error.retry_after is None

    def test_stores_retry_after(self) -> None:
        error = XeroRateLimitError("Rate limit exceeded", retry_after=60)

        assert error.retry_after == 60


class TestFormatErrorMessage:
    """Tests for JSON error folding."""

    def test_plain_text_unchanged(self) -> None:
        assert format_error_message("500: Internal Server Error") == "500: Internal Server Error"

    def test_invalid_json_unchanged(self) -> None:
        assert format_error_message('{"broken') == '{"broken'

    def test_json_list_unchanged(self) -> None:
        assert format_error_message('["a", "b"]') == '["a", "b"]'

    def test_without_errors(self) -> None:
        message = '{"status": 404, "title": "Not Found", "detail": "No such invoice"}'

        assert format_error_message(message) == "404: Not Found - No such invoice"
