"""Tests for application configuration."""

import json
from pathlib import Path

import pytest

from xero_oauth.config import (
    DEFAULT_ENDPOINT,
    HMAC_SHA1,
    RSA_SHA1,
    ApplicationType,
    XeroConfig,
)
from xero_oauth.exceptions import XeroConfigError, XeroUnknownSignatureMethodError

ENV_VARS = (
    "XERO_APPLICATION_TYPE",
    "XERO_CONSUMER_KEY",
    "XERO_CONSUMER_SECRET",
    "XERO_SIGN_WITH",
    "XERO_PRIVATE_KEY",
    "XERO_CALLBACK_URL",
    "XERO_ENDPOINT",
    "XERO_OAUTH_ENDPOINT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestProfiles:
    """Tests for per application type defaults."""

    @pytest.mark.parametrize(
        ("application_type", "sign_with", "expires", "renewable", "three_legged"),
        [
            ("private", RSA_SHA1, False, False, False),
            ("public", HMAC_SHA1, True, False, True),
            ("partner", RSA_SHA1, True, True, True),
        ],
    )
    def test_profile(
        self,
        application_type: str,
        sign_with: str,
        expires: bool,
        renewable: bool,
        three_legged: bool,
    ) -> None:
        """Each application type should carry its own token policy."""
        config = XeroConfig(consumer_key="k", application_type=application_type)

        assert config.application_type is ApplicationType(application_type)
        assert config.signature_method == sign_with
        assert config.profile.expires is expires
        assert config.profile.renewable is renewable
        assert config.profile.three_legged is three_legged

    def test_explicit_sign_with_overrides_default(self) -> None:
        """sign_with should win over the profile default."""
        config = XeroConfig(consumer_key="k", application_type="private", sign_with=HMAC_SHA1)

        assert config.signature_method == HMAC_SHA1


class TestConstruction:
    """Tests for XeroConfig validation and derived values."""

    def test_defaults(self) -> None:
        """Unset fields should take the documented defaults."""
        config = XeroConfig(consumer_key="k")

        assert config.application_type is ApplicationType.PUBLIC
        assert config.callback_url == "oob"
        assert config.endpoint == DEFAULT_ENDPOINT
        assert config.oauth_base_url == "https://api.xero.com/oauth"
        assert config.timeout == 30.0
        assert config.retries == 0

    def test_oauth_endpoint_derived_from_endpoint(self) -> None:
        """The OAuth endpoint should live under /oauth on the API host."""
        config = XeroConfig(consumer_key="k", endpoint="http://host:8082/api.xro/2.0/")

        assert config.oauth_base_url == "http://host:8082/oauth"
        assert config.api_base_url == "http://host:8082/api.xro/2.0"

    def test_explicit_oauth_endpoint(self) -> None:
        """An explicit OAuth endpoint should be kept, minus trailing slash."""
        config = XeroConfig(consumer_key="k", oauth_endpoint="https://auth.example.com/oauth/")

        assert config.oauth_base_url == "https://auth.example.com/oauth"

    def test_missing_key(self) -> None:
        """An empty consumer key should be rejected."""
        with pytest.raises(XeroConfigError) as exc_info:
            XeroConfig(consumer_key="")

        assert exc_info.value.code == XeroConfigError.MISSING_KEY

    def test_unknown_signature_method(self) -> None:
        """An unknown signing method should be rejected by name."""
        with pytest.raises(XeroUnknownSignatureMethodError) as exc_info:
            XeroConfig(consumer_key="k", sign_with="MD5")

        assert exc_info.value.code == 11004
        assert exc_info.value.message == "Config error MD5 Unknown signature method"

    def test_private_key_coerced_to_path(self) -> None:
        """A string private key should become a Path."""
        config = XeroConfig(consumer_key="k", private_key="keys/privatekey.pem")

        assert config.private_key == Path("keys/privatekey.pem")

    def test_is_immutable(self) -> None:
        """Config should not change after construction."""
        config = XeroConfig(consumer_key="k")

        with pytest.raises(AttributeError):
            config.consumer_key = "other"


class TestFromMapping:
    """Tests for XeroConfig.from_mapping."""

    def test_full_mapping(self) -> None:
        """All supported keys should be honored."""
        config = XeroConfig.from_mapping(
            {
                "application_type": "partner",
                "key": "k",
                "secret": "s",
                "private_key": "/tmp/key.pem",
                "callback_url": "https://example.com/callback",
                "endpoint": "http://host",
                "timeout": "10",
                "retries": 3,
            }
        )

        assert config.application_type is ApplicationType.PARTNER
        assert config.consumer_secret == "s"
        assert config.private_key == Path("/tmp/key.pem")
        assert config.callback_url == "https://example.com/callback"
        assert config.oauth_base_url == "http://host/oauth"
        assert config.timeout == 10.0
        assert config.retries == 3

    def test_missing_application_type(self) -> None:
        with pytest.raises(XeroConfigError) as exc_info:
            XeroConfig.from_mapping({"key": "k"})

        assert exc_info.value.code == XeroConfigError.MISSING_APPLICATION_TYPE

    def test_unknown_application_type(self) -> None:
        """An unknown type should be reported by name."""
        with pytest.raises(XeroConfigError) as exc_info:
            XeroConfig.from_mapping({"application_type": "enterprise", "key": "k"})

        assert exc_info.value.code == XeroConfigError.UNKNOWN_APPLICATION_TYPE
        assert "enterprise" in exc_info.value.message

    def test_missing_key(self) -> None:
        with pytest.raises(XeroConfigError) as exc_info:
            XeroConfig.from_mapping({"application_type": "public"})

        assert exc_info.value.code == XeroConfigError.MISSING_KEY


class TestLoading:
    """Tests for environment and file loading."""

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should read XERO_* variables."""
        monkeypatch.setenv("XERO_APPLICATION_TYPE", "private")
        monkeypatch.setenv("XERO_CONSUMER_KEY", "env_key")
        monkeypatch.setenv("XERO_PRIVATE_KEY", "/keys/privatekey.pem")
        monkeypatch.setenv("XERO_ENDPOINT", "http://host")

        config = XeroConfig.from_env()

        assert config.application_type is ApplicationType.PRIVATE
        assert config.consumer_key == "env_key"
        assert config.private_key == Path("/keys/privatekey.pem")
        assert config.api_base_url == "http://host"

    def test_from_file(self, tmp_path: Path) -> None:
        """Should read a JSON config file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"application_type": "public", "key": "file_key"}))

        config = XeroConfig.from_file(path)

        assert config.consumer_key == "file_key"

    def test_from_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            XeroConfig.from_file(tmp_path / "missing.json")

    def test_from_file_default_location(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without a path the XDG config directory should be used."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        config_dir = tmp_path / "xero-oauth"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(
            json.dumps({"application_type": "public", "key": "xdg_key"})
        )

        assert XeroConfig.from_file().consumer_key == "xdg_key"

    def test_load_prefers_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables should take precedence over the file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"application_type": "public", "key": "file_key"}))
        monkeypatch.setenv("XERO_APPLICATION_TYPE", "public")
        monkeypatch.setenv("XERO_CONSUMER_KEY", "env_key")

        assert XeroConfig.load(path).consumer_key == "env_key"

    def test_load_falls_back_to_file(self, tmp_path: Path) -> None:
        """Without environment config the file should be used."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"application_type": "public", "key": "file_key"}))

        assert XeroConfig.load(path).consumer_key == "file_key"
