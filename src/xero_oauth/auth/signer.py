"""OAuth 1.0a request signing (HMAC-SHA1 and RSA-SHA1)."""

from __future__ import annotations

import base64
import hashlib
import hmac
from collections.abc import Iterable, Mapping
from pathlib import Path
from urllib.parse import quote

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from xero_oauth.config import HMAC_SHA1, RSA_SHA1
from xero_oauth.exceptions import (
    XeroPrivateKeyInvalidError,
    XeroPrivateKeyNotFoundError,
    XeroUnknownSignatureMethodError,
)

ParamValue = str | Iterable[str]


def percent_encode(value: str) -> str:
    """Percent-encode per RFC 3986: only ``A-Za-z0-9-._~`` stay unescaped."""
    return quote(value, safe="")


def normalize_parameters(parameters: Mapping[str, ParamValue]) -> str:
    """Build the normalized parameter string.

    Names are sorted by byte value. A name holding several values emits one
    ``name=value`` pair per value, values encoded and then sorted.
    """
    elements: list[str] = []
    for name in sorted(parameters, key=lambda n: n.encode("utf-8")):
        if name == "oauth_signature":
            continue
        value = parameters[name]
        values = [value] if isinstance(value, str) else list(value)
        encoded_name = percent_encode(name)
        for encoded in sorted(percent_encode(str(v)) for v in values):
            elements.append(f"{encoded_name}={encoded}")
    return "&".join(elements)


def signature_base_string(method: str, url: str, parameters: Mapping[str, ParamValue]) -> str:
    """Build ``METHOD&enc(url)&enc(normalized parameters)``."""
    return "&".join(
        [
            method.upper(),
            percent_encode(url),
            percent_encode(normalize_parameters(parameters)),
        ]
    )


class SignatureSigner:
    """Signs OAuth requests with the configured method.

    Secrets are passed in explicitly: the consumer secret and private key at
    construction, the token secret per call since it changes as tokens are
    exchanged.
    """

    def __init__(
        self,
        signature_method: str,
        *,
        consumer_secret: str = "",
        private_key: Path | str | None = None,
    ) -> None:
        self.signature_method = signature_method
        self.consumer_secret = consumer_secret
        self.private_key = private_key

    def sign(
        self,
        method: str,
        url: str,
        parameters: Mapping[str, ParamValue],
        token_secret: str = "",
    ) -> str:
        """Sign a request and return the base64-encoded signature."""
        if self.signature_method == HMAC_SHA1:
            return self._sign_hmac_sha1(method, url, parameters, token_secret)
        if self.signature_method == RSA_SHA1:
            return self._sign_rsa_sha1(method, url, parameters)
        raise XeroUnknownSignatureMethodError(str(self.signature_method))

    def _sign_hmac_sha1(
        self,
        method: str,
        url: str,
        parameters: Mapping[str, ParamValue],
        token_secret: str,
    ) -> str:
        """Generate OAuth 1.0a HMAC-SHA1 signature."""
        base_string = signature_base_string(method, url, parameters)
        signing_key = f"{percent_encode(self.consumer_secret)}&{percent_encode(token_secret)}"

        signature = hmac.new(
            signing_key.encode(),
            base_string.encode(),
            hashlib.sha1,
        ).digest()

        return base64.b64encode(signature).decode()

    def _sign_rsa_sha1(
        self,
        method: str,
        url: str,
        parameters: Mapping[str, ParamValue],
    ) -> str:
        """Generate OAuth 1.0a RSA-SHA1 signature."""
        key = self._load_private_key()
        base_string = signature_base_string(method, url, parameters)

        signature = key.sign(base_string.encode(), padding.PKCS1v15(), hashes.SHA1())

        return base64.b64encode(signature).decode()

    def _load_private_key(self) -> rsa.RSAPrivateKey:
        """Read and parse the PEM private key; nothing is cached between calls."""
        path = str(self.private_key or "")
        try:
            pem = Path(path).read_bytes()
        except OSError:
            raise XeroPrivateKeyNotFoundError(path) from None

        try:
            key = serialization.load_pem_private_key(pem, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm):
            raise XeroPrivateKeyInvalidError(path) from None

        if not isinstance(key, rsa.RSAPrivateKey):
            raise XeroPrivateKeyInvalidError(path)
        return key
