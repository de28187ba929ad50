"""Shared fixtures – key pairs, JWK export, token signing and a static key-set source."""
from __future__ import annotations

import json
from typing import Any, Callable

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt.algorithms import ECAlgorithm, RSAAlgorithm, get_default_algorithms
from jwt.utils import base64url_encode

from cognito_jwt_verifier.kernel.errors import KeySetFetchError
from cognito_jwt_verifier.kernel.result import Err, Ok, Result

REGION = "eu-west-1"
USER_POOL_ID = "eu-west-1_AbCdEf123"
JWKS_URL = f"https://cognito-idp.{REGION}.amazonaws.com/{USER_POOL_ID}/.well-known/jwks.json"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _public_jwk(private_key: Any, kid: str, alg: str) -> dict[str, Any]:
    """Export the public half of *private_key* as a JWKS entry."""
    if isinstance(private_key, rsa.RSAPrivateKey):
        jwk = RSAAlgorithm.to_jwk(private_key.public_key(), as_dict=True)
    else:
        jwk = ECAlgorithm.to_jwk(private_key.public_key(), as_dict=True)
    jwk.pop("key_ops", None)
    jwk.update(kid=kid, alg=alg, use="sig")
    return jwk


def _segment(value: dict[str, Any]) -> bytes:
    return base64url_encode(json.dumps(value, separators=(",", ":")).encode("utf-8"))


def _sign(
    claims: dict[str, Any],
    private_key: Any,
    *,
    kid: str = "k1",
    alg: str = "RS256",
    header: dict[str, Any] | None = None,
) -> str:
    """Sign *claims* with *alg*; *header* replaces the default ``{"alg", "kid"}`` header."""
    signing_input = _segment(header if header is not None else {"alg": alg, "kid": kid}) + b"." + _segment(claims)
    signature = get_default_algorithms()[alg].sign(signing_input, private_key)
    return (signing_input + b"." + base64url_encode(signature)).decode("ascii")


class StaticKeySetSource:
    """Key-set source returning a fixed result and counting calls."""

    def __init__(self, result: Result[dict[str, Any], KeySetFetchError]) -> None:
        self.result = result
        self.calls: list[str] = []

    async def get_key_set(self, kid: str) -> Result[dict[str, Any], KeySetFetchError]:
        self.calls.append(kid)
        return self.result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def public_jwk() -> Callable[..., dict[str, Any]]:
    return _public_jwk


@pytest.fixture(scope="session")
def sign() -> Callable[..., str]:
    return _sign


@pytest.fixture(scope="session")
def static_source() -> Callable[..., StaticKeySetSource]:
    """Factory: ``static_source(jwks)`` or ``static_source(error=KeySetFetchError())``."""

    def _make(
        jwks: dict[str, Any] | None = None,
        *,
        error: KeySetFetchError | None = None,
    ) -> StaticKeySetSource:
        return StaticKeySetSource(Err(error) if error is not None else Ok(jwks or {"keys": []}))

    return _make
