"""Key resolution – pick the JWKS entry for a ``kid`` and bind its algorithm.

The algorithm used to verify a token is always the ``alg`` declared by the
matched key-set entry.  The token header only has to agree with it, so a
token cannot talk the verifier into ``none`` or into HMAC with a public key.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt.algorithms import Algorithm, get_default_algorithms
from jwt.exceptions import PyJWTError

from cognito_jwt_verifier.kernel.errors import KeyNotFoundError
from cognito_jwt_verifier.kernel.result import Err, Ok, Result


class KeyType(StrEnum):
    """JWK ``kty`` values accepted for signature verification."""

    RSA = "RSA"
    EC = "EC"


_ALGORITHMS: dict[KeyType, frozenset[str]] = {
    KeyType.RSA: frozenset({"RS256", "RS384", "RS512", "PS256", "PS384", "PS512"}),
    KeyType.EC: frozenset({"ES256", "ES384", "ES512"}),
}

_EC_CURVES: dict[str, str] = {"ES256": "P-256", "ES384": "P-384", "ES512": "P-521"}

_PUBLIC_KEY_CLASSES: dict[KeyType, type] = {
    KeyType.RSA: rsa.RSAPublicKey,
    KeyType.EC: ec.EllipticCurvePublicKey,
}


@dataclass(frozen=True)
class ResolvedKey:
    """A public key paired with the one algorithm its JWKS entry allows."""

    kid: str
    key_type: KeyType
    algorithm: str
    public_key: Any
    primitive: Algorithm


def find_entry(jwks: Mapping[str, Any], kid: str) -> Mapping[str, Any] | None:
    """Return the first entry of ``jwks["keys"]`` whose ``kid`` equals *kid*."""
    keys = jwks.get("keys")
    if not isinstance(keys, list):
        return None
    for entry in keys:
        if isinstance(entry, Mapping) and entry.get("kid") == kid:
            return entry
    return None


def resolve_key(jwks: Mapping[str, Any], kid: str) -> Result[ResolvedKey, KeyNotFoundError]:
    """Locate the key for *kid* and parse it into a usable public key."""
    if not isinstance(jwks.get("keys"), list):
        return Err(KeyNotFoundError("Key set has no 'keys' list", detail={"kid": kid}))

    entry = find_entry(jwks, kid)
    if entry is None:
        return Err(KeyNotFoundError("No key in key set matches 'kid'", detail={"kid": kid}))

    algorithm = entry.get("alg")
    if not isinstance(algorithm, str):
        return Err(KeyNotFoundError("Matched key declares no 'alg'", detail={"kid": kid}))

    try:
        key_type = KeyType(entry.get("kty"))
    except ValueError:
        return Err(
            KeyNotFoundError(
                "Matched key has an unsupported 'kty'",
                detail={"kid": kid, "kty": str(entry.get("kty"))},
            )
        )

    if algorithm not in _ALGORITHMS[key_type]:
        return Err(
            KeyNotFoundError(
                "Matched key declares an algorithm not usable with its key type",
                detail={"kid": kid, "kty": key_type.value, "alg": algorithm},
            )
        )
    if entry.get("use", "sig") != "sig":
        return Err(KeyNotFoundError("Matched key is not a signing key", detail={"kid": kid}))

    return _load_public_key(entry, kid, key_type, algorithm)


def _load_public_key(
    entry: Mapping[str, Any],
    kid: str,
    key_type: KeyType,
    algorithm: str,
) -> Result[ResolvedKey, KeyNotFoundError]:
    detail = {"kid": kid, "kty": key_type.value, "alg": algorithm}
    if key_type is KeyType.EC and entry.get("crv") != _EC_CURVES[algorithm]:
        return Err(KeyNotFoundError("Matched key's curve does not fit its algorithm", detail=detail))
    if "d" in entry:
        return Err(KeyNotFoundError("Matched key carries private material", detail=detail))

    primitive = get_default_algorithms()[algorithm]
    try:
        public_key = primitive.from_jwk(dict(entry))
    except (PyJWTError, ValueError, TypeError, KeyError) as exc:
        return Err(KeyNotFoundError("Matched key material could not be parsed", detail=detail, cause=exc))

    if not isinstance(public_key, _PUBLIC_KEY_CLASSES[key_type]):
        return Err(KeyNotFoundError("Matched key is not a public key", detail=detail))

    return Ok(
        ResolvedKey(
            kid=kid,
            key_type=key_type,
            algorithm=algorithm,
            public_key=public_key,
            primitive=primitive,
        )
    )


__all__ = ["KeyType", "ResolvedKey", "find_entry", "resolve_key"]
