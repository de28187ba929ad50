"""Signature verification against a resolved key."""
from __future__ import annotations

import json
from typing import Any

from jwt.exceptions import PyJWTError
from jwt.utils import base64url_decode

from cognito_jwt_verifier.jwks.resolver import ResolvedKey
from cognito_jwt_verifier.kernel.errors import SignatureInvalidError
from cognito_jwt_verifier.kernel.result import Err, Ok, Result
from cognito_jwt_verifier.token.parser import ParsedToken

type Claims = dict[str, Any]


def verify_signature(token: ParsedToken, key: ResolvedKey) -> Result[Claims, SignatureInvalidError]:
    """Check *token*'s signature with *key* and decode its payload.

    The header must name exactly the algorithm bound to the key by its JWKS
    entry; a missing or different ``alg`` is rejected before any
    cryptography runs.  Only ``key.primitive`` is ever tried.  Claims are
    returned exactly as signed; ``exp``, ``nbf``, ``iss`` and ``aud`` are
    NOT checked.
    """
    detail = {"kid": key.kid, "alg": key.algorithm}
    header_alg = token.header.get("alg")
    if header_alg != key.algorithm:
        return Err(
            SignatureInvalidError(
                "Token 'alg' does not match the key's algorithm",
                detail={**detail, "header_alg": header_alg if isinstance(header_alg, str) else None},
            )
        )

    try:
        signing_input = token.signing_input
        signature = base64url_decode(token.signature_segment)
    except ValueError as exc:
        return Err(
            SignatureInvalidError("Token segments are not base64url-encoded", detail=detail, cause=exc)
        )

    try:
        valid = key.primitive.verify(signing_input, key.public_key, signature)
    except (PyJWTError, ValueError, TypeError) as exc:
        return Err(SignatureInvalidError("Signature could not be checked", detail=detail, cause=exc))
    if not valid:
        return Err(SignatureInvalidError(detail=detail))

    try:
        claims = json.loads(base64url_decode(token.payload_segment))
    except (ValueError, RecursionError) as exc:
        return Err(SignatureInvalidError("Payload is not base64url-encoded JSON", detail=detail, cause=exc))
    if not isinstance(claims, dict):
        return Err(SignatureInvalidError("Payload is not a JSON object", detail=detail))
    return Ok(claims)


__all__ = ["Claims", "verify_signature"]
