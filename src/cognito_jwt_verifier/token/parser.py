"""Structural parsing of compact JWS tokens.

Nothing produced here is trusted yet: the header is decoded only to learn
which key to look up. The payload and signature segments are kept as the
exact received text; decoding them belongs to signature verification, which
checks the bytes that were actually signed.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from jwt.utils import base64url_decode

from cognito_jwt_verifier.kernel.errors import MalformedTokenError
from cognito_jwt_verifier.kernel.result import Err, Ok, Result

_SEGMENT_COUNT = 3


@dataclass(frozen=True)
class ParsedToken:
    """The three segments of a token, split but unverified."""

    header: dict[str, Any]
    header_segment: str
    payload_segment: str
    signature_segment: str

    @property
    def kid(self) -> str:
        return self.header["kid"]

    @property
    def signing_input(self) -> bytes:
        """Raises ``UnicodeEncodeError`` for a non-ASCII payload segment."""
        return f"{self.header_segment}.{self.payload_segment}".encode("ascii")


def parse_token(token: str) -> Result[ParsedToken, MalformedTokenError]:
    """Split *token* and decode its header."""
    if not isinstance(token, str):
        return Err(MalformedTokenError("Token must be a string"))

    segments = token.split(".")
    if len(segments) != _SEGMENT_COUNT or not all(segments):
        return Err(
            MalformedTokenError(
                "Token must have exactly three non-empty segments",
                detail={"segments": len(segments)},
            )
        )
    header_segment, payload_segment, signature_segment = segments

    try:
        header = json.loads(base64url_decode(header_segment))
    except (ValueError, RecursionError) as exc:
        return Err(MalformedTokenError("Token header is not base64url-encoded JSON", cause=exc))

    if not isinstance(header, dict):
        return Err(MalformedTokenError("Token header is not a JSON object"))
    if not isinstance(header.get("kid"), str):
        return Err(MalformedTokenError("Token header has no string 'kid'"))

    return Ok(
        ParsedToken(
            header=header,
            header_segment=header_segment,
            payload_segment=payload_segment,
            signature_segment=signature_segment,
        )
    )


__all__ = ["ParsedToken", "parse_token"]
