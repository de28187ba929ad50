"""Error hierarchy.

Hierarchy::

    BaseError
    ├── VerificationFailure
    │   ├── MalformedTokenError      (malformed)
    │   ├── KeySetFetchError         (fetch_error)
    │   ├── KeyNotFoundError         (key_not_found)
    │   └── SignatureInvalidError    (signature_invalid)
    └── ConfigError                  (config/errors.py)

Verification failures are carried inside :class:`~cognito_jwt_verifier.kernel.result.Err`
values and are never raised past :meth:`Verifier.verify`.  Their messages are
fixed, classified strings: the token, key material and raw transport errors
only ever travel as ``__cause__``.
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any, ClassVar


class BaseError(Exception):
    """Root of the error hierarchy.

    Args:
        message: Human-readable description.
        code: Machine-readable slug (defaults to ``default_code``).
        detail: Extra context that is safe to log.
        cause: Original exception that triggered this error.
    """

    default_code: str = "base_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict; the cause is left out on purpose."""
        return {
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }


class FailureReason(StrEnum):
    """Why a token was rejected."""

    MALFORMED = "malformed"
    FETCH_ERROR = "fetch_error"
    KEY_NOT_FOUND = "key_not_found"
    SIGNATURE_INVALID = "signature_invalid"


class VerificationFailure(BaseError):
    """Terminal outcome of a rejected token."""

    reason: ClassVar[FailureReason]
    default_message: ClassVar[str] = "Token rejected"

    def __init__(
        self,
        message: str | None = None,
        *,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message or self.default_message,
            code=self.reason.value,
            detail=detail,
            cause=cause,
        )


class MalformedTokenError(VerificationFailure):
    """Wrong segment count, undecodable header, or missing ``kid``."""

    reason = FailureReason.MALFORMED
    default_message = "Token is malformed"


class KeySetFetchError(VerificationFailure):
    """The key set could not be retrieved."""

    reason = FailureReason.FETCH_ERROR
    default_message = "Key set could not be fetched"


class KeyNotFoundError(VerificationFailure):
    """No usable key in the key set for the token's ``kid``."""

    reason = FailureReason.KEY_NOT_FOUND
    default_message = "No usable key for token"


class SignatureInvalidError(VerificationFailure):
    """Signature did not verify, or the payload is not a JSON object."""

    reason = FailureReason.SIGNATURE_INVALID
    default_message = "Signature is invalid"


__all__ = [
    "BaseError",
    "FailureReason",
    "KeyNotFoundError",
    "KeySetFetchError",
    "MalformedTokenError",
    "SignatureInvalidError",
    "VerificationFailure",
]
