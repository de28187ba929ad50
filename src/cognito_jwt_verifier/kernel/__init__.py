"""Kernel – result variants, error hierarchy and clock."""
from cognito_jwt_verifier.kernel.clock import Clock, FrozenClock, SystemClock
from cognito_jwt_verifier.kernel.errors import (
    BaseError,
    FailureReason,
    KeyNotFoundError,
    KeySetFetchError,
    MalformedTokenError,
    SignatureInvalidError,
    VerificationFailure,
)
from cognito_jwt_verifier.kernel.result import Err, Ok, Result

__all__ = [
    "BaseError",
    "Clock",
    "Err",
    "FailureReason",
    "FrozenClock",
    "KeyNotFoundError",
    "KeySetFetchError",
    "MalformedTokenError",
    "Ok",
    "Result",
    "SignatureInvalidError",
    "SystemClock",
    "VerificationFailure",
]
