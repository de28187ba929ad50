"""
cognito_jwt_verifier – verify AWS Cognito JWTs against the user pool's JWKS.

Import path convention::

    from cognito_jwt_verifier import Verifier
    from cognito_jwt_verifier.jwks import CachedKeySetSource, KeySetFetcher
    from cognito_jwt_verifier.kernel.errors import FailureReason

Verified claims are returned unvalidated beyond signature integrity:
``exp``, ``nbf``, ``iss``, ``aud`` and ``token_use`` are the caller's to check.
"""

from cognito_jwt_verifier.config import VerifierSettings
from cognito_jwt_verifier.kernel.errors import FailureReason, VerificationFailure
from cognito_jwt_verifier.verifier import Verifier

__version__ = "0.1.0"
__all__ = ["FailureReason", "VerificationFailure", "Verifier", "VerifierSettings", "__version__"]
