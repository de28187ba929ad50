"""Token – structural parsing and signature verification."""
from cognito_jwt_verifier.token.parser import ParsedToken, parse_token
from cognito_jwt_verifier.token.signature import Claims, verify_signature

__all__ = ["Claims", "ParsedToken", "parse_token", "verify_signature"]
