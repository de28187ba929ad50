"""JWKS – key-set retrieval, caching and key resolution."""
from cognito_jwt_verifier.jwks.cache import CachedKeySetSource
from cognito_jwt_verifier.jwks.fetcher import JWKS, KeySetFetcher, KeySetSource, jwks_url
from cognito_jwt_verifier.jwks.resolver import KeyType, ResolvedKey, find_entry, resolve_key

__all__ = [
    "JWKS",
    "CachedKeySetSource",
    "KeySetFetcher",
    "KeySetSource",
    "KeyType",
    "ResolvedKey",
    "find_entry",
    "jwks_url",
    "resolve_key",
]
