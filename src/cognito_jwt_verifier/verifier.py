"""Verifier – the single public entry point for token verification.

Pipeline::

    parse_token -> key set source -> resolve_key -> verify_signature

Each stage returns a :data:`Result`; the first ``Err`` rejects the token.
There is no retry and no partial acceptance.

.. warning::
   Accepted claims are only known to be signed by the user pool.  ``exp``,
   ``nbf``, ``iss``, ``aud`` and ``token_use`` are NOT validated; callers
   must check them.
"""
from __future__ import annotations

from collections.abc import Mapping

import httpx

from cognito_jwt_verifier.config.settings import VerifierSettings, check_identifier
from cognito_jwt_verifier.jwks.cache import CachedKeySetSource
from cognito_jwt_verifier.jwks.fetcher import DEFAULT_TIMEOUT, JWKS, KeySetFetcher, KeySetSource
from cognito_jwt_verifier.jwks.resolver import resolve_key
from cognito_jwt_verifier.kernel.errors import FailureReason, KeySetFetchError, VerificationFailure
from cognito_jwt_verifier.kernel.result import Err, Ok, Result
from cognito_jwt_verifier.observability.logging import get_logger
from cognito_jwt_verifier.token.parser import parse_token
from cognito_jwt_verifier.token.signature import Claims, verify_signature

logger = get_logger(__name__)


class Verifier:
    """Verify Cognito-issued JWTs against the user pool's JWKS.

    Usage::

        verifier = Verifier("eu-west-1", "eu-west-1_AbCdEf123")
        claims = await verifier.verify(token)
        if claims is None:
            ...  # rejected

    Parameters
    ----------
    region / user_pool_id:
        Identify the user pool.  Raises
        :class:`~cognito_jwt_verifier.config.InvalidSettingValueError` when
        either cannot be embedded in the JWKS URL.
    key_set_source:
        Where key sets come from.  Defaults to a :class:`KeySetFetcher` that
        fetches on every call; pass a :class:`CachedKeySetSource` to reuse them.
    timeout:
        Fetch timeout for the default fetcher.
    """

    def __init__(
        self,
        region: str,
        user_pool_id: str,
        *,
        key_set_source: KeySetSource | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._region = check_identifier("region", region)
        self._user_pool_id = check_identifier("user_pool_id", user_pool_id)
        if key_set_source is None:
            key_set_source = KeySetFetcher(region, user_pool_id, timeout=timeout)
        self._source: KeySetSource = key_set_source
        self._log = logger.bind(region=region, user_pool_id=user_pool_id)

    @classmethod
    def from_settings(
        cls,
        settings: VerifierSettings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> Verifier:
        """Build a verifier, caching key sets when ``settings.cache_ttl > 0``."""
        source: KeySetSource = KeySetFetcher(
            settings.region,
            settings.user_pool_id,
            timeout=settings.fetch_timeout,
            client=client,
        )
        if settings.cache_ttl > 0:
            source = CachedKeySetSource(source, ttl=settings.cache_ttl)
        return cls(settings.region, settings.user_pool_id, key_set_source=source)

    @property
    def key_set_source(self) -> KeySetSource:
        return self._source

    async def verify(self, token: str) -> Claims | None:
        """Return the token's claims if its signature verifies, else ``None``."""
        result = await self.verify_result(token)
        return result.unwrap_or(None)

    async def verify_result(self, token: str) -> Result[Claims, VerificationFailure]:
        """Run the pipeline and report which stage rejected the token."""
        parsed = parse_token(token)
        if isinstance(parsed, Err):
            return self._reject(parsed.error)
        kid = parsed.value.kid

        jwks = await self._fetch(kid)
        if isinstance(jwks, Err):
            return self._reject(jwks.error, kid=kid)

        outcome = (
            resolve_key(jwks.value, kid)
            .flat_map(lambda key: verify_signature(parsed.value, key))
        )
        if isinstance(outcome, Err):
            return self._reject(outcome.error, kid=kid)

        self._log.debug("token.accepted", kid=kid)
        return outcome

    async def _fetch(self, kid: str) -> Result[JWKS, KeySetFetchError]:
        try:
            result = await self._source.get_key_set(kid)
        except Exception as exc:  # noqa: BLE001
            # verify() never raises, whatever source is plugged in.
            return Err(KeySetFetchError("Key set source raised", cause=exc))
        if isinstance(result, Ok) and not isinstance(result.value, Mapping):
            return Err(KeySetFetchError("Key set source returned a non-mapping"))
        return result

    def _reject(self, failure: VerificationFailure, *, kid: str | None = None) -> Err[VerificationFailure]:
        log = self._log.warning if failure.reason is FailureReason.FETCH_ERROR else self._log.info
        log(
            "token.rejected",
            reason=failure.code,
            message=failure.message,
            kid=kid,
            cause=type(failure.cause).__name__ if failure.cause is not None else None,
        )
        return Err(failure)


__all__ = ["Verifier"]
