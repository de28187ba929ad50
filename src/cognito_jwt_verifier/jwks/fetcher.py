"""JWKS retrieval from a Cognito user pool's well-known endpoint."""
from __future__ import annotations

from typing import Any, Protocol

import httpx

from cognito_jwt_verifier.config.settings import check_identifier
from cognito_jwt_verifier.kernel.errors import KeySetFetchError
from cognito_jwt_verifier.kernel.result import Err, Ok, Result
from cognito_jwt_verifier.observability.logging import get_logger

type JWKS = dict[str, Any]

_JWKS_URL = "https://cognito-idp.{region}.amazonaws.com/{user_pool_id}/.well-known/jwks.json"

DEFAULT_TIMEOUT = 5.0

logger = get_logger(__name__)


def jwks_url(region: str, user_pool_id: str) -> str:
    """Return the JWKS URL of *user_pool_id* in *region*."""
    check_identifier("region", region)
    check_identifier("user_pool_id", user_pool_id)
    return _JWKS_URL.format(region=region, user_pool_id=user_pool_id)


class KeySetSource(Protocol):
    """Port: anything that can hand the verifier a key set for a ``kid``."""

    async def get_key_set(self, kid: str) -> Result[JWKS, KeySetFetchError]: ...


class KeySetFetcher:
    """Fetches the key set over HTTP, once per call, with no caching.

    Parameters
    ----------
    region / user_pool_id:
        Identify the user pool; both must be URL-path safe.
    timeout:
        Seconds before the request is abandoned.  A timeout is a fetch error.
    client:
        Optional shared ``httpx.AsyncClient``.  It is used as-is and never
        closed here; without one, a client is opened per fetch.
    """

    def __init__(
        self,
        region: str,
        user_pool_id: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = jwks_url(region, user_pool_id)
        self._timeout = timeout
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    async def fetch(self) -> Result[JWKS, KeySetFetchError]:
        """GET the key set; every transport or decoding failure is an ``Err``."""
        detail: dict[str, Any] = {"url": self._url}
        try:
            if self._client is not None:
                response = await self._client.get(self._url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(self._url)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            return Err(KeySetFetchError("Key set request timed out", detail=detail, cause=exc))
        except httpx.HTTPStatusError as exc:
            detail["status_code"] = exc.response.status_code
            return Err(
                KeySetFetchError(
                    f"Key set endpoint returned HTTP {exc.response.status_code}",
                    detail=detail,
                    cause=exc,
                )
            )
        except httpx.HTTPError as exc:
            return Err(KeySetFetchError("Key set request failed", detail=detail, cause=exc))

        try:
            document = response.json()
        except ValueError as exc:
            return Err(KeySetFetchError("Key set response is not JSON", detail=detail, cause=exc))
        if not isinstance(document, dict):
            return Err(KeySetFetchError("Key set response is not a JSON object", detail=detail))

        keys = document.get("keys")
        logger.debug(
            "jwks.fetched",
            url=self._url,
            keys_count=len(keys) if isinstance(keys, list) else 0,
        )
        return Ok(document)

    async def get_key_set(self, kid: str) -> Result[JWKS, KeySetFetchError]:  # noqa: ARG002
        return await self.fetch()


__all__ = ["DEFAULT_TIMEOUT", "JWKS", "KeySetFetcher", "KeySetSource", "jwks_url"]
