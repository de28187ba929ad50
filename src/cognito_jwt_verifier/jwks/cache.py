"""Key-set caching with TTL expiry, refresh-on-miss and single-flight fetches.

Caching changes how often the key set is retrieved, never how a token is
judged: every answer is still a key set the wrapped source returned.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from cognito_jwt_verifier.jwks.fetcher import JWKS, KeySetSource
from cognito_jwt_verifier.jwks.resolver import find_entry
from cognito_jwt_verifier.kernel.clock import Clock, SystemClock
from cognito_jwt_verifier.kernel.errors import KeySetFetchError
from cognito_jwt_verifier.kernel.result import Err, Ok, Result
from cognito_jwt_verifier.observability.logging import get_logger

DEFAULT_TTL = 3600.0
DEFAULT_MAX_MISSES = 16

logger = get_logger(__name__)


@dataclass
class _Entry:
    jwks: JWKS
    fetched_at: float
    # kids already refetched for during this entry's lifetime and still absent
    missed_kids: set[str] = field(default_factory=set)


class CachedKeySetSource:
    """Wraps a :class:`KeySetSource` with a TTL cache.

    One instance caches the key set of one wrapped source, i.e. of one
    ``(region, user_pool_id)`` pair.

    * A fresh entry that contains the requested ``kid`` is served as-is.
    * An expired entry is refetched.
    * A fresh entry that lacks the ``kid`` is refetched once per unknown
      ``kid`` (key rotation); later misses for the same ``kid`` are served
      from cache until the entry expires.  Once ``max_misses`` ``kid``
      values have stayed unknown after their refetch, further unknown
      ``kid`` values are answered from cache until the window ends.
    * Concurrent fetches collapse into one.
    * When a refetch fails and an entry exists, the stale entry is served.

    The instance may be shared across event loops (e.g. successive
    ``asyncio.run`` calls); its lock is recreated for each running loop.

    Parameters
    ----------
    source:
        The wrapped source, normally a :class:`KeySetFetcher`.
    ttl:
        Seconds a fetched key set stays fresh.
    max_misses:
        Unknown ``kid`` values that may each trigger a refetch per TTL window.
    clock:
        Time source; defaults to :class:`SystemClock`.
    """

    def __init__(
        self,
        source: KeySetSource,
        *,
        ttl: float = DEFAULT_TTL,
        max_misses: int = DEFAULT_MAX_MISSES,
        clock: Clock | None = None,
    ) -> None:
        self._source = source
        self._ttl = ttl
        self._max_misses = max_misses
        self._clock = clock or SystemClock()
        self._entry: _Entry | None = None
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    async def get_key_set(self, kid: str) -> Result[JWKS, KeySetFetchError]:
        entry = self._entry
        if entry is not None and self._serves(entry, kid):
            return Ok(entry.jwks)

        async with self._loop_lock():
            # Another task may have refreshed while we waited.
            entry = self._entry
            if entry is not None and self._serves(entry, kid):
                return Ok(entry.jwks)
            return await self._refresh(entry, kid)

    def invalidate(self) -> None:
        """Drop the cached key set."""
        self._entry = None

    def _loop_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def _fresh(self, entry: _Entry) -> bool:
        return self._clock.timestamp() - entry.fetched_at < self._ttl

    def _serves(self, entry: _Entry, kid: str) -> bool:
        if not self._fresh(entry):
            return False
        if kid in entry.missed_kids or find_entry(entry.jwks, kid) is not None:
            return True
        if len(entry.missed_kids) >= self._max_misses:
            logger.debug("jwks.miss_refetch_budget_spent", kid=kid, max_misses=self._max_misses)
            return True
        return False

    async def _refresh(self, stale: _Entry | None, kid: str) -> Result[JWKS, KeySetFetchError]:
        result = await self._source.get_key_set(kid)
        if isinstance(result, Err):
            if stale is None:
                return result
            logger.warning(
                "jwks.refresh_failed_serving_stale",
                kid=kid,
                reason=result.error.code,
                detail=result.error.detail,
            )
            return Ok(stale.jwks)

        fetched_at = self._clock.timestamp()
        if stale is not None and self._fresh(stale):
            # Refetched on a miss: the TTL window and its miss budget carry over.
            fetched_at = stale.fetched_at
            missed = stale.missed_kids | {kid}
        else:
            missed = {kid}
        if find_entry(result.value, kid) is not None:
            missed.discard(kid)
        self._entry = _Entry(jwks=result.value, fetched_at=fetched_at, missed_kids=missed)
        logger.debug("jwks.cached", kid=kid, ttl=self._ttl)
        return result


__all__ = ["DEFAULT_MAX_MISSES", "DEFAULT_TTL", "CachedKeySetSource"]
