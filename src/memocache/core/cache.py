"""In-process key/value cache with FIFO limit, expiry and storage modes.

Every public operation is a coroutine for composability with async
callers, but runs its critical section synchronously: nothing awaits
between validation and mutation, so operations and prune ticks on the
same event loop never interleave mid-operation.

Object keys are compared by identity (see memocache.core.keys).
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional

from memocache.core.errors import (
    CacheClosedError,
    ClearError,
    DuplicateKeyError,
    EmptyValueError,
    NotFoundError,
)
from memocache.core.keys import check_key, store_key
from memocache.core.models import (
    AddObjectAs,
    CacheEntry,
    CacheOptions,
    check_add_object_as,
    check_positive_ms,
)
from memocache.core.pruning import Pruner
from memocache.core.serialization import transform_value

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class Cache:
    """Async key/value cache.

    Purpose:
      - add(key, value, ...) / get(key) / pop(key) / has(key) / clear()
      - prune() to sweep expired entries on demand
      - close() (or `async with`) to stop the background pruner

    Key behavior:
      - Inserting past `limit` evicts the single oldest entry first.
      - Expired entries read as absent even before a prune tick removes them.
      - A rejected add leaves the store untouched.
    """

    def __init__(
        self,
        options: Optional[CacheOptions] = None,
        *,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._options = options or CacheOptions()
        self._clock = clock or _monotonic_ms
        self._store: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()
        self._closed = False

        self._pruner: Optional[Pruner] = None
        if self._options.duration_ms:
            self._pruner = Pruner(self._prune_expired, frequency_ms=self._options.frequency_ms)
            # Without a running loop the first operation starts the task
            self._pruner.start()

    @property
    def options(self) -> CacheOptions:
        return self._options

    def __len__(self) -> int:
        return len(self._store)

    async def __aenter__(self) -> "Cache":
        self._enter()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def add(
        self,
        key: Any,
        value: Any,
        *,
        add_object_as: Optional[AddObjectAs] = None,
        lifetime_ms: Optional[float] = None,
        duplicate_add_throws: Optional[bool] = None,
    ) -> None:
        """Store `value` under `key`, replacing any existing entry.

        Params:
          - add_object_as: overrides CacheOptions.add_objects_as for this value.
          - lifetime_ms: per-entry lifetime overriding the engine duration.
          - duplicate_add_throws: overrides CacheOptions.duplicate_add_throws.

        Raises:
          EmptyKeyError, EmptyValueError, DuplicateKeyError,
          InvalidOptionsError or SerializationError; the store is unchanged
          whenever an error is raised.
        """
        self._enter()

        check_key(key)
        if value is None:
            raise EmptyValueError("value cannot be empty")

        mode = check_add_object_as(
            add_object_as if add_object_as is not None else self._options.add_objects_as
        )
        if lifetime_ms is not None:
            check_positive_ms("lifetime_ms", lifetime_ms)
        throw_on_duplicate = (
            duplicate_add_throws
            if duplicate_add_throws is not None
            else self._options.duplicate_add_throws
        )

        now = self._clock()
        skey = store_key(key)
        existing = self._live_entry(skey, now)
        if existing is not None and throw_on_duplicate:
            raise DuplicateKeyError(key)

        stored = transform_value(value, mode)

        # All checks passed; mutate from here on
        if existing is not None:
            del self._store[skey]
        elif self._options.limit is not None and len(self._store) >= self._options.limit:
            _, evicted = self._store.popitem(last=False)
            logger.debug("Evicted oldest entry %r (limit=%d)", evicted.key, self._options.limit)

        self._store[skey] = CacheEntry(key=key, value=stored, timestamp=now, lifetime_ms=lifetime_ms)

    async def get(self, key: Any, throw_on_empty: Optional[bool] = None) -> Any:
        """Return the stored value, or None when absent or expired.

        Raises NotFoundError instead of returning None when the effective
        throw_on_empty policy is true.
        """
        self._enter()
        entry = self._live_entry(store_key(key), self._clock())
        if entry is None:
            return self._missing(key, throw_on_empty, operation="get")
        return entry.value

    async def pop(self, key: Any, throw_on_empty: Optional[bool] = None) -> Any:
        """Remove the entry and return its value (None when absent)."""
        self._enter()
        skey = store_key(key)
        entry = self._live_entry(skey, self._clock())
        if entry is None:
            return self._missing(key, throw_on_empty, operation="pop")
        del self._store[skey]
        return entry.value

    async def has(self, key: Any) -> bool:
        self._enter()
        return self._live_entry(store_key(key), self._clock()) is not None

    async def clear(self) -> None:
        self._enter()
        try:
            self._store.clear()
        except Exception as e:
            raise ClearError(f"clear failed: {e}") from e

    async def prune(self) -> int:
        """Remove every expired entry now; returns the number removed."""
        self._enter()
        return self._prune_expired()

    async def close(self) -> None:
        # Idempotent; later operations raise CacheClosedError
        if self._closed:
            return
        self._closed = True
        if self._pruner is not None:
            await self._pruner.stop()
        self._store.clear()

    def _enter(self) -> None:
        if self._closed:
            raise CacheClosedError("cache is closed")
        if self._pruner is not None and not self._pruner.running:
            self._pruner.start()

    def _live_entry(self, skey: Hashable, now: float) -> Optional[CacheEntry]:
        entry = self._store.get(skey)
        if entry is None:
            return None
        if entry.is_expired(now, self._options.duration_ms):
            # Drop eagerly so reads never depend on prune cadence
            del self._store[skey]
            return None
        return entry

    def _missing(self, key: Any, throw_on_empty: Optional[bool], *, operation: str) -> None:
        should_throw = throw_on_empty if throw_on_empty is not None else self._options.throw_on_empty
        if should_throw:
            raise NotFoundError(key, operation=operation)
        return None

    def _prune_expired(self) -> int:
        now = self._clock()
        default_lifetime = self._options.duration_ms
        expired = [skey for skey, entry in self._store.items() if entry.is_expired(now, default_lifetime)]
        for skey in expired:
            del self._store[skey]
        return len(expired)
