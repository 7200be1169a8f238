"""Async memoization on top of the cache engine.

The wrapper derives a key from the call arguments with canonical JSON and
delegates storage, expiry and eviction entirely to the backing Cache.
"""

from __future__ import annotations

import functools
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from memocache.core.cache import Cache
from memocache.core.errors import MissingArgumentsError, NotAFunctionError
from memocache.core.serialization import canonical_json

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _is_falsy(value: Any) -> bool:
    # None, False, 0, NaN and "" count as missing; empty containers do not
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)):
        return value == 0 or value != value
    return isinstance(value, str) and value == ""


def call_key(args: tuple, kwargs: dict) -> str:
    # Sorted keys make kwargs and dict arguments order-independent
    return canonical_json([list(args), kwargs])


def memoize(
    fn: Callable[..., R],
    *,
    cache: Optional[Cache] = None,
) -> Callable[..., Awaitable[R]]:
    """Wrap `fn` so repeated calls with equal arguments reuse the first result.

    Params:
      - fn: sync or async callable; its result must not be None.
      - cache: backing engine; defaults to Cache() (no limit, no expiry).

    Returns:
      An async function; the backing engine is exposed as `.cache`.

    Raises:
      NotAFunctionError if fn is not callable. The wrapper raises
      MissingArgumentsError when called without arguments (or with a
      single falsy argument) and propagates cache errors unchanged.
      Results are stored by reference whatever the backing cache's
      storage mode.
    """
    if not callable(fn):
        raise NotAFunctionError("must provide a function with arguments to be provided as parameter")

    backing = cache if cache is not None else Cache()

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> R:
        if not kwargs and (not args or (len(args) == 1 and _is_falsy(args[0]))):
            raise MissingArgumentsError("memoized functions must have arguments")

        key = call_key(args, kwargs)
        # The engine never stores None, so None means a miss
        cached = await backing.get(key, throw_on_empty=False)
        if cached is not None:
            return cached

        logger.debug("Memoize miss for %s", getattr(fn, "__qualname__", fn))
        result = fn(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result

        await backing.add(key, result, add_object_as="by_reference")
        return result

    wrapper.cache = backing  # type: ignore[attr-defined]
    return wrapper
