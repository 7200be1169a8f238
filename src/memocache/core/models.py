"""Dataclasses describing cache configuration and stored entries.

CacheOptions is fixed at construction and acts as the default for every
operation; per-call keyword arguments on Cache.add/get/pop override it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, get_args

from memocache.config import PRUNE_FREQUENCY_MS
from memocache.core.errors import InvalidOptionsError


AddObjectAs = Literal["clone", "stringify", "by_reference"]

ADD_OBJECT_MODES = frozenset(get_args(AddObjectAs))


def check_add_object_as(mode: str) -> str:
    if mode not in ADD_OBJECT_MODES:
        raise InvalidOptionsError(
            f"add_object_as must be one of {sorted(ADD_OBJECT_MODES)}, got {mode!r}"
        )
    return mode


def check_positive_ms(name: str, value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise InvalidOptionsError(f"{name} must be a positive number of milliseconds, got {value!r}")
    return value


@dataclass(frozen=True)
class Lifetime:
    """How long entries live and how often expired ones are swept.

    - duration_ms: maximum entry age; None means entries never expire.
    - frequency_ms: interval between background prune ticks.
    """

    duration_ms: Optional[float] = None
    frequency_ms: float = PRUNE_FREQUENCY_MS

    def __post_init__(self) -> None:
        if self.duration_ms is not None:
            check_positive_ms("lifetime.duration_ms", self.duration_ms)
        check_positive_ms("lifetime.frequency_ms", self.frequency_ms)


@dataclass(frozen=True)
class CacheOptions:
    """Engine-wide defaults.

    Field groups:
    - Capacity: limit (FIFO eviction of the oldest entry)
    - Policy: duplicate_add_throws, throw_on_empty
    - Storage: add_objects_as
    - Expiry: lifetime
    """

    limit: Optional[int] = None

    duplicate_add_throws: bool = False
    throw_on_empty: bool = False

    add_objects_as: AddObjectAs = "by_reference"

    lifetime: Optional[Lifetime] = None

    def __post_init__(self) -> None:
        if self.limit is not None:
            if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
                raise InvalidOptionsError(f"limit must be a positive integer, got {self.limit!r}")
        check_add_object_as(self.add_objects_as)

    @property
    def duration_ms(self) -> Optional[float]:
        if self.lifetime is None:
            return None
        return self.lifetime.duration_ms

    @property
    def frequency_ms(self) -> float:
        if self.lifetime is None:
            return PRUNE_FREQUENCY_MS
        return self.lifetime.frequency_ms


@dataclass(slots=True)
class CacheEntry:
    # Stored value + monotonic insertion time (ms) + optional per-entry lifetime
    key: Any
    value: Any
    timestamp: float
    lifetime_ms: Optional[float] = field(default=None)

    def age(self, now: float) -> float:
        return now - self.timestamp

    def is_expired(self, now: float, default_lifetime_ms: Optional[float]) -> bool:
        lifetime = self.lifetime_ms if self.lifetime_ms is not None else default_lifetime_ms
        if not lifetime:
            return False
        return self.age(now) > lifetime
