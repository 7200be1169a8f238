"""Key validation and store-key derivation.

Strings, bytes and numbers compare by value. Every other key (dicts,
lists, tuples, arbitrary objects) compares by identity: two structurally
equal objects are two different keys, and a lookup with an equal copy of
an object key finds nothing.

bool is a subclass of int, so True and 1 (and False and 0) are the same key.
"""

from __future__ import annotations

from typing import Any, Hashable

from memocache.core.errors import EmptyKeyError

VALUE_KEY_TYPES = (str, bytes, int, float)


class IdentityKey:
    """Hashable handle comparing the wrapped object by reference."""

    __slots__ = ("obj",)

    def __init__(self, obj: Any) -> None:
        # Holding the object keeps id(obj) from being reused while stored
        self.obj = obj

    def __hash__(self) -> int:
        return id(self.obj)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, IdentityKey) and other.obj is self.obj

    def __repr__(self) -> str:
        return f"IdentityKey({self.obj!r})"


def check_key(key: Any) -> None:
    if key is None:
        raise EmptyKeyError("key cannot be empty")
    text = key if isinstance(key, (str, bytes)) else str(key)
    if len(text) == 0:
        raise EmptyKeyError("key cannot be empty")


def store_key(key: Any) -> Hashable:
    if isinstance(key, VALUE_KEY_TYPES):
        return key
    return IdentityKey(key)
