from __future__ import annotations

from typing import Any


class CacheError(Exception):
    """Base error for the cache engine and memoizer."""


class ValidationError(CacheError):
    """Raised when user input is invalid."""


class EmptyKeyError(ValidationError):
    """Raised when a key is None or renders as an empty string."""


class EmptyValueError(ValidationError):
    """Raised when a value is None."""


class InvalidOptionsError(ValidationError):
    """Raised when cache or per-call options are out of range."""


class SerializationError(ValidationError):
    """Raised when a value cannot be cloned or rendered as canonical JSON."""


class NotAFunctionError(ValidationError):
    """Raised when memoize() is given something that is not callable."""


class MissingArgumentsError(ValidationError):
    """Raised when a memoized function is called without arguments."""


class DuplicateKeyError(CacheError):
    """Raised when adding an existing key while duplicates are rejected."""

    def __init__(self, key: Any) -> None:
        super().__init__(f"add failed: value already exists with key {key!r}")
        self.key = key


class NotFoundError(CacheError):
    """Raised when a requested key is absent or expired."""

    def __init__(self, key: Any, *, operation: str = "get") -> None:
        super().__init__(f"{operation} failed: value not found for key {key!r}")
        self.key = key


class ClearError(CacheError):
    """Raised when the underlying store fails to clear."""


class CacheClosedError(CacheError):
    """Raised when an operation runs on a closed cache."""
