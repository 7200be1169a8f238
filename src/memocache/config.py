"""Configuration and environment helpers for memocache.

Reads typed environment variables and exposes the defaults the engine
falls back to when options leave a field unset.
"""

from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


# How often the background pruner wakes up, in milliseconds
PRUNE_FREQUENCY_MS = max(1, _env_int("MEMOCACHE_PRUNE_FREQUENCY_MS", 500))
