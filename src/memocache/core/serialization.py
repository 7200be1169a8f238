"""Value transforms applied on insert and canonical JSON rendering.

canonical_json sorts object keys and uses compact separators so that
structurally equal inputs always render to the same text regardless of
dict insertion order.
"""

from __future__ import annotations

import copy
import dataclasses
import json
from typing import Any

from memocache.core.errors import SerializationError
from memocache.core.models import AddObjectAs

PRIMITIVE_VALUE_TYPES = (str, bytes, int, float)


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=canonical_json)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_json(value: Any) -> str:
    try:
        return json.dumps(
            value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=_json_default
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize value: {e}") from e


def is_structured(value: Any) -> bool:
    return not isinstance(value, PRIMITIVE_VALUE_TYPES)


def transform_value(value: Any, mode: AddObjectAs) -> Any:
    """Return the form of `value` the store keeps under `mode`.

    Primitives are stored unchanged whatever the mode.
    """
    if not is_structured(value):
        return value
    if mode == "clone":
        try:
            return copy.deepcopy(value)
        except (TypeError, copy.Error) as e:
            raise SerializationError(f"Cannot clone value: {e}") from e
    if mode == "stringify":
        return canonical_json(value)
    return value
