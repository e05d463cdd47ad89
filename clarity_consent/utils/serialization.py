"""Shared serialization helpers.

``snake_to_camel`` backs the camelCase aliases of the payload models,
and ``serialize_option_value`` flattens structured option values into
a single string for pattern scanning.
"""

from __future__ import annotations

import json
from typing import Any

import pydantic


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as ``"ad_storage"``.

    Returns:
        The camelCase equivalent, e.g. ``"adStorage"``.
    """
    parts = name.split("_")
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, pydantic.BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def serialize_option_value(value: Any) -> str:
    """Flatten *value* into one string, keeping every string fragment.

    Mappings keep their insertion order, so the first matching run
    follows the order in which the value was stored.  Anything JSON
    cannot encode natively is rendered with ``str()``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    try:
        return json.dumps(value, ensure_ascii=False, default=_to_jsonable)
    except (TypeError, ValueError):
        # Circular values cannot be encoded.
        return repr(value)
