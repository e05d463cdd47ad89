"""Pull a Clarity project identifier out of an arbitrary option value."""

from __future__ import annotations

from typing import Any

from clarity_consent.detection import constants
from clarity_consent.detection.validation import is_valid_project_id
from clarity_consent.utils import serialization


def _is_empty(value: Any) -> bool:
    """Mirror the host's notion of an empty option value."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value in ("", "0")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    if isinstance(value, (list, tuple, dict, set, frozenset, bytes)):
        return len(value) == 0
    return False


def extract_project_id(value: Any) -> str | None:
    """Return the project identifier embedded in *value*, or ``None``.

    Structured values are flattened to text first.  The strict
    ``clarity.ms/tag/<id>`` pattern is tried before the generic
    alphanumeric run; only the capture of the first pattern that
    matches is validated.  A strict match that fails validation
    does not fall through to the generic pattern, so a noisy blob
    cannot yield two different guesses.
    """
    if _is_empty(value):
        return None

    text = serialization.serialize_option_value(value)

    for pattern in constants.PROJECT_ID_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        candidate = match.group(1)
        return candidate if is_valid_project_id(candidate) else None

    return None
