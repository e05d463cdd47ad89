"""Syntactic checks for Clarity project identifiers."""

from __future__ import annotations

import re

from clarity_consent.detection import constants

_ALNUM_RE = re.compile(r"[a-zA-Z0-9]+")
_DIGIT_RE = re.compile(r"[0-9]")


def is_excluded_word(candidate: str) -> bool:
    """Return ``True`` if *candidate* is an excluded word once digits are removed.

    Comparison is case-insensitive.  ``"Settings"`` and
    ``"switching123"`` are excluded; ``"wordpress5x"`` is not.
    """
    return _DIGIT_RE.sub("", candidate).lower() in constants.EXCLUDED_WORDS


def is_valid_project_id(candidate: object) -> bool:
    """Return ``True`` if *candidate* looks like a Clarity project identifier.

    An identifier is 8 to 15 ASCII letters or digits, contains at
    least one digit, and is not an excluded word.  Never raises;
    anything that is not a string is simply invalid.
    """
    if not isinstance(candidate, str):
        return False
    if not constants.PROJECT_ID_MIN_LENGTH <= len(candidate) <= constants.PROJECT_ID_MAX_LENGTH:
        return False
    if not _ALNUM_RE.fullmatch(candidate):
        return False
    if not _DIGIT_RE.search(candidate):
        return False
    return not is_excluded_word(candidate)
