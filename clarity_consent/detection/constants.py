"""Shared constants for Clarity project identifier detection."""

from __future__ import annotations

import re

# Option holding an identifier accepted on an earlier save.
SAVED_PROJECT_ID_OPTION = "clarity_project_id"

# The official Microsoft Clarity plugin.  When it is active the
# identifier lives in its own settings, which we may not be able
# to read, so its presence alone is reported.
COMPANION_PLUGIN_SLUG = "microsoft-clarity/clarity.php"

# Options written by plugins known to embed Clarity, in priority order.
KNOWN_CLARITY_OPTIONS: tuple[str, ...] = (
    "microsoft_clarity_project_id",
    "microsoft_clarity_settings",
    "clarity_settings",
    "seopress_analytics_option_name",
    "seopress_analytics_clarity",
    "siteseo_analytics_clarity_project_id",
    "aioseo_options",
)

PROJECT_ID_MIN_LENGTH = 8
PROJECT_ID_MAX_LENGTH = 15

# Words that satisfy the shape of an identifier inside settings blobs
# but are never one.
EXCLUDED_WORDS: frozenset[str] = frozenset({"switching", "wordpress", "settings"})

# Tried in order; the first pattern that matches textually is the only
# one whose capture is validated.
PROJECT_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"clarity\.ms/tag/([a-zA-Z0-9]{8,15})"),
    re.compile(r"([a-zA-Z0-9]{8,15})"),
)
