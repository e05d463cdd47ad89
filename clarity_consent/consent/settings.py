"""Stored consent settings for the two Clarity storage categories.

Both settings accept exactly ``granted`` or ``denied``.  Anything
else is coerced to ``granted`` instead of rejecting the write.
"""

from __future__ import annotations

import re
from typing import Any

from clarity_consent.models.consent import CONSENT_VALUES, DEFAULT_CONSENT, ConsentDecision, ConsentValue
from clarity_consent.storage.options import OptionStore
from clarity_consent.utils import logger

log = logger.create_logger("ConsentSettings")

AD_STORAGE_OPTION = "clarity_ad_storage"
ANALYTICS_STORAGE_OPTION = "clarity_analytics_storage"

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")


def _sanitize_text_field(raw: str) -> str:
    """Strip tags, collapse whitespace runs, and trim."""
    return _WHITESPACE_RE.sub(" ", _TAG_RE.sub("", raw)).strip()


def sanitize_consent_value(raw: Any) -> ConsentValue:
    """Return ``"denied"`` or ``"granted"`` for any input.

    Only an exact, case-sensitive ``granted``/``denied`` survives;
    ``"Granted"``, ``"true"``, the empty string, and non-strings all
    collapse to the default ``granted``.
    """
    if not isinstance(raw, str):
        return DEFAULT_CONSENT
    sanitized = _sanitize_text_field(raw)
    if sanitized in CONSENT_VALUES:
        return sanitized  # type: ignore[return-value]
    return DEFAULT_CONSENT


def load_consent_decision(store: OptionStore) -> ConsentDecision:
    """Read both consent settings, defaulting to ``granted``."""
    return ConsentDecision(
        ad_storage=sanitize_consent_value(store.get(AD_STORAGE_OPTION, DEFAULT_CONSENT)),
        analytics_storage=sanitize_consent_value(store.get(ANALYTICS_STORAGE_OPTION, DEFAULT_CONSENT)),
    )


def save_consent_decision(store: OptionStore, ad_storage: Any, analytics_storage: Any) -> ConsentDecision:
    """Sanitise and persist both consent settings.

    Returns the decision as stored.
    """
    decision = ConsentDecision(
        ad_storage=sanitize_consent_value(ad_storage),
        analytics_storage=sanitize_consent_value(analytics_storage),
    )
    store.set(AD_STORAGE_OPTION, decision.ad_storage)
    store.set(ANALYTICS_STORAGE_OPTION, decision.analytics_storage)
    log.info(
        "Consent settings saved",
        {
            "adStorage": decision.ad_storage,
            "analyticsStorage": decision.analytics_storage,
        },
    )
    return decision
