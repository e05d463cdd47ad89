"""Remove every option the consent layer has ever written."""

from __future__ import annotations

from clarity_consent.consent.settings import AD_STORAGE_OPTION, ANALYTICS_STORAGE_OPTION
from clarity_consent.detection.constants import SAVED_PROJECT_ID_OPTION
from clarity_consent.storage.options import OptionStore
from clarity_consent.utils import logger

log = logger.create_logger("Uninstall")

CURRENT_OPTIONS: tuple[str, ...] = (
    AD_STORAGE_OPTION,
    ANALYTICS_STORAGE_OPTION,
)

# Written by releases before detection became stateless.
LEGACY_OPTIONS: tuple[str, ...] = (
    SAVED_PROJECT_ID_OPTION,
    "clarity_auto_project_id",
    "clarity_detected_from",
    "clarity_detection_notice_dismissed",
    "clarity_wordpress_site_id",
)

TRANSIENTS: tuple[str, ...] = (
    "clarity_consent_temp",
    "clarity_consent_cache",
    "clarity_layer_temp",
    "clarity_consent_auto_detection",
)


def site_option_key(name: str) -> str:
    """Key of the network-wide copy of option *name*."""
    return f"_site_option_{name}"


def transient_keys(name: str) -> tuple[str, ...]:
    """Keys backing transient *name* at site and network level."""
    return (
        f"_transient_{name}",
        f"_transient_timeout_{name}",
        f"_site_transient_{name}",
        f"_site_transient_timeout_{name}",
    )


def uninstall_keys() -> list[str]:
    """Every key ``uninstall`` removes, in removal order."""
    keys: list[str] = []
    for name in (*CURRENT_OPTIONS, *LEGACY_OPTIONS):
        keys.append(name)
        keys.append(site_option_key(name))
    for name in TRANSIENTS:
        keys.extend(transient_keys(name))
    return keys


def uninstall(store: OptionStore) -> int:
    """Delete all consent layer options from *store*.

    Returns the number of keys that were present and removed.
    """
    removed = sum(1 for key in uninstall_keys() if store.delete(key))
    log.success("Consent layer options removed", {"removed": removed})
    return removed
