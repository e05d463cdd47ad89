"""
Status of the consent layer as shown on the settings page.

Detection runs afresh for every status request, so the page always
reflects the current option store.
"""

from __future__ import annotations

from clarity_consent.consent import settings
from clarity_consent.detection import constants
from clarity_consent.detection.detectors import detect_project_id
from clarity_consent.models.detection import DetectionResult
from clarity_consent.models.status import AdminNotice, ConsentLayerStatus, UiState
from clarity_consent.storage.options import OptionStore, is_plugin_active

SETUP_NOTICE = (
    "Microsoft Clarity plugin detected. Please complete setup to start "
    "to use Clarity Consent Auto plugin."
)
COMPANION_REQUIRED_NOTICE = (
    "This consent layer requires the official Microsoft Clarity plugin "
    "to be installed and active."
)


def resolve_ui_state(detection: DetectionResult, companion_active: bool) -> UiState:
    """Pick which variant of the settings page to show.

    An inactive companion plugin always wins, even when an identifier
    was found in another plugin's options.
    """
    if not companion_active:
        return "companion-required"
    if detection.detected:
        return "active"
    return "configuration-needed"


def build_notices(detection: DetectionResult, ui_state: UiState) -> list[AdminNotice]:
    notices: list[AdminNotice] = []
    if (
        detection.provenance is not None
        and detection.provenance.kind == "companion-plugin-active"
        and not detection.detected
    ):
        notices.append(AdminNotice(level="info", message=SETUP_NOTICE))
    if ui_state == "companion-required":
        notices.append(AdminNotice(level="warning", message=COMPANION_REQUIRED_NOTICE))
    return notices


def build_status(store: OptionStore) -> ConsentLayerStatus:
    """Detect, then describe the consent layer's current state."""
    detection = detect_project_id(store)
    companion_active = is_plugin_active(store, constants.COMPANION_PLUGIN_SLUG)
    ui_state = resolve_ui_state(detection, companion_active)
    return ConsentLayerStatus(
        detection=detection,
        companion_plugin_active=companion_active,
        consent=settings.load_consent_decision(store),
        ui_state=ui_state,
        consent_layer_active=detection.detected,
        notices=build_notices(detection, ui_state),
    )
