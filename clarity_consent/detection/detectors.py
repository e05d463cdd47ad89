"""
Detection of an existing Clarity project identifier on the host site.

Detection is an ordered chain of stateless detectors.  Each one
looks at one source in the option store and either produces a
``DetectionResult`` or passes.  The first detector to produce a
result wins:

1. An identifier saved earlier under ``clarity_project_id``.
2. The official Microsoft Clarity plugin being active.
3. Options of plugins known to embed Clarity, in priority order.

Nothing is cached between calls; the option store may change from
one request to the next.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from clarity_consent.detection import constants
from clarity_consent.detection.extraction import extract_project_id
from clarity_consent.detection.validation import is_valid_project_id
from clarity_consent.models.detection import DetectionResult, Provenance
from clarity_consent.storage.options import OptionStore, is_plugin_active
from clarity_consent.utils import logger

log = logger.create_logger("Detection")


class Detector(Protocol):
    """A single detection strategy."""

    def attempt(self, store: OptionStore) -> DetectionResult | None: ...


class SavedProjectIdDetector:
    """Accept a previously saved identifier if it is still valid."""

    def __init__(self, option_name: str = constants.SAVED_PROJECT_ID_OPTION) -> None:
        self.option_name = option_name

    def attempt(self, store: OptionStore) -> DetectionResult | None:
        saved = store.get(self.option_name)
        if saved and is_valid_project_id(saved):
            return DetectionResult(
                project_id=saved,
                provenance=Provenance.previously_saved(self.option_name),
            )
        return None

    def __repr__(self) -> str:
        return f"SavedProjectIdDetector({self.option_name!r})"


class CompanionPluginDetector:
    """Report the official Clarity plugin without an identifier."""

    def __init__(self, plugin_slug: str = constants.COMPANION_PLUGIN_SLUG) -> None:
        self.plugin_slug = plugin_slug

    def attempt(self, store: OptionStore) -> DetectionResult | None:
        if is_plugin_active(store, self.plugin_slug):
            return DetectionResult(
                project_id=None,
                provenance=Provenance.companion_plugin(self.plugin_slug),
            )
        return None

    def __repr__(self) -> str:
        return f"CompanionPluginDetector({self.plugin_slug!r})"


class KnownOptionDetector:
    """Extract an identifier from one third-party option."""

    def __init__(self, option_name: str) -> None:
        self.option_name = option_name

    def attempt(self, store: OptionStore) -> DetectionResult | None:
        project_id = extract_project_id(store.get(self.option_name))
        if project_id is None:
            return None
        return DetectionResult(
            project_id=project_id,
            provenance=Provenance.known_option(self.option_name),
        )

    def __repr__(self) -> str:
        return f"KnownOptionDetector({self.option_name!r})"


DEFAULT_DETECTORS: tuple[Detector, ...] = (
    SavedProjectIdDetector(),
    CompanionPluginDetector(),
    *(KnownOptionDetector(name) for name in constants.KNOWN_CLARITY_OPTIONS),
)


def detect_project_id(
    store: OptionStore,
    detectors: Sequence[Detector] = DEFAULT_DETECTORS,
) -> DetectionResult:
    """Run *detectors* in order and return the first result.

    Returns ``DetectionResult.undetected()`` when every detector
    passes.  Never raises for malformed option values.
    """
    for detector in detectors:
        result = detector.attempt(store)
        if result is not None:
            log.debug(
                "Detection matched",
                {
                    "detector": repr(detector),
                    "projectId": result.project_id,
                    "source": result.provenance.label if result.provenance else None,
                },
            )
            return result

    log.debug("No Clarity project ID detected", {"detectors": len(detectors)})
    return DetectionResult.undetected()
