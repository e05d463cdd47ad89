# Models package: re-export the public models.
# Prefer importing from the specific submodule (e.g. clarity_consent.models.consent).

from clarity_consent.models.consent import (
    ConsentDecision as ConsentDecision,
    ConsentPayload as ConsentPayload,
    ConsentState as ConsentState,
    ConsentValue as ConsentValue,
)
from clarity_consent.models.detection import (
    DetectionResult as DetectionResult,
    Provenance as Provenance,
    ProvenanceKind as ProvenanceKind,
)
from clarity_consent.models.status import (
    AdminNotice as AdminNotice,
    ConsentLayerStatus as ConsentLayerStatus,
    UiState as UiState,
)
