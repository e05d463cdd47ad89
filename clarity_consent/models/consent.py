"""Pydantic models for consent decisions and the browser payload."""

from __future__ import annotations

import enum
from typing import Literal

import pydantic

from clarity_consent.utils import serialization

ConsentValue = Literal["granted", "denied"]

CONSENT_VALUES: tuple[ConsentValue, ...] = ("granted", "denied")
DEFAULT_CONSENT: ConsentValue = "granted"


class ConsentDecision(pydantic.BaseModel):
    """The configured consent for both Clarity storage categories."""

    model_config = pydantic.ConfigDict(
        frozen=True, alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    ad_storage: ConsentValue = DEFAULT_CONSENT
    analytics_storage: ConsentValue = DEFAULT_CONSENT


class ConsentPayload(pydantic.BaseModel):
    """Consent decision as delivered to the browser.

    Serialises with camelCase names (``adStorage``,
    ``analyticsStorage``), the shape the layer script reads from
    the ``clarityConsent`` global.
    """

    model_config = pydantic.ConfigDict(
        frozen=True, alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    ad_storage: ConsentValue
    analytics_storage: ConsentValue

    @classmethod
    def from_decision(cls, decision: ConsentDecision) -> ConsentPayload:
        return cls(ad_storage=decision.ad_storage, analytics_storage=decision.analytics_storage)

    def to_browser_dict(self) -> dict[str, str]:
        """Return the payload keyed by its camelCase field names."""
        return self.model_dump(by_alias=True)

    def to_consent_api_argument(self) -> dict[str, str]:
        """Return the argument ``clarity('consentv2', ...)`` expects."""
        return {
            "ad_Storage": self.ad_storage,
            "analytics_Storage": self.analytics_storage,
        }


class ConsentState(enum.StrEnum):
    """Lifecycle of the consent propagation client for one page load."""

    IDLE = "idle"
    POLLING = "polling"
    APPLIED = "applied"
    TIMED_OUT = "timed-out"
    FAILED = "failed"
