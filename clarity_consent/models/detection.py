"""Pydantic models for project identifier detection."""

from __future__ import annotations

from typing import Literal

import pydantic

from clarity_consent.utils import serialization

ProvenanceKind = Literal[
    "previously-saved",
    "companion-plugin-active",
    "known-option",
]


class Provenance(pydantic.BaseModel):
    """Where a detection result came from."""

    model_config = pydantic.ConfigDict(
        frozen=True, alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    kind: ProvenanceKind
    label: str
    source_key: str | None = None

    @classmethod
    def previously_saved(cls, option_name: str) -> Provenance:
        return cls(kind="previously-saved", label="Previously saved ID", source_key=option_name)

    @classmethod
    def companion_plugin(cls, plugin_slug: str) -> Provenance:
        return cls(kind="companion-plugin-active", label="Microsoft Clarity plugin active", source_key=plugin_slug)

    @classmethod
    def known_option(cls, option_name: str) -> Provenance:
        return cls(kind="known-option", label=f"Detected from: {option_name}", source_key=option_name)


class DetectionResult(pydantic.BaseModel):
    """Outcome of one detection pass.

    ``project_id`` is either ``None`` or an identifier that passed
    validation.  A result with a provenance but no identifier is
    meaningful: the companion plugin is active but not configured.
    """

    model_config = pydantic.ConfigDict(
        frozen=True, alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    project_id: str | None = None
    provenance: Provenance | None = None

    @classmethod
    def undetected(cls) -> DetectionResult:
        """Return the empty *nothing found* result."""
        return cls(project_id=None, provenance=None)

    @property
    def detected(self) -> bool:
        return self.project_id is not None
