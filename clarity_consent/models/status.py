"""Pydantic models for the admin status view."""

from __future__ import annotations

from typing import Literal

import pydantic

from clarity_consent.models.consent import ConsentDecision
from clarity_consent.models.detection import DetectionResult
from clarity_consent.utils import serialization

UiState = Literal["companion-required", "configuration-needed", "active"]


class AdminNotice(pydantic.BaseModel):
    """A dismissible notice shown in the site's back office."""

    level: Literal["info", "warning"]
    message: str


class ConsentLayerStatus(pydantic.BaseModel):
    """Everything the settings page needs to render itself."""

    model_config = pydantic.ConfigDict(alias_generator=serialization.snake_to_camel, populate_by_name=True)

    detection: DetectionResult
    companion_plugin_active: bool
    consent: ConsentDecision
    ui_state: UiState
    consent_layer_active: bool
    notices: list[AdminNotice] = pydantic.Field(default_factory=list)
