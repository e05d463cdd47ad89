"""
HTTP surface for the consent layer.

Serves the admin status view, the consent settings, the per-page
consent snippet, and the browser layer script.  The option store is
provided through a FastAPI dependency so tests and embedders can swap
it out.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncGenerator
from typing import Annotated, Any

import fastapi
import pydantic
from starlette import responses

from clarity_consent import config
from clarity_consent.admin import status as admin_status
from clarity_consent.consent import injection, settings
from clarity_consent.detection.detectors import detect_project_id
from clarity_consent.models.consent import ConsentDecision
from clarity_consent.models.status import ConsentLayerStatus
from clarity_consent.storage import uninstall as uninstall_mod
from clarity_consent.storage.options import JsonFileOptionStore, OptionStore
from clarity_consent.utils import logger

log = logger.create_logger("Server")


def get_settings() -> config.Settings:
    return config.get_settings()


def get_option_store(cfg: Annotated[config.Settings, fastapi.Depends(get_settings)]) -> OptionStore:
    return JsonFileOptionStore(cfg.options_file)


StoreDep = Annotated[OptionStore, fastapi.Depends(get_option_store)]
SettingsDep = Annotated[config.Settings, fastapi.Depends(get_settings)]


class ConsentUpdate(pydantic.BaseModel):
    """Incoming consent settings; values are sanitised, never rejected."""

    model_config = pydantic.ConfigDict(populate_by_name=True)

    ad_storage: Any = pydantic.Field(default=None, alias="adStorage")
    analytics_storage: Any = pydantic.Field(default=None, alias="analyticsStorage")


class UninstallResult(pydantic.BaseModel):
    removed: int


@contextlib.asynccontextmanager
async def lifespan(_app: fastapi.FastAPI) -> AsyncGenerator[None]:
    """Log server start on startup."""
    cfg = config.get_settings()
    log.section("Clarity Consent Auto Started")
    log.info(
        "Environment",
        {
            "env": "production" if cfg.is_production else "development",
            "optionsFile": str(cfg.options_file),
        },
    )
    yield


app = fastapi.FastAPI(title="Clarity Consent Auto", lifespan=lifespan)

# ============================================================================
# Admin Routes
# ============================================================================


@app.get("/api/status", response_model=ConsentLayerStatus, response_model_by_alias=True)
async def status_endpoint(store: StoreDep) -> ConsentLayerStatus:
    """Re-detect and report the consent layer status."""
    return admin_status.build_status(store)


@app.get("/api/consent", response_model=ConsentDecision, response_model_by_alias=True)
async def get_consent_endpoint(store: StoreDep) -> ConsentDecision:
    return settings.load_consent_decision(store)


@app.put("/api/consent", response_model=ConsentDecision, response_model_by_alias=True)
async def put_consent_endpoint(update: ConsentUpdate, store: StoreDep) -> ConsentDecision:
    """Save consent settings; fields left out keep their stored value."""
    current = settings.load_consent_decision(store)
    return settings.save_consent_decision(
        store,
        update.ad_storage if update.ad_storage is not None else current.ad_storage,
        update.analytics_storage if update.analytics_storage is not None else current.analytics_storage,
    )


@app.post("/api/uninstall", response_model=UninstallResult)
async def uninstall_endpoint(store: StoreDep) -> UninstallResult:
    return UninstallResult(removed=uninstall_mod.uninstall(store))


# ============================================================================
# Page Routes
# ============================================================================


@app.get("/api/snippet")
async def snippet_endpoint(store: StoreDep, cfg: SettingsDep) -> responses.Response:
    """
    Return the consent snippet for a page render.

    Responds ``204`` when no project ID is detected, in which case
    nothing should be injected into the page.
    """
    payload = injection.build_consent_payload(store, detect_project_id(store))
    if payload is None:
        return responses.Response(status_code=204)
    return responses.HTMLResponse(injection.render_consent_snippet(payload, cfg.script_url))


@app.get("/consent-layer.js")
async def layer_script_endpoint(cfg: SettingsDep) -> responses.Response:
    script = injection.render_layer_script(cfg.poll_interval_ms, cfg.poll_max_attempts)
    return responses.Response(
        script,
        media_type="application/javascript",
        headers={"Cache-Control": "public, max-age=3600"},
    )
