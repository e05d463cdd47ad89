"""
Runtime configuration for the consent layer.

Centralises environment variable names and default values.
Uses ``pydantic_settings.BaseSettings`` for environment binding,
type coercion, and validation; a ``.env`` file in the working
directory is loaded through ``python-dotenv`` first.
"""

from __future__ import annotations

import functools
import pathlib

import dotenv
import pydantic
import pydantic_settings

from clarity_consent.utils import logger

log = logger.create_logger("Config")

DEFAULT_SCRIPT_URL = "/consent-layer.js"


class Settings(pydantic_settings.BaseSettings):
    """Process-wide settings.

    Attributes:
        options_file: JSON document backing the option store.
        script_url: URL the consent snippet loads the layer script from.
        poll_interval_ms: Delay between checks for ``window.clarity``.
        poll_max_attempts: Checks before the client gives up.
        environment: ``development`` or ``production``.
    """

    options_file: pathlib.Path = pydantic.Field(
        default=pathlib.Path("options.json"), validation_alias="CLARITY_OPTIONS_FILE"
    )
    script_url: str = pydantic.Field(
        default=DEFAULT_SCRIPT_URL, validation_alias="CLARITY_SCRIPT_URL"
    )
    poll_interval_ms: int = pydantic.Field(
        default=100, gt=0, validation_alias="CLARITY_POLL_INTERVAL_MS"
    )
    poll_max_attempts: int = pydantic.Field(
        default=100, gt=0, validation_alias="CLARITY_POLL_MAX_ATTEMPTS"
    )
    environment: str = pydantic.Field(
        default="development", validation_alias="ENVIRONMENT"
    )
    host: str = pydantic.Field(default="0.0.0.0", validation_alias="HOST")
    port: int = pydantic.Field(default=3001, validation_alias="PORT")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    dotenv.load_dotenv()
    settings = Settings()
    log.debug(
        "Settings loaded",
        {
            "optionsFile": str(settings.options_file),
            "pollIntervalMs": settings.poll_interval_ms,
            "pollMaxAttempts": settings.poll_max_attempts,
            "environment": settings.environment,
        },
    )
    return settings
