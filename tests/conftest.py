"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from clarity_consent.models.consent import ConsentPayload
from clarity_consent.storage.options import MemoryOptionStore

# ── Option Store Fixtures ───────────────────────────────────────


@pytest.fixture()
def empty_store() -> MemoryOptionStore:
    """A site with no options at all."""
    return MemoryOptionStore()


@pytest.fixture()
def seopress_store() -> MemoryOptionStore:
    """A site whose SEO plugin embeds the Clarity tag URL."""
    return MemoryOptionStore(
        {
            "seopress_analytics_option_name": {
                "seopress_google_analytics_enable": "1",
                "seopress_clarity_script": '<script src="https://www.clarity.ms/tag/aq9itx5whc"></script>',
            },
        }
    )


@pytest.fixture()
def companion_store() -> MemoryOptionStore:
    """The official Clarity plugin is active but nothing else is configured."""
    return MemoryOptionStore({"active_plugins": ["akismet/akismet.php", "microsoft-clarity/clarity.php"]})


# ── Consent Fixtures ────────────────────────────────────────────


@pytest.fixture()
def mixed_payload() -> ConsentPayload:
    """Ads denied, analytics granted."""
    return ConsentPayload(ad_storage="denied", analytics_storage="granted")


# ── Page Double ─────────────────────────────────────────────────


class FakeConsentTarget:
    """A page whose ``window.clarity`` appears after a number of checks.

    ``available_on_check`` counts every call to ``has_entry_point``,
    including the immediate one; ``None`` means it never appears.
    """

    def __init__(
        self,
        available_on_check: int | None = 1,
        *,
        admin: bool = False,
        invoke_error: Exception | None = None,
        event_error: Exception | None = None,
    ) -> None:
        self.available_on_check = available_on_check
        self.admin = admin
        self.invoke_error = invoke_error
        self.event_error = event_error
        self.checks = 0
        self.invocations: list[tuple[str, dict[str, str]]] = []
        self.events: list[tuple[str, dict[str, str]]] = []

    async def is_admin_context(self) -> bool:
        return self.admin

    async def has_entry_point(self) -> bool:
        self.checks += 1
        return self.available_on_check is not None and self.checks >= self.available_on_check

    async def invoke_entry_point(self, command: str, argument: dict[str, str]) -> None:
        if self.invoke_error is not None:
            raise self.invoke_error
        self.invocations.append((command, argument))

    async def dispatch_event(self, name: str, detail: dict[str, str]) -> None:
        if self.event_error is not None:
            raise self.event_error
        self.events.append((name, detail))
