"""
Consent propagation client.

Waits for Clarity's global entry point (``window.clarity``) to become
callable on a page and invokes it exactly once with the configured
consent, then announces completion with a ``clarityConsentApplied``
event.  The page is reached through the ``ConsentTarget`` protocol so
the same state machine drives a real browser (see
``clarity_consent.browser.playwright_target``) or a test double.

States for one page load::

    idle -> polling -> applied | timed-out | failed

Back-office pages stay ``idle`` for good.  Polling checks once
immediately, then every ``interval_ms`` up to ``max_attempts`` checks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol

from clarity_consent.models.consent import ConsentPayload, ConsentState
from clarity_consent.utils import logger
from clarity_consent.utils.errors import get_error_message

log = logger.create_logger("ConsentClient")

CONSENT_COMMAND = "consentv2"
CONSENT_APPLIED_EVENT = "clarityConsentApplied"

DEFAULT_INTERVAL_MS = 100
DEFAULT_MAX_ATTEMPTS = 100


class ConsentTarget(Protocol):
    """The page the client runs against."""

    async def is_admin_context(self) -> bool: ...

    async def has_entry_point(self) -> bool: ...

    async def invoke_entry_point(self, command: str, argument: dict[str, str]) -> None: ...

    async def dispatch_event(self, name: str, detail: dict[str, str]) -> None: ...


class IntervalTimer:
    """Call *on_tick* every *interval_ms* until it returns ``True``.

    Stops after *max_ticks* calls, awaiting *on_exhausted* if the
    last tick still returned ``False``.  ``cancel()`` stops it from
    outside; a stopped timer never fires again.
    """

    def __init__(
        self,
        interval_ms: int,
        max_ticks: int,
        on_tick: Callable[[int], Awaitable[bool]],
        on_exhausted: Callable[[], Awaitable[None]],
    ) -> None:
        self._interval = interval_ms / 1000
        self._max_ticks = max_ticks
        self._on_tick = on_tick
        self._on_exhausted = on_exhausted
        self._task: asyncio.Task[None] | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError("IntervalTimer already started")
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Wait until the timer has stopped for any reason."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise

    async def _run(self) -> None:
        while self.ticks < self._max_ticks:
            await asyncio.sleep(self._interval)
            self.ticks += 1
            if await self._on_tick(self.ticks):
                return
        await self._on_exhausted()


class ConsentPropagationClient:
    """Deliver one consent payload to Clarity on one page load."""

    def __init__(
        self,
        target: ConsentTarget,
        payload: ConsentPayload,
        *,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._target = target
        self._payload = payload
        self._interval_ms = interval_ms
        self._max_attempts = max_attempts

        self.state = ConsentState.IDLE
        self.invocations = 0
        self._invoked = False
        self._admin_context = False
        self._started = False
        self._fallback_used = False
        self._timer: IntervalTimer | None = None

    @property
    def attempts(self) -> int:
        """Scheduled checks made by the current (or last) poll."""
        return self._timer.ticks if self._timer else 0

    # ==========================================================================
    # Page Triggers
    # ==========================================================================

    async def on_dom_ready(self) -> None:
        """Start polling once the document has loaded."""
        if self._started:
            return
        self._started = True
        await self._begin()

    async def on_load(self) -> None:
        """Fallback for the full-load event: poll once more if still needed."""
        if self._admin_context or self._fallback_used:
            return
        if self.state in (ConsentState.POLLING, ConsentState.APPLIED, ConsentState.FAILED):
            return
        self._fallback_used = True
        self._started = True
        log.debug("Window load fallback triggered", {"state": self.state.value})
        await self._begin()

    async def wait(self) -> ConsentState:
        """Wait for the running poll, if any, and return the state."""
        if self._timer is not None:
            await self._timer.wait()
        return self.state

    async def run(self) -> ConsentState:
        """Fire both page triggers and wait for a terminal state."""
        await self.on_dom_ready()
        await self.on_load()
        return await self.wait()

    # ==========================================================================
    # Polling
    # ==========================================================================

    async def _begin(self) -> None:
        if await self._target.is_admin_context():
            self._admin_context = True
            log.debug("Admin area detected - skipping consent application")
            return

        self.state = ConsentState.POLLING
        if await self._entry_point_ready():
            await self._apply()
            return

        self._timer = IntervalTimer(
            self._interval_ms,
            self._max_attempts,
            on_tick=self._on_tick,
            on_exhausted=self._on_exhausted,
        )
        self._timer.start()

    async def _entry_point_ready(self) -> bool:
        try:
            return await self._target.has_entry_point()
        except Exception as exc:
            log.debug("Entry point check failed", {"error": get_error_message(exc)})
            return False

    async def _on_tick(self, tick: int) -> bool:
        if self.state is not ConsentState.POLLING:
            return True
        if not await self._entry_point_ready():
            return False
        await self._apply()
        return True

    async def _on_exhausted(self) -> None:
        if self.state is not ConsentState.POLLING:
            return
        self.state = ConsentState.TIMED_OUT
        seconds = self._interval_ms * self._max_attempts / 1000
        log.warn(
            f"Microsoft Clarity not found after {seconds:g} seconds - consent not applied",
            {"attempts": self._max_attempts},
        )

    async def _apply(self) -> None:
        if self._invoked:
            return
        self._invoked = True

        argument = self._payload.to_consent_api_argument()
        try:
            await self._target.invoke_entry_point(CONSENT_COMMAND, argument)
        except Exception as exc:
            self.state = ConsentState.FAILED
            log.error("Error applying consent", {"error": get_error_message(exc)})
            return

        self.invocations += 1
        self.state = ConsentState.APPLIED
        log.success("Consent successfully applied", dict(argument))
        try:
            await self._target.dispatch_event(CONSENT_APPLIED_EVENT, self._payload.to_browser_dict())
        except Exception as exc:
            log.warn("Failed to dispatch consent applied event", {"error": get_error_message(exc)})
