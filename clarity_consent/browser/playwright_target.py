"""
Playwright binding for the consent propagation client.

Lets the client drive a real page: ``window.clarity`` is checked and
invoked through ``page.evaluate``, and the completion event is
dispatched on the page's ``document``.  ``verify_consent_on_url``
runs the whole flow against a live site.
"""

from __future__ import annotations

from playwright import async_api

from clarity_consent.consent.client import ConsentPropagationClient
from clarity_consent.models.consent import ConsentPayload, ConsentState
from clarity_consent.utils import logger

log = logger.create_logger("PlaywrightTarget")

NAVIGATION_TIMEOUT_MS = 30000


class PlaywrightConsentTarget:
    """``ConsentTarget`` backed by a Playwright page."""

    def __init__(self, page: async_api.Page) -> None:
        self._page = page

    async def is_admin_context(self) -> bool:
        return bool(
            await self._page.evaluate(
                "() => !!(document.body && document.body.classList.contains('wp-admin'))"
            )
        )

    async def has_entry_point(self) -> bool:
        return bool(await self._page.evaluate("() => typeof window.clarity === 'function'"))

    async def invoke_entry_point(self, command: str, argument: dict[str, str]) -> None:
        await self._page.evaluate(
            "([command, argument]) => { window.clarity(command, argument); }",
            [command, argument],
        )

    async def dispatch_event(self, name: str, detail: dict[str, str]) -> None:
        await self._page.evaluate(
            """([name, detail]) => {
                window.clarityConsentApplied = true;
                document.dispatchEvent(new CustomEvent(name, {
                    bubbles: true,
                    cancelable: true,
                    detail: detail,
                }));
            }""",
            [name, detail],
        )


async def verify_consent_on_url(
    url: str,
    payload: ConsentPayload,
    *,
    interval_ms: int,
    max_attempts: int,
    headless: bool = True,
) -> ConsentState:
    """Open *url* in Chromium and apply *payload* to its Clarity instance.

    Returns the client's final state.
    """
    log.info("Launching browser", {"url": url, "headless": headless})
    async with async_api.async_playwright() as pw:
        browser = await pw.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            await page.goto(url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)

            client = ConsentPropagationClient(
                PlaywrightConsentTarget(page),
                payload,
                interval_ms=interval_ms,
                max_attempts=max_attempts,
            )
            await client.on_dom_ready()

            try:
                await page.wait_for_load_state("load", timeout=NAVIGATION_TIMEOUT_MS)
            except async_api.TimeoutError:
                log.warn("Page did not finish loading, skipping load fallback", {"url": url})
            else:
                await client.on_load()

            state = await client.wait()
        finally:
            await browser.close()

    log.info("Consent verification finished", {"url": url, "state": state.value})
    return state
