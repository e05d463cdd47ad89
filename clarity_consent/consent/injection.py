"""
Consent payload construction and page injection.

The layer script is only enqueued when detection resolved a project
identifier.  The payload travels to the browser as the
``clarityConsent`` global, defined by an inline script placed before
the layer script itself.
"""

from __future__ import annotations

import html
import json

from clarity_consent.consent import client, settings
from clarity_consent.models.consent import ConsentPayload
from clarity_consent.models.detection import DetectionResult
from clarity_consent.storage.options import OptionStore
from clarity_consent.utils import logger

log = logger.create_logger("Injection")

SCRIPT_HANDLE = "clarity-consent-layer"
PAYLOAD_GLOBAL = "clarityConsent"
SCRIPT_VERSION = "2.0.1"


def build_consent_payload(store: OptionStore, detection: DetectionResult) -> ConsentPayload | None:
    """Return the payload for this page render, or ``None`` to inject nothing."""
    if not detection.detected:
        log.debug("No project ID detected, consent layer not enqueued")
        return None
    return ConsentPayload.from_decision(settings.load_consent_decision(store))


def _payload_json(payload: ConsentPayload) -> str:
    # "<" is escaped so the payload can never close the inline <script>.
    return json.dumps(payload.to_browser_dict(), sort_keys=True).replace("<", "\\u003c")


def render_consent_snippet(payload: ConsentPayload | None, script_url: str) -> str:
    """Render the HTML that defines the payload and loads the layer script.

    Returns an empty string when there is no payload.
    """
    if payload is None:
        return ""
    src = html.escape(f"{script_url}?ver={SCRIPT_VERSION}", quote=True)
    return (
        f'<script id="{SCRIPT_HANDLE}-js-extra">\n'
        f"var {PAYLOAD_GLOBAL} = {_payload_json(payload)};\n"
        f"</script>\n"
        f'<script src="{src}" id="{SCRIPT_HANDLE}-js"></script>\n'
    )


def render_layer_script(
    interval_ms: int = client.DEFAULT_INTERVAL_MS,
    max_attempts: int = client.DEFAULT_MAX_ATTEMPTS,
) -> str:
    """Return the browser script with the poll settings filled in."""
    return (
        CONSENT_LAYER_SCRIPT.replace("__INTERVAL_MS__", str(int(interval_ms)))
        .replace("__MAX_ATTEMPTS__", str(int(max_attempts)))
        .replace("__COMMAND__", client.CONSENT_COMMAND)
        .replace("__EVENT__", client.CONSENT_APPLIED_EVENT)
        .replace("__PAYLOAD_GLOBAL__", PAYLOAD_GLOBAL)
    )


# Browser counterpart of ConsentPropagationClient.
CONSENT_LAYER_SCRIPT = """\
(function () {
    'use strict';

    var config = window.__PAYLOAD_GLOBAL__;
    if (typeof config === 'undefined') {
        console.warn('Clarity Consent Auto: Configuration not found - plugin may not be properly configured');
        return;
    }

    var INTERVAL_MS = __INTERVAL_MS__;
    var MAX_ATTEMPTS = __MAX_ATTEMPTS__;
    var state = 'idle';
    var invoked = false;
    var fallbackUsed = false;

    function entryPointReady() {
        return typeof window.clarity === 'function';
    }

    function applyConsent() {
        if (invoked) {
            return;
        }
        invoked = true;
        try {
            window.clarity('__COMMAND__', {
                ad_Storage: config.adStorage,
                analytics_Storage: config.analyticsStorage
            });
        } catch (error) {
            state = 'failed';
            console.error('Clarity Consent Auto: Error applying consent', error);
            return;
        }
        state = 'applied';
        window.clarityConsentApplied = true;
        try {
            document.dispatchEvent(new CustomEvent('__EVENT__', {
                bubbles: true,
                cancelable: true,
                detail: {
                    adStorage: config.adStorage,
                    analyticsStorage: config.analyticsStorage
                }
            }));
        } catch (error) {
            console.warn('Clarity Consent Auto: Failed to dispatch consent applied event', error);
        }
    }

    function begin() {
        if (document.body && document.body.classList.contains('wp-admin')) {
            return;
        }
        state = 'polling';
        if (entryPointReady()) {
            applyConsent();
            return;
        }
        var attempts = 0;
        var timer = setInterval(function () {
            attempts++;
            if (state !== 'polling') {
                clearInterval(timer);
            } else if (entryPointReady()) {
                clearInterval(timer);
                applyConsent();
            } else if (attempts >= MAX_ATTEMPTS) {
                clearInterval(timer);
                state = 'timed-out';
                console.warn('Clarity Consent Auto: Microsoft Clarity not found after ' +
                    (INTERVAL_MS * MAX_ATTEMPTS / 1000) + ' seconds - consent not applied');
            }
        }, INTERVAL_MS);
    }

    var started = false;
    function onReady() {
        if (started) {
            return;
        }
        started = true;
        begin();
    }

    if (document.readyState === 'loading') {
        document.addEventListener('DOMContentLoaded', onReady);
    } else {
        onReady();
    }

    if (document.readyState !== 'complete') {
        window.addEventListener('load', function () {
            if (fallbackUsed || state === 'polling' || state === 'applied' || state === 'failed') {
                return;
            }
            fallbackUsed = true;
            started = true;
            begin();
        });
    }
})();
"""
