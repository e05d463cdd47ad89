"""Tests for clarity_consent.consent.client: the consent poll loop."""

from __future__ import annotations

import asyncio
from unittest import mock

import pytest

from clarity_consent.consent import client as client_mod
from clarity_consent.consent.client import (
    CONSENT_APPLIED_EVENT,
    CONSENT_COMMAND,
    ConsentPropagationClient,
    IntervalTimer,
)
from clarity_consent.models.consent import ConsentPayload, ConsentState
from tests.conftest import FakeConsentTarget


def _client(target: FakeConsentTarget, payload: ConsentPayload, max_attempts: int = 100) -> ConsentPropagationClient:
    return ConsentPropagationClient(target, payload, interval_ms=2, max_attempts=max_attempts)


class TestImmediateAvailability:
    """Clarity already loaded when the DOM is ready."""

    @pytest.mark.asyncio
    async def test_applies_without_polling(self, mixed_payload: ConsentPayload) -> None:
        target = FakeConsentTarget(available_on_check=1)
        client = _client(target, mixed_payload)

        state = await client.run()

        assert state is ConsentState.APPLIED
        assert client.attempts == 0
        assert target.invocations == [
            (CONSENT_COMMAND, {"ad_Storage": "denied", "analytics_Storage": "granted"}),
        ]
        assert target.events == [
            (CONSENT_APPLIED_EVENT, {"adStorage": "denied", "analyticsStorage": "granted"}),
        ]


class TestDelayedAvailability:
    """Clarity appears while polling."""

    @pytest.mark.asyncio
    async def test_applies_once_on_third_poll(self, mixed_payload: ConsentPayload) -> None:
        # One immediate check, then available on the third scheduled check.
        target = FakeConsentTarget(available_on_check=4)
        client = _client(target, mixed_payload)

        state = await client.run()
        checks_after_apply = target.checks
        await asyncio.sleep(0.05)

        assert state is ConsentState.APPLIED
        assert client.attempts == 3
        assert len(target.invocations) == 1
        assert len(target.events) == 1
        assert target.checks == checks_after_apply == 4

    @pytest.mark.asyncio
    async def test_load_fallback_while_polling_does_not_double_invoke(self, mixed_payload: ConsentPayload) -> None:
        target = FakeConsentTarget(available_on_check=5)
        client = _client(target, mixed_payload)

        await client.on_dom_ready()
        await client.on_load()
        await client.on_load()
        await client.wait()

        assert len(target.invocations) == 1


class TestTimeout:
    """Clarity never appears."""

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, mixed_payload: ConsentPayload) -> None:
        target = FakeConsentTarget(available_on_check=None)
        client = ConsentPropagationClient(target, mixed_payload, interval_ms=1, max_attempts=100)

        with mock.patch.object(client_mod.log, "warn") as warn:
            state = await client.run()

        assert state is ConsentState.TIMED_OUT
        assert client.attempts == 100
        assert target.checks == 101
        assert target.invocations == []
        assert target.events == []
        warn.assert_called_once()

    @pytest.mark.asyncio
    async def test_load_after_timeout_polls_once_more(self, mixed_payload: ConsentPayload) -> None:
        target = FakeConsentTarget(available_on_check=None)
        client = _client(target, mixed_payload, max_attempts=3)

        await client.on_dom_ready()
        assert await client.wait() is ConsentState.TIMED_OUT

        target.available_on_check = target.checks + 2
        await client.on_load()
        assert await client.wait() is ConsentState.APPLIED

        # The fallback is used up; a second load does nothing.
        await client.on_load()
        assert len(target.invocations) == 1


class TestAdminContext:
    """Admin pages are left alone."""

    @pytest.mark.asyncio
    async def test_stays_idle(self, mixed_payload: ConsentPayload) -> None:
        target = FakeConsentTarget(available_on_check=1, admin=True)
        client = _client(target, mixed_payload)

        state = await client.run()

        assert state is ConsentState.IDLE
        assert target.checks == 0
        assert target.invocations == []


class TestInvocationFailure:
    """Errors raised while applying consent."""

    @pytest.mark.asyncio
    async def test_error_is_logged_not_raised(self, mixed_payload: ConsentPayload) -> None:
        target = FakeConsentTarget(available_on_check=2, invoke_error=RuntimeError("clarity exploded"))
        client = _client(target, mixed_payload)

        with mock.patch.object(client_mod.log, "error") as error:
            state = await client.run()

        assert state is ConsentState.FAILED
        assert target.events == []
        error.assert_called_once()
        assert error.call_args.args[1] == {"error": "clarity exploded"}

    @pytest.mark.asyncio
    async def test_no_retry_after_failure(self, mixed_payload: ConsentPayload) -> None:
        target = FakeConsentTarget(available_on_check=1, invoke_error=RuntimeError("boom"))
        client = _client(target, mixed_payload)

        await client.run()
        checks = target.checks
        await client.on_load()
        await asyncio.sleep(0.02)

        assert client.state is ConsentState.FAILED
        assert target.checks == checks

    @pytest.mark.asyncio
    async def test_event_failure_keeps_applied_state(self, mixed_payload: ConsentPayload) -> None:
        target = FakeConsentTarget(available_on_check=1, event_error=RuntimeError("no document"))
        client = _client(target, mixed_payload)

        with (
            mock.patch.object(client_mod.log, "error") as error,
            mock.patch.object(client_mod.log, "warn") as warn,
        ):
            state = await client.run()

        assert state is ConsentState.APPLIED
        assert client.invocations == 1
        assert len(target.invocations) == 1
        error.assert_not_called()
        warn.assert_called_once()
        assert warn.call_args.args[1] == {"error": "no document"}


class TestIntervalTimer:
    """Tests for IntervalTimer."""

    @pytest.mark.asyncio
    async def test_stops_when_tick_returns_true(self) -> None:
        exhausted = mock.AsyncMock()

        async def on_tick(tick: int) -> bool:
            return tick == 2

        timer = IntervalTimer(1, 10, on_tick, exhausted)
        timer.start()
        await timer.wait()

        assert timer.ticks == 2
        assert timer.running is False
        exhausted.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_calls_exhausted(self) -> None:
        exhausted = mock.AsyncMock()
        timer = IntervalTimer(1, 3, mock.AsyncMock(return_value=False), exhausted)
        timer.start()
        await timer.wait()

        assert timer.ticks == 3
        exhausted.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        exhausted = mock.AsyncMock()
        timer = IntervalTimer(1000, 3, mock.AsyncMock(return_value=False), exhausted)
        timer.start()
        timer.cancel()
        await timer.wait()

        assert timer.ticks == 0
        exhausted.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cannot_start_twice(self) -> None:
        timer = IntervalTimer(1000, 1, mock.AsyncMock(return_value=True), mock.AsyncMock())
        timer.start()
        with pytest.raises(RuntimeError):
            timer.start()
        timer.cancel()
        await timer.wait()
