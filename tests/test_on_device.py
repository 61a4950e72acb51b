"""
Legislator Lens - on-device session and cancellation tests
"""
import asyncio

import pytest

from legislator_lens.clients.on_device import open_session
from legislator_lens.core.cancellation import CancelSignal, run_cancellable
from legislator_lens.core.exceptions import (
    AnalysisCancelledError,
    SessionTimeoutError,
    UnavailableError,
)
from legislator_lens.models.availability import Availability

from .conftest import FakeCapability


class TestOpenSession:

    @pytest.mark.asyncio
    async def test_session_destroyed_after_block(self):
        capability = FakeCapability(responder=lambda p: "ok")

        async with open_session(capability) as session:
            assert await session.prompt("hello") == "ok"

        assert capability.sessions[0].destroyed is True

    @pytest.mark.asyncio
    async def test_session_destroyed_when_block_raises(self):
        capability = FakeCapability()

        with pytest.raises(ValueError):
            async with open_session(capability):
                raise ValueError("boom")

        assert capability.sessions[0].destroyed is True

    @pytest.mark.asyncio
    async def test_unavailable_capability_is_refused(self):
        capability = FakeCapability(state=Availability.UNAVAILABLE)

        with pytest.raises(UnavailableError):
            async with open_session(capability):
                pass

        assert capability.sessions == []

    @pytest.mark.asyncio
    async def test_downloadable_capability_is_opened(self):
        """Creating a session on a downloadable capability triggers the download"""
        capability = FakeCapability(state=Availability.DOWNLOADABLE)

        async with open_session(capability) as session:
            assert session is capability.sessions[0]

    @pytest.mark.asyncio
    async def test_creation_timeout(self):
        capability = FakeCapability(create_delay=1)

        with pytest.raises(SessionTimeoutError):
            async with open_session(capability, timeout=0.01):
                pass

    @pytest.mark.asyncio
    async def test_options_forwarded_to_create(self):
        capability = FakeCapability()

        async with open_session(capability, system_prompt="be neutral"):
            pass

        assert capability.create_options == [{"system_prompt": "be neutral"}]


class TestCancellation:

    @pytest.mark.asyncio
    async def test_returns_result_without_signal(self):
        async def work():
            return 42

        assert await run_cancellable(work()) == 42

    @pytest.mark.asyncio
    async def test_signal_aborts_in_flight_call(self):
        signal = CancelSignal()
        started = asyncio.Event()
        finished = False

        async def slow():
            nonlocal finished
            started.set()
            await asyncio.sleep(5)
            finished = True

        async def cancel_soon():
            await started.wait()
            signal.cancel("user navigated away")

        asyncio.create_task(cancel_soon())
        with pytest.raises(AnalysisCancelledError) as exc_info:
            await run_cancellable(slow(), signal)

        assert "navigated away" in str(exc_info.value)
        assert finished is False

    @pytest.mark.asyncio
    async def test_already_cancelled_signal(self):
        signal = CancelSignal()
        signal.cancel()

        async def work():
            return "done"

        with pytest.raises(AnalysisCancelledError):
            await run_cancellable(work(), signal)

    @pytest.mark.asyncio
    async def test_cancel_during_prompt_still_destroys_session(self):
        capability = FakeCapability(responder=lambda p: "late", prompt_delay=5)
        signal = CancelSignal()

        async def cancel_soon():
            await asyncio.sleep(0.01)
            signal.cancel()

        asyncio.create_task(cancel_soon())
        with pytest.raises(AnalysisCancelledError):
            async with open_session(capability, signal=signal) as session:
                await run_cancellable(session.prompt("slow question"), signal)

        assert capability.sessions[0].destroyed is True
