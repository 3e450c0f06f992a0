"""Tests for the interrupt channel.

The channel is a flag plus a single-slot key wait.  These tests drive
it directly on the test's event loop.
"""

import asyncio

import pytest

from termkit.errors import KeyWaitPendingError
from termkit.interrupt import INTERRUPT, InterruptChannel


class TestFlag:
    """Verify raising and lowering the interrupt flag."""

    def test_starts_lowered(self) -> None:
        """A new channel is not interrupted and not waiting."""
        channel = InterruptChannel()
        assert not channel.interrupted
        assert not channel.waiting

    def test_request_and_clear(self) -> None:
        """request() raises the flag and clear() lowers it."""
        channel = InterruptChannel()
        channel.request()
        assert channel.interrupted
        channel.clear()
        assert not channel.interrupted


class TestWaitKey:
    """Verify the single-slot key wait."""

    @pytest.mark.asyncio
    async def test_key_press_resolves_wait(self) -> None:
        """The pressed key is what wait_key returns."""
        channel = InterruptChannel()
        task = asyncio.create_task(channel.wait_key())
        await asyncio.sleep(0)
        assert channel.waiting
        assert channel.press_key("q") is True
        assert await task == "q"
        assert not channel.waiting

    @pytest.mark.asyncio
    async def test_interrupt_resolves_wait(self) -> None:
        """Ctrl+C wakes the wait with INTERRUPT."""
        channel = InterruptChannel()
        task = asyncio.create_task(channel.wait_key())
        await asyncio.sleep(0)
        channel.request()
        assert await task == INTERRUPT

    @pytest.mark.asyncio
    async def test_already_interrupted(self) -> None:
        """A wait after Ctrl+C returns at once."""
        channel = InterruptChannel()
        channel.request()
        assert await channel.wait_key() == INTERRUPT

    @pytest.mark.asyncio
    async def test_second_wait_is_an_error(self) -> None:
        """Only one wait may be pending at a time."""
        channel = InterruptChannel()
        task = asyncio.create_task(channel.wait_key())
        await asyncio.sleep(0)
        with pytest.raises(KeyWaitPendingError):
            await channel.wait_key()
        channel.press_key("x")
        assert await task == "x"

    def test_press_without_wait(self) -> None:
        """Keys nobody waits for are not consumed."""
        assert InterruptChannel().press_key("a") is False

    @pytest.mark.asyncio
    async def test_sequential_waits(self) -> None:
        """The slot is free again once a wait is answered."""
        channel = InterruptChannel()
        for key in ("a", "b"):
            task = asyncio.create_task(channel.wait_key())
            await asyncio.sleep(0)
            channel.press_key(key)
            assert await task == key
