"""Unit tests for ThrottledSequence."""

import pytest
from unittest.mock import AsyncMock

from src.core.throttle import ThrottledSequence


async def _drain(sequence):
    return [item async for item in sequence]


class TestThrottledSequence:
    """Tests for fixed-delay iteration."""

    @pytest.mark.asyncio
    async def test_pauses_between_items_only(self):
        """N items cost N - 1 pauses, none before the first."""
        sleep = AsyncMock()
        items = await _drain(ThrottledSequence(["a", "b", "c"], delay=1.0, sleep=sleep))

        assert items == ["a", "b", "c"]
        assert sleep.await_count == 2
        sleep.assert_awaited_with(1.0)

    @pytest.mark.asyncio
    async def test_single_item_never_pauses(self):
        sleep = AsyncMock()
        assert await _drain(ThrottledSequence(["only"], delay=1.0, sleep=sleep)) == ["only"]
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_limit_caps_items_and_pauses(self):
        sleep = AsyncMock()
        sequence = ThrottledSequence([1, 2, 3, 4], delay=0.5, limit=2, sleep=sleep)

        assert len(sequence) == 2
        assert await _drain(sequence) == [1, 2]
        assert sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_zero_delay_skips_sleep(self):
        sleep = AsyncMock()
        assert await _drain(ThrottledSequence([1, 2, 3], delay=0, sleep=sleep)) == [1, 2, 3]
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pause_happens_even_if_caller_fails_on_item(self):
        """Each request counts against the rate limit, successful or not."""
        sleep = AsyncMock()
        handled = []
        async for item in ThrottledSequence(["bad", "good"], delay=1.0, sleep=sleep):
            try:
                if item == "bad":
                    raise RuntimeError("boom")
                handled.append(item)
            except RuntimeError:
                continue

        assert handled == ["good"]
        assert sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_sequence(self):
        sleep = AsyncMock()
        assert await _drain(ThrottledSequence([], delay=1.0, sleep=sleep)) == []
        sleep.assert_not_awaited()

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            ThrottledSequence([1], delay=-1)

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            ThrottledSequence([1], delay=1, limit=-1)
