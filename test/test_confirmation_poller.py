#!/usr/bin/env python3
"""Unit tests for the confirmation poller."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, call, patch

import httpx
import pytest

from src.terra_swapper.confirmation_poller import ConfirmationPoller, wait_with_stop
from src.terra_swapper.errors import ConfirmationCancelled, ConfirmationTimeout, TransactionFailed
from src.terra_swapper.models import ConfirmationState, TxLookup

TXHASH = "A1B2C3D4E5F60718293A4B5C6D7E8F9012345678901234567890ABCDEF123456"


def make_lcd(heights, lookups) -> MagicMock:
    """Create a mock LcdUtility returning the given heights and lookups in order."""
    mock = MagicMock()
    mock.get_block_height = AsyncMock(side_effect=list(heights))
    mock.lookup_tx = AsyncMock(side_effect=list(lookups))
    return mock


def make_poller(lcd, **kwargs) -> ConfirmationPoller:
    kwargs.setdefault("poll_interval", 0)
    kwargs.setdefault("index_grace", 0)
    return ConfirmationPoller(lcd, **kwargs)


class TestConfirmationPoller:
    """Test suite for ConfirmationPoller."""

    @pytest.mark.asyncio
    async def test_confirms_after_not_found(self):
        """Test that two misses followed by inclusion confirm with exactly three lookups."""
        lcd = make_lcd(
            heights=[10, 11, 12],
            lookups=[TxLookup.not_found(), TxLookup.not_found(), TxLookup.included(height=100)]
        )
        poller = make_poller(lcd)

        result = await poller.wait_for_confirmation(TXHASH)

        assert result.height == 100
        assert result.success is True
        assert result.txhash == TXHASH
        assert poller.state is ConfirmationState.CONFIRMED
        assert poller.lookups == 3
        assert lcd.lookup_tx.await_count == 3
        lcd.lookup_tx.assert_has_awaits([call(TXHASH)] * 3)

    @pytest.mark.asyncio
    async def test_failed_execution(self):
        """Test that a non-zero code fails immediately with code and log."""
        lcd = make_lcd(
            heights=[10],
            lookups=[TxLookup.included(height=11, code=5, raw_log="insufficient funds")]
        )
        poller = make_poller(lcd)

        with pytest.raises(TransactionFailed) as exc_info:
            await poller.wait_for_confirmation(TXHASH)

        assert exc_info.value.code == 5
        assert exc_info.value.raw_log == "insufficient funds"
        assert exc_info.value.height == 11
        assert poller.state is ConfirmationState.FAILED
        assert poller.lookups == 1

    @pytest.mark.asyncio
    async def test_skips_lookup_when_height_unchanged(self):
        """Test that no lookup is issued until a new block is observed."""
        lcd = make_lcd(
            heights=[10, 10, 10, 11],
            lookups=[TxLookup.not_found(), TxLookup.included(height=11)]
        )
        poller = make_poller(lcd)

        result = await poller.wait_for_confirmation(TXHASH)

        assert result.height == 11
        assert lcd.get_block_height.await_count == 4
        assert lcd.lookup_tx.await_count == 2

    @pytest.mark.asyncio
    async def test_transport_errors_are_transient(self):
        """Test that transport errors keep the poller pending."""
        lcd = make_lcd(
            heights=[10, 11, 12],
            lookups=[
                TxLookup.transport_error("HTTP 500: boom"),
                httpx.ReadTimeout("timed out"),
                TxLookup.included(height=12),
            ]
        )
        poller = make_poller(lcd)

        result = await poller.wait_for_confirmation(TXHASH)

        assert result.height == 12
        assert poller.lookups == 3

    @pytest.mark.asyncio
    async def test_height_query_errors_are_transient(self):
        lcd = make_lcd(
            heights=[httpx.ConnectError("refused"), 10],
            lookups=[TxLookup.included(height=10)]
        )
        poller = make_poller(lcd)

        result = await poller.wait_for_confirmation(TXHASH)

        assert result.height == 10
        assert lcd.lookup_tx.await_count == 1

    @pytest.mark.asyncio
    async def test_no_premature_success(self):
        """Test that the poller stays pending while lookups miss."""
        lcd = make_lcd(
            heights=range(1, 50),
            lookups=[TxLookup.not_found()] * 10 + [TxLookup.included(height=42)]
        )
        poller = make_poller(lcd)

        result = await poller.wait_for_confirmation(TXHASH)

        assert result.height == 42
        assert poller.lookups == 11

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test that the optional deadline ends polling."""
        lcd = MagicMock()
        lcd.get_block_height = AsyncMock(return_value=10)
        lcd.lookup_tx = AsyncMock(return_value=TxLookup.not_found())
        poller = make_poller(lcd, poll_interval=0.01, timeout=0.05)

        with pytest.raises(ConfirmationTimeout) as exc_info:
            await poller.wait_for_confirmation(TXHASH)

        assert exc_info.value.txhash == TXHASH
        assert exc_info.value.timeout == 0.05
        assert poller.state is ConfirmationState.PENDING

    def test_zero_timeout_means_unbounded(self):
        poller = make_poller(MagicMock(), timeout=0)
        assert poller.timeout is None

    @pytest.mark.asyncio
    async def test_stop_event_cancels(self):
        lcd = MagicMock()
        lcd.get_block_height = AsyncMock(return_value=10)
        lcd.lookup_tx = AsyncMock(return_value=TxLookup.not_found())
        stop_event = asyncio.Event()
        stop_event.set()
        poller = make_poller(lcd, poll_interval=5)

        with pytest.raises(ConfirmationCancelled):
            await poller.wait_for_confirmation(TXHASH, stop_event=stop_event)

        lcd.get_block_height.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_waits_poll_interval_and_index_grace(self):
        """Test the poll interval and the index grace period are both honoured."""
        lcd = make_lcd(heights=[10], lookups=[TxLookup.included(height=10)])
        poller = ConfirmationPoller(lcd, poll_interval=3.0, index_grace=0.5)

        with patch("src.terra_swapper.confirmation_poller.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            await poller.wait_for_confirmation(TXHASH)

        assert mock_sleep.await_args_list == [call(3.0), call(0.5)]

    @pytest.mark.asyncio
    async def test_state_resets_between_transactions(self):
        lcd = make_lcd(
            heights=[10, 11],
            lookups=[TxLookup.included(height=10), TxLookup.included(height=11)]
        )
        poller = make_poller(lcd)

        await poller.wait_for_confirmation(TXHASH)
        result = await poller.wait_for_confirmation("OTHER")

        assert result.height == 11
        assert poller.lookups == 1


class TestWaitWithStop:
    """Tests for the stop-aware sleep helper."""

    @pytest.mark.asyncio
    async def test_returns_false_after_timeout(self):
        assert await wait_with_stop(asyncio.Event(), 0.01) is False

    @pytest.mark.asyncio
    async def test_returns_true_when_set(self):
        event = asyncio.Event()
        event.set()
        assert await wait_with_stop(event, 10) is True

    @pytest.mark.asyncio
    async def test_without_event(self):
        assert await wait_with_stop(None, 0) is False
