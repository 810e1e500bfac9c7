#!/usr/bin/env python3
"""Confirmation polling for submitted transactions.

Acceptance by the entry node does not mean inclusion in a block, and the
transaction index lags block production. This module polls once per new
block until the transaction shows up, then reports its execution outcome.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from .errors import ConfirmationCancelled, ConfirmationTimeout, TransactionFailed
from .models import ConfirmationResult, ConfirmationState, LookupStatus, TxLookup

if TYPE_CHECKING:
    from .utils.lcd_utility import LcdUtility

logger = logging.getLogger(__name__)


async def wait_with_stop(stop_event: asyncio.Event | None, timeout_seconds: float) -> bool:
    """
    Sleep for timeout_seconds unless stop_event is set first.

    Returns:
        True if the stop event is set
    """
    if stop_event is None:
        if timeout_seconds > 0:
            await asyncio.sleep(timeout_seconds)
        return False

    if timeout_seconds > 0 and not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            pass

    return stop_event.is_set()


class ConfirmationPoller:
    """
    Polls the chain until a transaction is included in a block.

    State machine: PENDING -> CONFIRMED | FAILED. Lookups are only issued
    once per newly observed block height.
    """

    def __init__(
        self,
        lcd_util: "LcdUtility",
        poll_interval: float = 3.0,
        index_grace: float = 0.5,
        timeout: float | None = None
    ) -> None:
        """
        Initialize the ConfirmationPoller.

        Args:
            lcd_util: LCD client used for height queries and tx lookups
            poll_interval: Seconds between polls
            index_grace: Seconds to wait after a new block before the lookup
            timeout: Optional deadline in seconds; None or 0 polls forever
        """
        self.lcd_util: LcdUtility = lcd_util
        self.poll_interval: float = poll_interval
        self.index_grace: float = index_grace
        self.timeout: float | None = timeout or None

        self.state: ConfirmationState = ConfirmationState.PENDING
        self.lookups: int = 0

    async def wait_for_confirmation(
        self,
        txhash: str,
        stop_event: asyncio.Event | None = None
    ) -> ConfirmationResult:
        """
        Wait until the transaction is observed in a block.

        Args:
            txhash: Hash returned by the submitter
            stop_event: Optional event that aborts polling when set

        Returns:
            ConfirmationResult for a successfully executed transaction

        Raises:
            TransactionFailed: If the tx was included with a non-zero code
            ConfirmationTimeout: If the optional deadline passed
            ConfirmationCancelled: If stop_event was set
        """
        self.state = ConfirmationState.PENDING
        self.lookups = 0

        loop = asyncio.get_running_loop()
        deadline: float | None = loop.time() + self.timeout if self.timeout else None
        last_checked_height: int = 0

        logger.info(f"Waiting for tx {txhash} to be included...")

        while self.state is ConfirmationState.PENDING:
            if await wait_with_stop(stop_event, self.poll_interval):
                raise ConfirmationCancelled(txhash)

            if deadline is not None and loop.time() >= deadline:
                logger.error(f"Tx {txhash} not confirmed within {self.timeout} seconds")
                raise ConfirmationTimeout(txhash, self.timeout)

            try:
                latest_height: int = await self.lcd_util.get_block_height()
            except Exception as e:
                logger.warning(f"Could not fetch latest block height: {e}")
                continue

            if latest_height <= last_checked_height:
                continue

            last_checked_height = latest_height

            # Give the tx index a moment to catch up with the new block
            if await wait_with_stop(stop_event, self.index_grace):
                raise ConfirmationCancelled(txhash)

            lookup: TxLookup = await self._lookup(txhash)

            match lookup.status:
                case LookupStatus.NOT_FOUND:
                    logger.debug(f"Tx {txhash} not found at height {latest_height}")
                case LookupStatus.TRANSPORT_ERROR:
                    logger.warning(f"Transient error looking up tx {txhash}: {lookup.error}")
                case LookupStatus.INCLUDED if lookup.code == 0:
                    self.state = ConfirmationState.CONFIRMED
                case LookupStatus.INCLUDED:
                    self.state = ConfirmationState.FAILED
                    logger.error(
                        f"✗ Tx {txhash} failed at height {lookup.height}: "
                        f"code={lookup.code}, raw_log={lookup.raw_log}"
                    )
                    raise TransactionFailed(lookup.code, lookup.raw_log, lookup.height)

        logger.info(f"✓ Tx {txhash} confirmed in block {lookup.height}")
        return ConfirmationResult(
            txhash=txhash,
            height=lookup.height,
            success=True,
            code=lookup.code,
            raw_log=lookup.raw_log
        )

    async def _lookup(self, txhash: str) -> TxLookup:
        """Issue one lookup, folding unexpected exceptions into TRANSPORT_ERROR."""
        self.lookups += 1
        try:
            return await self.lcd_util.lookup_tx(txhash)
        except Exception as e:
            logger.error(f"Unexpected error looking up tx {txhash}: {e}", exc_info=True)
            return TxLookup.transport_error(str(e))
