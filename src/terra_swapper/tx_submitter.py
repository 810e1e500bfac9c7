#!/usr/bin/env python3
"""Transaction submission for the Terra Swapper.

This module hands signed transactions to the chain's entry node and
interprets the synchronous check-tx response.
"""

import logging
from typing import TYPE_CHECKING

from .errors import BroadcastRejected
from .models import BroadcastResponse, SignedTx

if TYPE_CHECKING:
    from .utils.lcd_utility import LcdUtility

logger = logging.getLogger(__name__)


class TxSubmitter:
    """Broadcasts signed transactions and reports the accepted hash."""

    def __init__(self, lcd_util: "LcdUtility") -> None:
        """
        Initialize the TxSubmitter.

        Args:
            lcd_util: LCD client used for broadcasting
        """
        self.lcd_util: LcdUtility = lcd_util

    async def submit(self, signed_tx: SignedTx) -> str:
        """
        Broadcast a signed transaction in sync mode.

        A rejection is terminal for the current cycle and is never retried
        here; bad sequences or fees do not fix themselves within a period.

        Args:
            signed_tx: The signed transaction

        Returns:
            The accepted transaction hash to poll for

        Raises:
            BroadcastRejected: If the entry node's check-tx rejects the tx
        """
        response: BroadcastResponse = await self.lcd_util.broadcast_sync(signed_tx.tx_bytes)

        if not response.accepted:
            logger.error(
                f"✗ Broadcast rejected: code={response.code}, raw_log={response.raw_log}"
            )
            raise BroadcastRejected(response.code, response.raw_log)

        logger.info(f"✓ Transaction accepted by entry node: {response.txhash}")
        return response.txhash
