"""
Terra Swapper implementation.

This module contains the main worker that gates swaps on block height,
builds, signs and submits them, waits for their confirmation, and keeps
running through any per-cycle failure.
"""

import asyncio
import contextlib
import logging
from typing import Protocol

from .alert_sink import SlackAlertSink
from .config import SwapperConfig
from .confirmation_poller import ConfirmationPoller, wait_with_stop
from .errors import ConfirmationCancelled
from .height_gate import HeightGate
from .models import ConfirmationResult, CycleOutcome, SignedTx, SwapRequest
from .swap_builder import build_swap_request
from .tx_submitter import TxSubmitter
from .utils.counter_store import CounterStore, RedisCounterStore
from .utils.lcd_utility import LcdUtility

logger = logging.getLogger(__name__)


class SwapSigner(Protocol):
    """Signing collaborator for swap requests."""

    @property
    def address(self) -> str:
        ...

    async def sign_swap(self, request: SwapRequest) -> SignedTx:
        ...


class TerraSwapper:
    """
    Main worker that swaps a bounded amount once per block interval.

    One cycle runs at a time: gate -> balance -> build -> sign -> submit ->
    confirm. Any exception raised inside a cycle is logged, reported to the
    alert sink, and followed by the regular inter-cycle delay.
    """

    def __init__(
        self,
        config: SwapperConfig,
        lcd_util: LcdUtility,
        store: CounterStore,
        signer: SwapSigner,
        alert_sink: SlackAlertSink
    ) -> None:
        """
        Initialize the swapper with its collaborators.

        Args:
            config: Swapper configuration
            lcd_util: LCD client for chain queries and broadcasts
            store: Durable store holding the last acted height
            signer: Wallet that signs swap transactions
            alert_sink: Failure notification channel
        """
        self.config = config
        self.lcd_util = lcd_util
        self.store = store
        self.signer = signer
        self.alert_sink = alert_sink

        self.height_gate = HeightGate(store, interval=config.swap.interval)
        self.submitter = TxSubmitter(lcd_util)
        self.poller = ConfirmationPoller(
            lcd_util,
            poll_interval=config.timing.poll_interval,
            index_grace=config.timing.index_grace,
            timeout=config.timing.confirmation_timeout
        )

        self.running = False
        self.shutdown_event = asyncio.Event()

    @classmethod
    async def from_config(cls, config: SwapperConfig) -> "TerraSwapper":
        """
        Create a TerraSwapper wired to the real chain, Redis and Slack.

        Must be awaited from a running event loop since the wallet opens
        its own HTTP session.
        """
        # Signing SDK is only needed for live wiring
        from .utils.wallet_utility import WalletUtility

        config.log_config()

        lcd_util = LcdUtility(config.chain.node_url, timeout=config.timing.request_timeout)
        store = RedisCounterStore.from_url(config.store.redis_url, prefix=config.store.key_prefix)
        signer = WalletUtility(
            node_url=config.chain.node_url,
            chain_id=config.chain.chain_id,
            mnemonic=config.chain.mnemonic,
            gas_prices=config.chain.gas_prices,
            gas_adjustment=config.chain.gas_adjustment
        )
        alert_sink = SlackAlertSink(config.alert.slack_url, timeout=config.timing.request_timeout)

        logger.info(f"TerraSwapper initialized for account {signer.address}")
        return cls(config, lcd_util, store, signer, alert_sink)

    async def load_swap_token_balance(self) -> int:
        """Fetch the spendable source token balance; a missing entry is zero."""
        balance = await self.lcd_util.get_balance(self.signer.address, self.config.swap.from_denom)
        return balance or 0

    async def run_cycle(self) -> CycleOutcome:
        """
        Run one gate -> swap -> confirm cycle.

        Returns:
            How the cycle ended

        Raises:
            Exception: Any failure; the caller decides how to report it
        """
        height: int = await self.lcd_util.get_block_height()

        if not await self.height_gate.try_acquire(height):
            return CycleOutcome.SKIPPED

        # From here on this period is spent, whatever happens next
        balance: int = await self.load_swap_token_balance()
        if balance == 0:
            logger.info(f"No {self.config.swap.from_denom} balance at height {height}, skipping period")
            return CycleOutcome.NO_BALANCE

        request: SwapRequest = build_swap_request(
            sender=self.signer.address,
            balance=balance,
            cap=self.config.swap.amount_per_period,
            from_denom=self.config.swap.from_denom,
            to_denom=self.config.swap.to_denom
        )
        logger.info(f"Swapping at height {height}: {request}")

        signed_tx: SignedTx = await self.signer.sign_swap(request)
        txhash: str = await self.submitter.submit(signed_tx)

        result: ConfirmationResult = await self.poller.wait_for_confirmation(
            txhash, stop_event=self.shutdown_event
        )
        logger.info(f"Tx Broadcasted => hash: {result.txhash}, height: {result.height}")
        return CycleOutcome.CONFIRMED

    async def report_failure(self, error: Exception) -> None:
        """Log a cycle failure and forward it to the alert sink."""
        logger.error(f"Swapper cycle failed: {error}", exc_info=error)
        with contextlib.suppress(Exception):
            await self.alert_sink.notify(f"Swapper Error: {error} '<!channel>'")

    async def run(self) -> None:
        """
        Main loop. Runs cycles until stop() is called.
        """
        self.running = True
        logger.info(
            f"Starting TerraSwapper: {self.config.swap.from_denom} -> {self.config.swap.to_denom} "
            f"every {self.config.swap.interval} blocks"
        )

        try:
            while not self.shutdown_event.is_set():
                try:
                    await self.run_cycle()
                except ConfirmationCancelled as e:
                    logger.warning(f"{e}; shutting down before the outcome was observed")
                except Exception as e:
                    await self.report_failure(e)

                await wait_with_stop(self.shutdown_event, self.config.timing.cycle_delay)
        finally:
            self.running = False
            logger.info("TerraSwapper stopped")

    def stop(self) -> None:
        """Request the main loop to stop after the current wait."""
        logger.info("Stopping TerraSwapper...")
        self.shutdown_event.set()

    async def close(self) -> None:
        """Release network resources held by the collaborators."""
        for resource in (self.lcd_util, self.store, self.signer, self.alert_sink):
            if close := getattr(resource, "close", None):
                try:
                    await close()
                except Exception as e:
                    logger.warning(f"Error closing {type(resource).__name__}: {e}")
