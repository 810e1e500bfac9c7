#!/usr/bin/env python3
"""Block height gating for the Terra Swapper.

The gate admits at most one swap per qualifying block height. The decision
is persisted before any side effect so that a crash between the write and
the broadcast forfeits the period instead of swapping twice.
"""

import logging

from .utils.counter_store import CounterStore

logger = logging.getLogger(__name__)

LAST_HEIGHT_KEY = "last_height"


def should_act(current_height: int, last_acted_height: int, interval: int) -> bool:
    """
    Decide whether a swap is due at the given height.

    Fires one block before each interval boundary, i.e. when
    ``current_height + 1`` is a multiple of ``interval``, and only for
    heights above the last acted height.

    Args:
        current_height: Latest observed chain height
        last_acted_height: Height of the last admitted swap
        interval: Swap period in blocks

    Returns:
        True if a swap should be attempted at current_height
    """
    if interval <= 0:
        raise ValueError(f"Interval must be positive, got {interval}")

    return current_height > last_acted_height and (current_height + 1) % interval == 0


class HeightGate:
    """Once-per-qualifying-height admission check backed by a durable counter."""

    def __init__(self, store: CounterStore, interval: int, key: str = LAST_HEIGHT_KEY) -> None:
        """
        Initialize the gate.

        Args:
            store: Durable store holding the last acted height
            interval: Swap period in blocks
            key: Store key for the last acted height
        """
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")

        self.store = store
        self.interval = interval
        self.key = key

    async def last_acted_height(self) -> int:
        """
        Read the last acted height from the store.

        Returns:
            The stored height, or 0 if nothing was stored yet

        Raises:
            ValueError: If the stored value is not a decimal integer
        """
        raw = await self.store.get(self.key)
        if not raw:
            return 0

        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"Corrupt last acted height in store: {raw!r}") from None

    async def try_acquire(self, current_height: int) -> bool:
        """
        Admit the current height if a swap is due and record the admission.

        Nothing is written when the gate does not fire.

        Args:
            current_height: Latest observed chain height

        Returns:
            True if the caller should proceed with a swap at this height
        """
        last_height = await self.last_acted_height()
        if not should_act(current_height, last_height, self.interval):
            return False

        # Record first, act second
        await self.store.set(self.key, str(current_height))
        logger.info(f"Height gate fired at {current_height} (previous: {last_height})")
        return True
