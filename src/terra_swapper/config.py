#!/usr/bin/env python3
"""Configuration management for the Terra Swapper.

This module provides type-safe configuration dataclasses with validation
for the swapper worker. Configuration is loaded from environment variables
(optionally seeded from a .env file) with sensible defaults where appropriate.
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv
from mnemonic import Mnemonic

# Get logger for this module
logger = logging.getLogger(__name__)


def _parse_positive_int(name: str, raw: str) -> int:
    """Parse a strictly positive integer from an environment value."""
    try:
        value = int(raw.strip())
    except (AttributeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True, slots=True)
class SwapConfig:
    """What to swap and how often.

    Attributes:
        from_denom: Denom of the token being sold (e.g. 'uusd')
        to_denom: Denom of the token being bought (e.g. 'uluna')
        interval: Swap period in blocks
        amount_per_period: Maximum amount of from_denom swapped per period
    """

    from_denom: str
    to_denom: str
    interval: int
    amount_per_period: int

    def __post_init__(self) -> None:
        """Validate swap configuration."""
        if not self.from_denom:
            raise ValueError("Source denom is required (SWAP_FROM_DENOM)")
        if not self.to_denom:
            raise ValueError("Destination denom is required (SWAP_TO_DENOM)")
        if self.from_denom == self.to_denom:
            raise ValueError(
                f"Source and destination denoms must differ, both are {self.from_denom}"
            )
        if self.interval <= 0:
            raise ValueError(f"Swap interval must be positive, got {self.interval}")
        if self.amount_per_period <= 0:
            raise ValueError(
                f"Swap amount per period must be positive, got {self.amount_per_period}"
            )


@dataclass(frozen=True, slots=True)
class ChainConfig:
    """Configuration for the Terra chain and the swapping account.

    Attributes:
        node_url: HTTP(S) LCD endpoint
        chain_id: Chain identifier (e.g. 'columbus-5')
        mnemonic: Account mnemonic used for signing
        gas_prices: Gas prices string passed to the signer
        gas_adjustment: Multiplier applied to simulated gas when estimating fees
    """

    node_url: str
    chain_id: str
    mnemonic: str
    gas_prices: str = "0.01133uluna"
    gas_adjustment: float = 1.75

    def __post_init__(self) -> None:
        """Validate chain configuration."""
        if not self.node_url:
            raise ValueError("Node URL is required (NODE_URL)")

        parsed = urlparse(self.node_url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(
                f"Invalid node URL scheme: {parsed.scheme}. "
                "Expected http or https"
            )

        # Trailing slashes would double up when joined with LCD paths
        stripped = self.node_url.rstrip('/')
        if stripped != self.node_url:
            object.__setattr__(self, 'node_url', stripped)

        if not self.chain_id:
            raise ValueError("Chain ID is required (CHAIN_ID)")

        if not self.mnemonic:
            raise ValueError("Mnemonic is required (MNEMONIC)")

        words = self.mnemonic.split()
        if len(words) not in (12, 15, 18, 21, 24):
            raise ValueError(
                f"Invalid mnemonic length. Expected 12-24 words, got {len(words)}"
            )

        if not Mnemonic("english").check(" ".join(words)):
            raise ValueError("Invalid mnemonic: unknown words or bad checksum")

        if self.gas_adjustment <= 0:
            raise ValueError(f"Gas adjustment must be positive, got {self.gas_adjustment}")


@dataclass(frozen=True, slots=True)
class StoreConfig:
    """Configuration for the durable last-height store."""
    redis_url: str = "redis://localhost:6379"
    key_prefix: str = "swapper_"

    def __post_init__(self) -> None:
        """Validate store configuration."""
        parsed = urlparse(self.redis_url)
        if parsed.scheme not in ('redis', 'rediss', 'unix'):
            raise ValueError(
                f"Invalid Redis URL scheme: {parsed.scheme}. "
                "Expected redis, rediss, or unix"
            )


@dataclass(frozen=True, slots=True)
class AlertConfig:
    """Configuration for failure notifications. An empty URL disables alerting."""
    slack_url: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.slack_url)


@dataclass(frozen=True, slots=True)
class TimingConfig:
    """Configuration for polling cadence and timeouts."""
    # Defaults match the behaviour of the production worker
    cycle_delay: float = 1.0  # seconds between cycles
    poll_interval: float = 3.0  # seconds between confirmation polls
    index_grace: float = 0.5  # seconds to let the tx index catch up
    confirmation_timeout: float = 0.0  # 0 disables the deadline
    request_timeout: float = 15.0  # HTTP request timeout in seconds

    def __post_init__(self) -> None:
        """Validate timing configuration."""
        if self.cycle_delay < 0:
            raise ValueError(f"Cycle delay must be non-negative, got {self.cycle_delay}")

        if self.poll_interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.poll_interval}")
        if self.poll_interval > 300:
            raise ValueError(f"Poll interval too long (max 300s), got {self.poll_interval}")

        if self.index_grace < 0:
            raise ValueError(f"Index grace must be non-negative, got {self.index_grace}")

        if self.confirmation_timeout < 0:
            raise ValueError(
                f"Confirmation timeout must be non-negative, got {self.confirmation_timeout}"
            )

        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive, got {self.request_timeout}")
        if self.request_timeout > 120:
            raise ValueError(f"Request timeout too long (max 120s), got {self.request_timeout}")


@dataclass(frozen=True, slots=True)
class SwapperConfig:
    """Main configuration for the Terra Swapper.

    Attributes:
        swap: What to swap and at which block cadence
        chain: Chain endpoint and account credentials
        store: Durable store for the last acted height
        alert: Failure notification channel
        timing: Polling cadence and timeouts
    """

    swap: SwapConfig
    chain: ChainConfig
    store: StoreConfig
    alert: AlertConfig
    timing: TimingConfig

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> "SwapperConfig":
        """Load configuration from environment variables.

        Values already present in the environment take precedence over
        the ones read from the .env file.

        Args:
            dotenv_path: Optional explicit path to a .env file

        Returns:
            SwapperConfig instance with loaded values

        Raises:
            ValueError: If required environment variables are missing or invalid
        """
        load_dotenv(dotenv_path)

        interval_raw = os.environ.get("SWAP_INTERVAL", "")
        if not interval_raw:
            raise ValueError(
                "SWAP_INTERVAL environment variable is required. "
                "This is the swap period in blocks."
            )

        amount_raw = os.environ.get("SWAP_AMOUNT_PER_PERIOD", "")
        if not amount_raw:
            raise ValueError(
                "SWAP_AMOUNT_PER_PERIOD environment variable is required. "
                "This is the maximum amount swapped per period."
            )

        swap_config = SwapConfig(
            from_denom=os.environ.get("SWAP_FROM_DENOM", ""),
            to_denom=os.environ.get("SWAP_TO_DENOM", ""),
            interval=_parse_positive_int("SWAP_INTERVAL", interval_raw),
            amount_per_period=_parse_positive_int("SWAP_AMOUNT_PER_PERIOD", amount_raw)
        )

        chain_config = ChainConfig(
            node_url=os.environ.get("NODE_URL", ""),
            chain_id=os.environ.get("CHAIN_ID", ""),
            mnemonic=os.environ.get("MNEMONIC", ""),
            gas_prices=os.environ.get("GAS_PRICES", "0.01133uluna"),
            gas_adjustment=float(os.environ.get("GAS_ADJUSTMENT", "1.75"))
        )

        store_config = StoreConfig(
            redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379")
        )

        alert_config = AlertConfig(
            slack_url=os.environ.get("SLACK_NOTIFICATION_URL", "")
        )

        timing_config = TimingConfig(
            cycle_delay=float(os.environ.get("CYCLE_DELAY", "1")),
            poll_interval=float(os.environ.get("POLL_INTERVAL", "3")),
            index_grace=float(os.environ.get("INDEX_GRACE", "0.5")),
            confirmation_timeout=float(os.environ.get("CONFIRMATION_TIMEOUT", "0")),
            request_timeout=float(os.environ.get("REQUEST_TIMEOUT", "15"))
        )

        return cls(
            swap=swap_config,
            chain=chain_config,
            store=store_config,
            alert=alert_config,
            timing=timing_config
        )

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("Terra Swapper Configuration")
        logger.info("=" * 60)

        logger.info("Swap:")
        logger.info(f"  From Denom: {self.swap.from_denom}")
        logger.info(f"  To Denom: {self.swap.to_denom}")
        logger.info(f"  Interval: {self.swap.interval} blocks")
        logger.info(f"  Amount Per Period: {self.swap.amount_per_period}")

        logger.info("Chain:")
        logger.info(f"  Node URL: {self.chain.node_url}")
        logger.info(f"  Chain ID: {self.chain.chain_id}")
        logger.info(f"  Gas Prices: {self.chain.gas_prices}")
        logger.info(f"  Gas Adjustment: {self.chain.gas_adjustment}")
        logger.info("  Mnemonic: [CONFIGURED]")

        logger.info("Store:")
        logger.info(f"  Redis URL: {self.store.redis_url}")
        logger.info(f"  Key Prefix: {self.store.key_prefix}")

        logger.info("Alerting:")
        logger.info(f"  Slack: {'ENABLED' if self.alert.enabled else 'DISABLED'}")

        logger.info("Timing:")
        logger.info(f"  Cycle Delay: {self.timing.cycle_delay} seconds")
        logger.info(f"  Poll Interval: {self.timing.poll_interval} seconds")
        logger.info(f"  Index Grace: {self.timing.index_grace} seconds")
        if self.timing.confirmation_timeout:
            logger.info(f"  Confirmation Timeout: {self.timing.confirmation_timeout} seconds")
        else:
            logger.info("  Confirmation Timeout: NONE")
        logger.info(f"  Request Timeout: {self.timing.request_timeout} seconds")

        logger.info("=" * 60)
