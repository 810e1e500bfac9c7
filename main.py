#!/usr/bin/env python3
"""Entry point for the Terra Swapper worker.

This module provides the main entry point for the long-running worker
that swaps a bounded amount of one token into another once per block
interval.
"""

import argparse
import asyncio
import contextlib
import logging
import os
import signal
import sys

# Configure logging before any other imports create loggers
def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

# Get logger for this module
logger = logging.getLogger(__name__)

from src.terra_swapper.config import SwapperConfig
from src.terra_swapper.swapper import TerraSwapper


async def main() -> None:
    """Main entry point for the Terra Swapper worker.

    Parses startup arguments, loads configuration from the environment,
    and runs the swapper until it receives SIGINT or SIGTERM.

    Raises:
        SystemExit: On configuration or startup errors
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Terra Swapper - swap a bounded amount once per block interval",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  MNEMONIC               - Account mnemonic used for signing
  SWAP_INTERVAL          - Swap period in blocks
  SWAP_AMOUNT_PER_PERIOD - Maximum amount swapped per period
  SWAP_FROM_DENOM        - Denom to sell (e.g. uusd)
  SWAP_TO_DENOM          - Denom to buy (e.g. uluna)
  NODE_URL               - LCD endpoint
  CHAIN_ID               - Chain identifier
  SLACK_NOTIFICATION_URL - Slack webhook for failures (empty disables)
  REDIS_URL              - Redis connection string
  LOG_LEVEL              - Logging level (can be overridden with --log-level)
        """
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    args: argparse.Namespace = parser.parse_args()

    setup_logging(args.log_level)

    logger.info("=== Terra Swapper Starting ===")
    logger.info("Loading configuration from environment...")

    try:
        config: SwapperConfig = SwapperConfig.from_env()
        logger.info("Configuration loaded successfully")
    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your environment variables:")
        logger.error("  - MNEMONIC, NODE_URL, CHAIN_ID")
        logger.error("  - SWAP_INTERVAL, SWAP_AMOUNT_PER_PERIOD")
        logger.error("  - SWAP_FROM_DENOM, SWAP_TO_DENOM")
        sys.exit(1)

    try:
        swapper: TerraSwapper = await TerraSwapper.from_config(config)
    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        sys.exit(1)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, swapper.stop)

    try:
        await swapper.run()
    finally:
        await swapper.close()
        logger.info("Shutdown completed")


if __name__ == "__main__":
    asyncio.run(main())
