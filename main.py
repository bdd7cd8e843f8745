#!/usr/bin/env python3
"""Entry point for the swap-deposit workflow.

Loads configuration from the environment (and an optional .env file),
runs the swap-then-deposit sequence once and exits.
"""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv


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

from swap_deposit.errors import WorkflowAbortedError
from swap_deposit.workflow import SwapDepositWorkflow


def main() -> None:
    """Parse arguments, load configuration and run the workflow.

    Raises:
        SystemExit: With status 1 on configuration or runtime errors
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Swap a token and deposit the proceeds into a lending pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  RPC_URL              - JSON-RPC endpoint
  PRIVATE_KEY          - Signer private key
  TOKEN_IN_ADDRESS     - Token to sell
  TOKEN_OUT_ADDRESS    - Token to buy and deposit
  SWAP_AMOUNT          - Amount of token in, in token units
  FEE_TIER             - Pool fee tier (default: 3000)
  AMOUNT_OUT_MINIMUM   - Minimum output in base units (default: 0)
  DEPOSIT_AMOUNT       - Amount to deposit (default: swap output)
  LOG_LEVEL            - Logging level (can be overridden with --log-level)
        """
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to a .env file to load (default: .env)"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    args: argparse.Namespace = parser.parse_args()

    load_dotenv(args.env_file)
    setup_logging(args.log_level or os.environ.get("LOG_LEVEL", "INFO"))

    logger.info("=== Swap-Deposit Starting ===")
    logger.info("Loading configuration from environment...")

    try:
        workflow: SwapDepositWorkflow = SwapDepositWorkflow.from_env()
    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your environment variables:")
        logger.error("  - RPC_URL: JSON-RPC endpoint")
        logger.error("  - PRIVATE_KEY: Signer private key")
        logger.error("  - TOKEN_IN_ADDRESS / TOKEN_OUT_ADDRESS: Token pair")
        logger.error("  - SWAP_AMOUNT: Amount to swap")
        sys.exit(1)
    except ConnectionError as e:
        logger.error(f"Connection Error: {e}")
        sys.exit(1)

    try:
        summary = workflow.run().to_dict()
        logger.info(f"Pool: {summary['pool']}")
        logger.info(f"Swapped: {summary['amount_in']} base units")
        logger.info(f"Deposited: {summary['deposit_amount']} base units")
        for tx in summary["transactions"]:
            logger.info(f"  {tx['description']}: {tx['tx_hash']} (block {tx['block_number']})")
        logger.info("=== Swap-Deposit Finished ===")

    except WorkflowAbortedError as e:
        logger.error(f"Fatal Error: {e}")
        logger.error(f"Cause: {e.__cause__!r}")
        sys.exit(1)

    except KeyboardInterrupt:
        logger.info("\nReceived interrupt signal, stopping...")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
