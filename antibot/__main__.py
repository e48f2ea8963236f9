#!/usr/bin/env python3
"""
Antibot buyer entry point

Fetches the pre-built buy transaction for TOKEN_TO_BUY, signs our slot and
sends it to SOLANA_RPC_URL. Configure through the environment or a .env file.
"""

import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import BuyerSettings, load_buyer_settings
from .errors import AntibotError, ConfigurationError
from .executor import AntibotExecutor
from .metrics import start_metrics_server
from .models import SubmissionReceipt

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def setup_logging(level: str = "INFO"):
    """Setup console logging"""

    log_format = '%(asctime)s | %(levelname)-8s | %(name)-12s | %(message)s'

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Set specific log levels
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def report(receipt: SubmissionReceipt) -> None:
    logging.info(f"🧾 Transaction signature: {receipt.signature}")
    logging.info(f"🔗 View transaction on {receipt.explorer_host}: {receipt.explorer_url}")


async def run_buyer(settings: BuyerSettings) -> int:
    """Run one buy and map the outcome to an exit code"""

    executor = None
    try:
        start_metrics_server(settings.metrics_port)
        executor = AntibotExecutor(settings, on_status=lambda msg: logging.info(f"⏳ {msg}"))
        receipt = await executor.run()
        report(receipt)
        return EXIT_OK
    except AntibotError as e:
        logging.error(f"❌ {e.describe()}")
        return EXIT_FAILED
    except Exception as e:
        logging.error(f"💥 Buyer failed: {e}", exc_info=True)
        return EXIT_FAILED
    finally:
        if executor is not None:
            await executor.close()


def main() -> int:
    """Entry point"""

    setup_logging()

    # Load environment file if it exists
    env_file = Path('.env')
    if env_file.exists():
        load_dotenv(env_file)
        logging.info("📁 Loaded .env file")
    else:
        logging.warning("⚠️  No .env file found, using system environment")

    try:
        settings = load_buyer_settings()
    except ConfigurationError as e:
        logging.error(f"❌ {e}")
        logging.error("📋 Check the environment or your .env file")
        return EXIT_CONFIG

    setup_logging(settings.log_level)
    logging.info("🚀 Starting Antibot Buyer")

    try:
        return asyncio.run(run_buyer(settings))
    except KeyboardInterrupt:
        logging.info("👋 Stopped by user")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
