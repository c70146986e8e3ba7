"""
Main entry point for the Matrix bot.

Loads configuration from environment and starts the bot.
"""
from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

# Import bot after .env is loaded so modules can read env vars at import time.
from bot import CatBot
from core.config import ConfigError, load_config

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("catbot")

# Suppress verbose third-party library logs unless LOG_LEVEL is DEBUG
if LOG_LEVEL.upper() != "DEBUG":
    logging.getLogger("nio").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

if not env_path.exists():
    logger.debug(".env file not found at %s", env_path)


async def main() -> int:
    try:
        config = load_config()
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    bot = CatBot(config)
    try:
        await bot.start()
    except Exception as e:
        logger.error("Bot stopped: %s", e)
        if "M_UNKNOWN_TOKEN" in str(e):
            logger.error("Access token was rejected. Check MATRIX_ACCESS_TOKEN in your .env file.")
        return 1
    finally:
        await bot.close()
    return 0


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
