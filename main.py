"""
FitTrack Assistant — Entry Point.

Single entry point: `python main.py` starts the Telegram bot.
Set LOG_LEVEL=DEBUG in the environment for verbose logs.
"""

import logging
import os

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
# httpx logs every Telegram API URL (bot token included) at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)

from src.bot.telegram_bot import main

if __name__ == "__main__":
    main()
