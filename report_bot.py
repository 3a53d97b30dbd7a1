#!/usr/bin/env python3
"""
Feature Report Bot - Entry Point

Запуск:
    python report_bot.py
    # или
    ./report_bot.py

Настройки берутся из окружения и .env (см. core/config.py).
"""

import asyncio
import logging
import sys

from core.config import load_settings
from core.errors import ConfigurationError
from core.logging import setup_logging
from telegram_interface import ReportBotController

logger = logging.getLogger(__name__)


async def main():
    """
    Main entry point

    Загружает настройки, настраивает логирование и запускает контроллер.
    """
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(level=settings.log_level, log_dir=settings.log_dir)

    logger.info("=" * 50)
    logger.info("🚀 Feature Report Bot")
    logger.info("=" * 50)
    logger.info(f"⚙️ Settings: {settings.safe_dump()}")

    controller = ReportBotController(settings)

    # Start bot (lifecycle handles everything)
    await controller.start()


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("👋 Bot stopped by user")
    except Exception as e:
        logger.error(f"❌ Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
