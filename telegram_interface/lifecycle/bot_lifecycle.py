"""
Bot Lifecycle Manager - управление жизненным циклом бота

Отвечает за:
- Запуск в режиме polling или webhook (BOT_MODE)
- Обработку сигналов (SIGINT, SIGTERM)
- Корректное освобождение ресурсов

Webhook режим поднимает aiohttp приложение:
- POST /webhook - обновления Telegram (SimpleRequestHandler)
- GET /health - проверка живости
"""

import asyncio
import logging
import signal
from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application
from aiohttp import web

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook"
HEALTH_PATH = "/health"


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


class BotLifecycle:
    """
    Управление жизненным циклом Telegram бота

    Координирует запуск и остановку бота в выбранном режиме.
    """

    def __init__(
        self,
        bot: Bot,
        dispatcher: Dispatcher,
        mode: str = "polling",
        webhook_url: Optional[str] = None,
        port: int = 3000
    ):
        """
        Args:
            bot: Aiogram Bot instance
            dispatcher: Aiogram Dispatcher instance
            mode: polling | webhook
            webhook_url: Публичный URL сервера (для webhook режима)
            port: Порт HTTP сервера (для webhook режима)
        """
        self.bot = bot
        self.dp = dispatcher
        self.mode = mode
        self.webhook_url = webhook_url
        self.port = port

        self._runner: Optional[web.AppRunner] = None

        # Shutdown event для graceful shutdown
        self._shutdown_event = asyncio.Event()

    def setup_signal_handlers(self):
        """
        Настроить обработчики сигналов для graceful shutdown
        """
        loop = asyncio.get_running_loop()

        def signal_handler(sig):
            logger.info(f"🛑 Received signal {sig}, initiating graceful shutdown...")
            self._shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))

        logger.info("📡 Signal handlers configured (SIGINT, SIGTERM)")

    def request_shutdown(self):
        self._shutdown_event.set()

    def create_web_app(self) -> web.Application:
        """aiohttp приложение с webhook и health endpoints"""
        app = web.Application()
        app.router.add_get(HEALTH_PATH, health)

        SimpleRequestHandler(dispatcher=self.dp, bot=self.bot).register(app, path=WEBHOOK_PATH)
        setup_application(app, self.dp, bot=self.bot)
        return app

    async def start(self):
        """
        Запуск бота в выбранном режиме с graceful shutdown
        """
        self.setup_signal_handlers()

        try:
            if self.mode == "webhook":
                await self._run_webhook()
            else:
                await self._run_polling()
        except Exception as e:
            logger.error(f"Bot error: {e}", exc_info=True)
            raise
        finally:
            # Всегда освобождаем ресурсы
            await self.stop()

    async def _run_polling(self):
        logger.info("🔄 Starting report bot polling...")

        # Старый webhook мешает getUpdates
        await self.bot.delete_webhook(drop_pending_updates=False)

        polling_task = asyncio.create_task(
            self.dp.start_polling(self.bot, handle_signals=False)
        )
        shutdown_task = asyncio.create_task(self._shutdown_event.wait())

        done, _ = await asyncio.wait(
            {polling_task, shutdown_task},
            return_when=asyncio.FIRST_COMPLETED
        )

        # Graceful shutdown
        logger.info("🛑 Initiating graceful shutdown...")
        shutdown_task.cancel()

        if polling_task in done:
            # Polling завершился сам - пробрасываем ошибку, если была
            polling_task.result()
            return

        await self.dp.stop_polling()
        try:
            await polling_task
        except asyncio.CancelledError:
            pass
        logger.info("✅ Polling stopped")

    async def _run_webhook(self):
        url = f"{self.webhook_url.rstrip('/')}{WEBHOOK_PATH}"
        await self.bot.set_webhook(
            url=url,
            allowed_updates=self.dp.resolve_used_update_types()
        )
        logger.info(f"📡 Telegram webhook configured: {url}")

        self._runner = web.AppRunner(self.create_web_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, host="0.0.0.0", port=self.port)
        await site.start()
        logger.info(f"🌐 Webhook server listening on port {self.port}")

        await self._shutdown_event.wait()
        logger.info("🛑 Initiating graceful shutdown...")

    async def stop(self):
        """
        Graceful остановка бота с освобождением всех ресурсов
        """
        logger.info("🛑 Stopping bot gracefully...")

        try:
            if self._runner:
                await self._runner.cleanup()
                self._runner = None
                logger.info("✅ Webhook server stopped")

            await self.bot.session.close()
            logger.info("✅ Bot session closed")

            logger.info("🎉 Bot stopped successfully")

        except Exception as e:
            logger.error(f"❌ Error during shutdown: {e}", exc_info=True)
