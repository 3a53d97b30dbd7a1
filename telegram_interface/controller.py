"""
Report Bot Controller - координатор

Этот controller - только координация и композиция, без бизнес-логики.

Архитектура:
- lifecycle: Управление жизненным циклом бота
- handlers: Обработчики команд и сообщений
- middleware: Промежуточные слои
- utilities: Клавиатуры и отправка длинных сообщений
"""

import logging
from aiogram import Bot, Dispatcher

from core.config import Settings
from data_access.excel_reader import ExcelReader
from data_access.state_store import SessionStateStore
from services.completion_client import CompletionClient
from services.report_pipeline import ReportPipeline

from .handler_registry import HandlerRegistry
from .lifecycle import BotLifecycle

logger = logging.getLogger(__name__)


class ReportBotController:
    """
    Контроллер бота отчетов

    Ответственность:
    - Композиция всех компонентов
    - Инициализация Bot и Dispatcher
    - Регистрация handlers через HandlerRegistry
    - Запуск через BotLifecycle
    """

    def __init__(self, settings: Settings):
        logger.info("🤖 Initializing Report Bot Controller...")
        self.settings = settings

        # 1. Create Bot and Dispatcher
        self.bot = Bot(token=settings.telegram_bot_token)
        self.dp = Dispatcher()
        logger.info("✅ Bot and Dispatcher created")

        # 2. Data and AI services
        self.store = SessionStateStore()
        self.reader = ExcelReader(settings.excel_path)
        self.completion_client = CompletionClient.from_settings(settings)
        self.pipeline = ReportPipeline.from_settings(settings, self.completion_client)
        logger.info(
            f"✅ Services initialized: excel={settings.excel_path}, model={settings.openai_model}"
        )

        # 3. Register handlers
        self.handler_registry = HandlerRegistry(
            dp=self.dp,
            settings=settings,
            store=self.store,
            reader=self.reader,
            pipeline=self.pipeline
        )
        self.handler_registry.register_all()

        # 4. Create BotLifecycle
        self.lifecycle = BotLifecycle(
            bot=self.bot,
            dispatcher=self.dp,
            mode=settings.bot_mode,
            webhook_url=settings.webhook_url,
            port=settings.port
        )

        logger.info("🎉 Report Bot Controller initialized successfully")

    async def start(self):
        """Запуск бота (polling или webhook по BOT_MODE)"""
        logger.info(f"🚀 Starting Report Bot in {self.settings.bot_mode} mode...")
        await self.lifecycle.start()

    async def stop(self):
        logger.info("🛑 Stopping Report Bot...")
        self.lifecycle.request_shutdown()
