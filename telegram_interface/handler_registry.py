"""
Handler Registry - регистрация всех обработчиков бота

Отвечает за:
- Регистрацию handlers с dependency injection
- Связывание handlers с командами, callback_data и шагами диалога
- Middleware регистрацию
"""

import logging
from functools import partial
from aiogram import Dispatcher, F
from aiogram.filters import Command, CommandStart

from data_access.state_store import DialogueStep

from .handlers import CommandHandlers, ReportHandlers
from .middleware import UpdateLoggerMiddleware
from .states import DialogueStepFilter
from .utilities import (
    CALLBACK_CANCEL,
    CALLBACK_GENERATE,
    CALLBACK_START_NEW,
    CATEGORY_PREFIX,
)

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """
    Регистратор всех обработчиков бота

    Использует dependency injection для передачи зависимостей в handlers.
    """

    def __init__(self, dp: Dispatcher, settings, store, reader, pipeline):
        """
        Args:
            dp: Aiogram Dispatcher
            settings: Settings (admin ids для /reload)
            store: SessionStateStore
            reader: ExcelReader
            pipeline: ReportPipeline
        """
        self.dp = dp
        self.settings = settings
        self.store = store
        self.reader = reader
        self.pipeline = pipeline

    def register_all(self):
        """Регистрация всех handlers и middleware"""
        logger.info("🔧 Registering all handlers...")

        # 1. Register middleware
        self._register_middleware()

        # 2. Register command handlers
        self._register_command_handlers()

        # 3. Register report dialogue handlers
        self._register_report_handlers()

        # 4. Register fallback handler
        self._register_fallback_handlers()

        logger.info("✅ All handlers registered successfully")

    def _register_middleware(self):
        """Регистрация middleware"""
        self.dp.message.middleware(UpdateLoggerMiddleware(self.store))
        self.dp.callback_query.middleware(UpdateLoggerMiddleware(self.store))
        logger.info("🔄 Middleware registered: UpdateLoggerMiddleware")

    def _register_command_handlers(self):
        """Регистрация базовых команд"""
        # /start
        self.dp.message.register(
            partial(CommandHandlers.cmd_start, store=self.store),
            CommandStart()
        )

        # /help
        self.dp.message.register(CommandHandlers.cmd_help, Command("help"))

        # /cancel
        self.dp.message.register(
            partial(CommandHandlers.cmd_cancel, store=self.store),
            Command("cancel")
        )

        # /reload (admin only)
        self.dp.message.register(
            partial(
                CommandHandlers.cmd_reload,
                settings=self.settings,
                reader=self.reader,
                pipeline=self.pipeline
            ),
            Command("reload")
        )

        logger.info("📝 Command handlers registered: /start, /help, /cancel, /reload")

    def _register_report_handlers(self):
        """Регистрация диалога отчета"""
        # Topic text
        self.dp.message.register(
            partial(ReportHandlers.handle_topic, store=self.store, reader=self.reader),
            F.text,
            ~F.text.startswith("/"),
            DialogueStepFilter(self.store, DialogueStep.TOPIC)
        )

        # Callback: toggle category
        self.dp.callback_query.register(
            partial(ReportHandlers.callback_toggle_category, store=self.store),
            F.data.startswith(CATEGORY_PREFIX)
        )

        # Callback: generate
        self.dp.callback_query.register(
            partial(
                ReportHandlers.callback_generate,
                store=self.store,
                reader=self.reader,
                pipeline=self.pipeline
            ),
            F.data == CALLBACK_GENERATE
        )

        # Callback: cancel
        self.dp.callback_query.register(
            partial(ReportHandlers.callback_cancel, store=self.store),
            F.data == CALLBACK_CANCEL
        )

        # Callback: start new report
        self.dp.callback_query.register(
            partial(ReportHandlers.callback_start_new, store=self.store),
            F.data == CALLBACK_START_NEW
        )

        logger.info("📊 Report handlers registered")

    def _register_fallback_handlers(self):
        """Регистрация fallback handler для текста вне шага topic"""
        self.dp.message.register(ReportHandlers.handle_unknown, F.text)
        logger.info("❓ Fallback handler registered")
