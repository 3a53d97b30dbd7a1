"""
Telegram Interface - Telegram бот отчетов по тестам фичей

Архитектура:
- controller: Главный координатор
- lifecycle: Polling/webhook, graceful shutdown
- handlers: Обработчики команд и диалога отчета
- middleware: Логирование событий
- utilities: Клавиатуры и разбиение длинных сообщений
- handler_registry: Регистрация handlers с DI
- states: Фильтр по шагу диалога
"""

from .controller import ReportBotController
from .lifecycle import BotLifecycle
from .handler_registry import HandlerRegistry
from .states import DialogueStepFilter
from .handlers import CommandHandlers, ReportHandlers
from .middleware import UpdateLoggerMiddleware
from .utilities import send_long_message, split_message

__all__ = [
    # Main controller
    "ReportBotController",

    # Lifecycle
    "BotLifecycle",

    # Registry
    "HandlerRegistry",

    # Filters
    "DialogueStepFilter",

    # Handlers
    "CommandHandlers",
    "ReportHandlers",

    # Middleware
    "UpdateLoggerMiddleware",

    # Utilities
    "send_long_message",
    "split_message",
]
