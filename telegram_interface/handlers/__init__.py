"""
Handlers - обработчики команд и сообщений Telegram бота

Модули:
- command_handlers: Базовые команды (/start, /help, /cancel, /reload)
- report_handlers: Тема, выбор категорий, генерация отчета
"""

from .command_handlers import CommandHandlers
from .report_handlers import ReportHandlers

__all__ = [
    "CommandHandlers",
    "ReportHandlers",
]
