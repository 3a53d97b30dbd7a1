"""
Utilities - вспомогательные функции

Модули:
- message_splitter: Разбиение длинных сообщений для Telegram
- keyboards: Клавиатуры выбора категорий
"""

from .message_splitter import send_long_message, split_message
from .keyboards import (
    build_category_keyboard,
    build_start_new_keyboard,
    parse_category_callback,
    CATEGORY_PREFIX,
    CALLBACK_GENERATE,
    CALLBACK_CANCEL,
    CALLBACK_START_NEW,
)

__all__ = [
    "send_long_message",
    "split_message",
    "build_category_keyboard",
    "build_start_new_keyboard",
    "parse_category_callback",
    "CATEGORY_PREFIX",
    "CALLBACK_GENERATE",
    "CALLBACK_CANCEL",
    "CALLBACK_START_NEW",
]
