"""
Keyboards - inline клавиатуры выбора категорий

callback_data категории - индекс в снимке available_categories,
чтобы не упираться в лимит Telegram в 64 байта.
"""

from typing import Optional, Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from .. import messages

CATEGORY_PREFIX = "category:"
CALLBACK_GENERATE = "generate"
CALLBACK_CANCEL = "cancel"
CALLBACK_START_NEW = "start_new"

BUTTONS_PER_ROW = 3


def category_callback(index: int) -> str:
    return f"{CATEGORY_PREFIX}{index}"


def parse_category_callback(data: str) -> Optional[int]:
    """Индекс категории из callback_data или None"""
    if not data.startswith(CATEGORY_PREFIX):
        return None
    raw = data[len(CATEGORY_PREFIX):]
    return int(raw) if raw.isdigit() else None


def build_category_keyboard(categories: Sequence[str], selected: Sequence[str]) -> InlineKeyboardMarkup:
    """
    Мультивыбор категорий: по 3 в ряд, выбранные с ✅,
    кнопка генерации появляется после первого выбора
    """
    keyboard = []
    for start in range(0, len(categories), BUTTONS_PER_ROW):
        row = []
        for index in range(start, min(start + BUTTONS_PER_ROW, len(categories))):
            category = categories[index]
            text = f"{messages.SELECTED_MARK}{category}" if category in selected else category
            row.append(InlineKeyboardButton(text=text, callback_data=category_callback(index)))
        keyboard.append(row)

    if selected:
        keyboard.append([
            InlineKeyboardButton(text=messages.BUTTON_GENERATE, callback_data=CALLBACK_GENERATE)
        ])

    keyboard.append([
        InlineKeyboardButton(text=messages.BUTTON_CANCEL, callback_data=CALLBACK_CANCEL)
    ])

    return InlineKeyboardMarkup(inline_keyboard=keyboard)


def build_start_new_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text=messages.BUTTON_START_NEW, callback_data=CALLBACK_START_NEW)
    ]])
