"""
Message Splitter - разбиение длинных сообщений для Telegram

Telegram лимит: 4096 символов на сообщение.
Режем по параграфам, слишком длинные параграфы - по предложениям,
слишком длинные предложения - жестко по длине.
"""

import asyncio
import logging
import re
from typing import Iterator, List, Optional, Tuple

from aiogram.exceptions import TelegramBadRequest
from aiogram.types import LinkPreviewOptions, Message

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4000  # Оставляем запас для номера части
NO_PREVIEW = LinkPreviewOptions(is_disabled=True)

_PARAGRAPH_RE = re.compile(r"\n{2,}")
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


def _units(text: str, max_length: int) -> Iterator[Tuple[str, str]]:
    """(разделитель перед куском, кусок), каждый кусок не длиннее max_length"""
    for paragraph in _PARAGRAPH_RE.split(text):
        if not paragraph.strip():
            continue
        if len(paragraph) <= max_length:
            yield "\n\n", paragraph
            continue

        separator = "\n\n"
        for sentence in _SENTENCE_RE.split(paragraph):
            for start in range(0, len(sentence), max_length):
                yield separator, sentence[start:start + max_length]
                separator = ""
            separator = " "


def split_message(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """Разбить текст на части не длиннее max_length"""
    if len(text) <= max_length:
        return [text]

    parts: List[str] = []
    current = ""
    for separator, unit in _units(text, max_length):
        if not current:
            current = unit
        elif len(current) + len(separator) + len(unit) <= max_length:
            current += separator + unit
        else:
            parts.append(current)
            current = unit

    if current:
        parts.append(current)
    return parts


async def send_long_message(message: Message, text: str, parse_mode: Optional[str] = "Markdown"):
    """
    Отправляет длинное сообщение, разбивая его на части если нужно

    Если Telegram не принимает разметку (LLM может вернуть несбалансированный
    Markdown), часть переотправляется простым текстом.
    """
    parts = split_message(text)

    for i, part in enumerate(parts):
        if len(parts) > 1:
            part = f"{part}\n\n📄 Часть {i + 1}/{len(parts)}"

        try:
            await message.answer(part, parse_mode=parse_mode, link_preview_options=NO_PREVIEW)
        except TelegramBadRequest as e:
            logger.warning(f"Markup rejected by Telegram, resending as plain text: {e}")
            await message.answer(part, parse_mode=None, link_preview_options=NO_PREVIEW)

        # Небольшая задержка между сообщениями
        if i < len(parts) - 1:
            await asyncio.sleep(0.1)

    logger.info(f"📤 Long message sent in {len(parts)} parts")
