"""
Command Handlers - базовые команды бота

Обработчики для:
- /start - новый диалог, запрос темы
- /help - справка по боту
- /cancel - отмена текущего диалога
- /reload - сброс кеша данных (только админы)
"""

import logging
from aiogram.types import Message

from data_access.state_store import DialogueStep, SessionState

from .. import messages

logger = logging.getLogger(__name__)


class CommandHandlers:
    """
    Обработчики базовых команд бота

    Все методы статические - зависимости приходят через параметры.
    """

    @staticmethod
    async def cmd_start(message: Message, store):
        """Команда /start - новая сессия, ждем тему"""
        user_id = message.from_user.id
        logger.info(f"👤 User started: {message.from_user.full_name} (ID: {user_id})")

        store.clear(user_id)
        store.set(user_id, SessionState(step=DialogueStep.TOPIC))

        await message.answer(messages.WELCOME)

    @staticmethod
    async def cmd_help(message: Message):
        """Команда /help - справка по боту"""
        await message.answer(messages.HELP)

    @staticmethod
    async def cmd_cancel(message: Message, store):
        """Команда /cancel - забыть состояние диалога"""
        user_id = message.from_user.id
        logger.info(f"🛑 Dialogue cancelled by user {user_id}")

        store.clear(user_id)
        await message.answer(messages.CANCELLED)

    @staticmethod
    async def cmd_reload(message: Message, settings, reader, pipeline):
        """Команда /reload - перечитать Excel и шаблоны при следующем запросе"""
        user_id = message.from_user.id

        if not settings.is_admin(user_id):
            logger.warning(f"⛔ /reload denied for user {user_id}")
            await message.answer(messages.ADMIN_ONLY)
            return

        reader.clear_cache()
        pipeline.templates.reload()
        logger.info(f"🔄 Data cache reloaded by admin {user_id}")
        await message.answer(messages.DATA_RELOADED)
