"""
Report Handlers - диалог выбора темы и категорий, генерация отчета

Шаги:
- topic: пользователь присылает тему → показываем категории
- categories: мультивыбор категорий кнопками → "Сгенерировать"
- generating: отчет генерируется, повторный запуск запрещен

Если во время генерации сессия была отменена или начата заново,
готовый отчет не отправляется.
"""

import logging
from dataclasses import replace

from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery, Message

from core.errors import DataSourceError, NoDataError, ReportBotException
from data_access.category_index import list_categories
from data_access.state_store import DialogueStep, SessionState

from .. import messages
from ..utilities import (
    build_category_keyboard,
    build_start_new_keyboard,
    parse_category_callback,
    send_long_message,
)

logger = logging.getLogger(__name__)


async def _delete_quietly(message: Message):
    try:
        await message.delete()
    except TelegramBadRequest as e:
        logger.debug(f"Could not delete message {message.message_id}: {e}")


class ReportHandlers:
    """Обработчики диалога генерации отчета"""

    @staticmethod
    async def handle_topic(message: Message, store, reader):
        """Текст на шаге topic - сохранить тему и показать категории"""
        user_id = message.from_user.id
        topic = (message.text or "").strip()

        if not topic:
            await message.answer(messages.EMPTY_TOPIC)
            return

        store.set(user_id, SessionState(topic=topic, step=DialogueStep.CATEGORIES))
        logger.info(f"📝 Topic set by user {user_id}: '{topic}'")

        try:
            rows = await reader.get_rows()
        except DataSourceError as e:
            logger.error(f"❌ Failed to load categories for user {user_id}: [{e.error_code.value}] {e}")
            await message.answer(messages.DATA_LOAD_FAILED)
            return

        categories = list_categories(rows)
        if not categories:
            await message.answer(messages.NO_CATEGORIES)
            return

        state = store.get(user_id) or SessionState(topic=topic, step=DialogueStep.CATEGORIES)
        store.set(user_id, replace(state, available_categories=categories))

        await message.answer(
            messages.topic_confirmed(topic),
            reply_markup=build_category_keyboard(categories, [])
        )

    @staticmethod
    async def callback_toggle_category(callback: CallbackQuery, store):
        """Кнопка категории - выбрать/снять выбор"""
        user_id = callback.from_user.id
        state = store.get(user_id)
        index = parse_category_callback(callback.data or "")

        if (
            not state
            or not state.available_categories
            or index is None
            or index >= len(state.available_categories)
        ):
            await callback.answer()
            await callback.message.answer(messages.START_FIRST)
            return

        if state.step == DialogueStep.GENERATING:
            await callback.answer(messages.ALREADY_GENERATING, show_alert=True)
            return

        category = state.available_categories[index]
        selected = state.toggle_category(category)
        store.set(user_id, replace(state, selected_categories=selected))

        await callback.answer()
        await callback.message.edit_reply_markup(
            reply_markup=build_category_keyboard(state.available_categories, selected)
        )

    @staticmethod
    async def callback_generate(callback: CallbackQuery, store, reader, pipeline):
        """Кнопка "Сгенерировать" - запустить pipeline и отправить отчет"""
        user_id = callback.from_user.id
        state = store.get(user_id)

        if not state or not state.topic or not state.selected_categories:
            await callback.answer()
            await callback.message.answer(messages.SELECT_AT_LEAST_ONE)
            return

        if state.step == DialogueStep.GENERATING:
            await callback.answer(messages.ALREADY_GENERATING, show_alert=True)
            return

        # Проверка и смена шага без await между ними - второй запрос увидит GENERATING
        generating = replace(state, step=DialogueStep.GENERATING)
        store.set(user_id, generating)
        delivered = False

        try:
            await callback.answer()
            progress = await callback.message.answer(messages.GENERATING)

            logger.info(
                f"🚀 Report requested by user {user_id}: topic='{state.topic}', "
                f"categories={state.selected_categories}"
            )

            try:
                rows = await reader.get_rows()
                result = await pipeline.generate_report(
                    topic=state.topic,
                    selected_categories=state.selected_categories,
                    rows=rows
                )
            except NoDataError as e:
                logger.warning(f"🔍 No data for user {user_id}: {e.context}")
                await ReportHandlers._fail(callback, store, user_id, generating, progress, messages.NO_DATA)
                return
            except DataSourceError as e:
                logger.error(f"❌ Data source error for user {user_id}: [{e.error_code.value}] {e}")
                await ReportHandlers._fail(callback, store, user_id, generating, progress, messages.DATA_LOAD_FAILED)
                return
            except ReportBotException as e:
                logger.error(f"❌ Report generation failed for user {user_id}: [{e.error_code.value}] {e}")
                await ReportHandlers._fail(callback, store, user_id, generating, progress, messages.GENERATION_FAILED)
                return
            except Exception as e:
                logger.error(f"❌ Unexpected error generating report for user {user_id}: {e}", exc_info=True)
                await ReportHandlers._fail(callback, store, user_id, generating, progress, messages.GENERATION_FAILED)
                return

            await _delete_quietly(progress)

            if store.get(user_id) is not generating:
                logger.info(
                    f"🗑 Report {result.request_id} discarded: session of user {user_id} "
                    f"was cancelled or restarted during generation"
                )
                return

            await send_long_message(callback.message, result.content)
            delivered = True
            store.clear(user_id)

            await callback.message.answer(messages.REPORT_DONE, reply_markup=build_start_new_keyboard())
            logger.info(f"✅ Report {result.request_id} delivered to user {user_id}")
        finally:
            # Недоставленный отчет возвращает сессию к выбору категорий
            if not delivered and store.get(user_id) is generating:
                logger.warning(f"⚠️ Generation for user {user_id} interrupted, back to category selection")
                store.set(user_id, replace(generating, step=DialogueStep.CATEGORIES))

    @staticmethod
    async def _fail(callback: CallbackQuery, store, user_id: int, generating, progress: Message, text: str):
        """Вернуть пользователя к выбору категорий и показать ошибку"""
        await _delete_quietly(progress)

        if store.get(user_id) is generating:
            store.set(user_id, replace(generating, step=DialogueStep.CATEGORIES))

        await callback.message.answer(text)

    @staticmethod
    async def callback_cancel(callback: CallbackQuery, store):
        """Кнопка "Отмена" """
        user_id = callback.from_user.id
        logger.info(f"🛑 Dialogue cancelled via button by user {user_id}")

        store.clear(user_id)
        await callback.answer()
        await callback.message.edit_text(messages.CANCELLED)

    @staticmethod
    async def callback_start_new(callback: CallbackQuery, store):
        """Кнопка "Начать заново" после готового отчета"""
        user_id = callback.from_user.id

        store.clear(user_id)
        store.set(user_id, SessionState(step=DialogueStep.TOPIC))

        await callback.answer()
        await callback.message.edit_text(messages.ASK_TOPIC)

    @staticmethod
    async def handle_unknown(message: Message):
        """Текст вне шага topic"""
        await message.answer(messages.UNKNOWN_INPUT)
