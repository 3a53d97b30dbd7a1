"""
Update Logger Middleware - логирование входящих событий и смены шага диалога

Аналог FSM state logging, только шаг берется из SessionStateStore.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message

from data_access.state_store import SessionStateStore

logger = logging.getLogger(__name__)


class UpdateLoggerMiddleware(BaseMiddleware):
    """
    Middleware для логирования событий пользователя

    Логирует:
    - user/chat и тип события до выполнения handler
    - шаг диалога до и после handler, если он изменился
    """

    def __init__(self, store: SessionStateStore):
        self.store = store

    def _step(self, user_id: int) -> Optional[str]:
        state = self.store.get(user_id)
        return state.step.value if state else None

    async def __call__(
        self,
        handler: Callable[[Message | CallbackQuery, Dict[str, Any]], Awaitable[Any]],
        event: Message | CallbackQuery,
        data: Dict[str, Any]
    ) -> Any:
        user = getattr(event, "from_user", None)
        if not user:
            return await handler(event, data)

        if isinstance(event, CallbackQuery):
            chat_id = event.message.chat.id if event.message else None
            kind = f"callback={event.data}"
        else:
            chat_id = event.chat.id
            kind = "command" if (event.text or "").startswith("/") else "message"

        step_before = self._step(user.id)
        logger.debug(f"📨 Update: user={user.id}, chat={chat_id}, {kind}, step={step_before or 'None'}")

        result = await handler(event, data)

        step_after = self._step(user.id)
        if step_before != step_after:
            logger.info(
                f"🔄 Dialogue step: user={user.id}, "
                f"{step_before or 'None'} → {step_after or 'None'}"
            )

        return result
