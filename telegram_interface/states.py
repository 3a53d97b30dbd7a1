"""
Dialogue Step Filter - фильтр handlers по шагу диалога

Шаг хранится в SessionStateStore, а не в aiogram FSM,
поэтому вместо StatesGroup используется собственный фильтр.
"""

from aiogram.filters import BaseFilter
from aiogram.types import CallbackQuery, Message

from data_access.state_store import DialogueStep, SessionStateStore


class DialogueStepFilter(BaseFilter):
    """Пропускает событие, если пользователь на указанном шаге"""

    def __init__(self, store: SessionStateStore, step: DialogueStep):
        self.store = store
        self.step = step

    async def __call__(self, event: Message | CallbackQuery) -> bool:
        if not event.from_user:
            return False
        state = self.store.get(event.from_user.id)
        return state is not None and state.step == self.step
