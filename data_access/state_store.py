"""
Session State Store - состояние диалога пользователя в памяти

Один экземпляр на процесс, создается при старте и передается в handlers
явно. Не персистентный, без TTL.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class DialogueStep(str, Enum):
    """Шаги диалога"""
    TOPIC = "topic"
    CATEGORIES = "categories"
    GENERATING = "generating"


@dataclass
class SessionState:
    """
    Состояние одного пользователя

    selected_categories - список, чтобы сохранить порядок выбора для отображения;
    дубликаты не допускаются (см. toggle_category).
    """
    topic: Optional[str] = None
    selected_categories: List[str] = field(default_factory=list)
    step: DialogueStep = DialogueStep.TOPIC
    available_categories: List[str] = field(default_factory=list)

    def toggle_category(self, category: str) -> List[str]:
        """Новый список выбора с добавленной/убранной категорией"""
        if category in self.selected_categories:
            return [c for c in self.selected_categories if c != category]
        return [*self.selected_categories, category]


class SessionStateStore:
    """
    Per-user key-value store

    set() - полная перезапись, не patch: вызывающий код читает состояние,
    мержит через dataclasses.replace и записывает целиком.
    Внутренней синхронизации нет - все вызовы идут из одного event loop.
    """

    def __init__(self):
        self._states: Dict[int, SessionState] = {}

    def get(self, user_id: int) -> Optional[SessionState]:
        return self._states.get(user_id)

    def set(self, user_id: int, state: SessionState) -> None:
        previous = self._states.get(user_id)
        self._states[user_id] = state

        previous_step = previous.step.value if previous else None
        if previous_step != state.step.value:
            logger.debug(f"🔄 Session step: user={user_id}, {previous_step} → {state.step.value}")

    def clear(self, user_id: int) -> None:
        if self._states.pop(user_id, None) is not None:
            logger.debug(f"🧹 Session cleared: user={user_id}")

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._states

    def __len__(self) -> int:
        return len(self._states)
