"""
Shared fixtures: fake clock, mocked LLM and aiogram objects
"""

from typing import List
from unittest.mock import AsyncMock, Mock

import pytest

from services.prompt_templates import PromptTemplateLoader
from tests.factories import PROMPTS_DIR, VALID_REPORT, completion_response


@pytest.fixture
def fake_sleep():
    """Записывает задержки вместо реального ожидания"""
    delays: List[float] = []

    async def _sleep(delay: float):
        delays.append(delay)

    _sleep.delays = delays
    return _sleep


@pytest.fixture
def openai_client():
    """Mock AsyncOpenAI"""
    client = Mock()
    client.chat.completions.create = AsyncMock(return_value=completion_response(VALID_REPORT))
    return client


@pytest.fixture
def completion_client():
    """Mock CompletionClient, всегда возвращает валидный отчет"""
    client = Mock()
    client.generate_completion = AsyncMock(return_value=VALID_REPORT)
    return client


@pytest.fixture
def templates():
    """Шаблоны промптов из репозитория"""
    return PromptTemplateLoader(PROMPTS_DIR)


@pytest.fixture
def prompts_dir(tmp_path):
    """Временная директория с минимальными шаблонами"""
    (tmp_path / "feature_summary_prompt.md").write_text(
        "Тема: {topic}\nКатегории: {selected_categories}\nДанные:\n{data}", encoding="utf-8"
    )
    (tmp_path / "repair_prompt.md").write_text(
        "Ответ: {original_response}\nДанные: {data}", encoding="utf-8"
    )
    return tmp_path


def make_user(user_id: int = 123):
    user = Mock()
    user.id = user_id
    user.full_name = "Test User"
    return user


@pytest.fixture
def message():
    """Mock aiogram Message"""
    msg = Mock()
    msg.from_user = make_user()
    msg.chat = Mock(id=123)
    msg.text = ""
    msg.message_id = 1
    msg.answer = AsyncMock(return_value=Mock(delete=AsyncMock(), message_id=2))
    msg.delete = AsyncMock()
    return msg


@pytest.fixture
def callback(message):
    """Mock aiogram CallbackQuery"""
    cb = Mock()
    cb.from_user = make_user()
    cb.data = ""
    cb.message = message
    cb.message.edit_reply_markup = AsyncMock()
    cb.message.edit_text = AsyncMock()
    cb.answer = AsyncMock()
    return cb
