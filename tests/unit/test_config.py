"""
Unit Tests: Configuration
"""

import pytest

from core.config import load_settings
from core.errors import ConfigurationError, ErrorCode

REQUIRED = {
    "telegram_bot_token": "123:abc",
    "openai_api_key": "sk-test",
    "excel_path": "data/results.xlsx",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "TELEGRAM_BOT_TOKEN", "OPENAI_API_KEY", "EXCEL_PATH", "BOT_MODE",
        "WEBHOOK_URL", "ADMIN_USER_IDS", "OPENAI_MODEL", "MAX_ROWS_PER_REQUEST",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = load_settings(_env_file=None, **REQUIRED)

    assert settings.openai_model == "gpt-4o-mini"
    assert settings.openai_temperature == 0.7
    assert settings.openai_max_tokens == 4000
    assert settings.bot_mode == "polling"
    assert settings.port == 3000
    assert settings.max_rows_per_request == 500
    assert settings.max_projects_per_request == 20
    assert settings.admin_user_ids == []


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:env")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("EXCEL_PATH", "env.xlsx")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")
    monkeypatch.setenv("MAX_ROWS_PER_REQUEST", "250")
    monkeypatch.setenv("ADMIN_USER_IDS", "98005572, 42")

    settings = load_settings(_env_file=None)

    assert settings.telegram_bot_token == "123:env"
    assert settings.openai_model == "gpt-4o"
    assert settings.max_rows_per_request == 250
    assert settings.admin_user_ids == [98005572, 42]
    assert settings.is_admin(42)
    assert not settings.is_admin(7)


def test_missing_required_values():
    """
    Тест: Нет токена / ключа / пути → ConfigurationError
    """
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(_env_file=None)

    assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR
    assert "telegram_bot_token" in str(exc_info.value)


def test_webhook_mode_requires_url():
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None, bot_mode="webhook", **REQUIRED)

    settings = load_settings(_env_file=None, bot_mode="WEBHOOK", webhook_url="https://bot.example.com", **REQUIRED)
    assert settings.bot_mode == "webhook"


def test_invalid_bot_mode():
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None, bot_mode="longpoll", **REQUIRED)


def test_safe_dump_hides_secrets():
    dumped = load_settings(_env_file=None, **REQUIRED).safe_dump()

    assert "telegram_bot_token" not in dumped
    assert "openai_api_key" not in dumped
    assert dumped["excel_path"] == "data/results.xlsx"
