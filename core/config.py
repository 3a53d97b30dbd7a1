"""
Centralized Configuration Management for Feature Report Bot

Все настройки читаются из окружения и .env файла.
"""
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .errors import ConfigurationError

PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Main configuration class"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Telegram
    telegram_bot_token: str = Field(..., min_length=1)
    bot_mode: str = "polling"
    webhook_url: Optional[str] = None
    port: int = 3000
    admin_user_ids: Annotated[List[int], NoDecode] = Field(default_factory=list)

    # AI
    openai_api_key: str = Field(..., min_length=1)
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 4000

    # Data
    excel_path: str = Field(..., min_length=1)
    prompts_dir: Path = PROJECT_ROOT / "prompts"

    # Report pipeline limits
    max_rows_per_request: int = Field(500, gt=0)
    max_projects_per_request: int = Field(20, gt=0)
    max_parallel_chunks: int = Field(4, gt=0)

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    @field_validator("bot_mode")
    @classmethod
    def _check_bot_mode(cls, value: str) -> str:
        value = value.lower()
        if value not in ("polling", "webhook"):
            raise ValueError("BOT_MODE must be 'polling' or 'webhook'")
        return value

    @field_validator("admin_user_ids", mode="before")
    @classmethod
    def _split_admin_ids(cls, value: Any) -> Any:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [int(part.strip()) for part in value.split(",") if part.strip()]
        if isinstance(value, int):
            return [value]
        return value

    @model_validator(mode="after")
    def _check_webhook(self) -> "Settings":
        if self.bot_mode == "webhook" and not self.webhook_url:
            raise ValueError("WEBHOOK_URL is required when BOT_MODE=webhook")
        return self

    def is_admin(self, user_id: int) -> bool:
        return user_id in self.admin_user_ids

    def safe_dump(self) -> Dict[str, Any]:
        """Settings без секретов - для логов при старте"""
        return self.model_dump(exclude={"telegram_bot_token", "openai_api_key"})


def load_settings(**overrides) -> Settings:
    """
    Собрать Settings, превращая ошибки валидации в ConfigurationError

    Args:
        **overrides: Значения, перекрывающие окружение (используется в тестах)
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = ", ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Configuration error: {problems}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance"""
    return load_settings()
