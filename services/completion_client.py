"""
Completion Client - один вызов OpenAI chat completion с retry

Ошибки классифицируются на границе транспорта (FailureKind), а решение
о повторе принимается по таблице RETRYABLE_KINDS:
- TIMEOUT / CONNECTION_RESET / NETWORK → до 2 повторов, задержка 1s, потом 2s
- RATE_LIMITED / EMPTY_RESPONSE / OTHER → ошибка сразу

Пустой ответ модели не повторяется.
"""

import logging
import random
import string
import time
from enum import Enum
from typing import Optional

import openai
from openai import AsyncOpenAI

from core.errors import CompletionError, ErrorCode
from core.retry import RetryableOperation, SleepFunc

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def generate_request_id() -> str:
    """req_<timestamp ms>_<9 символов base36>"""
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


class FailureKind(str, Enum):
    """Классификация ошибки вызова LLM"""
    TIMEOUT = "timeout"
    CONNECTION_RESET = "connection_reset"
    NETWORK = "network"
    RATE_LIMITED = "rate_limited"
    EMPTY_RESPONSE = "empty_response"
    OTHER = "other"


RETRYABLE_KINDS = frozenset({
    FailureKind.TIMEOUT,
    FailureKind.CONNECTION_RESET,
    FailureKind.NETWORK,
})

_ERROR_CODES = {
    FailureKind.TIMEOUT: ErrorCode.AI_TIMEOUT_ERROR,
    FailureKind.RATE_LIMITED: ErrorCode.AI_QUOTA_ERROR,
    FailureKind.EMPTY_RESPONSE: ErrorCode.AI_EMPTY_RESPONSE,
}


class EmptyCompletionError(Exception):
    """Модель вернула пустой ответ"""


def classify_failure(error: BaseException) -> FailureKind:
    """
    Определить вид ошибки

    Сначала по типу исключения (openai SDK, builtin сетевые ошибки),
    затем, для ошибок без структуры, по тексту сообщения.
    """
    if isinstance(error, EmptyCompletionError):
        return FailureKind.EMPTY_RESPONSE
    if isinstance(error, (openai.APITimeoutError, TimeoutError)):
        return FailureKind.TIMEOUT
    if isinstance(error, (openai.APIConnectionError, ConnectionError)):
        return FailureKind.CONNECTION_RESET
    if isinstance(error, openai.RateLimitError):
        return FailureKind.RATE_LIMITED
    if isinstance(error, openai.APIError):
        return FailureKind.OTHER

    # Ошибки без типа - по тексту. Известная хрупкость: "timeout" в
    # несетевом сообщении тоже будет считаться таймаутом.
    message = str(error)
    if "ECONNRESET" in message:
        return FailureKind.CONNECTION_RESET
    if "ETIMEDOUT" in message or "timeout" in message:
        return FailureKind.TIMEOUT
    if "network" in message:
        return FailureKind.NETWORK
    return FailureKind.OTHER


def is_retryable(error: BaseException) -> bool:
    return classify_failure(error) in RETRYABLE_KINDS


class CompletionClient:
    """
    Обертка над AsyncOpenAI для генерации текста

    Args:
        api_key: OpenAI API key
        model: Название модели
        temperature: Температура
        max_tokens: Лимит токенов ответа
        max_retries: Количество повторов (итого попыток = max_retries + 1)
        retry_base_delay: Шаг линейной задержки в секундах
        client: Готовый AsyncOpenAI (для тестов)
        sleep: Функция ожидания (для тестов)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 4000,
        max_retries: int = 2,
        retry_base_delay: float = 1.0,
        client: Optional[AsyncOpenAI] = None,
        sleep: Optional[SleepFunc] = None
    ):
        # Ретраи делаем сами, встроенные в SDK отключаем
        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings) -> "CompletionClient":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )

    async def generate_completion(
        self,
        system_prompt: str,
        user_prompt: str,
        request_id: Optional[str] = None
    ) -> str:
        """
        Сгенерировать ответ модели

        Returns:
            Непустой текст ответа

        Raises:
            ValueError: пустой system или user prompt
            CompletionError: ошибка не retry-able или попытки исчерпаны
        """
        if not system_prompt or not user_prompt:
            raise ValueError("Both system_prompt and user_prompt must be non-empty")

        req_id = request_id or generate_request_id()
        start_time = time.monotonic()

        logger.info(
            f"🤖 OpenAI request started: request_id={req_id}, model={self.model}, "
            f"system_prompt_len={len(system_prompt)}, user_prompt_len={len(user_prompt)}"
        )

        operation = RetryableOperation(
            operation_name=f"openai_completion[{req_id}]",
            max_attempts=self.max_retries + 1,
            base_delay=self.retry_base_delay,
            should_retry=is_retryable,
            sleep=self.sleep
        )

        try:
            content = await operation.execute(self._request, system_prompt, user_prompt, req_id)
        except Exception as e:
            kind = classify_failure(e)
            duration = time.monotonic() - start_time
            logger.error(
                f"❌ OpenAI request failed: request_id={req_id}, kind={kind.value}, "
                f"attempts={operation.attempt}, duration={duration:.2f}s, error={e}"
            )
            raise CompletionError(
                f"Completion failed after {operation.attempt} attempt(s): {e}",
                last_error=e,
                kind=kind,
                attempts=operation.attempt,
                error_code=_ERROR_CODES.get(kind, ErrorCode.AI_API_ERROR),
                context={"request_id": req_id}
            ) from e

        duration = time.monotonic() - start_time
        logger.info(
            f"✅ OpenAI request completed: request_id={req_id}, "
            f"duration={duration:.2f}s, attempt={operation.attempt}"
        )
        return content

    async def _request(self, system_prompt: str, user_prompt: str, request_id: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise EmptyCompletionError("Empty response from OpenAI")

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(f"OpenAI usage: request_id={request_id}, total_tokens={usage.total_tokens}")

        return content
