"""
Retry Pattern with linear backoff

Повторяет async операцию при временных сбоях.

Features:
- Linear backoff (1s → 2s → 3s ...)
- Решение о повторе принимает переданный предикат
- Инжектируемый sleep (тесты подменяют часы)
- Метрики (attempt count, total delay)

Usage:
    operation = RetryableOperation(
        "openai_completion",
        max_attempts=3,
        should_retry=lambda e: isinstance(e, TimeoutError),
    )
    result = await operation.execute(client.call, prompt)
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


def linear_delay(attempt: int, base_delay: float) -> float:
    """
    Задержка перед повтором после попытки номер `attempt` (1-based)

    attempt=1 → base_delay, attempt=2 → 2 * base_delay
    """
    return attempt * base_delay


class RetryableOperation:
    """
    Retry операция с state tracking и метриками

    Последняя ошибка пробрасывается как есть - обертку в доменное исключение
    делает вызывающий код, у которого есть контекст.
    """

    def __init__(
        self,
        operation_name: str,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        should_retry: Optional[Callable[[Exception], bool]] = None,
        sleep: Optional[SleepFunc] = None
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self.operation_name = operation_name
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.should_retry = should_retry or (lambda e: True)
        self.sleep = sleep or asyncio.sleep

        # State
        self.attempt = 0
        self.start_time: Optional[datetime] = None
        self.last_error: Optional[Exception] = None
        self.total_delay = 0.0

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Выполняет операцию с retry

        Returns:
            Результат функции

        Raises:
            Exception: Последняя ошибка, если она не retry-able или попытки исчерпаны
        """
        self.attempt = 0
        self.total_delay = 0.0
        self.last_error = None
        self.start_time = datetime.now()

        while True:
            self.attempt += 1

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                self.last_error = e

                if not self.should_retry(e):
                    logger.debug(
                        f"Non-retryable exception {type(e).__name__} "
                        f"in '{self.operation_name}'"
                    )
                    raise

                if self.attempt >= self.max_attempts:
                    elapsed = (datetime.now() - self.start_time).total_seconds()
                    logger.error(
                        f"RetryableOperation '{self.operation_name}' failed "
                        f"after {self.attempt} attempts ({elapsed:.2f}s). "
                        f"Error: {type(e).__name__}: {e}"
                    )
                    raise

                delay = linear_delay(self.attempt, self.base_delay)
                logger.warning(
                    f"RetryableOperation '{self.operation_name}' "
                    f"retry {self.attempt}/{self.max_attempts} "
                    f"after {delay:.2f}s. Error: {type(e).__name__}: {e}"
                )

                self.total_delay += delay
                await self.sleep(delay)
                continue

            if self.attempt > 1:
                elapsed = (datetime.now() - self.start_time).total_seconds()
                logger.info(
                    f"RetryableOperation '{self.operation_name}' succeeded "
                    f"on attempt {self.attempt}/{self.max_attempts} "
                    f"(elapsed: {elapsed:.2f}s)"
                )
            return result

    def get_stats(self) -> dict:
        """Статистика последнего выполнения"""
        return {
            "operation_name": self.operation_name,
            "attempts": self.attempt,
            "total_delay": round(self.total_delay, 2),
            "last_error": type(self.last_error).__name__ if self.last_error else None
        }
