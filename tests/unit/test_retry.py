"""
Unit Tests: Retry Pattern

Тестирует RetryableOperation:
- Linear backoff (1s → 2s)
- Custom retry conditions
- Max attempts limit
- Метрики последнего выполнения
"""

import pytest
from unittest.mock import AsyncMock

from core.retry import RetryableOperation, linear_delay


# ============================================================================
# BACKOFF
# ============================================================================

def test_linear_delay():
    """
    Тест: Задержка растет линейно с номером попытки
    """
    assert linear_delay(1, 1.0) == 1.0
    assert linear_delay(2, 1.0) == 2.0
    assert linear_delay(3, 0.5) == 1.5


def test_max_attempts_must_be_positive():
    """
    Тест: max_attempts < 1 запрещен
    """
    with pytest.raises(ValueError):
        RetryableOperation("op", max_attempts=0)


# ============================================================================
# EXECUTION
# ============================================================================

@pytest.mark.asyncio
async def test_succeeds_immediately(fake_sleep):
    """
    Тест: Успех с первой попытки без задержек
    """
    func = AsyncMock(return_value="success")
    operation = RetryableOperation("op", sleep=fake_sleep)

    result = await operation.execute(func, "arg", key="value")

    assert result == "success"
    func.assert_awaited_once_with("arg", key="value")
    assert fake_sleep.delays == []
    assert operation.attempt == 1


@pytest.mark.asyncio
async def test_retries_with_linear_delays(fake_sleep):
    """
    Тест: Две ошибки, затем успех - задержки 1s и 2s
    """
    func = AsyncMock(side_effect=[ConnectionError("reset"), ConnectionError("reset"), "ok"])
    operation = RetryableOperation("op", max_attempts=3, base_delay=1.0, sleep=fake_sleep)

    result = await operation.execute(func)

    assert result == "ok"
    assert func.await_count == 3
    assert fake_sleep.delays == [1.0, 2.0]
    assert operation.total_delay == 3.0


@pytest.mark.asyncio
async def test_raises_last_error_after_max_attempts(fake_sleep):
    """
    Тест: После исчерпания попыток пробрасывается последняя ошибка как есть
    """
    errors = [TimeoutError("first"), TimeoutError("second"), TimeoutError("third")]
    func = AsyncMock(side_effect=errors)
    operation = RetryableOperation("op", max_attempts=3, sleep=fake_sleep)

    with pytest.raises(TimeoutError) as exc_info:
        await operation.execute(func)

    assert exc_info.value is errors[-1]
    assert func.await_count == 3
    assert fake_sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_non_retryable_error_raised_immediately(fake_sleep):
    """
    Тест: should_retry=False - ошибка сразу, без задержек
    """
    func = AsyncMock(side_effect=ValueError("bad input"))
    operation = RetryableOperation(
        "op",
        max_attempts=3,
        should_retry=lambda e: not isinstance(e, ValueError),
        sleep=fake_sleep
    )

    with pytest.raises(ValueError):
        await operation.execute(func)

    assert func.await_count == 1
    assert fake_sleep.delays == []


@pytest.mark.asyncio
async def test_stats_reflect_last_execution(fake_sleep):
    """
    Тест: get_stats() отражает последнее выполнение
    """
    func = AsyncMock(side_effect=[ConnectionError("reset"), "ok"])
    operation = RetryableOperation("openai", max_attempts=3, base_delay=0.5, sleep=fake_sleep)

    await operation.execute(func)
    stats = operation.get_stats()

    assert stats["operation_name"] == "openai"
    assert stats["attempts"] == 2
    assert stats["total_delay"] == 0.5
    assert stats["last_error"] == "ConnectionError"
