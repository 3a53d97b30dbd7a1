"""
Middleware - промежуточные слои обработки

Модули:
- update_logger: Логирование событий и смены шага диалога
"""

from .update_logger import UpdateLoggerMiddleware

__all__ = ["UpdateLoggerMiddleware"]
