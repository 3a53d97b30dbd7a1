"""
Error taxonomy for the report bot.

Every failure that crosses a module boundary is a ReportBotException carrying
a standardized ErrorCode, so handlers can pick the user-facing message by type
and logs stay greppable by code.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standardized error codes for tracking and debugging"""

    # Data source errors
    DATA_FILE_NOT_FOUND = "DATA_001"
    DATA_FILE_UNREADABLE = "DATA_002"
    DATA_FILE_EMPTY = "DATA_003"
    DATA_MISSING_COLUMNS = "DATA_004"
    DATA_NO_MATCH = "DATA_005"

    # AI service errors
    AI_API_ERROR = "AI_001"
    AI_TIMEOUT_ERROR = "AI_002"
    AI_QUOTA_ERROR = "AI_003"
    AI_EMPTY_RESPONSE = "AI_004"

    # Prompt templates
    TEMPLATE_NOT_FOUND = "TPL_001"

    # System errors
    CONFIGURATION_ERROR = "SYS_003"
    UNKNOWN_ERROR = "SYS_999"


class ReportBotException(Exception):
    """Base exception class for the report bot"""

    default_code = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        user_id: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        self.user_id = user_id
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging"""
        return {
            'error_code': self.error_code.value,
            'message': self.message,
            'user_id': self.user_id,
            'context': self.context,
            'timestamp': self.timestamp.isoformat(),
            'type': self.__class__.__name__
        }


class DataSourceError(ReportBotException):
    """Spreadsheet is missing, unreadable, empty or lacks required columns"""
    default_code = ErrorCode.DATA_FILE_UNREADABLE


class NoDataError(ReportBotException):
    """Category selection matched zero rows"""
    default_code = ErrorCode.DATA_NO_MATCH


class CompletionError(ReportBotException):
    """
    LLM backend failed and the retry budget is spent (or the failure
    was not retryable).

    Attributes:
        last_error: Последняя исходная ошибка
        kind: Классификация последней ошибки (FailureKind)
        attempts: Сколько попыток было сделано
    """
    default_code = ErrorCode.AI_API_ERROR

    def __init__(
        self,
        message: str,
        last_error: Optional[BaseException] = None,
        kind: Any = None,
        attempts: int = 0,
        **kwargs
    ):
        self.last_error = last_error
        self.kind = kind
        self.attempts = attempts
        super().__init__(message, **kwargs)


class TemplateNotFoundError(ReportBotException):
    """Prompt template file does not exist"""
    default_code = ErrorCode.TEMPLATE_NOT_FOUND


class ConfigurationError(ReportBotException):
    """Invalid process configuration - fatal at startup"""
    default_code = ErrorCode.CONFIGURATION_ERROR
