"""
Core Package - Configuration, errors, logging and retry utilities
"""

from .config import Settings, get_settings, load_settings
from .errors import (
    ErrorCode,
    ReportBotException,
    DataSourceError,
    NoDataError,
    CompletionError,
    TemplateNotFoundError,
    ConfigurationError,
)
from .logging import setup_logging
from .retry import RetryableOperation, linear_delay

__all__ = [
    "Settings",
    "get_settings",
    "load_settings",
    "ErrorCode",
    "ReportBotException",
    "DataSourceError",
    "NoDataError",
    "CompletionError",
    "TemplateNotFoundError",
    "ConfigurationError",
    "setup_logging",
    "RetryableOperation",
    "linear_delay",
]
