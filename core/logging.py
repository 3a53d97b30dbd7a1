"""
Shared Logging Setup for Feature Report Bot
"""
import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5


def setup_logging(level: str = "INFO", log_dir: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure the root logger once per process.

    Console handler always; rotating file handler only when log_dir is given.
    Calling it again replaces the handlers instead of stacking duplicates.
    """
    root = logging.getLogger()
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path / "report_bot.log",
            maxBytes=MAX_FILE_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8"
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # aiogram event logs are too chatty at INFO
    logging.getLogger("aiogram.event").setLevel(max(numeric_level, logging.WARNING))

    return root
