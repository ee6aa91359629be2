import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from . import settings


def resolve_level(level: Optional[str | int] = None) -> int:
    """Numeric logging level from a name ("debug", "INFO") or number; falls back to settings."""
    if isinstance(level, int):
        return level
    name = (level or settings.LOG_LEVEL).strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def log_path_for(report: Optional[str] = None) -> Path:
    """Each report writes its own rotating file, e.g. logs/billing.log."""
    return settings.LOG_DIR / f"{report or 'reports'}.log"


def setup_logger(report: Optional[str] = None, log_level: Optional[str | int] = None) -> logging.Logger:
    """
    Configures the root logger for one CLI run: plain messages on the console,
    timestamped records in the report's rotating log file.
    Handlers are installed once; a second call only updates the level.
    """
    level = resolve_level(log_level)
    logger = logging.getLogger()
    logger.setLevel(level)

    if any(getattr(handler, "_pallet_reports", False) for handler in logger.handlers):
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path_for(report),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    for handler in (console_handler, file_handler):
        handler.setLevel(level)
        handler._pallet_reports = True
        logger.addHandler(handler)

    # Connection chatter from the webhook post stays out of the report logs.
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
    return logger
