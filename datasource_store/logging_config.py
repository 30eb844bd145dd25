"""
Logging setup for the datasource store.

Handlers installed here are process-wide. configure_logging() installs them,
reload_logging() re-reads settings (e.g. after log rotation), and
close_logging() flushes and removes them.
"""

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from .config import Settings, settings as default_settings

PACKAGE_LOGGER = "datasource_store"

_installed_handlers: List[logging.Handler] = []


class JsonFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "t": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "lvl": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry)


TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter()
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(config: Optional[Settings] = None) -> logging.Logger:
    """
    Install handlers on the package logger.

    Args:
        config: Settings to read LOG_LEVEL, LOG_FORMAT and LOG_FILE from

    Returns:
        The package logger
    """
    config = config or default_settings
    close_logging()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))

    handler: logging.Handler
    if config.LOG_FILE:
        handler = logging.FileHandler(config.LOG_FILE, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(_build_formatter(config.LOG_FORMAT))

    package_logger.addHandler(handler)
    _installed_handlers.append(handler)
    return package_logger


def reload_logging(config: Optional[Settings] = None) -> logging.Logger:
    """Reopen handlers, e.g. after the log file was rotated"""
    return configure_logging(config)


def close_logging() -> None:
    """Flush, close and detach the handlers installed by configure_logging"""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    while _installed_handlers:
        handler = _installed_handlers.pop()
        package_logger.removeHandler(handler)
        handler.flush()
        handler.close()
