"""Structured logging configuration"""

import logging
import json
import os
from datetime import datetime
from typing import Optional

from .errors import ConfigurationError

# Line layout of the append-only engine log file
LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(message)s"
LOG_FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: str) -> int:
    """
    Map a level name such as "info" to its logging constant

    Raises:
        ConfigurationError: If the name is not a logging level
    """
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ConfigurationError(f"Unknown log level: {level!r}")
    return value


class StructuredLogger:
    """Structured JSON logger for the discount engine"""

    def __init__(self, name: str, level: str = "INFO", log_file: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(resolve_level(level))

        # Console handler with JSON formatter, added once per logger name
        if not any(getattr(h, "_discount_console", False) for h in self.logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            handler._discount_console = True
            self.logger.addHandler(handler)

        if log_file:
            self.add_file_handler(log_file)

    def add_file_handler(self, log_file: str) -> None:
        """Append plain-text event lines to log_file, replacing any earlier engine log file"""
        path = os.path.abspath(log_file)
        for h in list(self.logger.handlers):
            if not getattr(h, "_discount_file", False):
                continue
            if h.baseFilename == path:
                return
            self.logger.removeHandler(h)
            h.close()

        os.makedirs(os.path.dirname(path), exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT, LOG_FILE_DATE_FORMAT))
        handler._discount_file = True
        self.logger.addHandler(handler)

    def log(self, level: str, message: str, **kwargs):
        """Log structured message"""
        getattr(self.logger, level.lower())(message, extra={"context": kwargs})

    def info(self, message: str, **kwargs):
        self.log("info", message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.log("warning", message, **kwargs)

    def error(self, message: str, **kwargs):
        self.log("error", message, **kwargs)

    def debug(self, message: str, **kwargs):
        self.log("debug", message, **kwargs)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter"""

    def format(self, record):
        # Context goes first so it can never overwrite the record's own fields
        log_data = {
            **getattr(record, "context", {}),
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Decimal and date context values are rendered as strings
        return json.dumps(log_data, default=str)


def get_logger(name: str, log_file: Optional[str] = None, level: Optional[str] = None) -> StructuredLogger:
    """Get or create structured logger"""
    log_level = level or os.getenv("LOG_LEVEL", "INFO")
    return StructuredLogger(name, log_level, log_file)
