"""
Logging setup shared by the API process and Celery workers.

Call ``LoggingConfig()`` once at startup; modules then use ``get_logger(name)``
or ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Optional

from app.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "app"

# Chatty third-party loggers kept at WARNING regardless of LOG_LEVEL
QUIET_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3", "celery.redirected")


class LoggingConfig:
    """Configure stdlib logging from settings (LOG_LEVEL)."""

    _configured = False

    def __init__(self, level: Optional[str] = None) -> None:
        if LoggingConfig._configured:
            return
        level = (level or get_settings().log_level or "INFO").upper()
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {"default": {"format": LOG_FORMAT}},
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "formatter": "default",
                    }
                },
                "root": {"level": level, "handlers": ["console"]},
                "loggers": {
                    name: {"level": "WARNING"} for name in QUIET_LOGGERS
                },
            }
        )
        LoggingConfig._configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the application namespace."""
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
