"""Central logging configuration."""

from __future__ import annotations

import logging
import logging.config
from typing import Any

from .config import get_settings


def configure_logging(level: str | None = None) -> None:
    """Apply the service-wide logging configuration."""

    resolved = (level or get_settings().log_level).upper()
    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        },
        "root": {
            "handlers": ["default"],
            "level": getattr(logging, resolved, logging.INFO),
        },
        "loggers": {
            "apscheduler": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)
